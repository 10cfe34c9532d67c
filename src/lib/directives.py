"""
Directive implementations for nutcompiler

Each directive turns one {@name:arguments} tag into a host code fragment.
Uses DirectiveSpec for metadata and validation; the registry is a closed
table checked against BUILTIN_DIRECTIVES when it is built.

Handlers have the signature (invocation, context) -> str, where context is
the CompileContext of the running compile call. Handlers that compile
expressions go through the compiler's ParameterConverter.
"""

from typing import Callable, Dict, Optional

from ..models.context import CompileContext
from ..models.directives import (
    BUILTIN_DIRECTIVES,
    DirectiveCategory,
    DirectiveInvocation,
    DirectiveSpec,
)
from .errors import MalformedDirective, MisplacedDirective, UnknownDirective
from .log import LOG


Handler = Callable[[DirectiveInvocation, CompileContext], str]


def fragment_make(context: CompileContext, code: str) -> str:
    return context.compiler.settings.fragment_make(code)


def expression_compile(context: CompileContext, raw: str) -> str:
    return context.compiler.converter.expression_compile(raw)


def condition_compile(context: CompileContext, raw: str) -> str:
    return context.compiler.converter.condition_compile(raw)


def name_literal(raw: str) -> str:
    """Template/section name as a single-quoted host string"""
    name = raw.strip().strip('\'"')
    return "'" + name.replace("'", "\\'") + "'"


def inert_text(text: str) -> str:
    """Neutralize sequences that would end a host comment or code fragment"""
    return text.replace('*/', '* /').replace('?>', '? >')


def malformed_report(
    invocation: DirectiveInvocation, context: CompileContext, expected: str
) -> str:
    """
    Handle a directive whose arguments lack a required shape

    In strict mode raises MalformedDirective. Otherwise logs a warning and
    returns an inert fragment carrying the offending text, so the rest of
    the document still compiles.
    """
    if context.compiler.settings.strict_mode:
        raise MalformedDirective(
            invocation.name,
            invocation.arguments,
            source=context.source,
            position=invocation.position,
            template=context.name,
        )

    LOG(
        f"{context.name}: cannot compile {invocation.name} "
        f"'{invocation.arguments}' (expected {expected})",
        level=1,
        severity="WARNING",
    )
    raw = inert_text(invocation.arguments)
    return fragment_make(context, f"/* Cannot compile {invocation.name}: {raw} */")


def misplaced_raise(invocation: DirectiveInvocation, context: CompileContext, reason: str) -> None:
    raise MisplacedDirective(
        invocation.name,
        reason,
        source=context.source,
        position=invocation.position,
        template=context.name,
    )


class DirectiveRegistry:
    """
    Registry of directive specifications and handlers

    Maps directive names to DirectiveSpec objects containing metadata
    and compilation handlers.
    """

    def __init__(self) -> None:
        """Initialize the directive registry and register all built-in directives"""
        self.specs: Dict[str, DirectiveSpec] = {}
        self.layoutDirectives_register()
        self.assignmentDirectives_register()
        self.conditionalDirectives_register()
        self.loopDirectives_register()
        self.switchDirectives_register()
        self.blockDirectives_register()
        self.registry_validate()

    def register(self, spec: DirectiveSpec) -> None:
        """Register a directive specification"""
        self.specs[spec.name] = spec
        for alias in spec.aliases:
            self.specs[alias] = spec

    def registry_validate(self) -> None:
        """
        Check the table covers exactly the built-in directives

        Raises:
            RuntimeError: If a built-in directive has no handler or an
                          unexpected name was registered
        """
        names = {spec.name for spec in self.specs.values()}
        missing = BUILTIN_DIRECTIVES - names
        extra = names - BUILTIN_DIRECTIVES
        if missing or extra:
            raise RuntimeError(
                f"Directive table mismatch: missing={sorted(missing)} extra={sorted(extra)}"
            )

    def spec_get(self, name: str) -> Optional[DirectiveSpec]:
        """Get full directive specification by (case-insensitive) name"""
        return self.specs.get(name.strip().lower())

    def get(self, name: str) -> Optional[Handler]:
        """Get directive handler by name, None if not found"""
        spec = self.spec_get(name)
        return spec.handler if spec else None

    def directives_listByCategory(self, category: DirectiveCategory) -> list[DirectiveSpec]:
        """Get all directives in a category"""
        seen = {id(spec): spec for spec in self.specs.values() if spec.category == category}
        return list(seen.values())

    def dispatch(self, invocation: DirectiveInvocation, context: CompileContext) -> str:
        """
        Compile one directive tag

        Args:
            invocation: Name, arguments and position of the tag
            context: State of the running compile call

        Returns:
            Host code fragment replacing the tag

        Raises:
            UnknownDirective: No handler is registered for the name
            MalformedDirective: Arguments required but missing (strict mode)
        """
        spec = self.spec_get(invocation.name)
        if spec is None:
            raise UnknownDirective(
                invocation.name,
                source=context.source,
                position=invocation.position,
                template=context.name,
            )

        LOG(f"Dispatching '{spec.name}' at position {invocation.position}", level=3)

        if spec.takes_arguments and not invocation.arguments:
            return malformed_report(invocation, context, "arguments")

        return spec.handler(invocation, context)

    def layoutDirectives_register(self) -> None:
        """Register layout, section and include directives"""

        def layout_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """Handle {@layout:name} - register the parent layout"""
            context.has_layout = True
            return fragment_make(context, f"$this->layout({name_literal(invocation.arguments)});")

        def section_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """Handle {@section:name} - start capturing a named block"""
            return fragment_make(context, f"$this->sectionStart({name_literal(invocation.arguments)});")

        def endsection_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            return fragment_make(context, "$this->sectionEnd();")

        def show_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            return fragment_make(context, "$this->showSection();")

        def include_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """Handle {@include:name} - render a sub-template in place"""
            name = name_literal(invocation.arguments)
            return fragment_make(context, f"echo $this->factory->make({name})->render();")

        self.register(DirectiveSpec(
            name='layout',
            category=DirectiveCategory.LAYOUT,
            description='Render this template inside a parent layout',
            handler=layout_handler,
            takes_arguments=True,
            examples=['{@layout:master}'],
        ))

        self.register(DirectiveSpec(
            name='section',
            category=DirectiveCategory.LAYOUT,
            description='Start a named section captured for the layout',
            handler=section_handler,
            takes_arguments=True,
            examples=['{@section:content}'],
        ))

        self.register(DirectiveSpec(
            name='endsection',
            category=DirectiveCategory.LAYOUT,
            description='End the current section',
            handler=endsection_handler,
            examples=['{@endsection}'],
        ))

        self.register(DirectiveSpec(
            name='show',
            category=DirectiveCategory.LAYOUT,
            description='Output the yielded section content',
            handler=show_handler,
            examples=['{@show}'],
        ))

        self.register(DirectiveSpec(
            name='include',
            category=DirectiveCategory.LAYOUT,
            description='Render another template in place',
            handler=include_handler,
            takes_arguments=True,
            examples=['{@include:partials.header}'],
        ))

    def assignmentDirectives_register(self) -> None:
        """Register variable assignment directives"""

        def assignment_split(invocation: DirectiveInvocation, context: CompileContext):
            if ' = ' not in invocation.arguments:
                return None
            target, value = invocation.arguments.split(' = ', 1)
            return expression_compile(context, target), expression_compile(context, value)

        def set_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """Handle {@set:target = value} - assign only if target is unset"""
            parts = assignment_split(invocation, context)
            if parts is None:
                return malformed_report(invocation, context, "'<target> = <value>'")
            target, value = parts
            return fragment_make(context, f"if(!isset({target})) {{ {target} = {value}; }}")

        def reset_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """Handle {@reset:target = value} - assign unconditionally"""
            parts = assignment_split(invocation, context)
            if parts is None:
                return malformed_report(invocation, context, "'<target> = <value>'")
            target, value = parts
            return fragment_make(context, f"{target} = {value};")

        self.register(DirectiveSpec(
            name='set',
            category=DirectiveCategory.ASSIGNMENT,
            description='Assign a value to a variable that is not set yet',
            handler=set_handler,
            takes_arguments=True,
            examples=["{@set:title = 'Home'}"],
        ))

        self.register(DirectiveSpec(
            name='reset',
            category=DirectiveCategory.ASSIGNMENT,
            description='Assign a value to a variable',
            handler=reset_handler,
            takes_arguments=True,
            examples=['{@reset:count = 0}'],
        ))

    def conditionalDirectives_register(self) -> None:
        """Register if/elseif/else/endif"""

        def if_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            condition = condition_compile(context, invocation.arguments)
            return fragment_make(context, f"if({condition}) {{")

        def elseif_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            condition = condition_compile(context, invocation.arguments)
            return fragment_make(context, f"}} elseif({condition}) {{")

        def else_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            return fragment_make(context, "} else {")

        def endif_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            return fragment_make(context, "}")

        self.register(DirectiveSpec(
            name='if',
            category=DirectiveCategory.CONDITIONAL,
            description='Open a conditional block',
            handler=if_handler,
            takes_arguments=True,
            examples=['{@if:user.active}'],
        ))

        self.register(DirectiveSpec(
            name='elseif',
            category=DirectiveCategory.CONDITIONAL,
            description='Alternative condition of the open conditional',
            handler=elseif_handler,
            takes_arguments=True,
            examples=['{@elseif:user.pending}'],
        ))

        self.register(DirectiveSpec(
            name='else',
            category=DirectiveCategory.CONDITIONAL,
            description='Fallback branch of the open conditional',
            handler=else_handler,
            examples=['{@else}'],
        ))

        self.register(DirectiveSpec(
            name='endif',
            category=DirectiveCategory.CONDITIONAL,
            description='Close the open conditional',
            handler=endif_handler,
            examples=['{@endif}'],
        ))

    def loopDirectives_register(self) -> None:
        """Register for/endfor"""

        def for_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """
            Handle {@for:item in items} and {@for:key,value in items}

            The loop is guarded so an unset or empty collection renders
            nothing instead of failing at render time.
            """
            if ' in ' not in invocation.arguments:
                return malformed_report(invocation, context, "'<variable> in <collection>'")

            variables, collection = invocation.arguments.split(' in ', 1)
            target = expression_compile(context, collection)

            if ',' in variables:
                key, value = variables.split(',', 1)
                binding = f"{expression_compile(context, key)} => {expression_compile(context, value)}"
            else:
                binding = expression_compile(context, variables)

            return fragment_make(
                context, f"if({target} && !empty({target})) foreach({target} as {binding}) {{"
            )

        def endfor_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            return fragment_make(context, "}")

        self.register(DirectiveSpec(
            name='for',
            category=DirectiveCategory.LOOP,
            description='Loop over a collection',
            handler=for_handler,
            takes_arguments=True,
            examples=['{@for:item in items}', '{@for:key,value in items}'],
        ))

        self.register(DirectiveSpec(
            name='endfor',
            category=DirectiveCategory.LOOP,
            description='Close the open loop',
            handler=endfor_handler,
            examples=['{@endfor}'],
        ))

    def switchDirectives_register(self) -> None:
        """
        Register switch/case/endswitch

        Every case is an independent equality test rather than an
        else-if chain: a later case closes the previous block and opens
        its own.
        """

        def switch_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """Handle {@switch:subject} - remember the subject, emit nothing"""
            context.switches.switch_open(expression_compile(context, invocation.arguments))
            return ''

        def case_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            switch = context.switches.current
            if switch is None:
                misplaced_raise(invocation, context, "no open switch")

            value = condition_compile(context, invocation.arguments)
            test = f"if({switch.subject} == {value}) {{"

            if switch.case_opened:
                return fragment_make(context, f"}} {test}")

            switch.case_opened = True
            return fragment_make(context, test)

        def endswitch_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            """
            Handle {@endswitch} - close the last case block, if any

            A switch with no case opened no block, so it closes with
            nothing rather than a bare '}'.
            """
            if context.switches.current is None:
                misplaced_raise(invocation, context, "no open switch")

            switch = context.switches.switch_close()
            return fragment_make(context, "}") if switch.case_opened else ''

        self.register(DirectiveSpec(
            name='switch',
            category=DirectiveCategory.SWITCH,
            description='Open a switch over a subject expression',
            handler=switch_handler,
            takes_arguments=True,
            examples=['{@switch:user.role}'],
        ))

        self.register(DirectiveSpec(
            name='case',
            category=DirectiveCategory.SWITCH,
            description='Block rendered when the subject equals the value',
            handler=case_handler,
            takes_arguments=True,
            examples=["{@case:'admin'}"],
        ))

        self.register(DirectiveSpec(
            name='endswitch',
            category=DirectiveCategory.SWITCH,
            description='Close the open switch',
            handler=endswitch_handler,
            examples=['{@endswitch}'],
        ))

    def blockDirectives_register(self) -> None:
        """Register the generic block closer"""

        def end_handler(invocation: DirectiveInvocation, context: CompileContext) -> str:
            return fragment_make(context, "}")

        self.register(DirectiveSpec(
            name='end',
            category=DirectiveCategory.BLOCK,
            description='Close any open block',
            handler=end_handler,
            examples=['{@end}'],
        ))
