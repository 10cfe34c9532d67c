"""
Compiler for nutcompiler templates

Rewrites a template into host code in three fixed passes over the whole
document, each pass producing the input of the next:

    1. comments_strip     {{-- ... --}}      -> inert code comment
    2. directives_expand  {@name:arguments}  -> control-flow fragments
    3. contents_expand    {{ expression }}   -> echo statements

Literal text between tags is left exactly where it was. When the template
used {@layout}, a trailer rendering the layout is appended.

Example:
    >>> Compiler().compile("Hello {{ name }}!")
    'Hello <?php echo $name ?>!'
"""

from pathlib import Path
from typing import Callable, List, Optional, Union

from ..config import appsettings
from ..models.context import CompileContext
from ..models.directives import DirectiveInvocation
from ..models.tags import TagSet
from .analyzer import ExpressionAnalyzer
from .converter import ParameterConverter
from .directives import DirectiveRegistry
from .errors import MisplacedDirective
from .filters import FilterInvoker, FilterTransform
from .log import LOG, state_connected


class Compiler:
    """
    Compiles template text to host code

    All state a compilation needs lives in a CompileContext created by
    each compile() call, so one Compiler can be reused for any number of
    templates.

    Attributes:
        settings: AppSettings in effect (delimiters, host syntax, strictness)
        tags: Delimiters recognized in templates
        analyzer: ExpressionAnalyzer for tag expressions
        converter: ParameterConverter producing host code
        directives: DirectiveRegistry dispatching directive tags
        verbosity: Output verbosity level (0-3); gates LOG() while compile() runs
    """

    def __init__(
        self,
        settings=None,
        tags: Optional[TagSet] = None,
        filters: Optional[FilterTransform] = None,
        registry: Optional[DirectiveRegistry] = None,
        verbosity: int = 1,
    ) -> None:
        """
        Initialize compiler

        Args:
            settings: AppSettings to use (default: the module singleton)
            tags: Delimiters (default: built from settings)
            filters: Filter collaborator (names, expression) -> expression
            registry: Directive table (default: all built-in directives)
            verbosity: Output verbosity level (0-3)
        """
        self.settings = settings or appsettings
        self.tags = tags or TagSet.from_settings(self.settings)
        self.verbosity = verbosity
        self.analyzer = ExpressionAnalyzer()
        self.converter = ParameterConverter(self.settings, self.analyzer, FilterInvoker(filters))
        self.directives = registry or DirectiveRegistry()

        self.comment_pattern = self.tags.comment_pattern()
        self.directive_pattern = self.tags.directive_pattern()
        self.content_pattern = self.tags.content_pattern()

        self.stages: List[Callable[[str, CompileContext], str]] = [
            self.comments_strip,
            self.directives_expand,
            self.contents_expand,
        ]

    def compile(self, template: str, name: str = "<template>") -> str:
        """
        Compile one template

        Args:
            template: Template source text
            name: Name used in diagnostics

        Returns:
            Host code with literal text preserved in place

        Raises:
            UnknownDirective: A directive tag has no handler
            MisplacedDirective: case/endswitch outside a switch, or (strict
                                mode) a switch left open
            MalformedDirective: Malformed arguments in strict mode
        """
        context = CompileContext(compiler=self, name=name)

        with state_connected(self):
            LOG(f"Compiling {name} ({len(template)} characters)", level=2)

            content = template
            for stage in self.stages:
                LOG(f"Running {stage.__name__}", level=3)
                content = stage(content, context)

            if context.switches.current is not None:
                self.switch_unclosed(context)

        if context.has_layout:
            content += "\n\n" + self.settings.fragment_make("$this->renderLayout($this->data);")

        return content

    def compile_file(self, path: Union[str, Path]) -> str:
        """Read a UTF-8 template file and compile it"""
        path = Path(path)
        return self.compile(path.read_text(encoding='utf-8'), name=path.name)

    def comments_strip(self, content: str, context: CompileContext) -> str:
        """Replace every comment region with an empty host comment"""
        context.source = content
        inert = self.settings.fragment_make("/**/")
        return self.comment_pattern.sub(lambda m: inert, content)

    def directives_expand(self, content: str, context: CompileContext) -> str:
        """Replace every directive tag with the fragment its handler emits"""
        context.source = content

        def directive_compile(match) -> str:
            invocation = DirectiveInvocation(
                name=match.group(1).strip(),
                arguments=(match.group(2) or '').strip(),
                position=match.start(),
            )
            return self.directives.dispatch(invocation, context)

        return self.directive_pattern.sub(directive_compile, content)

    def contents_expand(self, content: str, context: CompileContext) -> str:
        """Replace every echo tag with an echo of its compiled expression"""
        context.source = content

        def content_compile(match) -> str:
            result = self.converter.expression_compile(match.group(1))
            return self.settings.fragment_make(f"echo {result}")

        return self.content_pattern.sub(content_compile, content)

    def switch_unclosed(self, context: CompileContext) -> None:
        """A switch is still open at the end of the document"""
        if self.settings.strict_mode:
            raise MisplacedDirective(
                'switch', "not closed by endswitch", template=context.name
            )
        LOG(f"{context.name}: switch not closed by endswitch", level=1, severity="WARNING")
