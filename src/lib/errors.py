"""
Compile-time errors

All errors are raised during the single synchronous compile pass. They
subclass SyntaxError and render the offending source location the same
way for every kind:

    Unknown directive 'fro'
    Template page.nut, line 3, position 42
    Context: ...<li>{@fro: item in items}<li>...
                    ^
"""

from typing import Optional


class TemplateCompileError(SyntaxError):
    """Base class for errors raised while compiling a template"""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        position: Optional[int] = None,
        template: str = "<template>",
    ) -> None:
        self.message = message
        self.template = template
        self.position = position
        self.line = None
        if source is not None and position is not None:
            self.line = source.count('\n', 0, position) + 1
        super().__init__(self.report_build(source))

    def report_build(self, source: Optional[str]) -> str:
        """
        Build the error text with source context

        Shows up to 40 characters either side of the error position and a
        caret under it. Without a source only the message is returned.
        """
        if source is None or self.position is None:
            return self.message

        context_start = max(0, self.position - 40)
        context_end = min(len(source), self.position + 40)
        context = source[context_start:context_end].replace('\n', ' ')

        return (
            f"\n{self.message}\n"
            f"Template {self.template}, line {self.line}, position {self.position}\n"
            f"Context: ...{context}...\n"
            f"            {' ' * (self.position - context_start)}^"
        )


class UnknownDirective(TemplateCompileError):
    """A directive tag names a handler that does not exist"""

    def __init__(self, name: str, **kwargs) -> None:
        self.name = name
        super().__init__(f"Unknown directive '{name}'", **kwargs)


class MalformedDirective(TemplateCompileError):
    """A directive's arguments do not have the shape it requires"""

    def __init__(self, directive: str, raw: str, **kwargs) -> None:
        self.directive = directive
        self.raw = raw
        super().__init__(f"Cannot compile {directive}: '{raw}'", **kwargs)


class MisplacedDirective(TemplateCompileError):
    """A directive appears where its enclosing block is not open"""

    def __init__(self, name: str, reason: str = "", **kwargs) -> None:
        self.name = name
        message = f"Misplaced directive '{name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, **kwargs)
