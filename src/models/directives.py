"""
Directive specification and metadata models

Defines the structure and categories of template directives for
validation, documentation generation, and registry management.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List


class DirectiveCategory(Enum):
    """
    Categories of template directives

    Used for organization, documentation generation, and validation.
    """
    LAYOUT = "layout"            # {@layout}, {@section}, {@show}, {@include}
    ASSIGNMENT = "assignment"    # {@set}, {@reset}
    CONDITIONAL = "conditional"  # {@if}, {@elseif}, {@else}, {@endif}
    LOOP = "loop"                # {@for}, {@endfor}
    SWITCH = "switch"            # {@switch}, {@case}, {@endswitch}
    BLOCK = "block"              # {@end}


@dataclass
class DirectiveSpec:
    """
    Specification for a template directive

    Defines metadata and handler for a directive.
    Used by DirectiveRegistry to manage available directives.

    Attributes:
        name: Directive name as written after the directive opener
        category: Category for organization
        description: Human-readable description
        handler: Compilation function (invocation, context) -> str
        takes_arguments: Whether the directive expects a `:args` part
        examples: Example usage strings
        aliases: Alternative names for the directive
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable
    takes_arguments: bool = False
    examples: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DirectiveInvocation:
    """
    One directive tag found in a template

    Attributes:
        name: Directive name, stripped (e.g. "for")
        arguments: Raw text after the colon, stripped ("" when absent)
        position: Character offset of the tag in the document being expanded

    Example:
        "{@for: item in items}" at offset 10:
        DirectiveInvocation(name="for", arguments="item in items", position=10)
    """
    name: str
    arguments: str = ""
    position: int = 0


# Every directive the compiler must be able to dispatch
BUILTIN_DIRECTIVES: FrozenSet[str] = frozenset({
    'layout', 'section', 'endsection', 'show', 'include',
    'set', 'reset',
    'if', 'elseif', 'else', 'endif',
    'for', 'endfor',
    'switch', 'case', 'endswitch',
    'end',
})
