"""
Expression shape models

Type-safe structures produced by the ExpressionAnalyzer. Every expression
found inside a tag is classified into exactly one of these shapes.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Union


@dataclass(frozen=True)
class PathStep:
    """
    One (operator, token) pair of a path or arithmetic expression

    Attributes:
        text: Whole matched segment, operator included (e.g. ".name", "+ 1")
        operator: '', '.', '-', '+', '*', '/' or '%'
        token: Segment without the operator, brackets kept (e.g. "[a, b]")
        name: Token without surrounding brackets (e.g. "a, b")

    Example:
        "user.name" splits into
            PathStep(text="user", operator="", token="user", name="user")
            PathStep(text=".name", operator=".", token="name", name="name")
    """
    text: str
    operator: str
    token: str
    name: str

    @property
    def bracketed(self) -> bool:
        """True when the token is wrapped in square brackets"""
        return len(self.token) >= 2 and self.token.startswith('[') and self.token.endswith(']')


@dataclass(frozen=True)
class FunctionCall:
    """`name(arg, arg, ...)` with raw, unstripped argument strings"""
    name: str
    arguments: Tuple[str, ...]


@dataclass(frozen=True)
class Ternary:
    """
    Conditional expression

    Attributes:
        condition: Raw text before the operator
        operator: One of '?', 'and', 'or', '&&', '||'
        when_true: Raw text after the operator (before ':')
        when_false: Raw text after ':' (empty when absent)
    """
    condition: str
    operator: str
    when_true: str
    when_false: str = ""


@dataclass(frozen=True)
class PathExpression:
    """Chain of property-access steps, e.g. `user.profile.name`"""
    steps: Tuple[PathStep, ...]


@dataclass(frozen=True)
class ArithmeticExpression:
    """Chain of arithmetic steps, e.g. `price * qty`"""
    steps: Tuple[PathStep, ...]


@dataclass(frozen=True)
class NoShape:
    """Nothing recognizable; compiles to an empty literal"""


ExpressionShape = Union[FunctionCall, Ternary, PathExpression, ArithmeticExpression, NoShape]


@dataclass(frozen=True)
class Analysis:
    """
    Result of analyzing one expression

    Attributes:
        shape: Classified expression
        filters: Filter names, in the order they must be applied
    """
    shape: ExpressionShape
    filters: List[str] = field(default_factory=list)
