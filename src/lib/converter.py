"""
Parameter converter

Turns analyzed expression shapes into host code text. step_convert() is
the single place that decides whether a token is a variable, a literal,
a property step or a nested sub-expression; it is used the same way for
echo tags, directive arguments and function-call arguments.

Examples (default host syntax):
    user.name          -> $user->name
    items[0].title     -> $items[0]->title
    price * qty        -> $price * $qty
    [a, 'b', 3]        -> [$a, 'b', 3]
    date('Y', stamp)   -> date('Y', $stamp)
    name or 'Guest'    -> isset($name) ? 'Guest' : ''
"""

import re
from typing import Optional, Tuple

from ..models.expression import (
    ArithmeticExpression,
    ExpressionShape,
    FunctionCall,
    PathExpression,
    PathStep,
    Ternary,
)
from .analyzer import ExpressionAnalyzer, arguments_split, comparison_split, path_match
from .filters import FilterInvoker


NUMERIC_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
QUOTED_PATTERN = re.compile(r'^[\'"]|[\'"]$')
ARITHMETIC_OPERATORS = ('-', '+', '*', '/', '%')
EMPTY_LITERAL = "''"


def numeric_is(text: str) -> bool:
    return bool(NUMERIC_PATTERN.match(text.strip()))


def quoted_is(text: str) -> bool:
    """Token starts or ends with a quote, i.e. is (part of) a string literal"""
    return bool(QUOTED_PATTERN.search(text))


def whitespace_split(text: str) -> Tuple[str, str, str]:
    """(leading blanks, stripped text, trailing blanks)"""
    stripped = text.strip()
    if not stripped:
        return text, '', ''
    lead = text[:len(text) - len(text.lstrip())]
    trail = text[len(text.rstrip()):]
    return lead, stripped, trail


class ParameterConverter:
    """
    Compiles expressions into host code text

    Attributes:
        settings: AppSettings providing the variable sigil
        analyzer: ExpressionAnalyzer used for nested sub-expressions
        filters: FilterInvoker applied to analyzed filter lists
    """

    def __init__(
        self,
        settings,
        analyzer: Optional[ExpressionAnalyzer] = None,
        filters: Optional[FilterInvoker] = None,
    ) -> None:
        self.settings = settings
        self.analyzer = analyzer or ExpressionAnalyzer()
        self.filters = filters or FilterInvoker()

    def expression_compile(self, raw: str) -> str:
        """
        Analyze raw expression text and compile it, filters included

        Blank text, and text no pattern recognizes, compile to ''.
        """
        text = raw.strip()
        if not text:
            return EMPTY_LITERAL

        analysis = self.analyzer.analyze(text)
        result = self.shape_compile(analysis.shape)
        return self.filters.filters_apply(analysis.filters, result)

    def condition_compile(self, raw: str) -> str:
        """
        Compile a boolean condition, as taken by if, elseif and case

        Comparison operators and leading '!' are kept as host operators;
        every operand between them is compiled as an expression.

        Example:
            !user.active          -> !$user->active
            user.role == 'admin'  -> $user->role == 'admin'
        """
        parts = comparison_split(raw)
        compiled = [
            part if index % 2 else self.negation_compile(part)
            for index, part in enumerate(parts)
        ]
        return ' '.join(compiled)

    def negation_compile(self, raw: str) -> str:
        text = raw.strip()
        operand = text.lstrip('!')
        bangs = '!' * (len(text) - len(operand))
        return bangs + self.expression_compile(operand)

    def shape_compile(self, shape: ExpressionShape) -> str:
        """Compile one classified shape"""
        if isinstance(shape, FunctionCall):
            return self.function_compile(shape)
        if isinstance(shape, Ternary):
            return self.ternary_compile(shape)
        if isinstance(shape, (PathExpression, ArithmeticExpression)):
            return ''.join(self.step_convert(step) for step in shape.steps)
        return EMPTY_LITERAL

    def function_compile(self, shape: FunctionCall) -> str:
        arguments = [self.expression_compile(argument) for argument in shape.arguments]
        return f"{shape.name}({', '.join(arguments)})"

    def ternary_compile(self, shape: Ternary) -> str:
        """
        Compile a conditional

        'and'/'&&' and '?' test the condition's value; 'or'/'||' test
        whether it is set. A '?' whose true branch is the empty literal
        swaps its branches and becomes an 'or' test.
        """
        condition = self.expression_compile(shape.condition)
        when_true = self.expression_compile(shape.when_true)
        when_false = self.expression_compile(shape.when_false)

        if shape.operator in ('and', '&&'):
            return f"{condition} ? {when_true} : {when_false}"

        if shape.operator == '?':
            if when_true != EMPTY_LITERAL:
                return f"{condition} ? {when_true} : {when_false}"
            when_true, when_false = when_false, when_true

        return f"isset({condition}) ? {when_true} : {when_false}"

    def step_convert(self, step: PathStep) -> str:
        """
        Compile one (operator, token) step

        Decision order:
            1. numeric, blank or already a variable: verbatim (whole
               segment when an operator is attached)
            2. bracketed token without operator: collection literal
            3. '.' before an unquoted name: property access
            4. arithmetic operator: operator plus compiled operand
            5. quoted: verbatim; otherwise a variable reference
        """
        name = step.name
        bare = name.strip()

        if not step.bracketed and (
            numeric_is(bare) or not bare or bare.startswith(self.settings.variable_sigil)
        ):
            return step.text if step.operator else name

        if not step.operator and step.bracketed:
            items = [self.expression_compile(item) for item in arguments_split(name)]
            return f"[{', '.join(items)}]"

        if step.operator == '.' and not quoted_is(name):
            return f"->{name}"

        if step.operator in ARITHMETIC_OPERATORS:
            _, _, trail = whitespace_split(name)
            return f"{step.operator} {self.expression_compile(name)}{trail}"

        if quoted_is(name):
            return step.text

        lead, stripped, trail = whitespace_split(name)
        path = path_match(stripped) if '.' in stripped else None
        if path is not None:
            return f"{lead}{self.shape_compile(path)}{trail}"
        return f"{lead}{self.settings.variable_make(stripped)}{trail}"
