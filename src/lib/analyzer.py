"""
Expression analyzer

Classifies the expression found inside a tag into one of five shapes by
trying an ordered list of regular patterns. This is a priority grammar,
not a precedence-climbing parser: the first matcher that recognizes the
text wins, and nesting is handled by the ParameterConverter re-analyzing
sub-strings.

Precedence (highest first):
    1. function   name(arg, arg)        -> FunctionCall
    2. ternary    cond ? a : b, a or b  -> Ternary
    3. path       user.profile[0].name  -> PathExpression
    4. arithmetic price * qty - 1       -> ArithmeticExpression
    5. none                             -> NoShape

Because the function pattern is searched anywhere in the text, a call
always wins over a surrounding ternary or path:

    >>> ExpressionAnalyzer().analyze("a ? f(x) : b").shape
    FunctionCall(name='f', arguments=('x',))
"""

import re
from typing import Callable, List, Optional, Tuple

from ..models.expression import (
    Analysis,
    ArithmeticExpression,
    ExpressionShape,
    FunctionCall,
    NoShape,
    PathExpression,
    PathStep,
    Ternary,
)


FUNCTION_PATTERN = re.compile(r'(\w+?)\((.*)\)', re.S)
TERNARY_PATTERN = re.compile(r'([^?]*)(\?| or | and |\|\||&&)([^:]*)(?::)?([^;]*)', re.S)
PATH_STEP_PATTERN = re.compile(r'(\.?)(\[?([^.]+)\]?)')
ARITHMETIC_STEP_PATTERN = re.compile(r'([-+/*%]?)(\[?([^-+/*%]+)\]?)')

# A single pipe separates filters; '||' is the logical operator
FILTER_SEPARATOR = re.compile(r'(?<!\|)\|(?!\|)')

# Quoted strings and bracketed segments are opaque when looking for operators
OPAQUE_SEGMENT = re.compile(r"""'[^']*'|"[^"]*"|\[[^\]]*\]""")
ARITHMETIC_OPERATOR = re.compile(r'[-+*/%]')

# Longest first, so '===' is never read as '==' followed by '='
COMPARISON_OPERATOR = re.compile(r'===|!==|==|!=|<=|>=|<|>')


def arguments_split(text: str) -> List[str]:
    """
    Split a comma separated argument list at nesting depth zero

    Commas inside parentheses, brackets or quotes do not split.

    Example:
        >>> arguments_split("a, f(b, c), 'x,y'")
        ['a', ' f(b, c)', " 'x,y'"]
    """
    if not text.strip():
        return []

    parts: List[str] = []
    depth = 0
    quote = ''
    start = 0

    for i, char in enumerate(text):
        if quote:
            if char == quote:
                quote = ''
        elif char in '\'"':
            quote = char
        elif char in '([':
            depth += 1
        elif char in ')]':
            depth -= 1
        elif char == ',' and depth == 0:
            parts.append(text[start:i])
            start = i + 1

    parts.append(text[start:])
    return parts


def comparison_split(text: str) -> List[str]:
    """
    Cut a condition at its comparison operators, outside quotes and brackets

    Operands and operators alternate in the result, which always has odd
    length; text without a comparison comes back as a single operand.

    Example:
        >>> comparison_split("user.role == 'a<b'")
        ['user.role ', '==', " 'a<b'"]
    """
    parts: List[str] = []
    depth = 0
    quote = ''
    start = 0
    i = 0

    while i < len(text):
        char = text[i]
        if quote:
            if char == quote:
                quote = ''
        elif char in '\'"':
            quote = char
        elif char in '([':
            depth += 1
        elif char in ')]':
            depth -= 1
        elif depth == 0:
            m = COMPARISON_OPERATOR.match(text, i)
            if m:
                parts.extend([text[start:i], m.group(0)])
                i = start = m.end()
                continue
        i += 1

    parts.append(text[start:])
    return parts


def steps_collect(pattern: "re.Pattern[str]", text: str) -> Tuple[PathStep, ...]:
    """Cut text into (operator, token) steps with one of the step patterns"""
    steps = []
    for m in pattern.finditer(text):
        token = m.group(2)
        name = m.group(3)
        if token.startswith('[') and token.endswith(']') and len(token) >= 2:
            name = token[1:-1]
        steps.append(PathStep(text=m.group(0), operator=m.group(1), token=token, name=name))
    return tuple(steps)


def function_match(text: str) -> Optional[ExpressionShape]:
    """`name(args)` anywhere in the text"""
    m = FUNCTION_PATTERN.search(text)
    if not m:
        return None
    return FunctionCall(name=m.group(1), arguments=tuple(arguments_split(m.group(2))))


def ternary_match(text: str) -> Optional[ExpressionShape]:
    """`cond ? a : b`, `a and b`, `a or b`, `a && b`, `a || b`"""
    m = TERNARY_PATTERN.search(text)
    if not m:
        return None
    return Ternary(
        condition=m.group(1),
        operator=m.group(2).strip(),
        when_true=m.group(3),
        when_false=m.group(4),
    )


def path_match(text: str) -> Optional[ExpressionShape]:
    """Dotted/bracketed chain; declined when the text holds arithmetic"""
    if ARITHMETIC_OPERATOR.search(OPAQUE_SEGMENT.sub('', text)):
        return None
    steps = steps_collect(PATH_STEP_PATTERN, text)
    return PathExpression(steps=steps) if steps else None


def arithmetic_match(text: str) -> Optional[ExpressionShape]:
    """Operands joined by - + * / %"""
    steps = steps_collect(ARITHMETIC_STEP_PATTERN, text)
    return ArithmeticExpression(steps=steps) if steps else None


class ExpressionAnalyzer:
    """
    Classifies raw expression text into an ExpressionShape

    MATCHERS is the documented precedence order; each entry can be called
    on its own to test one shape in isolation.
    """

    MATCHERS: List[Tuple[str, Callable[[str], Optional[ExpressionShape]]]] = [
        ('function', function_match),
        ('ternary', ternary_match),
        ('path', path_match),
        ('arithmetic', arithmetic_match),
    ]

    def filters_split(self, raw: str) -> Tuple[str, List[str]]:
        """
        Separate the expression from its trailing filter list

        Returns:
            (expression, filter names in application order)

        Example:
            >>> ExpressionAnalyzer().filters_split("name|upper trim")
            ('name', ['upper', 'trim'])
        """
        parts = FILTER_SEPARATOR.split(raw, maxsplit=1)
        if len(parts) == 1:
            return raw, []
        expression, filters = parts
        return expression, filters.split()

    def shape_match(self, text: str) -> ExpressionShape:
        """Run the matchers in precedence order; NoShape when none applies"""
        for _, matcher in self.MATCHERS:
            shape = matcher(text)
            if shape is not None:
                return shape
        return NoShape()

    def analyze(self, raw: str) -> Analysis:
        """
        Classify an expression and extract its filter list

        Args:
            raw: Expression text as found between tag delimiters

        Returns:
            Analysis with the shape and ordered filter names
        """
        expression, filters = self.filters_split(raw)
        return Analysis(shape=self.shape_match(expression), filters=filters)
