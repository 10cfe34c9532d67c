"""
Expression analyzer tests

Tests filter splitting, each shape matcher in isolation, and the
precedence between them.
"""

import pytest

from nutcompiler.lib.analyzer import (
    ExpressionAnalyzer,
    arguments_split,
    arithmetic_match,
    comparison_split,
    path_match,
    ternary_match,
)
from nutcompiler.models.expression import (
    ArithmeticExpression,
    FunctionCall,
    NoShape,
    PathExpression,
    Ternary,
)


@pytest.fixture
def analyzer():
    return ExpressionAnalyzer()


class TestFilterSplit:
    """Test separation of the trailing filter list"""

    def test_no_filters(self, analyzer):
        assert analyzer.filters_split("name") == ("name", [])

    def test_filters_in_written_order(self, analyzer):
        """Filter names keep the order they were written in"""
        assert analyzer.filters_split("name|upper trim") == ("name", ["upper", "trim"])

    def test_extra_blanks_between_filters(self, analyzer):
        assert analyzer.filters_split("name|  upper   trim ") == ("name", ["upper", "trim"])

    def test_logical_or_is_not_a_filter(self, analyzer):
        """'||' is an operator, never a filter separator"""
        assert analyzer.filters_split("a || b") == ("a || b", [])

    def test_analysis_carries_filters(self, analyzer):
        analysis = analyzer.analyze("user.name|escape")
        assert analysis.filters == ["escape"]
        assert isinstance(analysis.shape, PathExpression)


class TestShapes:
    """Test classification into each shape"""

    def test_function_call(self, analyzer):
        shape = analyzer.analyze("strtoupper(name)").shape
        assert shape == FunctionCall(name="strtoupper", arguments=("name",))

    def test_function_call_without_arguments(self, analyzer):
        assert analyzer.analyze("now()").shape == FunctionCall(name="now", arguments=())

    def test_function_call_nested_commas(self, analyzer):
        """Commas inside nested calls and strings do not split arguments"""
        shape = analyzer.analyze("join(', ', pick(a, b))").shape
        assert shape.name == "join"
        assert [a.strip() for a in shape.arguments] == ["', '", "pick(a, b)"]

    def test_question_mark_ternary(self, analyzer):
        shape = analyzer.analyze("a ? b : c").shape
        assert isinstance(shape, Ternary)
        assert shape.operator == "?"
        assert (shape.condition.strip(), shape.when_true.strip(), shape.when_false.strip()) == ("a", "b", "c")

    @pytest.mark.parametrize("operator", ["and", "or", "&&", "||"])
    def test_word_and_symbol_operators(self, analyzer, operator):
        """Operators are stored without surrounding blanks"""
        shape = analyzer.analyze(f"a {operator} b").shape
        assert isinstance(shape, Ternary)
        assert shape.operator == operator
        assert shape.condition.strip() == "a"
        assert shape.when_true.strip() == "b"
        assert shape.when_false == ""

    def test_path(self, analyzer):
        shape = analyzer.analyze("user.profile.name").shape
        assert isinstance(shape, PathExpression)
        assert [s.operator for s in shape.steps] == ["", ".", "."]
        assert [s.name for s in shape.steps] == ["user", "profile", "name"]

    def test_bracketed_step(self, analyzer):
        shape = analyzer.analyze("[a, b]").shape
        assert isinstance(shape, PathExpression)
        step = shape.steps[0]
        assert step.bracketed
        assert step.name == "a, b"

    def test_arithmetic(self, analyzer):
        shape = analyzer.analyze("price * qty").shape
        assert isinstance(shape, ArithmeticExpression)
        assert [s.operator for s in shape.steps] == ["", "*"]

    def test_quoted_hyphen_is_not_arithmetic(self, analyzer):
        assert isinstance(analyzer.analyze("'Y-m-d'").shape, PathExpression)

    def test_nothing_recognized(self, analyzer):
        """Empty text is a valid NoShape outcome, not an error"""
        assert analyzer.analyze("").shape == NoShape()


class TestPrecedence:
    """Test the documented matcher order"""

    def test_matcher_order(self):
        names = [name for name, _ in ExpressionAnalyzer.MATCHERS]
        assert names == ["function", "ternary", "path", "arithmetic"]

    def test_function_beats_ternary(self, analyzer):
        """A call anywhere in the text wins over the surrounding ternary"""
        assert analyzer.analyze("a ? f(x) : b").shape == FunctionCall(name="f", arguments=("x",))

    def test_ternary_beats_path(self, analyzer):
        assert isinstance(analyzer.analyze("user.name ? 'y' : 'n'").shape, Ternary)

    def test_path_declines_arithmetic(self):
        assert path_match("a + b") is None
        assert isinstance(arithmetic_match("a + b"), ArithmeticExpression)

    def test_ternary_matcher_alone(self):
        assert ternary_match("plain") is None


class TestArgumentsSplit:
    """Test depth-aware comma splitting"""

    def test_empty(self):
        assert arguments_split("   ") == []

    def test_flat(self):
        assert arguments_split("a,b, c") == ["a", "b", " c"]

    def test_nested(self):
        assert arguments_split("a, f(b, c), 'x,y', [1, 2]") == ["a", " f(b, c)", " 'x,y'", " [1, 2]"]


class TestComparisonSplit:
    """Test cutting conditions at comparison operators"""

    def test_no_operator(self):
        assert comparison_split("user.active") == ["user.active"]

    def test_operators_alternate(self):
        assert comparison_split("a != b") == ["a ", "!=", " b"]

    def test_longest_operator_wins(self):
        assert comparison_split("a === b") == ["a ", "===", " b"]
        assert comparison_split("a<=b") == ["a", "<=", "b"]

    def test_quoted_and_nested_operators_ignored(self):
        assert comparison_split("x == 'a<b'") == ["x ", "==", " 'a<b'"]
        assert comparison_split("max(a > b, c)") == ["max(a > b, c)"]

    def test_leading_negation_is_not_an_operator(self):
        assert comparison_split("!user.active") == ["!user.active"]
