"""
Filter invocation

Filters are named post-processing transforms written after a pipe in an
echo tag: `{{ name|upper trim }}`. The compiler does not know what a
filter means; it hands the ordered name list and the compiled expression
to a filter collaborator and splices back whatever code text it returns.

The default collaborator, FunctionFilter, wraps the expression in one
host function call per filter, innermost first:

    ["upper", "trim"], "$name"  ->  "trim(strtoupper($name))"
"""

from typing import Callable, Dict, List, Optional

from .log import LOG


FilterTransform = Callable[[List[str], str], str]


# Filter name -> host function; '' means the filter leaves the value alone
FILTER_FUNCTIONS: Dict[str, str] = {
    'upper': 'strtoupper',
    'lower': 'strtolower',
    'capitalize': 'ucfirst',
    'trim': 'trim',
    'escape': 'htmlspecialchars',
    'e': 'htmlspecialchars',
    'json': 'json_encode',
    'length': 'count',
    'nl2br': 'nl2br',
    'raw': '',
}


class FunctionFilter:
    """
    Filter collaborator mapping each filter name to a host function

    Names missing from the table are used as the function name itself,
    so any function the renderer exposes can be used as a filter.
    """

    def __init__(self, functions: Optional[Dict[str, str]] = None) -> None:
        self.functions = dict(FILTER_FUNCTIONS if functions is None else functions)

    def __call__(self, names: List[str], expression: str) -> str:
        for name in names:
            function = self.functions.get(name, name)
            if function:
                expression = f"{function}({expression})"
        return expression


class FilterInvoker:
    """Forwards compiled expressions to the filter collaborator"""

    def __init__(self, transform: Optional[FilterTransform] = None) -> None:
        self.transform: FilterTransform = transform or FunctionFilter()

    def filters_apply(self, names: List[str], expression: str) -> str:
        """
        Apply filters in the order they were written

        Args:
            names: Filter names, e.g. ["upper", "trim"]
            expression: Compiled expression text

        Returns:
            Filter-wrapped expression text, or the expression untouched
            when there are no filters
        """
        if not names:
            return expression

        LOG(f"Applying filters {names} to {expression}", level=3)
        return self.transform(list(names), expression)
