"""
nutcompiler - template compiler

Compiles templates with {{ echo }}, {@directive} and {{-- comment --}} tags
into host code executed by a renderer.
"""

__version__ = "1.0.0"

from .analyzer import ExpressionAnalyzer
from .converter import ParameterConverter
from .filters import FilterInvoker, FunctionFilter
from .directives import DirectiveRegistry
from .compiler import Compiler
from .errors import TemplateCompileError, UnknownDirective, MalformedDirective, MisplacedDirective
from .log import LOG, state_connectToLogger, state_connected

__all__ = [
    "ExpressionAnalyzer",
    "ParameterConverter",
    "FilterInvoker",
    "FunctionFilter",
    "DirectiveRegistry",
    "Compiler",
    "TemplateCompileError",
    "UnknownDirective",
    "MalformedDirective",
    "MisplacedDirective",
    "LOG",
    "state_connectToLogger",
    "state_connected",
    "__version__",
]
