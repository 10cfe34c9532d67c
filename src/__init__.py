"""
nutcompiler - template compiler

Translates templates made of plain text plus echo, directive and comment
tags into host code that a renderer executes.
"""

__version__ = "1.0.0"

from .lib import (
    Compiler,
    DirectiveRegistry,
    ExpressionAnalyzer,
    ParameterConverter,
    TemplateCompileError,
    UnknownDirective,
    MalformedDirective,
    MisplacedDirective,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Compiler",
    "DirectiveRegistry",
    "ExpressionAnalyzer",
    "ParameterConverter",
    "TemplateCompileError",
    "UnknownDirective",
    "MalformedDirective",
    "MisplacedDirective",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
