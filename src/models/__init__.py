"""
Models package for nutcompiler

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, pipeline
from .directives import DirectiveSpec, DirectiveCategory, DirectiveInvocation, BUILTIN_DIRECTIVES
from .tags import TagSet
from .context import CompileContext, SwitchContext, SwitchState, SwitchStateTracker
from .expression import (
    Analysis,
    ArithmeticExpression,
    ExpressionShape,
    FunctionCall,
    NoShape,
    PathExpression,
    PathStep,
    Ternary,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "DirectiveSpec",
    "DirectiveCategory",
    "DirectiveInvocation",
    "BUILTIN_DIRECTIVES",
    "TagSet",
    "CompileContext",
    "SwitchContext",
    "SwitchState",
    "SwitchStateTracker",
    "Analysis",
    "ArithmeticExpression",
    "ExpressionShape",
    "FunctionCall",
    "NoShape",
    "PathExpression",
    "PathStep",
    "Ternary",
]
