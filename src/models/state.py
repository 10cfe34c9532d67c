"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from pathlib import Path
from argparse import Namespace
from functools import reduce
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the batch pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the run progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputGlob, strict, highlight
        - env_check: envOK
        - templates_find: templateFiles
        - templates_compile: compileResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing template sources
        outputdir: Base output directory for compiled templates
        verbosity: Logging verbosity level (1-3)
        inputGlob: Glob (relative to inputdir) selecting templates; empty
                   means every file ending in the configured template suffix
        strict: Raise on malformed directives instead of emitting diagnostics
        highlight: Also write a syntax-highlighted HTML view of each source
        envOK: Environment validation passed
        templateFiles: Template paths found under inputdir
        compileResult: Compilation results (compiled, failed, outputs)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputGlob: str = field(default="")
    strict: bool = field(default=False)
    highlight: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    templateFiles: List[Path] = field(default_factory=list)
    compileResult: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputGlob, strict, etc.)
            inputdir: Directory containing template sources
            outputdir: Directory for compiled output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            templates_find,
            templates_compile,
            results_report
        )

    This is equivalent to:
        results_report(templates_compile(templates_find(env_check(initial_state))))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
