#!/usr/bin/env python3
"""
nutcompiler - template compiler

Batch-compiles every template found in an input directory into host code
files in an output directory, keeping the relative layout.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Template syntax:
    {{ expression|filter filter }}   echo an expression
    {@directive:arguments}           control flow, layout and assignment
    {{-- comment --}}                stripped

Usage:
    nutcompiler inputdir/ outputdir/

Examples:
    # Compile every *.nut file below views/
    nutcompiler views/ build/

    # Only the pages, fail on malformed directives, write highlighted sources
    nutcompiler views/ build/ --inputGlob "pages/**/*.nut" --strict --highlight

    # Verbose output
    nutcompiler views/ build/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter

from .config import appsettings
from .lib import Compiler, TemplateCompileError, __version__, LOG, state_connectToLogger
from .lib.lexer import NutLexer
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="nutcompiler - compile templates into host code",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputGlob",
    default="",
    type=str,
    help="Glob (relative to inputdir) selecting templates. Defaults to every file with the template suffix",
)

parser.add_argument(
    "--strict",
    action="store_true",
    default=False,
    help="Fail on malformed directives instead of emitting a diagnostic comment",
)

parser.add_argument(
    "--highlight",
    action="store_true",
    default=False,
    help="Also write a syntax-highlighted HTML view of each template source",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the input directory and create the output directory.

    Exits:
        1 if the input directory does not exist
    """
    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    if not state.inputdir or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def templates_find(inputstate: ProgramState) -> ProgramState:
    """
    Collect the template files to compile.

    Returns:
        ProgramState with templateFiles set, sorted for stable output
    """
    state = inputstate.copy()

    pattern = state.inputGlob or f"**/*{appsettings.template_suffix}"
    state.templateFiles = sorted(p for p in state.inputdir.glob(pattern) if p.is_file())
    LOG(f"Found {len(state.templateFiles)} templates matching {pattern}", level=1)
    return state


def templates_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile each template and write the result below outputdir.

    A template that fails to compile is reported and skipped; the others
    are still written.

    Returns:
        ProgramState with compileResult:
            - compiled: List[str] output files written
            - failed: Dict[str, str] template -> error message
            - highlighted: List[str] HTML views written
    """
    state = inputstate.copy()

    settings = appsettings.model_copy(update={"strict_mode": True}) if state.strict else appsettings
    compiler = Compiler(settings=settings, verbosity=state.verbosity)
    formatter = HtmlFormatter(full=True, title="template source")

    compiled, highlighted = [], []
    failed = {}

    for template in state.templateFiles:
        relative = template.relative_to(state.inputdir)
        LOG(f"Compiling {relative}", level=2)

        try:
            source = template.read_text(encoding="utf-8")
            output = compiler.compile(source, name=str(relative))
        except (OSError, TemplateCompileError) as e:
            print(f"Error compiling {relative}: {e}", file=sys.stderr)
            failed[str(relative)] = str(e)
            continue

        target = state.outputdir / relative.with_suffix(settings.output_suffix)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(output, encoding="utf-8")
        compiled.append(str(target))

        if state.highlight:
            view = state.outputdir / relative.with_suffix(relative.suffix + ".html")
            view.write_text(highlight(source, NutLexer(), formatter), encoding="utf-8")
            highlighted.append(str(view))

    state.compileResult = {"compiled": compiled, "failed": failed, "highlighted": highlighted}
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Summarize the run.

    Exits:
        1 if no result is available or any template failed
    """
    state: ProgramState = inputstate.copy()
    if state.compileResult is None:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    LOG(f"Compiled: {len(state.compileResult['compiled'])}", level=1)
    for output in state.compileResult["compiled"]:
        LOG(f"  {output}", level=2)

    if state.compileResult["failed"]:
        LOG(f"Failed: {len(state.compileResult['failed'])}", level=1)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="nutcompiler - template compiler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compile every template in inputdir into outputdir.

    Orchestrates the batch pipeline:
        1. env_check: Validate directories
        2. templates_find: Collect template files
        3. templates_compile: Compile and write each template
        4. results_report: Summarize, exit non-zero on failures
    """
    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, templates_find, templates_compile, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
