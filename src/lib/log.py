"""
Compiler logging on top of Loguru

LOG() is gated by the verbosity of whichever object is bound to the
current context: the batch ProgramState while the CLI pipeline runs, or
the Compiler itself for the duration of each compile() call. Anything
with a `verbosity` attribute can be bound.

Usage:
    from nutcompiler.lib.log import LOG, state_connected

    with state_connected(compiler):
        LOG("Expanding directive tags", level=2)
        LOG("cannot compile for 'bogus'", level=1, severity="WARNING")

Levels gate on verbosity (1 normal, 2 verbose, 3 debug); severity is the
Loguru level the record is emitted at. Nothing bound means nothing logged.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Iterator, Optional
import sys

from loguru import logger

_bound_state: ContextVar[Optional[Any]] = ContextVar('nut_log_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{name}:{line}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> Token:
    """
    Bind a state object to the logging context

    Returns:
        The ContextVar token, for state_disconnect()
    """
    return _bound_state.set(state)


def state_disconnect(token: Token) -> None:
    """Restore whatever was bound before the matching connect"""
    _bound_state.reset(token)


@contextmanager
def state_connected(state: Any) -> Iterator[Any]:
    """Bind `state` for the body of a with-block, then restore the previous one"""
    token = state_connectToLogger(state)
    try:
        yield state
    finally:
        state_disconnect(token)


def LOG(message: str, level: int = 1, severity: str = "DEBUG", **kwargs: Any) -> None:
    """
    Emit message when the bound state's verbosity reaches `level`

    Args:
        message: Text to log
        level: Minimum verbosity required (1=normal, 2=verbose, 3=debug)
        severity: Loguru level name of the emitted record
        **kwargs: Extra loguru formatting arguments
    """
    state = _bound_state.get()
    if state is None or getattr(state, 'verbosity', 0) < level:
        return
    logger.opt(depth=1).log(severity, message, **kwargs)
