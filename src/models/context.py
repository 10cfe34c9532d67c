"""
Per-compilation state

A CompileContext is created fresh by every Compiler.compile() call and
threaded through the stages and directive handlers, so one Compiler
instance never carries state from one template into the next.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class SwitchState(Enum):
    """Where the innermost switch block currently stands"""
    IDLE = "idle"        # no switch open
    OPEN = "open"        # {@switch} seen, no {@case} yet
    IN_CASE = "in_case"  # at least one {@case} block emitted


@dataclass
class SwitchContext:
    """
    One open {@switch} block

    Attributes:
        subject: Compiled subject expression every case compares against
        case_opened: Whether the first case block has been emitted
    """
    subject: str
    case_opened: bool = False


@dataclass
class SwitchStateTracker:
    """
    Stack of open switch blocks

    Nested switches push a new context; {@endswitch} pops the innermost
    one, so a later switch always starts from a clean context.
    """
    stack: List[SwitchContext] = field(default_factory=list)

    @property
    def current(self) -> Optional[SwitchContext]:
        return self.stack[-1] if self.stack else None

    @property
    def state(self) -> SwitchState:
        if not self.stack:
            return SwitchState.IDLE
        return SwitchState.IN_CASE if self.stack[-1].case_opened else SwitchState.OPEN

    def switch_open(self, subject: str) -> SwitchContext:
        """Start tracking a new switch block"""
        switch = SwitchContext(subject=subject)
        self.stack.append(switch)
        return switch

    def switch_close(self) -> SwitchContext:
        """Stop tracking the innermost switch block and return it"""
        return self.stack.pop()


@dataclass
class CompileContext:
    """
    Mutable state for exactly one compile run

    Attributes:
        compiler: The Compiler running this compilation
        name: Template name used in diagnostics
        source: Document text of the stage currently running
        has_layout: Set once a {@layout} directive has been compiled
        switches: Open switch blocks
    """
    compiler: Any
    name: str = "<template>"
    source: str = ""
    has_layout: bool = False
    switches: SwitchStateTracker = field(default_factory=SwitchStateTracker)
