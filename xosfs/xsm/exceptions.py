"""State of the last exception raised inside the XSM machine."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ExceptionType(IntEnum):
    """Causes of a machine exception, as reported in the EC register."""

    PAGEFAULT = 0
    ILLINSTR = 1
    ILLMEM = 2
    ARITH = 3


@dataclass
class ExceptionState:
    """The pending exception: message, cause, mode, faulting address and page."""

    message: Optional[str] = None
    code: int = 0
    mode: int = 0
    ma: int = 0
    epn: int = 0

    def set(self, message, exc_type, mode):
        """Record a new exception; the address and page are kept as they were."""
        self.message = message
        self.code = exc_type
        self.mode = mode