"""The register file of the XSM machine."""

from .word import XSM_NUM_REG, Word

REGISTER_NAMES = (
    "R0", "R1", "R2", "R3", "R4", "R5", "R6", "R7", "R8", "R9",
    "R10", "R11", "R12", "R13", "R14", "R15", "R16", "R17", "R18", "R19",
    "P0", "P1", "P2", "P3",
    "BP", "SP", "IP", "PTBR", "PTLR", "EIP", "EC", "EPN", "EMA",
)

_CODES = {name.upper(): code for code, name in enumerate(REGISTER_NAMES)}

_PORT_LOW = 20
_PORT_HIGH = 23
# Only PTBR is barred from user mode among the kernel registers.
_KERNEL_ONLY = 27


class Registers:
    """The machine registers, addressed by name regardless of case."""

    def __init__(self):
        self._regs = [Word() for _ in range(XSM_NUM_REG)]
        self.zero_register = Word()
        self.zero_register.store_integer(0)

    def code(self, name):
        """Return the index of register *name*, or None when there is none."""
        return _CODES.get(name.upper())

    def get(self, name):
        """Return the word of register *name*, or None when there is none."""
        code = self.code(name)
        return None if code is None else self._regs[code]

    def _require(self, name):
        word = self.get(name)
        if word is None:
            raise KeyError(f"No such register: {name}")
        return word

    def names(self):
        """Return the register names in order."""
        return REGISTER_NAMES

    def __len__(self):
        return XSM_NUM_REG

    def get_integer(self, name):
        """Return the integer in register *name*; KeyError when there is none."""
        return self._require(name).get_integer()

    def get_string(self, name):
        """Return the text in register *name*, or None when there is none."""
        word = self.get(name)
        return None if word is None else word.get_string()

    def store_integer(self, name, value):
        """Store an integer in register *name*; KeyError when there is none."""
        self._require(name).store_integer(value)

    def store_string(self, name, text):
        """Store text in register *name*; KeyError when there is none."""
        self._require(name).store_string(text)

    def user_mode_accessible(self, name):
        """Tell whether a user-mode program may name register *name*."""
        code = self.code(name)
        if code is None:
            return False
        if _PORT_LOW <= code <= _PORT_HIGH:
            return False
        return code != _KERNEL_ONLY