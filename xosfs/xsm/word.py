"""The XSM machine word: sixteen bytes holding a number or a short string."""

from enum import IntEnum

from ..vdisk import parse_int

XSM_WORD_SIZE = 16
XSM_INSTRUCTION_SIZE = 2
XSM_NUM_REG = 33

_ENCODING = "latin-1"
_ZERO = ord("0")
_NINE = ord("9")


class WordType(IntEnum):
    """The kind of value a word holds, seen from the host side."""

    STRING = 0
    INTEGER = 1


class Word:
    """A fixed sixteen-byte cell of machine memory, disk or register."""

    __slots__ = ("_data",)

    def __init__(self, raw=b""):
        data = bytes(raw)[:XSM_WORD_SIZE]
        self._data = bytearray(data.ljust(XSM_WORD_SIZE, b"\0"))

    @property
    def raw(self):
        """The sixteen bytes of the word, including anything after its terminator."""
        return bytes(self._data)

    def __eq__(self, other):
        if not isinstance(other, Word):
            return NotImplemented
        return self._data == other._data

    __hash__ = None

    def __repr__(self):
        return f"Word({self.get_string()!r})"

    def unix_type(self):
        """Return INTEGER when the text is an optional sign followed by digits."""
        text = self.get_string().encode(_ENCODING, errors="replace")
        if text[:1] in (b"+", b"-"):
            text = text[1:]
        if all(_ZERO <= byte <= _NINE for byte in text):
            return WordType.INTEGER
        return WordType.STRING

    def get_integer(self):
        """Return the leading integer of the text, 0 when there is none."""
        return parse_int(self.get_string())

    def get_string(self):
        """Return the text up to the first NUL byte."""
        return self._data.split(b"\0", 1)[0].decode(_ENCODING)

    def store_integer(self, value):
        """Write *value* in decimal; bytes after the terminator are left as they were."""
        digits = str(int(value)).encode("ascii")[:XSM_WORD_SIZE]
        self._data[: len(digits)] = digits
        if len(digits) < XSM_WORD_SIZE:
            self._data[len(digits)] = 0

    def store_string(self, text):
        """Write *text*, cut to sixteen bytes and padded with NUL bytes."""
        encoded = text.encode(_ENCODING, errors="replace")[:XSM_WORD_SIZE]
        self._data[:] = encoded.ljust(XSM_WORD_SIZE, b"\0")

    def copy_from(self, other):
        """Make this word a byte-for-byte copy of *other*."""
        self._data[:] = other._data

    def encrypt(self):
        """Replace the word with the sum of its sixteen bytes taken as signed chars."""
        total = sum(byte - 256 if byte >= 128 else byte for byte in self._data)
        self.store_integer(total)