"""The XSM machine's disk, held in memory and written back when closed."""

from pathlib import Path

from .memory import XSM_PAGE_SIZE
from .word import XSM_WORD_SIZE, Word

XSM_DISK_BLOCK_NUM = 512
XSM_DISK_BLOCK_SIZE = XSM_PAGE_SIZE
BLOCK_BYTES = XSM_DISK_BLOCK_SIZE * XSM_WORD_SIZE
DISK_BYTES = XSM_DISK_BLOCK_NUM * BLOCK_BYTES

DEFAULT_DISK = "../xfs-interface/disk.xfs"


class MachineDisk:
    """A disk image loaded whole into memory."""

    def __init__(self, path=DEFAULT_DISK):
        self.path = Path(path)
        self._data = bytearray(DISK_BYTES)
        try:
            with open(self.path, "rb") as fh:
                content = fh.read(DISK_BYTES)
        except FileNotFoundError:
            with open(self.path, "wb"):
                pass
        else:
            self._data[: len(content)] = content

    def block(self, block_num):
        """Return a writable view of the bytes of block *block_num*."""
        if not 0 <= block_num < XSM_DISK_BLOCK_NUM:
            raise IndexError(f"no such disk block: {block_num}")
        start = block_num * BLOCK_BYTES
        return memoryview(self._data)[start:start + BLOCK_BYTES]

    def write_page(self, page, block_num):
        """Copy a page of words into block *block_num*."""
        words = list(page)
        if len(words) != XSM_DISK_BLOCK_SIZE:
            raise ValueError(
                f"a page holds {XSM_DISK_BLOCK_SIZE} words, got {len(words)}"
            )
        self.block(block_num)[:] = b"".join(word.raw for word in words)

    def read_block(self, block_num):
        """Return copies of the words of block *block_num*."""
        data = bytes(self.block(block_num))
        return [
            Word(data[start:start + XSM_WORD_SIZE])
            for start in range(0, BLOCK_BYTES, XSM_WORD_SIZE)
        ]

    def close(self, path=None):
        """Write the whole disk to *path* (its own file by default); return bytes written."""
        target = self.path if path is None else Path(path)
        with open(target, "wb") as fh:
            return fh.write(self._data)