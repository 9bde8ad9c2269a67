"""Memory copy of the XFS metadata blocks and access to the disk file."""

import os
import re
from dataclasses import dataclass
from itertools import takewhile
from pathlib import Path

from .layout import (
    BLOCK_BYTES,
    BLOCK_SIZE,
    DATA_START_BLOCK,
    DISK_FORMAT,
    DISK_FREE_LIST,
    DISK_NAME,
    EXTRA_BLOCKS,
    INODE,
    INODE_ENTRY_FILENAME,
    INODE_ENTRY_FILESIZE,
    INODE_ENTRY_SIZE,
    INODE_TABLE_WORDS,
    NO_BLOCKS_TO_COPY,
    NO_OF_DISK_BLOCKS,
    NO_OF_FREE_LIST_BLOCKS,
    NO_OF_INODE_BLOCKS,
    NO_OF_ROOTFILE_BLOCKS,
    ROOTFILE,
    ROOTFILE_ENTRY_FILESIZE,
    ROOTFILE_ENTRY_SIZE,
    TEMP_BLOCK,
    WORD_SIZE,
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_COMMIT_REGIONS = {
    DISK_FREE_LIST: ((DISK_FREE_LIST, NO_OF_FREE_LIST_BLOCKS),),
    INODE: ((INODE, NO_OF_INODE_BLOCKS), (ROOTFILE, NO_OF_ROOTFILE_BLOCKS)),
    ROOTFILE: ((ROOTFILE, NO_OF_ROOTFILE_BLOCKS),),
}

_METADATA_REGIONS = (
    (DISK_FREE_LIST, NO_OF_FREE_LIST_BLOCKS),
    (INODE, NO_OF_INODE_BLOCKS),
    (ROOTFILE, NO_OF_ROOTFILE_BLOCKS),
)


class DiskError(Exception):
    """Base class for disk file errors."""


class DiskOpenError(DiskError):
    """The disk file cannot be opened."""

    def __init__(self, message="Unable to open disk file"):
        super().__init__(message)


class DiskCreateError(DiskError):
    """The disk file cannot be created."""

    def __init__(self, message="Failed to create disk file"):
        super().__init__(message)


@dataclass
class XosFile:
    """A file entry listed from the inode table."""

    name: str
    size: int


def parse_int(text):
    """Read a leading decimal integer the way atoi does; 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _encode_word(word):
    data = word.encode("latin-1", errors="replace")[:WORD_SIZE]
    return data.ljust(WORD_SIZE, b"\0")


def _decode_word(raw):
    return raw.split(b"\0", 1)[0].decode("latin-1")


class VirtualDisk:
    """Metadata blocks of the disk kept in memory, plus one scratch block."""

    NUM_BLOCKS = NO_BLOCKS_TO_COPY + EXTRA_BLOCKS

    def __init__(self, path=DISK_NAME):
        self.path = Path(path)
        self.blocks = [[""] * BLOCK_SIZE for _ in range(self.NUM_BLOCKS)]

    def _open(self, mode):
        try:
            return open(self.path, mode)
        except OSError as exc:
            raise DiskOpenError() from exc

    def read_block(self, virt_block, file_block):
        """Copy disk block *file_block* into memory block *virt_block*."""
        with self._open("rb") as fh:
            fh.seek(file_block * BLOCK_BYTES)
            data = fh.read(BLOCK_BYTES)
        words = self.blocks[virt_block]
        whole = len(data) - len(data) % WORD_SIZE
        for index, start in enumerate(range(0, whole, WORD_SIZE)):
            words[index] = _decode_word(data[start:start + WORD_SIZE])

    def write_block(self, virt_block, file_block):
        """Copy memory block *virt_block* to disk block *file_block*."""
        payload = b"".join(_encode_word(word) for word in self.blocks[virt_block])
        with self._open("r+b") as fh:
            fh.seek(file_block * BLOCK_BYTES)
            fh.write(payload)

    def create(self, format):
        """Create the disk file, truncating it when *format* is DISK_FORMAT."""
        flags = os.O_WRONLY | os.O_CREAT
        if format == DISK_FORMAT:
            flags |= os.O_TRUNC
        try:
            fd = os.open(self.path, flags, 0o666)
        except OSError as exc:
            raise DiskCreateError() from exc
        os.close(fd)

    def check_exists(self):
        """Raise DiskOpenError unless the disk file can be opened."""
        with self._open("rb"):
            pass

    def empty_block(self, block):
        """Set every word of memory block *block* to the empty string."""
        self.blocks[block] = [""] * BLOCK_SIZE

    def free_blocks(self, blocks):
        """Mark disk blocks free and wipe them on disk.

        Stops at the first entry that is -1, 0 or None.
        """
        for block in takewhile(lambda b: b not in (-1, 0, None), blocks):
            self.store_value_at(DISK_FREE_LIST * BLOCK_SIZE + block, 0)
            self.empty_block(TEMP_BLOCK)
            self.write_block(TEMP_BLOCK, block)

    def find_free_block(self):
        """Claim the first free block in the free list; None when the disk is full."""
        base = DISK_FREE_LIST * BLOCK_SIZE
        for offset in range(NO_OF_FREE_LIST_BLOCKS * BLOCK_SIZE):
            if self.get_value_at(base + offset) == 0:
                self.store_value_at(base + offset, 1)
                return offset
        return None

    def set_defaults(self, structure):
        """Fill the free list, inode table or root file with default values."""
        if structure == DISK_FREE_LIST:
            base = DISK_FREE_LIST * BLOCK_SIZE
            for offset in range(NO_OF_FREE_LIST_BLOCKS * BLOCK_SIZE):
                used = not DATA_START_BLOCK <= offset < NO_OF_DISK_BLOCKS
                self.store_value_at(base + offset, 1 if used else 0)
        elif structure == INODE:
            base = INODE * BLOCK_SIZE
            for offset in range(NO_OF_INODE_BLOCKS * BLOCK_SIZE):
                self.store_value_at(base + offset, -1)
            for entry in range(base, base + INODE_TABLE_WORDS, INODE_ENTRY_SIZE):
                self.store_value_at(entry + INODE_ENTRY_FILESIZE, 0)
        elif structure == ROOTFILE:
            base = ROOTFILE * BLOCK_SIZE
            size = NO_OF_ROOTFILE_BLOCKS * BLOCK_SIZE
            for offset in range(size):
                self.store_value_at(base + offset, -1)
            for entry in range(base, base + size, ROOTFILE_ENTRY_SIZE):
                self.store_value_at(entry + ROOTFILE_ENTRY_FILESIZE, 0)
        else:
            raise ValueError(f"unknown disk structure: {structure}")

    def commit(self, structure):
        """Write a structure's memory copy to the disk file.

        Committing the inode table also commits the root file.
        """
        try:
            regions = _COMMIT_REGIONS[structure]
        except KeyError:
            raise ValueError(f"unknown disk structure: {structure}") from None
        for start, count in regions:
            for block in range(start, start + count):
                self.write_block(block, block)

    def load(self):
        """Read the free list, inode table and root file from the disk file."""
        for start, count in _METADATA_REGIONS:
            for block in range(start, start + count):
                self.read_block(block, block)

    def clear(self):
        """Wipe the whole memory copy."""
        for block in range(self.NUM_BLOCKS):
            self.empty_block(block)

    def get_value_at(self, address):
        """Return the integer held in the word at *address*."""
        return parse_int(self.get_string_at(address))

    def get_string_at(self, address):
        """Return the text held in the word at *address*."""
        block, index = divmod(address, BLOCK_SIZE)
        return self.blocks[block][index]

    def store_value_at(self, address, value):
        """Store an integer in the word at *address*."""
        self.store_string_at(address, str(value))

    def store_string_at(self, address, text):
        """Store text, cut to one word, in the word at *address*."""
        block, index = divmod(address, BLOCK_SIZE)
        self.blocks[block][index] = text[:WORD_SIZE]

    def list_files(self):
        """Return the files recorded in the inode table."""
        self.check_exists()
        base = INODE * BLOCK_SIZE
        files = []
        for entry in range(base, base + INODE_TABLE_WORDS, INODE_ENTRY_SIZE):
            if self.get_value_at(entry + INODE_ENTRY_FILENAME) != -1:
                files.append(
                    XosFile(
                        self.get_string_at(entry + INODE_ENTRY_FILENAME),
                        self.get_value_at(entry + INODE_ENTRY_FILESIZE),
                    )
                )
        return files