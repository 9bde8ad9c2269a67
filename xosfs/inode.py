"""Inode table and root file entries in the memory copy of the disk."""

from .layout import (
    BLOCK_SIZE,
    FILETYPE_DATA,
    FILETYPE_EXEC,
    FILETYPE_ROOT,
    INODE,
    INODE_ENTRY_DATABLOCK,
    INODE_ENTRY_FILENAME,
    INODE_ENTRY_FILESIZE,
    INODE_ENTRY_FILETYPE,
    INODE_ENTRY_PERMISSION,
    INODE_ENTRY_SIZE,
    INODE_ENTRY_USERID,
    INODE_NUM_DATA_BLOCKS,
    INODE_TABLE_WORDS,
    ROOTFILE,
    ROOTFILE_ENTRY_FILENAME,
    ROOTFILE_ENTRY_FILESIZE,
    ROOTFILE_ENTRY_FILETYPE,
    ROOTFILE_ENTRY_SIZE,
)
from .vdisk import parse_int

_INODE_BASE = INODE * BLOCK_SIZE
_ROOTFILE_BASE = ROOTFILE * BLOCK_SIZE

# (user id, permission) recorded for each file type.
_OWNERSHIP = {
    FILETYPE_ROOT: (0, 0),
    FILETYPE_DATA: (1, 1),
    FILETYPE_EXEC: (0, -1),
}


def _entry_locations():
    return range(0, INODE_TABLE_WORDS, INODE_ENTRY_SIZE)


def _root_index(inode_location):
    return inode_location // INODE_ENTRY_SIZE * ROOTFILE_ENTRY_SIZE


def find_empty_inode_entry(disk):
    """Return the relative location of the first free inode entry, or None."""
    for location in _entry_locations():
        if disk.get_value_at(_INODE_BASE + location + INODE_ENTRY_FILENAME) == -1:
            return location
    return None


def add_root_file_entry(disk, index, file_type, name, size):
    """Record name, size and type of a file at *index* in the root file."""
    base = _ROOTFILE_BASE + index
    disk.store_string_at(base + ROOTFILE_ENTRY_FILENAME, name)
    disk.store_value_at(base + ROOTFILE_ENTRY_FILESIZE, size)
    disk.store_value_at(base + ROOTFILE_ENTRY_FILETYPE, file_type)


def add_inode_entry(disk, index, file_type, name, size, blocks):
    """Fill the inode entry at *index* and its matching root file entry.

    Missing data block slots are recorded as -1.
    """
    base = _INODE_BASE + index
    disk.store_value_at(base + INODE_ENTRY_FILETYPE, file_type)
    disk.store_string_at(base + INODE_ENTRY_FILENAME, name)
    disk.store_value_at(base + INODE_ENTRY_FILESIZE, size)
    if file_type in _OWNERSHIP:
        user_id, permission = _OWNERSHIP[file_type]
        disk.store_value_at(base + INODE_ENTRY_USERID, user_id)
        disk.store_value_at(base + INODE_ENTRY_PERMISSION, permission)
    padded = list(blocks)[:INODE_NUM_DATA_BLOCKS]
    padded += [-1] * (INODE_NUM_DATA_BLOCKS - len(padded))
    for slot, block in enumerate(padded):
        disk.store_value_at(base + INODE_ENTRY_DATABLOCK + slot, block)
    add_root_file_entry(disk, _root_index(index), file_type, name, size)


def remove_root_file_entry(disk, location):
    """Mark the root file entry at *location* as unused."""
    base = _ROOTFILE_BASE + location
    disk.store_value_at(base + ROOTFILE_ENTRY_FILETYPE, -1)
    disk.store_value_at(base + ROOTFILE_ENTRY_FILENAME, -1)
    disk.store_value_at(base + ROOTFILE_ENTRY_FILESIZE, 0)


def remove_inode_entry(disk, location):
    """Mark the inode entry at *location* and its root file entry as unused."""
    base = _INODE_BASE + location
    disk.store_value_at(base + INODE_ENTRY_FILETYPE, -1)
    disk.store_value_at(base + INODE_ENTRY_FILENAME, -1)
    disk.store_value_at(base + INODE_ENTRY_FILESIZE, 0)
    disk.store_value_at(base + INODE_ENTRY_USERID, -1)
    disk.store_value_at(base + INODE_ENTRY_PERMISSION, -1)
    for slot in range(INODE_NUM_DATA_BLOCKS):
        disk.store_value_at(base + INODE_ENTRY_DATABLOCK + slot, -1)
    remove_root_file_entry(disk, _root_index(location))


def get_inode_entry(disk, name):
    """Return the relative location of the inode entry for *name*, or None."""
    if name is None:
        return None
    for location in _entry_locations():
        word = disk.get_string_at(_INODE_BASE + location + INODE_ENTRY_FILENAME)
        if word == name and parse_int(word) != -1:
            return location
    return None


def get_data_blocks(disk, location):
    """Return the data block numbers recorded in the inode entry at *location*."""
    base = _INODE_BASE + location + INODE_ENTRY_DATABLOCK
    return [disk.get_value_at(base + slot) for slot in range(INODE_NUM_DATA_BLOCKS)]