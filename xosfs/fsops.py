"""File system operations on an XFS disk: format, list, remove, inspect, export."""

from .inode import add_inode_entry, get_data_blocks, get_inode_entry, remove_inode_entry
from .layout import (
    BLOCK_SIZE,
    CONSOLE_INT,
    CONSOLE_INT_SIZE,
    DISK_FREE_LIST,
    DISK_NO_FORMAT,
    DISKCONTROLLER_INT,
    DISKCONTROLLER_INT_SIZE,
    EX_HANDLER,
    EX_HANDLER_SIZE,
    FILETYPE_ROOT,
    INIT_BLOCK,
    INODE,
    INODE_NUM_DATA_BLOCKS,
    NO_OF_FREE_LIST_BLOCKS,
    NO_OF_INIT_BLOCKS,
    NO_OF_INODE_BLOCKS,
    NO_OF_ROOTFILE_BLOCKS,
    OS_STARTUP_CODE,
    OS_STARTUP_CODE_SIZE,
    ROOTFILE,
    TEMP_BLOCK,
    TIMERINT,
    TIMERINT_SIZE,
    USER_TABLE_OFFSET,
    interrupt_location,
)
from .loader import expand_path

_ENCODING = "latin-1"

# Initial user table: the kernel and root users.
_DEFAULT_USERS = ("kernel", "-1", "root", "452")


class XfsError(Exception):
    """An operation on the XFS disk could not be carried out."""


def format_disk(disk, format):
    """Create the disk file; when *format* is true, lay down an empty file system."""
    disk.create(DISK_NO_FORMAT)
    if not format:
        return
    disk.clear()
    disk.set_defaults(DISK_FREE_LIST)
    disk.commit(DISK_FREE_LIST)
    disk.set_defaults(INODE)
    disk.set_defaults(ROOTFILE)
    root_blocks = [ROOTFILE + i for i in range(NO_OF_ROOTFILE_BLOCKS)]
    root_blocks += [-1] * (INODE_NUM_DATA_BLOCKS - len(root_blocks))
    add_inode_entry(
        disk, 0, FILETYPE_ROOT, "root", NO_OF_ROOTFILE_BLOCKS * BLOCK_SIZE, root_blocks
    )
    user_table = INODE * BLOCK_SIZE + USER_TABLE_OFFSET
    for offset, value in enumerate(_DEFAULT_USERS):
        disk.store_string_at(user_table + offset, value)
    disk.commit(INODE)
    disk.commit(ROOTFILE)


def list_files(disk):
    """Return the files recorded on the disk."""
    return disk.list_files()


def _locate(disk, name):
    location = get_inode_entry(disk, name)
    if location is None:
        raise XfsError(f"File '{name}' not found!")
    return location


def _used_blocks(disk, location):
    blocks = get_data_blocks(disk, location)
    return list(_take_positive(blocks))


def _take_positive(blocks):
    for block in blocks:
        if block <= 0:
            return
        yield block


def _read_words(disk, block):
    disk.empty_block(TEMP_BLOCK)
    disk.read_block(TEMP_BLOCK, block)
    words = [disk.get_string_at(TEMP_BLOCK * BLOCK_SIZE + i) for i in range(BLOCK_SIZE)]
    disk.empty_block(TEMP_BLOCK)
    return words


def delete_file(disk, name):
    """Remove a file and release its blocks; the root file cannot be removed."""
    if name == "root":
        raise XfsError("Root file cannot be deleted")
    disk.check_exists()
    location = _locate(disk, name)
    disk.free_blocks(get_data_blocks(disk, location))
    remove_inode_entry(disk, location)
    disk.commit(INODE)
    disk.commit(DISK_FREE_LIST)


def clear_blocks(disk, start_block, count):
    """Overwrite *count* disk blocks from *start_block* with empty words."""
    disk.empty_block(TEMP_BLOCK)
    for block in range(start_block, start_block + count):
        disk.write_block(TEMP_BLOCK, block)


def delete_init(disk):
    """Remove the INIT program from the disk."""
    clear_blocks(disk, INIT_BLOCK, NO_OF_INIT_BLOCKS)


def delete_os_code(disk):
    """Remove the OS startup code from the disk."""
    clear_blocks(disk, OS_STARTUP_CODE, OS_STARTUP_CODE_SIZE)


def delete_timer(disk):
    """Remove the timer interrupt routine from the disk."""
    clear_blocks(disk, TIMERINT, TIMERINT_SIZE)


def delete_disk_controller_int(disk):
    """Remove the disk controller interrupt routine from the disk."""
    clear_blocks(disk, DISKCONTROLLER_INT, DISKCONTROLLER_INT_SIZE)


def delete_console_int(disk):
    """Remove the console interrupt routine from the disk."""
    clear_blocks(disk, CONSOLE_INT, CONSOLE_INT_SIZE)


def delete_interrupt(disk, int_no):
    """Remove interrupt routine number *int_no* from the disk."""
    block, count, _ = interrupt_location(int_no)
    clear_blocks(disk, block, count)


def delete_exhandler(disk):
    """Remove the exception handler from the disk."""
    clear_blocks(disk, EX_HANDLER, EX_HANDLER_SIZE)


def file_contents(disk, name):
    """Return the non-empty words stored in file *name*."""
    disk.check_exists()
    location = _locate(disk, name)
    return [
        word
        for block in _used_blocks(disk, location)
        for word in _read_words(disk, block)
        if word
    ]


def _open_output(path):
    try:
        return open(path, "w", encoding=_ENCODING, newline="")
    except OSError as exc:
        raise XfsError(f"File '{path}' not found!") from exc


def export_file(disk, name, unix_path):
    """Write every word of file *name* to *unix_path*, one per line."""
    disk.check_exists()
    location = _locate(disk, name)
    blocks = _used_blocks(disk, location)
    with _open_output(expand_path(unix_path)) as out:
        for block in blocks:
            out.writelines(f"{word}\n" for word in _read_words(disk, block))


def copy_blocks_to_file(disk, start_block, end_block, path):
    """Write the words of disk blocks *start_block* to *end_block* to *path*."""
    disk.check_exists()
    with _open_output(expand_path(path)) as out:
        for block in range(start_block, end_block + 1):
            out.writelines(f"{word}\n" for word in _read_words(disk, block))


def disk_free_list(disk):
    """Return the free list words and the number of free blocks."""
    disk.check_exists()
    base = DISK_FREE_LIST * BLOCK_SIZE
    entries = [
        disk.get_string_at(base + i) for i in range(NO_OF_FREE_LIST_BLOCKS * BLOCK_SIZE)
    ]
    free = sum(1 for i in range(len(entries)) if disk.get_value_at(base + i) == 0)
    return entries, free


def dump_root_file(disk, path):
    """Write the root file blocks to *path*."""
    copy_blocks_to_file(disk, ROOTFILE, ROOTFILE + NO_OF_ROOTFILE_BLOCKS - 1, path)


def dump_inode_table(disk, path):
    """Write the inode table and user table blocks to *path*."""
    copy_blocks_to_file(disk, INODE, INODE + NO_OF_INODE_BLOCKS - 1, path)