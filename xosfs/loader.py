"""Loading UNIX files, programs and system code onto the XFS disk."""

import io
import os
import string
from enum import IntEnum

from .inode import add_inode_entry, find_empty_inode_entry, get_inode_entry
from .labels import resolve_labels
from .layout import (
    BLOCK_SIZE,
    CONSOLE_INT,
    CONSOLE_INT_SIZE,
    DISK_FREE_LIST,
    DISKCONTROLLER_INT,
    DISKCONTROLLER_INT_SIZE,
    EX_HANDLER,
    EX_HANDLER_SIZE,
    FILETYPE_DATA,
    FILETYPE_EXEC,
    IDLE_BLOCK,
    INIT_BLOCK,
    INODE,
    INODE_MAX_BLOCK_NUM,
    LIBRARY_BLOCK,
    MEM_CONSOLE_INT,
    MEM_DISKCONTROLLER_INT,
    MEM_EX_HANDLER,
    MEM_OS_STARTUP_CODE,
    MEM_TIMERINT,
    NO_OF_IDLE_BLOCKS,
    NO_OF_INIT_BLOCKS,
    NO_OF_LIBRARY_BLOCKS,
    NO_OF_SHELL_BLOCKS,
    OS_STARTUP_CODE,
    OS_STARTUP_CODE_SIZE,
    PAGE_SIZE,
    SHELL_BLOCK,
    TEMP_BLOCK,
    TIMERINT,
    TIMERINT_SIZE,
    XSM_WORD_SIZE,
    interrupt_location,
    module_location,
)

_LINE_LIMIT = 100
_ENCODING = "latin-1"


class LoadError(Exception):
    """A file could not be loaded onto the disk."""


class FileKind(IntEnum):
    """How the lines of a UNIX file are laid out in disk words."""

    ASSEMBLY_CODE = 0
    DATA_FILE = 1


def expand_path(path):
    """Replace a leading $NAME component with the value of that environment variable."""
    head, sep, rest = path.partition("/")
    if head.startswith("$"):
        value = os.environ.get(head[1:])
        if value is not None:
            head = value
    return head + sep + rest


def add_extension(filename, ext):
    """Append *ext* unless present, keeping the name within one disk word."""
    if len(filename) >= 16:
        return filename[:11] + ext
    if not filename.endswith(ext):
        filename += ext
        if len(filename) >= 16:
            return filename[:11] + ext
    return filename


def _fgets(stream, size):
    """Read like fgets into a buffer of *size*: return (text, end_of_file_hit)."""
    chunk = stream.readline(size - 1)
    hit_eof = not chunk.endswith("\n") and len(chunk) < size - 1
    return chunk, hit_eof


def data_file_size(stream):
    """Return the number of disk words a data file occupies."""
    stream.seek(0)
    reads = 0
    while True:
        _, hit_eof = _fgets(stream, XSM_WORD_SIZE)
        reads += 1
        if hit_eof:
            return reads - 1


def _split_instruction(buffer):
    """Split into opcode, first operand and the rest, as strtok would."""
    length = len(buffer)

    def token(pos, delims):
        while pos < length and buffer[pos] in delims:
            pos += 1
        if pos >= length:
            return None, None
        end = pos
        while end < length and buffer[end] not in delims:
            end += 1
        return buffer[pos:end], min(end + 1, length)

    instr, pos = token(0, " ")
    if pos is None:
        return instr, None, None
    arg1, pos = token(pos, ",")
    if pos is None:
        return instr, arg1, None
    rest = buffer[pos:]
    return instr, arg1, rest or None


def _assemble_line(line):
    """Turn one source line into the disk words it occupies."""
    quote = line.find('"')
    if quote < 0 or len(line) - quote <= 16:
        buffer = line[:31]
    else:
        buffer = line[:quote + 14] + '"'
    if len(buffer) <= 1:
        return []
    if buffer.endswith("\n"):
        buffer = buffer[:-1]
    instr, arg1, arg2 = _split_instruction(buffer)
    if instr is None:
        return []
    opcode = instr.strip()
    if opcode and opcode[0] in string.digits:
        return [opcode]
    if arg1 is not None:
        first = arg1.strip()
        if arg2 is not None:
            first += ","
        second = arg2.strip() if arg2 is not None else ""
        return [f"{opcode} {first}", second]
    return [instr, ""]


def write_file_to_disk(disk, stream, block, kind):
    """Fill disk block *block* from *stream*.

    Returns True when the block was filled and input may remain, False
    once the end of the stream was reached.
    """
    disk.empty_block(TEMP_BLOCK)
    base = TEMP_BLOCK * BLOCK_SIZE
    if kind == FileKind.ASSEMBLY_CODE:
        count = 0
        while count < BLOCK_SIZE:
            line, hit_eof = _fgets(stream, _LINE_LIMIT)
            if hit_eof:
                disk.write_block(TEMP_BLOCK, block)
                return False
            for word in _assemble_line(line):
                if count < BLOCK_SIZE:
                    disk.store_string_at(base + count, word)
                count += 1
        disk.write_block(TEMP_BLOCK, block)
        return True
    if kind == FileKind.DATA_FILE:
        for index in range(BLOCK_SIZE):
            chunk, hit_eof = _fgets(stream, XSM_WORD_SIZE)
            if hit_eof:
                disk.store_string_at(base + index, "")
                disk.write_block(TEMP_BLOCK, block)
                return False
            disk.store_string_at(base + index, chunk)
        disk.write_block(TEMP_BLOCK, block)
        return True
    raise ValueError(f"unknown file kind: {kind}")


def _open_source(path):
    try:
        return open(path, encoding=_ENCODING)
    except OSError as exc:
        raise LoadError(f"File {path} not found.") from exc


def _xfs_name(path, ext):
    return add_extension(path.rsplit("/", 1)[-1][:15], ext)


def _allocate(disk, count, no_space_message):
    blocks = []
    for _ in range(count):
        block = disk.find_free_block()
        if block is None:
            disk.free_blocks(blocks)
            raise LoadError(no_space_message)
        blocks.append(block)
    return blocks


def _store_file(disk, stream, name, file_type, size, num_blocks, kind, no_space):
    blocks = _allocate(disk, num_blocks, no_space)
    if get_inode_entry(disk, name) is not None:
        disk.free_blocks(blocks)
        raise LoadError(
            "Disk already contains the file with this name. "
            "Try again with a different name."
        )
    entry = find_empty_inode_entry(disk)
    if entry is None:
        disk.free_blocks(blocks)
        raise LoadError("No free INODE entry found.")
    disk.commit(DISK_FREE_LIST)
    disk.empty_block(TEMP_BLOCK)
    stream.seek(0)
    for block in blocks:
        write_file_to_disk(disk, stream, block, kind)
    padded = blocks + [-1] * (INODE_MAX_BLOCK_NUM - len(blocks))
    add_inode_entry(disk, entry, file_type, name, size, padded)
    disk.commit(INODE)


def load_executable(disk, path):
    """Load an assembly program as an executable file; return its XFS name."""
    name = _xfs_name(path, ".xsm")
    with _open_source(expand_path(path)) as stream:
        num_lines = stream.read().count("\n")
        num_blocks = num_lines // (BLOCK_SIZE // 2) + 1
        if num_blocks > INODE_MAX_BLOCK_NUM:
            raise LoadError(f"The size of file exceeds {INODE_MAX_BLOCK_NUM} blocks")
        _store_file(
            disk, stream, name, FILETYPE_EXEC, num_lines * 2, num_blocks,
            FileKind.ASSEMBLY_CODE, "Insufficient disk space!",
        )
    return name


def load_data(disk, path):
    """Load a data file, one word per line; return its XFS name."""
    name = _xfs_name(path, ".dat")
    with _open_source(expand_path(path)) as stream:
        num_words = data_file_size(stream)
        num_blocks = -(-num_words // BLOCK_SIZE)
        if num_blocks > INODE_MAX_BLOCK_NUM:
            raise LoadError(
                f"The size of file exceeds {INODE_MAX_BLOCK_NUM} blocks\n"
                f"The file contains {num_words} words, an xfs file can have only "
                f"upto {INODE_MAX_BLOCK_NUM * BLOCK_SIZE} words"
            )
        _store_file(
            disk, stream, name, FILETYPE_DATA, num_words, num_blocks,
            FileKind.DATA_FILE,
            "Disk does not have enough space to contain the file.",
        )
    return name


def _clear_blocks(disk, start_block, count):
    disk.empty_block(TEMP_BLOCK)
    for block in range(start_block, start_block + count):
        disk.write_block(TEMP_BLOCK, block)


def _load_code_stream(disk, stream, start_block, num_blocks):
    filled = True
    for block in range(start_block, start_block + num_blocks):
        filled = write_file_to_disk(disk, stream, block, FileKind.ASSEMBLY_CODE)
        if not filled:
            break
    if filled:
        _clear_blocks(disk, start_block, num_blocks)
        raise LoadError(f"Code exceeds {num_blocks} block")


def load_code(disk, path, start_block, num_blocks):
    """Load assembly code into a fixed region of the disk.

    Code that does not fit leaves the region cleared and raises LoadError.
    """
    with _open_source(expand_path(path)) as stream:
        _load_code_stream(disk, stream, start_block, num_blocks)


def load_code_with_labels(disk, path, start_block, num_blocks, mem_page):
    """Load code after resolving labels against memory page *mem_page*."""
    with _open_source(expand_path(path)) as source:
        lines = source.readlines()
    resolved = resolve_labels(lines, mem_page * PAGE_SIZE)
    stream = io.StringIO("".join(f"{line}\n" for line in resolved))
    _load_code_stream(disk, stream, start_block, num_blocks)


def load_init(disk, path):
    """Load the INIT program."""
    load_code(disk, path, INIT_BLOCK, NO_OF_INIT_BLOCKS)


def load_idle(disk, path):
    """Load the idle program."""
    load_code(disk, path, IDLE_BLOCK, NO_OF_IDLE_BLOCKS)


def load_shell(disk, path):
    """Load the shell program."""
    load_code(disk, path, SHELL_BLOCK, NO_OF_SHELL_BLOCKS)


def load_library(disk, path):
    """Load the library code."""
    load_code(disk, path, LIBRARY_BLOCK, NO_OF_LIBRARY_BLOCKS)


def load_os(disk, path):
    """Load the OS startup code."""
    load_code_with_labels(
        disk, path, OS_STARTUP_CODE, OS_STARTUP_CODE_SIZE, MEM_OS_STARTUP_CODE
    )


def load_timer(disk, path):
    """Load the timer interrupt routine."""
    load_code_with_labels(disk, path, TIMERINT, TIMERINT_SIZE, MEM_TIMERINT)


def load_disk_controller_int(disk, path):
    """Load the disk controller interrupt routine."""
    load_code_with_labels(
        disk, path, DISKCONTROLLER_INT, DISKCONTROLLER_INT_SIZE,
        MEM_DISKCONTROLLER_INT,
    )


def load_console_int(disk, path):
    """Load the console interrupt routine."""
    load_code_with_labels(disk, path, CONSOLE_INT, CONSOLE_INT_SIZE, MEM_CONSOLE_INT)


def load_interrupt(disk, path, int_no):
    """Load interrupt routine number *int_no*."""
    block, count, page = interrupt_location(int_no)
    load_code_with_labels(disk, path, block, count, page)


def load_module(disk, path, mod_no):
    """Load kernel module number *mod_no*."""
    block, count, page = module_location(mod_no)
    load_code_with_labels(disk, path, block, count, page)


def load_exhandler(disk, path):
    """Load the exception handler."""
    load_code_with_labels(disk, path, EX_HANDLER, EX_HANDLER_SIZE, MEM_EX_HANDLER)