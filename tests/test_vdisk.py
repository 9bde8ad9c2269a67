import pytest

from xosfs.layout import (
    BLOCK_SIZE,
    DATA_START_BLOCK,
    DISK_FORMAT,
    DISK_FREE_LIST,
    DISK_NO_FORMAT,
    INODE,
    INODE_ENTRY_FILENAME,
    INODE_ENTRY_FILESIZE,
    INODE_ENTRY_SIZE,
    ROOTFILE,
    ROOTFILE_ENTRY_FILESIZE,
    TEMP_BLOCK,
    USER_TABLE_OFFSET,
    WORD_SIZE,
)
from xosfs.vdisk import (
    DiskCreateError,
    DiskOpenError,
    VirtualDisk,
    XosFile,
    parse_int,
)

FREE = DISK_FREE_LIST * BLOCK_SIZE
INODE_BASE = INODE * BLOCK_SIZE


@pytest.fixture
def disk(tmp_path):
    vdisk = VirtualDisk(tmp_path / "disk.xfs")
    vdisk.create(DISK_FORMAT)
    return vdisk


def test_parse_int():
    assert parse_int("42") == 42
    assert parse_int("-1") == -1
    assert parse_int("  7abc") == 7
    assert parse_int("abc") == 0
    assert parse_int("") == 0


def test_check_exists_missing(tmp_path):
    vdisk = VirtualDisk(tmp_path / "absent.xfs")
    with pytest.raises(DiskOpenError, match="Unable to open disk file"):
        vdisk.check_exists()


def test_create_makes_file(tmp_path):
    path = tmp_path / "new.xfs"
    VirtualDisk(path).create(DISK_NO_FORMAT)
    assert path.exists()


def test_create_format_truncates(tmp_path):
    path = tmp_path / "d.xfs"
    path.write_bytes(b"abc")
    VirtualDisk(path).create(DISK_FORMAT)
    assert path.read_bytes() == b""


def test_create_in_missing_directory(tmp_path):
    vdisk = VirtualDisk(tmp_path / "no" / "such" / "disk.xfs")
    with pytest.raises(DiskCreateError, match="Failed to create disk file"):
        vdisk.create(DISK_FORMAT)


def test_write_without_file_raises(tmp_path):
    vdisk = VirtualDisk(tmp_path / "absent.xfs")
    with pytest.raises(DiskOpenError):
        vdisk.write_block(TEMP_BLOCK, 100)


def test_block_round_trip(disk):
    disk.store_string_at(TEMP_BLOCK * BLOCK_SIZE + 3, "MOV R0, 1")
    disk.store_value_at(TEMP_BLOCK * BLOCK_SIZE + 4, -7)
    disk.write_block(TEMP_BLOCK, 100)
    disk.clear()
    assert disk.get_string_at(TEMP_BLOCK * BLOCK_SIZE + 3) == ""
    disk.read_block(TEMP_BLOCK, 100)
    assert disk.get_string_at(TEMP_BLOCK * BLOCK_SIZE + 3) == "MOV R0, 1"
    assert disk.get_value_at(TEMP_BLOCK * BLOCK_SIZE + 4) == -7


def test_written_block_has_block_size(disk):
    disk.write_block(TEMP_BLOCK, 0)
    assert disk.path.stat().st_size == BLOCK_SIZE * WORD_SIZE


def test_store_string_cut_to_word(disk):
    disk.store_string_at(0, "x" * 40)
    assert disk.get_string_at(0) == "x" * WORD_SIZE


def test_free_list_defaults(disk):
    disk.set_defaults(DISK_FREE_LIST)
    assert disk.get_value_at(FREE) == 1
    assert disk.get_value_at(FREE + DATA_START_BLOCK - 1) == 1
    assert disk.get_value_at(FREE + DATA_START_BLOCK) == 0
    assert disk.get_value_at(FREE + BLOCK_SIZE - 1) == 0


def test_find_free_block(disk):
    disk.set_defaults(DISK_FREE_LIST)
    first = disk.find_free_block()
    assert first == DATA_START_BLOCK
    assert disk.get_value_at(FREE + first) == 1
    assert disk.find_free_block() == DATA_START_BLOCK + 1


def test_find_free_block_full(disk):
    for offset in range(BLOCK_SIZE):
        disk.store_value_at(FREE + offset, 1)
    assert disk.find_free_block() is None


def test_free_blocks(disk):
    disk.set_defaults(DISK_FREE_LIST)
    block = disk.find_free_block()
    disk.store_string_at(TEMP_BLOCK * BLOCK_SIZE, "data")
    disk.write_block(TEMP_BLOCK, block)
    disk.free_blocks([block, -1, DATA_START_BLOCK + 5])
    assert disk.get_value_at(FREE + block) == 0
    disk.store_string_at(TEMP_BLOCK * BLOCK_SIZE, "other")
    disk.read_block(TEMP_BLOCK, block)
    assert disk.get_string_at(TEMP_BLOCK * BLOCK_SIZE) == ""


def test_free_blocks_stops_at_marker(disk):
    disk.set_defaults(DISK_FREE_LIST)
    disk.store_value_at(FREE + 200, 1)
    disk.free_blocks([-1, 200])
    assert disk.get_value_at(FREE + 200) == 1


def test_inode_defaults(disk):
    disk.set_defaults(INODE)
    for entry in (0, INODE_ENTRY_SIZE * 59):
        assert disk.get_value_at(INODE_BASE + entry + INODE_ENTRY_FILENAME) == -1
        assert disk.get_string_at(INODE_BASE + entry + INODE_ENTRY_FILESIZE) == "0"
    assert disk.get_value_at(INODE_BASE + USER_TABLE_OFFSET + 2) == -1


def test_rootfile_defaults(disk):
    disk.set_defaults(ROOTFILE)
    base = ROOTFILE * BLOCK_SIZE
    assert disk.get_value_at(base) == -1
    assert disk.get_string_at(base + ROOTFILE_ENTRY_FILESIZE) == "0"


def test_unknown_structure(disk):
    with pytest.raises(ValueError):
        disk.set_defaults(TEMP_BLOCK)
    with pytest.raises(ValueError):
        disk.commit(TEMP_BLOCK)


def test_commit_inode_also_commits_rootfile(disk):
    disk.set_defaults(INODE)
    disk.set_defaults(ROOTFILE)
    disk.store_string_at(ROOTFILE * BLOCK_SIZE, "root")
    disk.set_defaults(DISK_FREE_LIST)
    disk.commit(DISK_FREE_LIST)
    disk.commit(INODE)
    reloaded = VirtualDisk(disk.path)
    reloaded.load()
    assert reloaded.get_string_at(ROOTFILE * BLOCK_SIZE) == "root"
    assert reloaded.blocks[INODE] == disk.blocks[INODE]
    assert reloaded.blocks[DISK_FREE_LIST] == disk.blocks[DISK_FREE_LIST]


def test_list_files_empty(disk):
    disk.set_defaults(INODE)
    assert disk.list_files() == []


def test_list_files(disk):
    disk.set_defaults(INODE)
    disk.store_string_at(INODE_BASE + INODE_ENTRY_FILENAME, "root")
    disk.store_value_at(INODE_BASE + INODE_ENTRY_FILESIZE, BLOCK_SIZE)
    assert disk.list_files() == [XosFile("root", BLOCK_SIZE)]


def test_list_files_ignores_user_table(disk):
    disk.set_defaults(INODE)
    disk.store_string_at(INODE_BASE + USER_TABLE_OFFSET, "kernel")
    disk.store_string_at(INODE_BASE + USER_TABLE_OFFSET + 1, "kernel")
    assert disk.list_files() == []


def test_list_files_needs_disk(tmp_path):
    with pytest.raises(DiskOpenError):
        VirtualDisk(tmp_path / "absent.xfs").list_files()