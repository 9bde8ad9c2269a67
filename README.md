# xosfs

`xosfs` manages `disk.xfs`, the disk image of a small teaching operating
system. It can format the image. It loads executables, data files, system
programs, interrupt routines, the exception handler and kernel modules onto
the image. It can list, show, export and remove files, and it copies raw
disk blocks out to ordinary files.

The `xosfs.xsm` sub-package has models of parts of the simulated machine:
the 16-byte word, paged memory with address translation, the register file,
the whole-image disk and the exception state.

## Installing

```
pip install .
```

## The command-line interface

The `xfs-interface` command works on `disk.xfs` in the current directory. If
that file exists, the command first reads its free list, inode table and root
file.

If you run it with no arguments, it opens an interactive prompt. The prompt
has tab completion wherever the `readline` module is available:

```
xfs-interface
# fdisk
# load --exec even.xsm
# load --data notes.dat
# ls
# exit
```

If you pass a command as arguments, it runs that one command and exits:

```
xfs-interface fdisk
xfs-interface load --os os_startup.xsm
xfs-interface load --int=timer timer.xsm
xfs-interface load --int=7 int7.xsm
xfs-interface load --module 0 mod0.xsm
xfs-interface export notes.dat /tmp/notes.txt
xfs-interface copy 3 4 inode.txt
xfs-interface dump --rootfile
```

The commands are:

| Command | Effect |
| --- | --- |
| `fdisk` | Create and format `disk.xfs` |
| `run <pathname>` | Run the commands in a file, one per line |
| `load --exec <pathname>` | Load an executable (`.xsm`, name of 12 characters at most) |
| `load --data <pathname>` | Load a data file (`.dat`, name of 12 characters at most) |
| `load --init`, `--os`, `--idle`, `--shell`, `--library`, `--exhandler <pathname>` | Load system code into its fixed region |
| `load --int=timer\|disk\|console\|4`–`18 <pathname>` | Load an interrupt routine |
| `load --module <0-7> <pathname>` | Load a kernel module |
| `export <xfs_filename> <pathname>` | Write a file's words to a UNIX file |
| `rm <xfs_filename>` | Remove a file; the file `root` cannot be removed |
| `ls` | List files and their sizes |
| `df` | Show the free list and the number of free blocks |
| `cat <xfs_filename>` | Show the non-empty words of a file |
| `copy <start_block> <end_block> <unix_filename>` | Copy a range of blocks to a UNIX file |
| `dump --inodeusertable` | Copy the inode and user tables to `inodeusertable.txt` |
| `dump --rootfile` | Copy the root file to `rootfile.txt` |
| `help` | List the commands |
| `exit` | Leave the interface |

The OS startup code, interrupt routines, exception handler and modules can
use labels (`name:`) as targets of `JMP`, `CALL`, `JZ` and `JNZ`. These
labels are turned into absolute addresses in the memory page where the code
is placed. Code that does not fit its region leaves that region cleared, and
an error is reported.

If a path starts with `$NAME/`, the part `$NAME` is replaced by the value of
that environment variable.

## Library use

```python
from xosfs.vdisk import VirtualDisk
from xosfs import fsops, loader

disk = VirtualDisk("disk.xfs")
fsops.format_disk(disk, True)
loader.load_executable(disk, "even.xsm")
for entry in fsops.list_files(disk):
    print(entry.name, entry.size)
```

Failures raise exceptions: `xosfs.vdisk.DiskError` (with `DiskOpenError` and
`DiskCreateError`), `xosfs.loader.LoadError`, `xosfs.fsops.XfsError` and
`xosfs.labels.LabelError`. Label resolution alone is available as
`xosfs.labels.resolve_labels(lines, base_address)`.

The machine-side models are in `xosfs.xsm`:

```python
from xosfs.xsm.memory import Memory, PageFault
from xosfs.xsm.registers import Registers

memory = Memory()
registers = Registers()
registers.store_integer("SP", 4096)
```

`Memory.translate_address` raises `IllegalPage`, `PageFault` or
`WriteProtected` when a logical address cannot be translated.
`xosfs.xsm.machine_disk.MachineDisk` loads a whole disk image into memory
and writes it back with `close()`.

## What it does not do

`xosfs` does not execute machine instructions. It has no instruction decoder,
no timer, disk or console devices, and no debugger. The `xosfs.xsm` modules
are building blocks. There is no command that boots or runs the machine.

## Running the tests

```
pip install ".[test]"
pytest
```