"""Interactive command interface to an XFS disk."""

import os
import sys
from pathlib import Path

from .fsops import (
    XfsError,
    copy_blocks_to_file,
    disk_free_list,
    dump_inode_table,
    dump_root_file,
    export_file,
    file_contents,
    format_disk,
    list_files,
    delete_file,
)
from .labels import LabelError
from .layout import DISK_NAME, NO_OF_DISK_BLOCKS, NO_OF_INTERRUPTS, NO_OF_MODULES
from .loader import (
    LoadError,
    load_console_int,
    load_data,
    load_disk_controller_int,
    load_executable,
    load_exhandler,
    load_idle,
    load_init,
    load_interrupt,
    load_library,
    load_module,
    load_os,
    load_shell,
    load_timer,
)
from .vdisk import DiskError, VirtualDisk, parse_int

_COMMANDS = (
    "fdisk", "run", "load", "export", "rm", "ls", "df", "cat", "copy", "dump",
    "exit", "help",
)
_LOAD_OPTIONS = (
    "--int=", "--exec", "--data", "--init", "--os", "--idle", "--shell",
    "--library", "--exhandler", "--module",
)
_INTERRUPTS = tuple(str(n) for n in range(4, 19)) + ("timer", "disk", "console")
_MODULE_NUMBERS = tuple(str(n) for n in range(8))
_DUMP_OPTIONS = ("--inodeusertable", "--rootfile")
_FILES = None

_HELP = """\
 fdisk 
\t Format the disk with XFS filesystem
 run <pathname> 
\t Executes the set of xfs-interface commands sequentially 
 load --exec <pathname> 
\t Loads an executable file to XFS disk 
 load --data <pathname> 
\t Loads a data file to XFS disk 
 load --init <pathname> 
\t Loads INIT code to XFS disk 
 load --os <pathname> 
\t Loads OS startup code to XFS disk 
 load --idle <pathname> 
\t Loads Idle code to XFS disk 
 load --shell <pathname> 
\t Loads Shell code to XFS disk 
 load --library <pathname> 
\t Loads Library code to XFS disk 
 load --int=timer <pathname>
\t Loads Timer Interrupt routine to XFS disk 
 load --int=disk <pathname>
\t Loads Disk Controller Interrupt routine to XFS disk 
 load --int=console <pathname>
\t Loads Console Interrupt routine to XFS disk 
 load --int=[4-18] <pathname>
\t Loads the specified Interrupt routine to XFS disk 
 load --exhandler <pathname> 
\t Loads exception handler routine to XFS disk 
 load --module [0-7] <pathname>
\t Loads the specified Module to XFS disk 
 export <xfs_filename> <pathname>
\t Exports a data file from XFS disk to UNIX file system
 rm <xfs_filename>
\t Removes a file from XFS disk 
 ls 
\t List all files
 df 
\t Display free list and free space
 cat <xfs_filename> 
\t to display contents of a file
 copy <start_blocks> <end_block> <unix_filename>
\t Copies contents of specified range of blocks to a UNIX file.
 dump --inodeusertable
\t Copies the contents of inode table and the user table to an external UNIX file named inodeusertable.txt
 dump --rootfile 
\t Copies the contents of root file to an external UNIX file named rootfile.txt
 exit 
\t Exit the interface
"""

_BANNER = (
    'Unix-XFS Interace Version 2.0. \nType "help" for getting a list of commands.'
)


def strip_white(text):
    """Remove leading and trailing whitespace."""
    return text.strip()


def _candidates(line_buffer, start):
    context = line_buffer[:start]
    words = [word for word in context.split(" ") if word]
    if not words:
        return _COMMANDS
    first = words[0]
    if first == "load":
        if context.endswith("--int="):
            return _INTERRUPTS
        if len(words) > 1 and words[1] == "--module":
            return _MODULE_NUMBERS
        return _LOAD_OPTIONS
    if first in ("export", "cat", "rm"):
        return _FILES
    if first == "dump":
        return _DUMP_OPTIONS
    return ()


def complete(line_buffer, text, start):
    """Return the completions of *text* at position *start* of *line_buffer*.

    File name contexts need a disk and yield nothing here.
    """
    candidates = _candidates(line_buffer, start)
    if candidates is _FILES:
        return []
    return [word for word in candidates if word.startswith(text)]


def _tokens(text):
    return [token for token in text.split(" ") if token]


class Shell:
    """Runs XFS interface commands against a disk."""

    def __init__(self, disk, out=None):
        self.disk = disk
        self.out = out if out is not None else sys.stdout
        self._matches = []

    def _say(self, text=""):
        print(text, file=self.out)

    def run_command(self, command):
        """Execute one command line; errors are reported on the output."""
        tokens = _tokens(command)
        if not tokens:
            return
        name, args = tokens[0], tokens[1:]
        try:
            self._dispatch(name, args)
        except (DiskError, LoadError, XfsError, LabelError) as exc:
            self._say(str(exc))

    def _dispatch(self, name, args):
        arg = (args + [None, None, None])[:3]
        if name == "help":
            self.out.write(_HELP)
        elif name == "fdisk":
            self._say('Formatting Complete. "disk.xfs" created.')
            format_disk(self.disk, True)
        elif name == "run":
            self._run_file(arg[0])
        elif name == "load":
            self._load(*arg)
        elif name == "rm":
            if arg[0] is None:
                self._say(
                    'Missing <xfs_filename> for rm. See "help" for more information'
                )
            else:
                delete_file(self.disk, arg[0])
        elif name == "export":
            if arg[1] is None:
                self._say(
                    'Missing <pathname> for export. See "help" for more information'
                )
            else:
                export_file(self.disk, arg[0], arg[1])
        elif name == "ls":
            self._list()
        elif name == "df":
            self._free_list()
        elif name == "cat":
            if arg[0] is None:
                self._say(
                    'Missing <xfs_filename> for cat. See "help" for more information'
                )
            else:
                for word in file_contents(self.disk, arg[0]):
                    self.out.write(f"{word}\t\n")
        elif name == "copy":
            if None in arg:
                self._say(
                    'Insufficient arguments for "copy". '
                    'See "help" for more information'
                )
            else:
                copy_blocks_to_file(
                    self.disk, parse_int(arg[0]), parse_int(arg[1]), arg[2][:50]
                )
        elif name == "dump":
            if arg[0] == "--inodeusertable":
                dump_inode_table(self.disk, "inodeusertable.txt")
            elif arg[0] == "--rootfile":
                dump_root_file(self.disk, "rootfile.txt")
            else:
                self._say(
                    f'Invalid argument "{arg[0] or ""}" for dump. '
                    'See "help" for more information'
                )
        elif name == "exit":
            raise SystemExit(0)
        else:
            self._say(f'Unknown command "{name}". See "help" for more information')

    def _run_file(self, path):
        try:
            with open(path or "", encoding="latin-1") as batch:
                lines = batch.readlines()
        except OSError:
            self._say(f"Unable to open file : {path or ''}")
            return
        for line in lines:
            self.run_command(line[:-1] if line.endswith("\n") else line)

    def _load(self, option_arg, path, extra):
        if path is None or option_arg is None:
            self._say('Missing <pathname> for load. See "help" for more information')
            return
        parts = [part for part in option_arg.split("=") if part]
        option = parts[0] if parts else ""
        int_type = parts[1] if len(parts) > 1 else None
        file_name = path[:100]
        simple = {
            "--init": load_init,
            "--shell": load_shell,
            "--library": load_library,
            "--idle": load_idle,
            "--os": load_os,
            "--exhandler": load_exhandler,
        }
        if option in ("--exec", "--data"):
            ext = ".xsm" if option == "--exec" else ".dat"
            if len(os.path.basename(file_name)) > 12:
                self._say("Filename is more than 12 characters long")
                return
            dot = file_name.rfind(".")
            if dot < 0 or file_name[dot:] != ext:
                self._say(f'Filename does not have "{ext}" extension')
                return
            loader = load_executable if option == "--exec" else load_data
            loader(self.disk, file_name)
        elif option in simple:
            simple[option](self.disk, file_name)
        elif option == "--int":
            named = {
                "timer": load_timer,
                "disk": load_disk_controller_int,
                "console": load_console_int,
            }
            if int_type in named:
                named[int_type](self.disk, file_name)
                return
            int_no = parse_int(int_type or "")
            if 4 <= int_no <= NO_OF_INTERRUPTS:
                load_interrupt(self.disk, file_name, int_no)
            else:
                self._say('Invalid argument for "--int=" ')
        elif option == "--module":
            mod_no = parse_int(path)
            if not 0 <= mod_no <= NO_OF_MODULES:
                self._say('Invalid argument for "--module=" ')
            elif extra is None:
                self._say(
                    'Missing <pathname> for load. See "help" for more information'
                )
            else:
                load_module(self.disk, extra, mod_no)
        else:
            self._say(
                f'Invalid argument "{option}" for load. '
                'See "help" for more information'
            )

    def _list(self):
        files = list_files(self.disk)
        if not files:
            self._say("The disk contains no files.")
        for entry in files:
            self._say(f"Filename: {entry.name} Filesize {entry.size}")

    def _free_list(self):
        entries, free = disk_free_list(self.disk)
        for index, word in enumerate(entries):
            self.out.write(f"{index} \t - \t {word}  \n")
        self.out.write(f"\nNo of Free Blocks = {free}")
        self.out.write(f"\nTotal no of Blocks = {NO_OF_DISK_BLOCKS}\n")

    def run(self, lines):
        """Execute command lines until one of them is "exit"."""
        for line in lines:
            command = strip_white(line)
            if not command:
                continue
            if command == "exit":
                break
            self.run_command(command)

    def _complete(self, line_buffer, text, start):
        candidates = _candidates(line_buffer, start)
        if candidates is _FILES:
            try:
                candidates = [entry.name for entry in list_files(self.disk)]
            except DiskError:
                return []
        return [word for word in candidates if word.startswith(text)]

    def _readline_completer(self, text, state):
        if state == 0:
            import readline

            self._matches = self._complete(
                readline.get_line_buffer(), text, readline.get_begidx()
            )
        return self._matches[state] if state < len(self._matches) else None


def _prompt_lines():
    while True:
        try:
            yield input("# ")
        except EOFError:
            return


def _enable_completion(shell):
    try:
        import readline
    except ImportError:
        return
    readline.set_completer(shell._readline_completer)
    readline.set_completer_delims(" ")
    readline.parse_and_bind("tab: complete")


def main(argv=None):
    """Run one command from the arguments, or an interactive session."""
    args = sys.argv[1:] if argv is None else list(argv)
    disk = VirtualDisk(DISK_NAME)
    if Path(DISK_NAME).exists():
        try:
            disk.load()
        except DiskError:
            pass
    shell = Shell(disk)
    if args:
        shell.run_command(" ".join(args))
    else:
        print(_BANNER)
        _enable_completion(shell)
        shell.run(_prompt_lines())
    return 0


if __name__ == "__main__":
    sys.exit(main())