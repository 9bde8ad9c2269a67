import io

import pytest

from xosfs.shell import Shell, complete, main, strip_white
from xosfs.vdisk import VirtualDisk


@pytest.fixture
def shell(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    disk = VirtualDisk(tmp_path / "disk.xfs")
    return Shell(disk, io.StringIO())


def output(sh):
    return sh.out.getvalue()


def test_strip_white():
    assert strip_white("  ls \t\n") == "ls"
    assert strip_white("   ") == ""


def test_complete_commands():
    assert complete("", "l", 0) == ["load", "ls"]
    assert complete("", "", 0)[0] == "fdisk"


def test_complete_load_options():
    assert complete("load ", "--e", 5) == ["--exec", "--exhandler"]


def test_complete_interrupts():
    assert complete("load --int=", "t", 11) == ["timer"]


def test_complete_modules():
    assert complete("load --module ", "", 14) == [str(n) for n in range(8)]


def test_complete_dump():
    assert complete("dump ", "--r", 5) == ["--rootfile"]


def test_complete_file_context_without_disk():
    assert complete("cat ", "", 4) == []


def test_unknown_command(shell):
    shell.run_command("frobnicate")
    assert 'Unknown command "frobnicate"' in output(shell)


def test_ls_without_disk(shell):
    shell.run_command("ls")
    assert "Unable to open disk file" in output(shell)


def test_fdisk_then_ls(shell, tmp_path):
    shell.run_command("fdisk")
    shell.run_command("ls")
    text = output(shell)
    assert 'Formatting Complete. "disk.xfs" created.' in text
    assert "Filename: root Filesize 512" in text
    assert (tmp_path / "disk.xfs").exists()


def test_root_cannot_be_removed(shell):
    shell.run_command("fdisk")
    shell.run_command("rm root")
    assert "Root file cannot be deleted" in output(shell)


def test_load_data_cat_and_remove(shell, tmp_path):
    (tmp_path / "hello.dat").write_text("hello\nworld\n")
    shell.run_command("fdisk")
    shell.run_command("load --data hello.dat")
    shell.run_command("ls")
    assert "hello.dat" in output(shell)
    shell.run_command("cat hello.dat")
    assert "world" in output(shell)
    shell.out = io.StringIO()
    shell.run_command("rm hello.dat")
    shell.run_command("ls")
    assert "hello.dat" not in output(shell)


def test_export(shell, tmp_path):
    (tmp_path / "notes.dat").write_text("alpha\n")
    shell.run_command("fdisk")
    shell.run_command("load --data notes.dat")
    shell.out = io.StringIO()
    shell.run_command("export notes.dat out.txt")
    assert output(shell) == ""
    content = (tmp_path / "out.txt").read_text(encoding="latin-1")
    assert content.startswith("alpha")


def test_export_unknown_file(shell):
    shell.run_command("fdisk")
    shell.run_command("export nothere.dat out.txt")
    assert "File 'nothere.dat' not found!" in output(shell)


def test_export_missing_path(shell):
    shell.run_command("export notes.dat")
    assert "Missing <pathname> for export" in output(shell)


def test_load_missing_path(shell):
    shell.run_command("load --data")
    assert "Missing <pathname> for load" in output(shell)


def test_load_long_filename(shell):
    shell.run_command("load --data averyveryverylongname.dat")
    assert "Filename is more than 12 characters long" in output(shell)


def test_load_wrong_extension(shell):
    shell.run_command("load --exec prog.txt")
    assert 'Filename does not have ".xsm" extension' in output(shell)


def test_load_invalid_interrupt(shell):
    shell.run_command("load --int=3 code.xsm")
    assert 'Invalid argument for "--int=" ' in output(shell)


def test_load_invalid_option(shell):
    shell.run_command("load --bogus code.xsm")
    assert 'Invalid argument "--bogus" for load' in output(shell)


def test_copy_insufficient_arguments(shell):
    shell.run_command("copy 1 2")
    assert 'Insufficient arguments for "copy"' in output(shell)


def test_dump_rootfile(shell, tmp_path):
    shell.run_command("fdisk")
    shell.out = io.StringIO()
    shell.run_command("dump --rootfile")
    assert output(shell) == ""
    lines = (tmp_path / "rootfile.txt").read_text(encoding="latin-1").splitlines()
    assert lines[0] == "root"
    assert len(lines) == 512


def test_dump_invalid_option(shell):
    shell.run_command("dump --bogus")
    assert 'Invalid argument "--bogus" for dump' in output(shell)


def test_df_counts(shell):
    shell.run_command("fdisk")
    shell.run_command("df")
    text = output(shell)
    assert "Total no of Blocks = 512" in text
    assert "No of Free Blocks = " in text


def test_exit_command_raises(shell):
    with pytest.raises(SystemExit):
        shell.run_command("exit")


def test_run_stops_at_exit(shell, tmp_path):
    shell.run(["  ", "ls", "exit", "fdisk"])
    assert "Unable to open disk file" in output(shell)
    assert not (tmp_path / "disk.xfs").exists()


def test_run_batch_file(shell, tmp_path):
    (tmp_path / "batch.txt").write_text("fdisk\nls\n")
    shell.run_command("run batch.txt")
    assert "Filename: root" in output(shell)


def test_run_missing_batch_file(shell):
    shell.run_command("run nothere.txt")
    assert "Unable to open file : nothere.txt" in output(shell)


def test_main_commands(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["fdisk"]) == 0
    assert (tmp_path / "disk.xfs").exists()
    assert main(["ls"]) == 0
    assert "Filename: root" in capsys.readouterr().out