import importlib
import subprocess
from pathlib import Path

import pytest

from nvidia_dl.core.config import Paths
from nvidia_dl.core.extract import ensure_archiver, extract, extract_command

extract_mod = importlib.import_module("nvidia_dl.core.extract")


def test_extract_command(tmp_path):
    cmd = extract_command(tmp_path / "driver.exe", tmp_path / "out", Path("7zr"))
    assert cmd == ["7zr", "x", "-aoa", "-bb0", "-bso0", "-bse1", "-bsp1",
                   str(tmp_path / "driver.exe"), f"-o{tmp_path / 'out'}"]


def test_extract_runs_archiver(tmp_path, monkeypatch):
    seen = {}

    def fake_run(cmd, **kw):
        seen["cmd"] = cmd
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(extract_mod.subprocess, "run", fake_run)
    out = extract(tmp_path / "driver.exe", tmp_path / "out", Path("7z"))
    assert out == tmp_path / "out" and out.is_dir()
    assert seen["cmd"][0] == "7z"


def test_extract_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(extract_mod.subprocess, "run",
                        lambda cmd, **kw: subprocess.CompletedProcess(cmd, 2, stdout="", stderr="Can not open file"))
    with pytest.raises(RuntimeError, match="Can not open file"):
        extract(tmp_path / "driver.exe", tmp_path / "out", Path("7z"))


def test_configured_archiver(tmp_path):
    exe = tmp_path / "7z"
    exe.write_text("")
    p = Paths(tmp_path, tmp_path / "x", exe, archiver_configured=True)
    assert ensure_archiver(p) == exe


def test_configured_archiver_missing(tmp_path):
    p = Paths(tmp_path, tmp_path / "x", tmp_path / "nope" / "7z", archiver_configured=True)
    with pytest.raises(RuntimeError):
        ensure_archiver(p)


def test_archiver_from_path(tmp_path, monkeypatch):
    monkeypatch.setattr(extract_mod.shutil, "which", lambda name: "/usr/bin/7z" if name == "7z" else None)
    p = Paths.from_cfg({}, tmp_dir=str(tmp_path))
    assert ensure_archiver(p) == Path("/usr/bin/7z")


def test_no_archiver_off_windows(tmp_path, monkeypatch):
    monkeypatch.setattr(extract_mod.shutil, "which", lambda name: None)
    monkeypatch.setattr(extract_mod.os, "name", "posix")
    with pytest.raises(RuntimeError):
        ensure_archiver(Paths.from_cfg({}, tmp_dir=str(tmp_path)))
