import io
import os

import pytest
from rich.console import Console

from nvidia_dl.core.models import CatalogEntry
from nvidia_dl.core.selection import Mode, NoSelection, Selected
from nvidia_dl.tui import GpuSelector, KeyReader, decode_keys, display_name, scroll_offset


class ScriptedKeys:
    """Stands in for KeyReader: plays back keys, None = tick without input."""
    def __init__(self, keys):
        self.keys = list(keys)
        self.entered = self.exited = False

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, *exc):
        self.exited = True

    def read(self, timeout=None):
        if not self.keys:
            raise RuntimeError("ran out of keys")
        return self.keys.pop(0)


def make_console():
    return Console(file=io.StringIO(), width=80, height=24, force_terminal=False)


def test_decode_keys():
    assert decode_keys("\x1b[A\x1b[B\x1b[C\x1b[D") == ["up", "down", "right", "left"]
    assert decode_keys("\x1bOA") == ["up"]
    assert decode_keys("\x1b") == ["esc"]
    assert decode_keys("\r\n\x7f\x08") == ["enter", "enter", "backspace", "backspace"]
    assert decode_keys("s309") == ["s", "3", "0", "9"]
    assert decode_keys("\x1b[3~q") == ["q"]  # Delete is ignored
    assert decode_keys("\x01") == []


def test_scroll_offset():
    assert scroll_offset(100, None, 0, 10) == 0
    assert scroll_offset(100, 9, 0, 10) == 0
    assert scroll_offset(100, 10, 0, 10) == 1
    assert scroll_offset(100, 99, 0, 10) == 90
    assert scroll_offset(100, 0, 90, 10) == 0
    assert scroll_offset(5, None, 40, 10) == 0  # list shrank under the window


def test_display_name_marks_adjacent_duplicates():
    items = [CatalogEntry("GTX 1060", 101, 816), CatalogEntry("GTX 1060", 102, 815), CatalogEntry("GTX 1050", 1, 1)]
    assert "psid 101" in display_name(items, 0).plain
    assert "psid 102" in display_name(items, 1).plain
    assert display_name(items, 2).plain == "GTX 1050"


def test_run_selects(gpus):
    keys = ScriptedKeys([None, "down", None, "down", "enter"])
    sel = GpuSelector(gpus, console=make_console())
    out = sel.run(keys=keys)
    assert out == Selected(sel.state.all_items[1])
    assert keys.entered and keys.exited


def test_run_search_then_pick(gpus):
    keys = ScriptedKeys(["s", "3", "0", "9", "0", " ", "T", "enter", "down", "enter"])
    out = GpuSelector(gpus, console=make_console()).run(keys=keys)
    assert out == Selected(CatalogEntry("GeForce RTX 3090 Ti", 120, 985))


def test_run_quit(gpus):
    keys = ScriptedKeys(["down", "q"])
    assert GpuSelector(gpus, console=make_console()).run(keys=keys) == NoSelection()
    assert keys.exited


def test_run_restores_on_error(gpus):
    keys = ScriptedKeys(["down"])
    with pytest.raises(RuntimeError, match="ran out of keys"):
        GpuSelector(gpus, console=make_console()).run(keys=keys)
    assert keys.exited


def test_preselect_and_render(gpus):
    sel = GpuSelector(gpus, console=make_console(), preselect=CatalogEntry("TITAN RTX", 110, 882))
    assert sel.state.filtered.current().name == "TITAN RTX"
    sel.console.print(sel.render())
    text = sel.console.file.getvalue()
    assert "Select Your GPU" in text and "> TITAN RTX" in text
    assert "to search" in text


def test_render_empty_search(gpus):
    sel = GpuSelector(gpus, console=make_console())
    sel.state.handle("s")
    assert sel.state.mode is Mode.SEARCHING
    sel.console.print(sel.render())
    text = sel.console.file.getvalue()
    assert "Type to search" in text and "to stop searching" in text


def test_plain_fallback(gpus, monkeypatch):
    answers = iter(["1060", "2"])
    monkeypatch.setattr("nvidia_dl.tui.Prompt.ask", lambda *a, **kw: next(answers))
    sel = GpuSelector(gpus, console=make_console())
    out = sel.run_plain()
    assert out == Selected(sel.state.filtered.items[1])
    assert out.entry.name == "GeForce GTX 1060"


def test_plain_fallback_cancel(gpus, monkeypatch):
    answers = iter(["", "0"])
    monkeypatch.setattr("nvidia_dl.tui.Prompt.ask", lambda *a, **kw: next(answers))
    assert GpuSelector(gpus, console=make_console()).run_plain() == NoSelection()


@pytest.fixture
def pty_pair():
    termios = pytest.importorskip("termios")
    pty = pytest.importorskip("pty")
    master, slave = pty.openpty()
    stream = open(slave, "rb", buffering=0)
    yield termios, master, stream
    stream.close()
    os.close(master)


def test_key_reader_decodes_and_restores_terminal(pty_pair):
    termios, master, stream = pty_pair
    saved = termios.tcgetattr(stream.fileno())
    with pytest.raises(RuntimeError, match="boom"):
        with KeyReader(stream=stream) as keys:
            assert termios.tcgetattr(stream.fileno()) != saved
            os.write(master, b"\x1b[A")
            assert keys.read(1.0) == "up"
            assert keys.read(0.01) is None
            raise RuntimeError("boom")
    assert termios.tcgetattr(stream.fileno()) == saved


def test_key_reader_joins_split_utf8(pty_pair):
    _, master, stream = pty_pair
    with KeyReader(stream=stream) as keys:
        os.write(master, "é".encode("utf-8")[:1])
        assert keys.read(1.0) is None
        os.write(master, "é".encode("utf-8")[1:])
        assert keys.read(1.0) == "é"
