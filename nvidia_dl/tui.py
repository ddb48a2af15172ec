#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared TUI components (key input, Menu, GPU picker) for the NVIDIA Driver Downloader.
"""
from __future__ import annotations
import codecs
import os
import platform
import select
import sys
import time
from typing import Any, List, Optional, Sequence, Tuple

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from .core.models import CatalogEntry
from .core.selection import (
    BACKSPACE, DOWN, ENTER, ESC, LEFT, RIGHT, UP,
    Mode, NoSelection, Outcome, Selected, SelectionState,
)

try:
    import msvcrt
except ImportError:
    msvcrt = None

try:
    import termios, tty
except ImportError:
    termios = tty = None

TICK_RATE = 0.125  # seconds between redraws when no key arrives

# ────────────────────────── Key input ──────────────────────────
_CSI = {"A": UP, "B": DOWN, "C": RIGHT, "D": LEFT}
_WIN_SCAN = {"H": UP, "P": DOWN, "M": RIGHT, "K": LEFT}

def decode_keys(data: str) -> List[str]:
    """Split raw terminal input into key names / single printable chars."""
    keys: List[str] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            if i + 1 < len(data) and data[i + 1] in "[O":
                j = i + 2
                # skip parameter bytes, stop on the final byte
                while j < len(data) and not ("@" <= data[j] <= "~"):
                    j += 1
                if j < len(data) and j == i + 2 and data[j] in _CSI:
                    keys.append(_CSI[data[j]])
                i = j + 1  # unknown sequences (F-keys, Delete, ...) are dropped
                continue
            keys.append(ESC)
        elif ch in ("\r", "\n"):
            keys.append(ENTER)
        elif ch in ("\x7f", "\x08"):
            keys.append(BACKSPACE)
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys


class KeyReader:
    """
    Owns the terminal's input mode while active. Entering switches stdin to
    cbreak (no echo, no line buffering), leaving always puts it back.
    """
    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self._saved = None
        self._pending: List[str] = []
        # keeps a multi-byte character split across reads intact
        self._decoder = codecs.getincrementaldecoder("utf-8")("replace")

    def __enter__(self) -> "KeyReader":
        if msvcrt is None and termios is not None:
            fd = self.stream.fileno()
            self._saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        return self

    def __exit__(self, *exc) -> None:
        if self._saved is not None:
            saved, self._saved = self._saved, None
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, saved)

    def read(self, timeout: Optional[float] = None) -> Optional[str]:
        """Next key, or None once `timeout` seconds pass (None = wait forever)."""
        if self._pending:
            return self._pending.pop(0)
        if msvcrt is not None:
            return self._read_windows(timeout)
        return self._read_posix(timeout)

    def _read_windows(self, timeout: Optional[float]) -> Optional[str]:
        deadline = None if timeout is None else time.monotonic() + timeout
        while not msvcrt.kbhit():
            if deadline is not None and time.monotonic() >= deadline:
                return None
            time.sleep(0.01)
        ch = msvcrt.getwch()
        if ch in ("\x00", "\xe0"):  # arrows
            return _WIN_SCAN.get(msvcrt.getwch())
        keys = decode_keys(ch)
        return keys[0] if keys else None

    def _read_posix(self, timeout: Optional[float]) -> Optional[str]:
        fd = self.stream.fileno()
        r, _, _ = select.select([fd], [], [], timeout)
        if not r:
            return None
        data = self._decoder.decode(os.read(fd, 64))
        if data == "\x1b":
            # lone Esc or the first byte of an arrow sequence
            r, _, _ = select.select([fd], [], [], 0.03)
            if r:
                data += self._decoder.decode(os.read(fd, 64))
        self._pending.extend(decode_keys(data))
        return self._pending.pop(0) if self._pending else None


def interactive() -> bool:
    return sys.stdin.isatty() and (msvcrt is not None or termios is not None)

# ────────────────────────── Screens ──────────────────────────
def get_system_label() -> str:
    """Return a formatted system status string."""
    os_name = platform.system()
    release = platform.release()
    menu_mode = "Interactive" if interactive() else "Basic"
    if os_name == "Darwin":
        os_name = "macOS"
    return f"[dim]Running on {os_name} {release} ({menu_mode} Mode)[/]"

def clear_screen(console: Console) -> None:
    console.clear()

def header_art() -> str:
    return r"""
    _   ___   __  ____  __
   / | / / | / / / __ \/ /
  /  |/ /| |/ / / / / / /
 / /|  / |   / / /_/ / /___
/_/ |_/  |__/ /_____/_____/
"""

def get_full_header() -> str:
    """Return art + system info for consistent UI."""
    h = header_art().rstrip()
    s = get_system_label()
    return f"[bold green]{h}[/]\n{s}"

def section(console: Console, title: str, subtitle: str = "") -> None:
    clear_screen(console)
    full = get_full_header()
    msg = f"{full}\n\n[bold]{title}[/]"
    if subtitle:
        msg += f"\n[dim]{subtitle}[/]"
    console.print(Panel.fit(msg, border_style="green"))


class Menu:
    """Simple arrow-key menu (falls back to a numbered prompt without a TTY)."""
    def __init__(self, console_: Console, items: List[Tuple[str, Any]], title: str = "", subtitle: str = ""):
        self.console = console_
        self.items = items  # list of (label, return_value)
        self.title = title
        self.subtitle = subtitle
        self.idx = 0

    def _render(self, checked: Optional[set] = None) -> None:
        self.console.clear()
        full = get_full_header()
        msg = f"{full}\n\n[bold]{self.title}[/]"
        if self.subtitle:
            msg += f"\n[dim]{self.subtitle}[/]"
        self.console.print(Panel.fit(msg, border_style="green"))

        lines = []
        for i, (label, _) in enumerate(self.items):
            cursor = "➤ " if i == self.idx else "  "
            box = ""
            if checked is not None:
                box = "[bold green][X][/] " if i in checked else "[dim][ ][/] "
            row = f"{cursor}{box}{label}"
            lines.append(f"[reverse bold cyan]{row}[/]" if i == self.idx else row)
        self.console.print("\n".join(lines))
        if checked is None:
            self.console.print("\n[dim]Use ↑/↓ and Enter to select. Esc/q to Cancel.[/]")
        else:
            self.console.print("\n[dim]Space=Toggle, Enter=Confirm, Esc=Cancel.[/]")

    def _move(self, key: str) -> None:
        if key == UP:
            self.idx = max(0, self.idx - 1)
        elif key == DOWN:
            self.idx = min(len(self.items) - 1, self.idx + 1)

    def show(self) -> Any:
        if not interactive():
            self.console.print(f"[bold]{self.title}[/]")
            for i, (label, _) in enumerate(self.items, 1):
                self.console.print(f"[{i}] {label}")
            ans = Prompt.ask("Select", default="1", console=self.console)
            if ans.isdigit() and 1 <= int(ans) <= len(self.items):
                return self.items[int(ans)-1][1]
            return None

        with KeyReader() as keys:
            while True:
                self._render()
                key = keys.read()
                if key == ENTER:
                    return self.items[self.idx][1]
                if key in (ESC, "q", "0"):
                    return None
                self._move(key or "")

    def show_multiselect(self, preset: Sequence[int] = ()) -> List[Any]:
        """Show checks, return list of selected values."""
        if not interactive():
            self.console.print(f"[bold]{self.title} (Multi-select)[/]")
            self.console.print("[dim]Enter indices separated by comma (e.g. 1,3)[/]")
            for i, (label, _) in enumerate(self.items, 1):
                self.console.print(f"[{i}] {label}")
            default = ",".join(str(i + 1) for i in preset)
            ans = Prompt.ask("Select", default=default, console=self.console)
            selected = []
            for part in ans.split(","):
                if part.strip().isdigit():
                    idx = int(part.strip()) - 1
                    if 0 <= idx < len(self.items):
                        selected.append(self.items[idx][1])
            return selected

        checked = set(preset)
        with KeyReader() as keys:
            while True:
                self._render(checked)
                key = keys.read()
                if key == " ":
                    checked ^= {self.idx}
                elif key == ENTER:
                    return [self.items[i][1] for i in sorted(checked)]
                elif key in (ESC, "q"):
                    return []
                else:
                    self._move(key or "")

# ────────────────────────── GPU picker ──────────────────────────
def scroll_offset(count: int, selected: Optional[int], offset: int, rows: int) -> int:
    """First visible row so that `selected` stays inside a `rows` tall window."""
    rows = max(1, rows)
    offset = max(0, min(offset, max(0, count - rows)))
    if selected is None:
        return offset
    if selected < offset:
        return selected
    if selected >= offset + rows:
        return selected - rows + 1
    return offset

def display_name(items: Sequence[CatalogEntry], i: int) -> Text:
    """Entry label; neighbours with the same name get their ids appended."""
    e = items[i]
    t = Text(e.name)
    dup = (i > 0 and items[i - 1].name == e.name) or (i + 1 < len(items) and items[i + 1].name == e.name)
    if dup:
        t.append(f"  (psid {e.series_id}, pfid {e.device_id})", style="dim")
    return t

HELP = {
    Mode.BROWSING: [("Press ", ""), ("q", "bold"), (" to exit, ", ""), ("s", "bold"),
                    (" to search, Arrow keys to navigate and ", ""), ("Enter", "bold"), (" to select.", "")],
    Mode.SEARCHING: [("Press ", ""), ("Esc", "bold"), (" to stop searching, ", ""),
                     ("Enter", "bold"), (" to confirm your search", "")],
}


class GpuSelector:
    """
    Full-screen, filterable GPU list. Arrow keys move, `s` searches, Enter
    picks, `q` quits. run() returns Selected(entry) or NoSelection().
    """
    def __init__(self, entries: Sequence[CatalogEntry], console: Optional[Console] = None,
                 preselect: Optional[CatalogEntry] = None):
        self.console = console or Console()
        self.state = SelectionState(entries)
        self.offset = 0
        if preselect is not None:
            self.state.preselect(preselect)

    def list_rows(self) -> int:
        # list borders (2) + search box (3) + help line (1)
        return max(1, self.console.size.height - 6)

    def render(self) -> Layout:
        st = self.state
        items = st.filtered.items
        rows = self.list_rows()
        self.offset = scroll_offset(len(items), st.filtered.selected, self.offset, rows)

        lines: List[Text] = []
        for i in range(self.offset, min(len(items), self.offset + rows)):
            label = display_name(items, i)
            if i == st.filtered.selected:
                lines.append(Text("> ", style="bold black on bright_green") + label.copy())
                lines[-1].stylize("bold black on bright_green")
            else:
                lines.append(Text("  ") + label)
        if not items:
            hint = "Type to search…" if st.mode is Mode.SEARCHING and not st.query else "No matching GPUs"
            lines.append(Text(hint, style="dim"))

        title = "Select Your GPU"
        if items:
            title += f" ({len(items)}/{len(st.all_items)})"
        query = Text(st.query)
        if st.mode is Mode.SEARCHING:
            query.append("█", style="blink")

        layout = Layout()
        layout.split_column(
            Layout(Panel(Group(*lines), title=title, border_style="green"), name="list"),
            Layout(Panel(query, title="Search", border_style="cyan" if st.mode is Mode.SEARCHING else "dim"),
                   name="search", size=3),
            Layout(Text.assemble(*HELP[st.mode]), name="help", size=1),
        )
        return layout

    def run(self, keys: Optional[KeyReader] = None) -> Outcome:
        if keys is None and not interactive():
            return self.run_plain()
        reader = keys if keys is not None else KeyReader()
        with reader, Live(self.render(), console=self.console, screen=True,
                          auto_refresh=False, transient=True) as live:
            while True:
                key = reader.read(TICK_RATE)
                if key is not None:
                    outcome = self.state.handle(key)
                    if outcome is not None:
                        return outcome
                live.update(self.render(), refresh=True)

    def run_plain(self, limit: int = 50) -> Outcome:
        """Prompt-based picking for pipes and dumb terminals."""
        st = self.state
        query = Prompt.ask("Search GPU name (blank = all)", default="", console=self.console)
        st.query = query
        st.refilter()
        items = st.filtered.items
        if not items:
            self.console.print(f"[yellow]No GPU matches '{query}'.[/]")
            return NoSelection()
        for i, e in enumerate(items[:limit], 1):
            self.console.print(f"[{i}] ", display_name(items, i - 1))
        if len(items) > limit:
            self.console.print(f"[dim]… {len(items) - limit} more, refine the search to see them[/]")
        raw = Prompt.ask("Select # (0 to cancel)", default="1", console=self.console).strip()
        if raw.isdigit() and 1 <= int(raw) <= min(len(items), limit):
            return Selected(items[int(raw) - 1])
        return NoSelection()
