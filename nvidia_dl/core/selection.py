"""
State for the GPU picker, kept free of any terminal code.

The interactive loop in ``nvidia_dl.tui`` reads keys and hands them to
``SelectionState.handle``; everything that decides what the list shows and
where the cursor sits lives here.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, Sequence, TypeVar, Union

from .models import CatalogEntry

T = TypeVar("T")


class StatefulList(Generic[T]):
    """A list plus an optional cursor that is always inside it."""

    def __init__(self, items: Sequence[T] = ()):
        self.items: List[T] = list(items)
        self.selected: Optional[int] = None

    def __len__(self) -> int:
        return len(self.items)

    def next(self) -> None:
        if not self.items:
            self.selected = None
            return
        i = self.selected
        self.selected = 0 if i is None or i >= len(self.items) - 1 else i + 1

    def previous(self) -> None:
        if not self.items:
            self.selected = None
            return
        i = self.selected
        if i is None:
            self.selected = 0
        elif i == 0:
            self.selected = len(self.items) - 1
        else:
            self.selected = i - 1

    def unselect(self) -> None:
        self.selected = None

    def select(self, index: Optional[int]) -> None:
        if index is not None and not 0 <= index < len(self.items):
            raise IndexError(index)
        self.selected = index

    def replace(self, items: Sequence[T]) -> None:
        # a new list never inherits the old cursor
        self.items = list(items)
        self.selected = None

    def current(self) -> Optional[T]:
        if self.selected is None:
            return None
        return self.items[self.selected]


class Mode(Enum):
    BROWSING = "browsing"
    SEARCHING = "searching"


@dataclass(frozen=True)
class Selected:
    entry: CatalogEntry


@dataclass(frozen=True)
class NoSelection:
    """User quit the picker. A normal outcome, not an error."""


Outcome = Union[Selected, NoSelection]

# key names produced by tui.KeyReader
UP, DOWN, LEFT, RIGHT = "up", "down", "left", "right"
ENTER, ESC, BACKSPACE = "enter", "esc", "backspace"


class SelectionState:
    def __init__(self, entries: Sequence[CatalogEntry]):
        # newest GPUs carry the highest ids, show them first
        self.all_items: List[CatalogEntry] = sorted(entries, key=lambda e: e.device_id, reverse=True)
        self.filtered: StatefulList[CatalogEntry] = StatefulList(self.all_items)
        self.mode = Mode.BROWSING
        self.query = ""

    def matches(self, query: str) -> List[CatalogEntry]:
        return [e for e in self.all_items if query in e.name]

    def refilter(self) -> None:
        self.filtered.replace(self.matches(self.query))

    def preselect(self, entry: CatalogEntry) -> bool:
        for i, e in enumerate(self.filtered.items):
            if e == entry:
                self.filtered.select(i)
                return True
        return False

    def handle(self, key: str) -> Optional[Outcome]:
        if self.mode is Mode.BROWSING:
            return self._browse(key)
        self._search(key)
        return None

    def _browse(self, key: str) -> Optional[Outcome]:
        if key == "q":
            return NoSelection()
        if key == "s":
            self.mode = Mode.SEARCHING
            self.query = ""
            self.filtered.replace([])
        elif key == DOWN:
            self.filtered.next()
        elif key == UP:
            self.filtered.previous()
        elif key == LEFT:
            self.filtered.unselect()
        elif key == ENTER:
            entry = self.filtered.current()
            if entry is not None:
                return Selected(entry)
        return None

    def _search(self, key: str) -> None:
        if key in (ENTER, ESC):
            self.mode = Mode.BROWSING
        elif key == BACKSPACE:
            self.query = self.query[:-1]
            self.refilter()
        elif len(key) == 1 and key.isprintable():
            self.query += key
            self.refilter()
