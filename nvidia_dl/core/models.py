from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type, TypeVar

UINT16_MAX = 0xFFFF

@dataclass(frozen=True)
class CatalogEntry:
    name: str = ""
    series_id: int = 0   # ParentID in the lookup XML
    device_id: int = 0   # Value in the lookup XML


class Channel(Enum):
    GAME_READY = "gameready"
    STUDIO = "studio"

class Platform(Enum):
    DESKTOP = "desktop"
    NOTEBOOK = "notebook"   # mobile GPUs

class Edition(Enum):
    DCH = "dch"   # Declarative Componentized Hardware, UWP based
    STD = "std"

class WindowsTarget(Enum):
    WIN10 = "win10"
    WIN11 = "win11"   # package that installs on both 10 and 11


# ---- link tokens -------------------------------------------------------------
CHANNEL_TOKEN: Dict[Channel, str] = {Channel.GAME_READY: "", Channel.STUDIO: "-nsd"}
PLATFORM_TOKEN: Dict[Platform, str] = {Platform.DESKTOP: "desktop", Platform.NOTEBOOK: "notebook"}
EDITION_TOKEN: Dict[Edition, str] = {Edition.DCH: "-dch", Edition.STD: ""}
TARGET_TOKEN: Dict[WindowsTarget, str] = {
    WindowsTarget.WIN10: "-win10",
    WindowsTarget.WIN11: "-win10-win11",
}

# fixed iteration order for candidate links
WINDOWS_TARGETS = (WindowsTarget.WIN10, WindowsTarget.WIN11)

# ---- driver lookup API codes -------------------------------------------------
CHANNEL_WHQL: Dict[Channel, int] = {Channel.GAME_READY: 1, Channel.STUDIO: 4}
EDITION_DTCID: Dict[Edition, int] = {Edition.DCH: 1, Edition.STD: 0}
TARGET_OSID: Dict[WindowsTarget, int] = {WindowsTarget.WIN10: 57, WindowsTarget.WIN11: 135}


@dataclass(frozen=True)
class DriverDescriptor:
    version: str = ""   # empty = ask the driver lookup for the latest one
    channel: Channel = Channel.GAME_READY
    platform: Platform = Platform.DESKTOP
    edition: Edition = Edition.DCH
    windows_target: WindowsTarget = WindowsTarget.WIN11


E = TypeVar("E", bound=Enum)

_ALIASES = {
    "game-ready": "gameready", "game_ready": "gameready", "gr": "gameready",
    "nsd": "studio", "laptop": "notebook", "mobile": "notebook",
    "standard": "std", "10": "win10", "11": "win11",
}

def parse_choice(enum_cls: Type[E], raw: str) -> E:
    """Map a config/CLI string onto one of the enums above."""
    key = (raw or "").strip().lower()
    key = _ALIASES.get(key, key)
    for member in enum_cls:
        if member.value == key or member.name.lower() == key:
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"unknown {enum_cls.__name__} {raw!r} (expected one of: {choices})")
