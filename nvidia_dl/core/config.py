from __future__ import annotations
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Channel, DriverDescriptor, Edition, Platform, WindowsTarget, parse_choice
from .utils import safe_filename, url_leaf_name

logger = logging.getLogger(__name__)

# ---- schema & defaults -------------------------------------------------------
SCHEMA_VERSION = 1
DEFAULT_CFG: Dict[str, Any] = {
    "schema": SCHEMA_VERSION,
    "channel": "gameready",     # gameready | studio
    "platform": "desktop",      # desktop | notebook
    "edition": "dch",           # dch | std
    "windows_target": "win11",  # win10 | win11
    "strip": [],                # component names, see core/strip.py
    "archiver": "",             # path to 7z/7zr; empty = look on PATH / fetch 7zr
    "tmp_dir": "",              # empty = <system temp>/nvidia_dl
    "verbose": False,
}

# ---- locations ---------------------------------------------------------------
# You can override location with env vars:
#   NVIDIA_DL_CONFIG=<full path to config.json>
#   NVIDIA_DL_DIR=<directory to place config.json>
def _windows_roaming_dir() -> Path:
    return Path(os.environ.get("APPDATA", Path.home() / "AppData/Roaming"))

def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

def config_dir() -> Path:
    env_dir = os.environ.get("NVIDIA_DL_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    if os.name == "nt":
        return (_windows_roaming_dir() / "NVIDIA_Driver_Downloader").resolve()
    return (_xdg_config_home() / "nvidia_dl").resolve()

def config_path() -> Path:
    env_path = os.environ.get("NVIDIA_DL_CONFIG")
    if env_path:
        p = Path(env_path).expanduser().resolve()
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    d = config_dir()
    d.mkdir(parents=True, exist_ok=True)
    return d / "config.json"

# ---- load / save -------------------------------------------------------------
def _merge_defaults(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = DEFAULT_CFG.copy()
    out.update(cfg or {})
    if "schema" not in out:
        out["schema"] = SCHEMA_VERSION
    return out

def load_cfg() -> Dict[str, Any]:
    p = config_path()
    if not p.exists():
        return DEFAULT_CFG.copy()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        # If the file is corrupt, keep a .bad copy and start fresh
        logger.warning("Config %s unreadable (%s), starting from defaults", p, e)
        try:
            p.rename(p.with_suffix(".bad.json"))
        except OSError:
            pass
        return DEFAULT_CFG.copy()
    if not isinstance(raw, dict):
        return DEFAULT_CFG.copy()
    return _merge_defaults(raw)

def save_cfg(cfg: Dict[str, Any]) -> None:
    p = config_path()
    tmp = p.with_suffix(".tmp")
    data = _merge_defaults(cfg)
    # Atomic-ish write
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    if p.exists():
        p.replace(p.with_suffix(".bak.json"))
    tmp.replace(p)

# ---- runtime values ----------------------------------------------------------
@dataclass(frozen=True)
class Paths:
    """Scratch locations handed to the download/extract steps."""
    tmp_dir: Path
    extract_dir: Path
    archiver: Path
    archiver_configured: bool = False

    def download_path(self, url: str) -> Path:
        # one file per link, so a partial from another driver is never resumed
        return self.tmp_dir / safe_filename(url_leaf_name(url))

    @classmethod
    def from_cfg(cls, cfg: Dict[str, Any], tmp_dir: Optional[str] = None,
                 archiver: Optional[str] = None) -> "Paths":
        base = Path(tmp_dir or cfg.get("tmp_dir") or Path(tempfile.gettempdir()) / "nvidia_dl")
        arch = archiver or cfg.get("archiver") or ""
        return cls(
            tmp_dir=base,
            extract_dir=base / "extract",
            archiver=Path(arch) if arch else base / "7zr.exe",
            archiver_configured=bool(arch),
        )

def descriptor_from_cfg(cfg: Dict[str, Any], version: str = "") -> DriverDescriptor:
    return DriverDescriptor(
        version=version,
        channel=parse_choice(Channel, cfg.get("channel", "gameready")),
        platform=parse_choice(Platform, cfg.get("platform", "desktop")),
        edition=parse_choice(Edition, cfg.get("edition", "dch")),
        windows_target=parse_choice(WindowsTarget, cfg.get("windows_target", "win11")),
    )

def remember_choices(cfg: Dict[str, Any], driver: DriverDescriptor,
                     strip: Optional[List[str]] = None, tmp_dir: Optional[str] = None,
                     archiver: Optional[str] = None) -> Dict[str, Any]:
    """Write the current selection back as the new defaults."""
    out = dict(cfg)
    out.update(
        channel=driver.channel.value,
        platform=driver.platform.value,
        edition=driver.edition.value,
        windows_target=driver.windows_target.value,
    )
    if strip is not None:
        out["strip"] = list(strip)
    if tmp_dir:
        out["tmp_dir"] = tmp_dir
    if archiver:
        out["archiver"] = archiver
    save_cfg(out)
    logger.info("Saved defaults to %s", config_path())
    return out
