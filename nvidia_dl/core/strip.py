from __future__ import annotations
import logging
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

# Optional parts of an unpacked driver, relative to the extract dir.
COMPONENTS: Dict[str, Tuple[str, ...]] = {
    "Telemetry": ("NvTelemetry", "NvModuleTracker"),
    "GeForce Experience": (
        "GFExperience",
        "GFExperience.NvStreamSrv",
        "ShadowPlay",
        "ShieldWirelessController",
    ),
    "Update System": ("Display.Update", "Update.Core"),
    "FrameView": ("FrameViewSDK",),
    "Optimus": ("Display.Optimus",),
}

def component_names() -> List[str]:
    return list(COMPONENTS)

def lookup(name: str) -> str:
    """Case-insensitive component name -> canonical name (KeyError if unknown)."""
    for key in COMPONENTS:
        if key.lower() == name.strip().lower():
            return key
    raise KeyError(name)

def strip(extract_dir: Path, names: Iterable[str]) -> List[Path]:
    removed: List[Path] = []
    for name in names:
        for rel in COMPONENTS[lookup(name)]:
            p = extract_dir / rel
            if p.is_dir():
                shutil.rmtree(p)
            elif p.exists():
                p.unlink()
            else:
                continue
            logger.debug("Removed %s", p)
            removed.append(p)
    return removed
