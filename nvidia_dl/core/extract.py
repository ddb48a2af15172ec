from __future__ import annotations
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

import requests

from .config import Paths
from .download import download_with_resume

logger = logging.getLogger(__name__)

SEVENZIP_URL = "https://www.7-zip.org/a/7zr.exe"

def ensure_archiver(paths: Paths, session: Optional[requests.Session] = None) -> Path:
    """
    Find something that can unpack the driver: the configured archiver,
    a 7z/7zr already on PATH, or (Windows) a freshly fetched 7zr.exe.
    """
    if paths.archiver_configured:
        if not paths.archiver.exists() and not shutil.which(str(paths.archiver)):
            raise RuntimeError(f"Configured archiver not found: {paths.archiver}")
        return paths.archiver
    for name in ("7z", "7zr", "7za"):
        found = shutil.which(name)
        if found:
            logger.debug("Using archiver from PATH: %s", found)
            return Path(found)
    if paths.archiver.exists():
        return paths.archiver
    if os.name != "nt":
        raise RuntimeError("No 7z/7zr on PATH; install p7zip or pass --archiver")
    logger.debug("Fetching 7zr from %s", SEVENZIP_URL)
    return download_with_resume(SEVENZIP_URL, paths.archiver, session=session)

def extract_command(archive: Path, out_dir: Path, archiver: Path) -> List[str]:
    return [
        str(archiver), "x",
        "-aoa",            # overwrite, no prompt
        "-bb0", "-bso0", "-bse1", "-bsp1",
        str(archive),
        f"-o{out_dir}",
    ]

def extract(archive: Path, out_dir: Path, archiver: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    cmd = extract_command(archive, out_dir, archiver)
    logger.debug("Running %s", " ".join(cmd))
    proc = subprocess.run(cmd, capture_output=True, text=True)
    if proc.returncode != 0:
        err = (proc.stderr or proc.stdout or "").strip()
        raise RuntimeError(f"Extraction failed (exit {proc.returncode}): {err}")
    return out_dir
