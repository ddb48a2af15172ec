from __future__ import annotations
from pathlib import Path
from typing import Callable, Optional
import logging

import requests

from .http import SESSION
from .utils import algo_for_hash, file_digest

logger = logging.getLogger(__name__)

ProgressCB = Callable[[int, int], None]  # (downloaded_bytes, total_bytes)

def download_with_resume(
    url: str,
    out_path: Path,
    expected_hash: str = "",
    on_progress: Optional[ProgressCB] = None,
    chunk_size: int = 128 * 1024,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Core downloader: resumable, no UI dependencies.
    - Writes to <file>.part and renames at the end; <file>.part.url records
      the source so a partial is only resumed for the same link
    - Calls on_progress(downloaded, total) if provided
    - Optional checksum verify (sha256/sha1/md5 detected by length)
    """
    s = session or SESSION
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp = out_path.with_suffix(out_path.suffix + ".part")
    src = out_path.with_suffix(out_path.suffix + ".part.url")
    if tmp.exists() and (not src.exists() or src.read_text(encoding="utf-8").strip() != url):
        # partial belongs to another link (or is of unknown origin)
        logger.debug("Discarding partial %s, it was not downloaded from %s", tmp, url)
        tmp.unlink()
    src.write_text(url, encoding="utf-8")
    resume = tmp.stat().st_size if tmp.exists() else 0
    headers = {"Range": f"bytes={resume}-"} if resume > 0 else {}

    logger.debug("Starting download %s -> %s (resume=%d)", url, out_path, resume)

    with s.get(url, stream=True, headers=headers, timeout=30) as r:
        r.raise_for_status()
        total = int(r.headers.get("Content-Length", "0"))
        if r.status_code == 206:
            total += resume
        else:
            # server ignored the Range header, start over
            resume = 0

        mode = "ab" if resume > 0 else "wb"
        downloaded = resume
        with open(tmp, mode) as f:
            for chunk in r.iter_content(chunk_size=chunk_size):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)
                if on_progress:
                    on_progress(downloaded, total)

    tmp.replace(out_path)
    src.unlink()
    logger.debug("Download finished: %s (%d bytes)", out_path, out_path.stat().st_size)

    if expected_hash:
        algo = algo_for_hash(expected_hash)
        logger.debug("Verifying checksum (%s)", algo)
        digest = file_digest(out_path, algo)
        if digest.lower() != expected_hash.lower():
            raise RuntimeError(f"Checksum mismatch: expected {expected_hash}, got {digest}")
        logger.debug("Checksum OK")
    return out_path
