from __future__ import annotations
import hashlib, math, re, urllib.parse
from pathlib import Path
from typing import Optional

def human_size(n: Optional[int]) -> str:
    if not n or n <= 0: return "?"
    units = ["B","KB","MB","GB","TB"]
    i = min(int(math.floor(math.log(n, 1024))), len(units) - 1)
    return f"{n/(1024**i):.2f} {units[i]}"

def url_leaf_name(u: str) -> str:
    return urllib.parse.unquote((u or "").split("?")[0].split("/")[-1]) or "driver.exe"

def safe_filename(name: str) -> str:
    return re.sub(r'[\\/*?:"<>|]+', "_", (name or "")).strip() or "file"

def file_digest(path: Path, algo: str = "sha256") -> str:
    h = hashlib.new(algo)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024*1024), b""):
            h.update(chunk)
    return h.hexdigest()

def algo_for_hash(expected: str) -> str:
    return "sha256" if len(expected) == 64 else ("sha1" if len(expected) == 40 else "md5")
