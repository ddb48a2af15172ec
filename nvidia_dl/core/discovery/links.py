from __future__ import annotations
import logging
import re
from typing import List, Optional

import requests

from ..errors import InvalidCombination, Unreachable
from ..http import PROBE_SESSION
from ..models import (
    CHANNEL_TOKEN, EDITION_TOKEN, PLATFORM_TOKEN, TARGET_TOKEN, WINDOWS_TARGETS,
    DriverDescriptor, WindowsTarget,
)

logger = logging.getLogger(__name__)

BASE = "https://international.download.nvidia.com"
_VERSION_RE = re.compile(r"^\d+\.\d+$")

def resolve(driver: DriverDescriptor) -> List[str]:
    """
    Candidate download links for a known driver version, one per Windows
    target (Win10 first). Pure string building, nothing is fetched here.
    """
    version = (driver.version or "").strip()
    if not version:
        raise InvalidCombination("driver version is empty")
    if not _VERSION_RE.match(version):
        raise InvalidCombination(f"malformed driver version {driver.version!r}")

    platform = PLATFORM_TOKEN[driver.platform]
    channel = CHANNEL_TOKEN[driver.channel]
    edition = EDITION_TOKEN[driver.edition]
    return [
        f"{BASE}/Windows/{version}/{version}-{platform}{TARGET_TOKEN[target]}"
        f"-64bit-international{channel}{edition}-whql.exe"
        for target in WINDOWS_TARGETS
    ]

def target_of(url: str) -> Optional[WindowsTarget]:
    """Which Windows target a candidate link was built for."""
    if "-win10-win11-" in url:
        return WindowsTarget.WIN11
    if "-win10-" in url:
        return WindowsTarget.WIN10
    return None

def validate(url: str, session: Optional[requests.Session] = None, timeout: int = 10) -> None:
    s = session or PROBE_SESSION
    try:
        r = s.head(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        raise Unreachable(str(e), url) from e
    if r.status_code >= 400:
        raise Unreachable(r.status_code, url)

def first_reachable(
    urls: List[str],
    prefer: Optional[WindowsTarget] = None,
    session: Optional[requests.Session] = None,
) -> str:
    ok: List[str] = []
    for u in urls:
        try:
            validate(u, session=session)
        except Unreachable as e:
            logger.debug("Candidate unreachable: %s", e)
            continue
        logger.debug("Candidate OK: %s", u)
        ok.append(u)
    if not ok:
        raise Unreachable("no candidate link reachable")
    for u in ok:
        if prefer is not None and target_of(u) == prefer:
            return u
    return ok[0]
