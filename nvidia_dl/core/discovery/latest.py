from __future__ import annotations
import logging
import re
from typing import Optional

import requests

from ..errors import Unreachable
from ..http import SESSION
from ..models import (
    CHANNEL_WHQL, EDITION_DTCID, TARGET_OSID, CatalogEntry, DriverDescriptor,
)
from .links import BASE

logger = logging.getLogger(__name__)

PROCESS_DRIVER = "https://www.nvidia.com/Download/processDriver.aspx"

def lookup_url(gpu: CatalogEntry, driver: DriverDescriptor) -> str:
    return (
        f"{PROCESS_DRIVER}?psid={gpu.series_id}&pfid={gpu.device_id}"
        f"&osid={TARGET_OSID[driver.windows_target]}&lid=1"
        f"&whql={CHANNEL_WHQL[driver.channel]}&dtcid={EDITION_DTCID[driver.edition]}"
    )

def parse_driver_page(html: str) -> Optional[str]:
    """Direct download link from a driver details page, if it carries one."""
    if "?url=" not in (html or ""):
        return None
    path = html.split("?url=")[-1].split("&")[0].strip()
    if not path:
        return None
    return f"{BASE}{path}"

def version_from_url(url: str) -> str:
    m = re.search(r"/Windows/(\d+\.\d+)/", url or "")
    return m.group(1) if m else ""

def resolve_latest(
    gpu: CatalogEntry,
    driver: DriverDescriptor,
    session: Optional[requests.Session] = None,
    timeout: int = 15,
) -> str:
    s = session or SESSION
    q = lookup_url(gpu, driver)
    logger.debug("Driver lookup: %s", q)
    try:
        r = s.get(q, timeout=timeout)
        r.raise_for_status()
        page_url = r.text.strip()
        if not page_url.startswith("http"):
            raise Unreachable(f"no driver listed for {gpu.name}", q)
        page = s.get(page_url, timeout=timeout)
        page.raise_for_status()
    except requests.RequestException as e:
        raise Unreachable(str(e), q) from e

    link = parse_driver_page(page.text)
    if not link:
        raise Unreachable("driver page has no download link", page_url)
    logger.debug("Latest driver for %s: %s", gpu.name, link)
    return link
