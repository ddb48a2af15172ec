from __future__ import annotations
import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

import requests

from ..errors import CatalogUnavailable
from ..http import SESSION
from ..models import UINT16_MAX, CatalogEntry

logger = logging.getLogger(__name__)

CATALOG_URL = "https://www.nvidia.com/Download/API/lookupValueSearch.aspx?TypeID=3"

def _field(node: ET.Element, name: str) -> Optional[str]:
    # ParentID shows up as an attribute in the live feed, older dumps use elements
    val = node.get(name)
    if val is None:
        child = node.find(name)
        val = child.text if child is not None else None
    return val.strip() if isinstance(val, str) else None

def _uint16(raw: Optional[str], what: str) -> int:
    try:
        n = int(raw or "")
    except ValueError:
        raise CatalogUnavailable(f"bad {what} {raw!r} in GPU list") from None
    if not 0 <= n <= UINT16_MAX:
        raise CatalogUnavailable(f"{what} {n} out of range in GPU list")
    return n

def parse_catalog(xml_text: str) -> List[CatalogEntry]:
    """Flatten the LookupValue list, keeping order and duplicates."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise CatalogUnavailable(f"GPU list is not valid XML: {e}") from e

    values = root.findall("./LookupValues/LookupValue")
    if not values and root.tag == "LookupValues":
        values = root.findall("./LookupValue")
    if not values:
        raise CatalogUnavailable("GPU list contains no entries")

    out: List[CatalogEntry] = []
    for v in values:
        name = _field(v, "Name")
        if not name:
            raise CatalogUnavailable("GPU list entry without a name")
        out.append(CatalogEntry(
            name=name,
            series_id=_uint16(_field(v, "ParentID"), "ParentID"),
            device_id=_uint16(_field(v, "Value"), "Value"),
        ))
    return out

def fetch_catalog(session: Optional[requests.Session] = None, timeout: int = 15) -> List[CatalogEntry]:
    s = session or SESSION
    logger.debug("Fetching GPU list from %s", CATALOG_URL)
    try:
        r = s.get(CATALOG_URL, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise CatalogUnavailable(f"GPU list fetch failed: {e}") from e
    entries = parse_catalog(r.text)
    logger.debug("GPU list: %d entries", len(entries))
    return entries
