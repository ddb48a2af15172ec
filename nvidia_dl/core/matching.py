from __future__ import annotations
from typing import Optional, Sequence

from .models import CatalogEntry

def best_guess(name: Optional[str], catalog: Sequence[CatalogEntry]) -> Optional[CatalogEntry]:
    """
    Pick the catalog entry that most likely is the detected GPU.
    Order: exact name, exact ignoring case, longest catalog name inside the
    detected one ("GeForce RTX 3090" in "GeForce RTX 3090 Lite Hash Rate"),
    then the first catalog name containing the detected one.
    """
    name = (name or "").strip()
    if not name or not catalog:
        return None
    for e in catalog:
        if e.name == name:
            return e
    low = name.lower()
    for e in catalog:
        if e.name.lower() == low:
            return e
    inside = [e for e in catalog if e.name and e.name.lower() in low]
    if inside:
        return max(inside, key=lambda e: len(e.name))
    for e in catalog:
        if low in e.name.lower():
            return e
    return None
