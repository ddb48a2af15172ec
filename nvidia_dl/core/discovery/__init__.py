# nvidia_dl/core/discovery/__init__.py

from .links import resolve, validate, first_reachable, target_of
from .catalog import fetch_catalog, parse_catalog
from .latest import resolve_latest, parse_driver_page, version_from_url
from .hardware import detect_gpu_name, get_gpu_id, parse_pci_ids

__all__ = [
    "resolve",
    "validate",
    "first_reachable",
    "target_of",
    "fetch_catalog",
    "parse_catalog",
    "resolve_latest",
    "parse_driver_page",
    "version_from_url",
    "detect_gpu_name",
    "get_gpu_id",
    "parse_pci_ids",
]
