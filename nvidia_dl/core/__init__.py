# nvidia_dl/core/__init__.py
from .errors import DriverError, InvalidCombination, Unreachable, CatalogUnavailable
from .models import (
    CatalogEntry, DriverDescriptor, Channel, Platform, Edition, WindowsTarget, parse_choice,
)
from .discovery import (
    resolve, validate, first_reachable, fetch_catalog, resolve_latest,
    version_from_url, detect_gpu_name,
)
from .selection import SelectionState, StatefulList, Mode, Selected, NoSelection
from .matching import best_guess
from .utils import human_size, url_leaf_name
from .http import SESSION
from .config import load_cfg, save_cfg, config_path, Paths, descriptor_from_cfg, remember_choices
from .download import download_with_resume
from .extract import ensure_archiver, extract
from .strip import strip, component_names

__all__ = [
    "DriverError", "InvalidCombination", "Unreachable", "CatalogUnavailable",
    "CatalogEntry", "DriverDescriptor", "Channel", "Platform", "Edition", "WindowsTarget",
    "parse_choice",
    "resolve", "validate", "first_reachable", "fetch_catalog", "resolve_latest",
    "version_from_url", "detect_gpu_name",
    "SelectionState", "StatefulList", "Mode", "Selected", "NoSelection",
    "best_guess",
    "human_size", "url_leaf_name",
    "SESSION",
    "load_cfg", "save_cfg", "config_path", "Paths", "descriptor_from_cfg", "remember_choices",
    "download_with_resume", "ensure_archiver", "extract",
    "strip", "component_names",
    "setup_logging",
]

# ---- simple logging toggle for the package ----
import logging

def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s"
    )
    # quiet down noisy deps
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
