"""
GPU detection helpers.

- get_gpu_id(): PCI device id of the installed NVIDIA adapter (registry on
  Windows, sysfs on Linux), e.g. '2204'.
- parse_pci_ids(text, dev): looks that id up in the public pci.ids list and
  returns the marketing name, e.g. 'GeForce RTX 3090'.
- detect_gpu_name(): both of the above, with the pci.ids download running
  alongside the local lookup.
"""
from __future__ import annotations
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

import requests

from ..http import SESSION

logger = logging.getLogger(__name__)

PCI_IDS_URL = "https://raw.githubusercontent.com/pciutils/pciids/master/pci.ids"
NVIDIA_VENDOR = "10de"
DISPLAY_CLASS_KEY = r"SYSTEM\CurrentControlSet\Control\Class\{4d36e968-e325-11ce-bfc1-08002be10318}"
SYSFS_PCI = Path("/sys/bus/pci/devices")

_VENDOR_RE = re.compile(r"^([0-9a-f]{4})  (.*)$")
_DEVICE_RE = re.compile(r"^\t([0-9a-f]{4})  (.*)$")

def _gpu_id_from_registry() -> Optional[str]:
    import winreg
    try:
        key = winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, DISPLAY_CLASS_KEY)
    except OSError:
        return None
    with key:
        i = 0
        while True:
            try:
                sub = winreg.EnumKey(key, i)
            except OSError:
                return None
            i += 1
            if len(sub) != 4:  # adapters live under 0000, 0001, ...
                continue
            try:
                with winreg.OpenKey(key, sub) as dev:
                    match, _ = winreg.QueryValueEx(dev, "MatchingDeviceId")
            except OSError:
                continue
            match = str(match).lower()
            if f"ven_{NVIDIA_VENDOR}" not in match or "dev_" not in match:
                continue
            return match.split("dev_")[-1].split("&")[0][:4]

def _gpu_id_from_sysfs(root: Path = SYSFS_PCI) -> Optional[str]:
    if not root.is_dir():
        return None
    for dev in sorted(root.iterdir()):
        try:
            vendor = (dev / "vendor").read_text().strip().lower()
            klass = (dev / "class").read_text().strip().lower()
            device = (dev / "device").read_text().strip().lower()
        except OSError:
            continue
        if vendor == f"0x{NVIDIA_VENDOR}" and klass.startswith("0x03"):
            return device[2:] if device.startswith("0x") else device
    return None

def get_gpu_id() -> Optional[str]:
    if os.name == "nt":
        dev = _gpu_id_from_registry()
    else:
        dev = _gpu_id_from_sysfs()
    logger.debug("Detected device id: %s", dev or "none")
    return dev

def parse_pci_ids(text: str, device_id: str) -> Optional[str]:
    device_id = (device_id or "").strip().lower()
    vendor = ""
    for line in text.splitlines():
        if line.startswith("#"):
            continue
        m = _VENDOR_RE.match(line)
        if m:
            vendor = m.group(1)
            continue
        if vendor != NVIDIA_VENDOR:
            continue
        m = _DEVICE_RE.match(line)
        if m and m.group(1) == device_id:
            name = m.group(2)
            # "GA102 [GeForce RTX 3090]" -> "GeForce RTX 3090"
            if "[" in name:
                name = name.split("[")[-1].split("]")[0]
            return name.strip()
    return None

def fetch_pci_ids(session: Optional[requests.Session] = None, timeout: int = 20) -> str:
    s = session or SESSION
    r = s.get(PCI_IDS_URL, timeout=timeout)
    r.raise_for_status()
    return r.text

def detect_gpu_name(session: Optional[requests.Session] = None) -> Optional[str]:
    """Best-effort: returns None when anything along the way comes up empty."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        ids_job = pool.submit(fetch_pci_ids, session)
        dev_job = pool.submit(get_gpu_id)
        dev = dev_job.result()
        try:
            text = ids_job.result()
        except requests.RequestException as e:
            logger.warning("pci.ids download failed: %s", e)
            return None
    if not dev:
        return None
    name = parse_pci_ids(text, dev)
    logger.debug("pci.ids name for %s: %s", dev, name)
    return name
