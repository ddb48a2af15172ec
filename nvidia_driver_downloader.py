#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
NVIDIA Driver Downloader — find, fetch and unpack a GeForce driver

What it does
------------
• Detects your GPU (registry / sysfs + pci.ids) while NVIDIA's GPU list loads.
• Searchable full-screen GPU picker when the guess is wrong (q quit, s search,
  arrows move, Enter select, Esc leave search).
• Builds the Win10 / Win11 download links for a version (Game Ready or Studio,
  desktop or notebook, DCH or standard) and checks which ones exist,
  or asks NVIDIA for the latest driver of the picked GPU.
• Resumable download with progress, 7-Zip extraction, optional removal of
  telemetry / GeForce Experience / updater components.

Install:  pip install -e .
Run:      python nvidia_driver_downloader.py
Flags:    python nvidia_driver_downloader.py --driver 516.59 --studio --list-only
"""
import sys

from nvidia_dl.cli import main

if __name__ == "__main__":
    sys.exit(main())
