# nvidia_dl/cli.py
from __future__ import annotations
import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .core import (
    Channel, Edition, Paths, Platform, WindowsTarget,
    component_names, descriptor_from_cfg, load_cfg, remember_choices, setup_logging,
)
from .core.strip import lookup
from .ui import FlowOptions, list_only_flow, run_driver_flow

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="NVIDIA driver downloader (GPU picker + link finder)")
    ap.add_argument("--driver", dest="driver_version", default="",
                    help="Driver version, e.g. 516.59 (default: latest for your GPU)")
    ap.add_argument("--studio", action="store_true", help="Studio driver instead of Game Ready")
    ap.add_argument("--notebook", action="store_true", help="Notebook (mobile GPU) package")
    ap.add_argument("--std", action="store_true", help="Standard (non-DCH) package")
    ap.add_argument("--win10", action="store_true", help="Prefer the Windows 10 only package")
    ap.add_argument("--tmp-dir", help="Scratch directory for the download and extraction")
    ap.add_argument("--archiver", help="Path to 7z/7zr used for extraction")
    ap.add_argument("--no-extract", action="store_true", help="Only download the installer")
    ap.add_argument("--strip", nargs="*", metavar="NAME", default=None,
                    help=f"Components to remove after extraction ({', '.join(component_names())})")
    ap.add_argument("--list-only", action="store_true",
                    help="Print candidate links for --driver and whether they exist")
    ap.add_argument("--save", action="store_true",
                    help="Remember these options (channel, platform, edition, target, strip, dirs) as defaults")
    ap.add_argument("--yes", "-y", action="store_true", help="Don't ask, take the defaults")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging for core/network")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap.parse_args(argv)

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    cfg = load_cfg()
    setup_logging(verbose=args.verbose or bool(cfg.get("verbose", False)))

    try:
        driver = descriptor_from_cfg(cfg, version=args.driver_version.strip())
        strip_names = [lookup(n) for n in (args.strip if args.strip is not None else cfg.get("strip", []))]
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except KeyError as e:
        print(f"error: unknown component {e.args[0]!r} "
              f"(expected one of: {', '.join(component_names())})", file=sys.stderr)
        return 2

    if args.studio: driver = replace(driver, channel=Channel.STUDIO)
    if args.notebook: driver = replace(driver, platform=Platform.NOTEBOOK)
    if args.std: driver = replace(driver, edition=Edition.STD)
    if args.win10: driver = replace(driver, windows_target=WindowsTarget.WIN10)

    if args.save:
        cfg = remember_choices(cfg, driver, strip=strip_names if args.strip is not None else None,
                               tmp_dir=args.tmp_dir, archiver=args.archiver)

    if args.list_only:
        return list_only_flow(driver)

    paths = Paths.from_cfg(cfg, tmp_dir=args.tmp_dir, archiver=args.archiver)
    opts = FlowOptions(
        assume_yes=args.yes,
        extract=not args.no_extract,
        strip=strip_names,
        ask_strip=args.strip is None and not cfg.get("strip"),
    )
    return run_driver_flow(driver, paths, opts)

if __name__ == "__main__":
    sys.exit(main())
