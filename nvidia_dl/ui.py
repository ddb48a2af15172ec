#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
UI layer for the NVIDIA Driver Downloader

- Detects the installed GPU while the NVIDIA GPU list downloads
- Confirms the guess or opens the searchable GPU picker
- Builds candidate links for a version (or asks NVIDIA for the latest one)
  and checks which of them exist
- Resumable download with progress, 7-Zip extraction, optional stripping
"""

from __future__ import annotations
import logging
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.table import Table
from rich import box
from rich.status import Status
from rich.progress import (
    BarColumn, DownloadColumn, Progress, TextColumn, TimeRemainingColumn, TransferSpeedColumn
)

from .core import (
    CatalogEntry, DriverDescriptor, CatalogUnavailable, InvalidCombination, Unreachable,
    NoSelection, Paths,
    resolve, validate, first_reachable, fetch_catalog, resolve_latest, version_from_url,
    detect_gpu_name, best_guess, download_with_resume, ensure_archiver, extract, strip,
    component_names, url_leaf_name, human_size,
)
from .core.discovery.links import target_of
from .tui import GpuSelector, Menu, section

logger = logging.getLogger(__name__)

console = Console()


@dataclass
class FlowOptions:
    assume_yes: bool = False
    extract: bool = True
    strip: List[str] = field(default_factory=list)
    ask_strip: bool = True


# ────────────────────────── Detection & selection ──────────────────────────
def detect_and_fetch() -> Tuple[Optional[str], Optional[List[CatalogEntry]]]:
    """Hardware guess and GPU list, fetched side by side."""
    with Status("[bold]Looking for your GPU…[/]", console=console, spinner="dots"):
        with ThreadPoolExecutor(max_workers=2) as pool:
            guess_job = pool.submit(detect_gpu_name)
            catalog_job = pool.submit(fetch_catalog)
            guess = guess_job.result()
            try:
                catalog: Optional[List[CatalogEntry]] = catalog_job.result()
            except CatalogUnavailable as e:
                logger.warning("%s", e)
                catalog = None
    return guess, catalog

def choose_gpu(catalog: List[CatalogEntry], guess: Optional[str], assume_yes: bool = False) -> Optional[CatalogEntry]:
    match = best_guess(guess, catalog)
    if match is not None:
        if assume_yes:
            return match
        items = [
            (f"Use [bold]{match.name}[/] [dim](detected)[/]", "USE"),
            ("Pick another GPU from the list", "PICK"),
            ("Exit", None),
        ]
        ans = Menu(console, items, title="GPU detected",
                   subtitle=f"Hardware reports: {guess}").show()
        if ans == "USE":
            return match
        if ans is None:
            return None
    elif guess:
        console.print(f"[yellow]Detected '{guess}' but it is not in NVIDIA's list.[/]")

    outcome = GpuSelector(catalog, console=console, preselect=match).run()
    if isinstance(outcome, NoSelection):
        return None
    return outcome.entry

# ────────────────────────── Links ──────────────────────────
def check_candidates(driver: DriverDescriptor) -> List[Tuple[str, str]]:
    """(url, status) for every candidate link; status is 'OK' or the failure."""
    rows = []
    for url in resolve(driver):
        try:
            validate(url)
            rows.append((url, "OK"))
        except Unreachable as e:
            rows.append((url, str(e.status)))
    return rows

def print_candidates(rows: List[Tuple[str, str]]) -> None:
    table = Table(title="Candidate Links", header_style="bold green", box=box.SIMPLE_HEAVY)
    table.add_column("Target", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("URL", overflow="fold")
    for url, status in rows:
        target = target_of(url)
        style = "green" if status == "OK" else "red"
        table.add_row(target.value if target else "?", f"[{style}]{status}[/]", url)
    console.print(table)

def pick_link(driver: DriverDescriptor, gpu: Optional[CatalogEntry]) -> str:
    if driver.version:
        with Status(f"[bold]Checking links for {driver.version}…[/]", console=console, spinner="dots"):
            return first_reachable(resolve(driver), prefer=driver.windows_target)
    if gpu is None:
        raise InvalidCombination("no driver version and no GPU to look one up for")
    with Status(f"[bold]Asking NVIDIA for the latest {gpu.name} driver…[/]", console=console, spinner="dots"):
        link = resolve_latest(gpu, driver)
        validate(link)
    return link

# ────────────────────────── Download ──────────────────────────
def download_with_progress(url: str, out_path: Path) -> Path:
    with Progress(
        TextColumn(f"[bold]Downloading[/] {url_leaf_name(url)}", justify="left"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=False
    ) as progress:
        task_id = progress.add_task("dl", total=None)

        def on_progress(done: int, total: int) -> None:
            progress.update(task_id, completed=done, total=total or None)

        return download_with_resume(url, out_path, on_progress=on_progress)

def choose_strip(opts: FlowOptions) -> List[str]:
    if opts.strip or opts.assume_yes or not opts.ask_strip:
        return list(opts.strip)
    names = component_names()
    items = [(n, n) for n in names]
    return Menu(console, items, title="Remove optional components?",
                subtitle="Checked components are deleted from the unpacked driver.").show_multiselect()

def unpack(paths: Paths, archive: Path, opts: FlowOptions) -> Path:
    with Status("[bold]Preparing 7-Zip…[/]", console=console, spinner="dots"):
        archiver = ensure_archiver(paths)
    with Status(f"[bold]Extracting to[/] {paths.extract_dir}", console=console, spinner="dots"):
        out = extract(archive, paths.extract_dir, archiver)
    console.print(f"[green]Extracted[/] to [bold]{out}[/]")

    names = choose_strip(opts)
    if names:
        removed = strip(out, names)
        console.print(f"[green]Stripped[/] {', '.join(names)} [dim]({len(removed)} paths removed)[/]")
    return out

def maybe_launch_installer(extract_dir: Path, opts: FlowOptions) -> None:
    setup = extract_dir / "setup.exe"
    if os.name != "nt" or not setup.exists() or opts.assume_yes:
        return
    if Confirm.ask("Launch the NVIDIA installer now?", default=True, console=console):
        subprocess.Popen([str(setup)], cwd=str(extract_dir))

# ────────────────────────── Full flow ──────────────────────────
def run_driver_flow(driver: DriverDescriptor, paths: Paths, opts: FlowOptions) -> int:
    section(
        console,
        "NVIDIA Driver Downloader",
        f"{driver.channel.value} · {driver.platform.value} · {driver.edition.value} · "
        f"{driver.windows_target.value} · version {driver.version or 'latest'}"
    )

    gpu: Optional[CatalogEntry] = None
    if not driver.version:
        guess, catalog = detect_and_fetch()
        if catalog is None:
            console.print("[yellow]NVIDIA's GPU list is unavailable, the latest driver can't be looked up.[/]")
            if opts.assume_yes:
                return 1
            version = Prompt.ask("Driver version to download (blank to abort)", default="", console=console).strip()
            if not version:
                section(console, "Canceled")
                return 1
            driver = DriverDescriptor(version, driver.channel, driver.platform, driver.edition, driver.windows_target)
        else:
            gpu = choose_gpu(catalog, guess, opts.assume_yes)
            if gpu is None:
                section(console, "Canceled")
                return 0

    try:
        link = pick_link(driver, gpu)
    except InvalidCombination as e:
        console.print(f"[red]Invalid driver selection:[/] {e}")
        return 2
    except Unreachable as e:
        console.print(f"[red]No downloadable driver found:[/] {e}")
        return 1

    console.print(Panel(
        f"[bold cyan]GPU:[/] {gpu.name if gpu else 'n/a'}\n"
        f"[bold cyan]Version:[/] {version_from_url(link) or driver.version or '?'}\n"
        f"[bold cyan]URL:[/] [link={link}]{link}[/]\n"
        f"[bold cyan]Saving to:[/] {paths.download_path(link)}",
        title="📦 Selected Driver",
        border_style="green",
        expand=False
    ))
    if not opts.assume_yes and not Confirm.ask("Download this driver?", default=True, console=console):
        section(console, "Canceled")
        return 0

    try:
        archive = download_with_progress(link, paths.download_path(link))
        console.print(f"[green]Done![/] {archive} [dim]({human_size(archive.stat().st_size)})[/]")
        if not opts.extract:
            return 0
        out = unpack(paths, archive, opts)
    except KeyboardInterrupt:
        section(console, "Interrupted")
        console.print("[yellow]Interrupted by user.[/]")
        return 130
    except Exception as e:
        logger.debug("Driver flow failed", exc_info=True)
        console.print(f"[red]Failed:[/] {e}")
        return 1

    maybe_launch_installer(out, opts)
    return 0

def list_only_flow(driver: DriverDescriptor) -> int:
    try:
        rows = check_candidates(driver)
    except InvalidCombination as e:
        console.print(f"[red]Invalid driver selection:[/] {e}")
        return 2
    print_candidates(rows)
    return 0 if any(s == "OK" for _, s in rows) else 1
