"""Shared utility functions for formgen.

Provides JSON I/O, file-system helpers, folder-name sanitising, size and
duration formatting, and the Rich-based console helpers every subsystem uses
to report progress.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------

# Characters that are illegal in a path component on at least one major
# platform, plus ASCII control characters.
_INVALID_PATH_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]+')


def sanitize_folder_name(name: str, fallback: str = "GeneratedProject") -> str:
    """Turn an arbitrary project name into a file-system-safe folder name.

    Runs of illegal characters become a single underscore; leading and
    trailing underscores produced by that substitution are dropped.

    Examples::

        sanitize_folder_name("Customer Intake") -> "Customer Intake"
        sanitize_folder_name("Sales/Q1: Orders") -> "Sales_Q1_ Orders"
    """
    parts = [p for p in _INVALID_PATH_CHARS.split(name.strip()) if p]
    result = "_".join(parts).strip(". ")
    return result or fallback


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Save data as pretty-printed JSON.

    Parent directories are created automatically and the write runs in a
    worker thread so large payloads do not block the event loop.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    await asyncio.to_thread(file_path.write_text, content, "utf-8")


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist and return it resolved."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


async def write_text_file(path: Path, content: str) -> Path:
    """Write *content* to *path* as UTF-8 off the event loop."""
    await asyncio.to_thread(_write_file, path, content)
    return path


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_bytes(size: int) -> str:
    """Format a byte count using binary units.

    Examples::

        format_bytes(512)     -> "512 B"
        format_bytes(1536)    -> "1.5 KB"
        format_bytes(1048576) -> "1 MB"
    """
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    order = 0
    while value >= 1024 and order < len(units) - 1:
        order += 1
        value /= 1024
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[order]}"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_info(message: str) -> None:
    """Print a dimmed progress message."""
    console.print(f"[dim]{message}[/dim]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
