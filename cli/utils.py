"""Utility functions for CLI output."""

import sys
from typing import Iterable, TextIO

from common.types import DriveItem
from cli.constants import GREEN, RESET


class ProgressLine:
    """Single terminal line that is rewritten as a transfer advances."""

    def __init__(self, label: str, stream: TextIO = sys.stdout):
        """
        Args:
            label: Text shown before the progress figures (e.g. "Uploading report.pdf")
            stream: Output stream
        """
        self.label = label
        self.stream = stream
        self._active = False

    def percentage(self, value: int) -> None:
        """Show an integer percentage."""
        self._write(f"{self.label}: {GREEN}{value}%{RESET}")

    def bytes(self, done: int, total: int) -> None:
        """Show transferred bytes, with a percentage when the total is known."""
        if total > 0:
            progress = (done / total) * 100
            self._write(
                f"{self.label}: {format_file_size(done)} / {format_file_size(total)} ({GREEN}{progress:.1f}%{RESET})"
            )
        else:
            self._write(f"{self.label}: {format_file_size(done)}")

    def finish(self) -> None:
        """End the progress line with a newline if anything was written."""
        if self._active:
            self.stream.write('\n')
            self.stream.flush()
            self._active = False

    def _write(self, text: str) -> None:
        self._active = True
        self.stream.write(f"\r{text}")
        self.stream.flush()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_listing(items: Iterable[DriveItem]) -> str:
    """Render folder items, folders first, then alphabetically."""
    ordered = sorted(items, key=lambda item: (not item.is_folder, item.name.lower()))
    if not ordered:
        return "The folder is empty."

    lines = [f"Found {len(ordered)} item(s):\n"]
    for item in ordered:
        if item.is_folder:
            count = f"{item.child_count} item(s)" if item.child_count is not None else "folder"
            lines.append(f"  [DIR]  {item.name}  ({count})\n         ID: {item.id}")
        else:
            lines.append(f"  [FILE] {item.name}  ({format_file_size(item.size)})\n         ID: {item.id}")
    return '\n'.join(lines)
