"""
Writing downloaded images to disk.
"""
from __future__ import annotations

from pathlib import Path


class DirectoryWriter:
    """Persists payloads as files directly inside one output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def save(self, name: str, data: bytes) -> Path:
        """Write data to output_dir/name, overwriting any existing file."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / name
        path.write_bytes(data)
        return path
