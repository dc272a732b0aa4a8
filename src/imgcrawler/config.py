"""
Crawl configuration.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

DEFAULT_WORKERS = 5
DEFAULT_TIMEOUT = 15.0


def split_csv(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated option value, dropping blanks."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Immutable settings for one crawl run."""
    seeds: Tuple[str, ...]
    output_dir: Path = field(default_factory=Path.cwd)
    user_agent: Optional[str] = None
    image_formats: FrozenSet[str] = frozenset()
    workers: int = DEFAULT_WORKERS
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        # Normalize collections so callers may pass lists or sets
        object.__setattr__(self, "seeds", tuple(self.seeds))
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(
            self, "image_formats", frozenset(f.strip().lower() for f in self.image_formats if f.strip())
        )
        if not self.seeds:
            raise ValueError("At least one seed URL is required")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_strings(
        cls,
        urls: str,
        output_dir: Optional[str] = None,
        image_formats: Optional[str] = None,
        user_agent: Optional[str] = None,
        workers: int = DEFAULT_WORKERS,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "CrawlConfig":
        """Build a config from raw comma-separated option values."""
        return cls(
            seeds=split_csv(urls),
            output_dir=Path(output_dir) if output_dir else Path.cwd(),
            user_agent=user_agent or None,
            image_formats=frozenset(split_csv(image_formats)),
            workers=workers,
            timeout=timeout,
        )
