"""Configuration models for the screentest runner."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


def default_output_root() -> str:
    """Return the per-user cache location used for diff artifacts."""
    cache_home = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return str(Path(cache_home) / "screentest")


class RunnerConfig(BaseModel):
    # Browser window used when a test case does not set its own viewport
    browser_width: int = 1536
    browser_height: int = 960
    headless: bool = True
    browser_args: list[str] = Field(default_factory=list)

    # Execution limits
    capture_timeout_seconds: float = 60

    # Visual diffing
    diff_threshold: float = 0.1

    # Artifacts
    output_root: str = Field(default_factory=default_output_root)

    @field_validator("browser_width", "browser_height")
    @classmethod
    def positive_dimension(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("browser dimensions must be positive")
        return v

    @field_validator("diff_threshold")
    @classmethod
    def threshold_in_range(cls, v: float) -> float:
        if not 0 <= v <= 1:
            raise ValueError("diff_threshold must be between 0 and 1")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "RunnerConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
