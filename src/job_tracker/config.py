"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    max_tokens: int = 1000
    max_retries: int = 3
    timeout: int = 120

    def __post_init__(self) -> None:
        if self.timeout < 1:
            raise ValueError(f"timeout must be >= 1, got {self.timeout}")
        if not 1 <= self.max_tokens <= 8192:
            raise ValueError(f"max_tokens must be between 1 and 8192, got {self.max_tokens}")
        if not 1 <= self.max_retries <= 10:
            raise ValueError(f"max_retries must be between 1 and 10, got {self.max_retries}")


@dataclass(frozen=True)
class ImportConfig:
    default_year: int | None = None  # None -> year of the import
    default_title: str = "Software Engineer"

    def __post_init__(self) -> None:
        if self.default_year is not None and not 1900 <= self.default_year <= 2999:
            raise ValueError(f"default_year must be between 1900 and 2999, got {self.default_year}")


@dataclass(frozen=True)
class BatchConfig:
    batch_size: int = 3
    delay_seconds: float = 2.0

    def __post_init__(self) -> None:
        if not 1 <= self.batch_size <= 20:
            raise ValueError(f"batch_size must be between 1 and 20, got {self.batch_size}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.job-tracker/jobs.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    imports: ImportConfig = field(default_factory=ImportConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        imports=ImportConfig(**raw.get("import", {})),
        batch=BatchConfig(**raw.get("batch", {})),
        storage=StorageConfig(**raw.get("storage", {})),
    )
