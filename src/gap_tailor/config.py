"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    analyzer_model: str = "claude-haiku-4-5-20251001"
    tailor_model: str = "claude-sonnet-4-5-20250929"
    analyzer_temperature: float = 0.3
    tailor_temperature: float = 0.7
    analyzer_max_tokens: int = 2048
    tailor_max_tokens: int = 4096
    timeout: int = 120

    def __post_init__(self) -> None:
        _check_range("analyzer_temperature", self.analyzer_temperature, 0.0, 1.0)
        _check_range("tailor_temperature", self.tailor_temperature, 0.0, 1.0)
        _check_range("analyzer_max_tokens", self.analyzer_max_tokens, 256, 64000)
        _check_range("tailor_max_tokens", self.tailor_max_tokens, 256, 64000)
        _check_range("timeout", self.timeout, 1, 600)


@dataclass(frozen=True)
class ScraperConfig:
    timeout: int = 20
    max_raw_chars: int = 10_000
    max_list_items: int = 20
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        _check_range("scraper timeout", self.timeout, 1, 300)
        _check_range("max_raw_chars", self.max_raw_chars, 100, 1_000_000)
        _check_range("max_list_items", self.max_list_items, 1, 1000)


@dataclass(frozen=True)
class GapsConfig:
    max_gaps: int = 5

    def __post_init__(self) -> None:
        _check_range("max_gaps", self.max_gaps, 1, 10)


@dataclass(frozen=True)
class LimitsConfig:
    max_upload_mb: int = 10

    def __post_init__(self) -> None:
        _check_range("max_upload_mb", self.max_upload_mb, 1, 100)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self) -> None:
        _check_range("port", self.port, 1, 65535)


@dataclass(frozen=True)
class RenderConfig:
    title: str = "Tailored Resume"
    byline: str = "Generated with Resume Tailor"


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    gaps: GapsConfig = field(default_factory=GapsConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    render: RenderConfig = field(default_factory=RenderConfig)


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
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        scraper=ScraperConfig(**raw.get("scraper", {})),
        gaps=GapsConfig(**raw.get("gaps", {})),
        limits=LimitsConfig(**raw.get("limits", {})),
        server=ServerConfig(**raw.get("server", {})),
        render=RenderConfig(**raw.get("render", {})),
    )
