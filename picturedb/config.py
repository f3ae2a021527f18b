"""Configuration module for picturedb."""

from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    return Path(__file__).parent.parent


@dataclass
class NavigatorConfig:
    image_extensions: frozenset[str] = frozenset({"jpg", "jpeg", "png", "gif"})


@dataclass
class StatsConfig:
    progress_interval: int = 100


@dataclass
class Config:
    database_path: Path = field(default_factory=lambda: _get_project_root() / "data" / "pictures.db")
    navigator: NavigatorConfig = field(default_factory=NavigatorConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
