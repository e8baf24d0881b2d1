"""
Centralized settings and path configuration for the scent tool.
"""
import os
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


DEFAULT_ATTAR_NOTES = ("Note: Fancy bottles cost extra (Rs 200 - 350).",)
DEFAULT_PERFUME_NOTES = (
    "Magnetic Box Charge Extra ( If You Need ): Rs 450",
    "Fancy Perfume Bottle Charge Extra ( If You Need ): Rs 200",
)


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Collection files
    products_path: Path
    others_path: Path
    orders_path: Path

    # Optional markup schedule override (CSV)
    markup_schedule: Optional[Path] = None

    # Price list presentation
    shop_name: str = "Islamic Scentiments"
    currency: str = "Rs"
    attar_notes: tuple = DEFAULT_ATTAR_NOTES
    perfume_notes: tuple = DEFAULT_PERFUME_NOTES

    log_level: str = "INFO"

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        env_data_dir = os.environ.get('SCENT_TOOL_DATA_DIR')
        data = Path(data_dir or env_data_dir or root / 'data')

        schedule_env = os.environ.get('SCENT_TOOL_MARKUP_SCHEDULE')
        if schedule_env:
            schedule_path = Path(schedule_env)
        else:
            schedule_path = data / 'markup_schedule.csv'

        return cls(
            project_root=root,
            data_dir=data,
            products_path=data / 'products.json',
            others_path=data / 'others.json',
            orders_path=data / 'orders.json',
            markup_schedule=schedule_path if schedule_path.exists() else None,
            shop_name=os.environ.get('SCENT_TOOL_SHOP_NAME', cls.shop_name),
            log_level=os.environ.get('SCENT_TOOL_LOG_LEVEL', cls.log_level).upper(),
        )


def configure_logging(level: Optional[str] = None):
    """Configure root logging once for API, UI and scripts."""
    level = level or get_settings().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
