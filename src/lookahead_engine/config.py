"""Configuration management for the Look-Ahead Engine.

Settings live in the ``engine`` section of ``config.yaml``. A missing file
yields the defaults.
"""

import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


class EngineConfig(BaseModel):
    """Configuration for look-ahead scheduling."""

    model_config = ConfigDict(extra="ignore")

    # Storage
    storage: Literal["memory", "csv"] = "memory"
    data_dir: str = "data"

    # Scheduling defaults
    default_task_duration_min: float = Field(60.0, ge=0)
    default_call_reminder_min: int = Field(60, ge=0)
    reminder_window_min: int = Field(60, ge=0)

    # Analytics
    accuracy_tolerance_pct: float = Field(10.0, ge=0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @property
    def is_persistent(self) -> bool:
        return self.storage == "csv"

    @classmethod
    def from_yaml(cls, config_path: Optional[str] = None) -> "EngineConfig":
        """Load from config.yaml engine section."""
        if config_path is None:
            config_path = Path.cwd() / "config.yaml"
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        engine = data.get("engine", {})

        flat = {
            "storage": engine.get("storage", "memory"),
            "data_dir": engine.get("data_dir", "data"),
            "log_level": engine.get("log_level", "INFO"),
        }

        if "schedule" in engine:
            schedule = engine["schedule"]
            flat["default_task_duration_min"] = schedule.get("default_task_duration_min", 60.0)
            flat["default_call_reminder_min"] = schedule.get("default_call_reminder_min", 60)
            flat["reminder_window_min"] = schedule.get("reminder_window_min", 60)

        if "analytics" in engine:
            flat["accuracy_tolerance_pct"] = engine["analytics"].get("accuracy_tolerance_pct", 10.0)

        return cls.model_validate(flat)


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """Load engine configuration."""
    return EngineConfig.from_yaml(config_path)


def configure_logging(config: EngineConfig) -> None:
    """Apply the configured log level to the package logger."""
    logging.getLogger("lookahead_engine").setLevel(config.log_level)
