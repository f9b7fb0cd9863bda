# Directory: config.py
"""
Configuration management for the assignment engine.
"""
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from utils.logger import logger


@dataclass
class SearchConfig:
    """Configuration for the backtracking search."""

    seed: Optional[int] = None
    max_steps: Optional[int] = 100_000
    most_constrained_first: bool = True


@dataclass
class HistoryConfig:
    """How far back past draws are excluded."""

    lookback_years: Optional[int] = 2
    current_year: Optional[int] = None


@dataclass
class AppConfig:
    """Main application configuration."""

    search: SearchConfig = field(default_factory=SearchConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    num_solutions: int = 100
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "AppConfig":
        """Create a configuration from a flat dictionary."""
        search_config = SearchConfig(
            **{
                k.split("_", 1)[1].lower(): v
                for k, v in config_dict.items()
                if k.startswith("SEARCH_")
            }
        )

        history_config = HistoryConfig(
            **{
                k.split("_", 1)[1].lower(): v
                for k, v in config_dict.items()
                if k.startswith("HISTORY_")
            }
        )

        return cls(
            search=search_config,
            history=history_config,
            num_solutions=config_dict.get("NUM_SOLUTIONS", 100),
            log_level=config_dict.get("LOG_LEVEL", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a flat dictionary."""
        result: Dict[str, Any] = {
            "NUM_SOLUTIONS": self.num_solutions,
            "LOG_LEVEL": self.log_level,
        }

        for key, value in vars(self.search).items():
            result[f"SEARCH_{key.upper()}"] = value

        for key, value in vars(self.history).items():
            result[f"HISTORY_{key.upper()}"] = value

        return result


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from a JSON file or use defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        AppConfig: Application configuration
    """
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                config_dict = json.load(f)
            return AppConfig.from_dict(config_dict)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")
            logger.info("Using default configuration.")
            return AppConfig()
    else:
        return AppConfig()
