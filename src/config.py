"""Application configuration loaded from ``config.json``."""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("config.json")


class LogConfig(BaseModel):
    level: str = "INFO"
    file: str | None = None


class DisplayConfig(BaseModel):
    """Presentation settings for rendered record values."""

    float_precision: int = 2
    raw_output: bool = False


class AppConfig(BaseModel):
    """Top-level configuration.

    Examples
    --------
    >>> AppConfig().display.float_precision
    2
    """

    log: LogConfig = Field(default_factory=LogConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "AppConfig":
        """Load configuration from a JSON file.

        Parameters
        ----------
        path : str | Path | None, optional
            Config file; ``config.json`` in the working directory when
            omitted. A missing file yields the defaults.

        Returns
        -------
        AppConfig
            Parsed configuration.

        Raises
        ------
        pydantic.ValidationError
            Raised when the file content does not match the schema.
        """
        config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
        if not config_path.exists():
            logger.debug(f"Config file not found, using defaults: {config_path}")
            return cls()
        return cls.model_validate_json(config_path.read_text(encoding="utf-8"))
