from __future__ import annotations

"""Runtime settings for scene file I/O, optionally overridden from `.env`."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger("scenetext.config")

VERSION_MARKER = "#usda 1.0"
DEFAULT_FILE_EXTENSION = ".usd"


@dataclass(frozen=True)
class Settings:
    file_extension: str = DEFAULT_FILE_EXTENSION
    indent: str = "    "
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        ext = self.file_extension.strip().lower()
        if not ext:
            raise ValueError("file_extension must be non-empty")
        if not ext.startswith("."):
            ext = f".{ext}"
        object.__setattr__(self, "file_extension", ext)
        if not self.indent or self.indent.strip():
            raise ValueError("indent must be non-empty whitespace")


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Build settings from the process environment.

    Reads `env_file` (or a `.env` found from the working directory) first;
    variables already set in the environment win.
    """
    if env_file is not None:
        load_dotenv(Path(env_file))
    else:
        load_dotenv()

    kwargs: dict[str, str] = {}
    extension = os.environ.get("SCENETEXT_FILE_EXTENSION")
    if extension:
        kwargs["file_extension"] = extension
    indent_width = os.environ.get("SCENETEXT_INDENT_WIDTH")
    if indent_width:
        try:
            width = int(indent_width)
        except ValueError:
            logger.warning(f"Ignoring non-integer SCENETEXT_INDENT_WIDTH={indent_width!r}")
        else:
            if width > 0:
                kwargs["indent"] = " " * width
    log_level = os.environ.get("SCENETEXT_LOG_LEVEL")
    if log_level:
        kwargs["log_level"] = log_level.upper()
    return Settings(**kwargs)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
