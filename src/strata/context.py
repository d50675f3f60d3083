"""State shared between the CLI callback and its commands."""

from __future__ import annotations

from pathlib import Path

from .config import StrataConfig, discover_config


class _Context:
    def __init__(self) -> None:
        self.config_path: Path | None = None


_context = _Context()


def get_config_path() -> Path | None:
    """The --config path given on the command line, if any."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    _context.config_path = path


def config_for(document: Path) -> StrataConfig:
    """Load the configuration that applies to a document.

    An explicit --config path wins over discovery next to the document.

    Raises:
        ValidationError: If the configuration file is invalid
    """
    return discover_config(document, _context.config_path)


def reset_context() -> None:
    """Forget the --config path."""
    _context.config_path = None
