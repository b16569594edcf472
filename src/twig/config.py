"""Environment configuration for twig"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

TRUE_VALUES = ("1", "true", "yes", "on")


def _default_log_file() -> Path:
    return Path.home() / ".twig" / "twig.log"


@dataclass
class Config:
    """Diagnostics settings read from the environment."""

    debug: bool = False
    log_file: Path = field(default_factory=_default_log_file)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.debug and self.log_file.is_dir():
            raise ValueError(f"log_file must be a file path, got directory '{self.log_file}'")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a config from TWIG_DEBUG and TWIG_LOG_FILE."""
        if environ is None:
            environ = os.environ
        debug = environ.get("TWIG_DEBUG", "").strip().lower() in TRUE_VALUES
        log_file = environ.get("TWIG_LOG_FILE")
        if log_file:
            return cls(debug=debug, log_file=Path(log_file).expanduser())
        return cls(debug=debug)
