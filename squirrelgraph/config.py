"""
Runtime settings for the CLI and the HTTP server.

Values come from the environment, after a ``.env`` file (if any) has been
loaded with python-dotenv.  Command-line flags override them.

    SQUIRRELGRAPH_LOG_LEVEL      INFO
    SQUIRRELGRAPH_OUT_DIR        compiled
    SQUIRRELGRAPH_STRICT         false
    SQUIRRELGRAPH_EMBED_PROJECT  false
    SQUIRRELGRAPH_HOST           127.0.0.1
    SQUIRRELGRAPH_PORT           3001
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

LOG_FORMAT = "[%(asctime)s]:%(name)s:(%(levelname)s) - %(message)s"
LOG_DATEFMT = "%H:%M:%S"

_PREFIX = "SQUIRRELGRAPH_"
_TRUE = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    log_level: str = "INFO"
    out_dir: str = "compiled"
    strict: bool = False
    embed_project: bool = False
    host: str = "127.0.0.1"
    port: int = 3001


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE


def load_settings(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """Read settings from ``environ`` (defaults to os.environ)."""
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    defaults = Settings()

    def get(name: str) -> Optional[str]:
        return environ.get(_PREFIX + name)

    port = get("PORT")
    try:
        port_number = int(port) if port else defaults.port
    except ValueError:
        raise ValueError(f"{_PREFIX}PORT must be an integer, got {port!r}") from None

    return Settings(
        log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
        out_dir=get("OUT_DIR") or defaults.out_dir,
        strict=_flag(get("STRICT"), defaults.strict),
        embed_project=_flag(get("EMBED_PROJECT"), defaults.embed_project),
        host=get("HOST") or defaults.host,
        port=port_number,
    )


def configure_logging(level: str) -> None:
    """Configure logging once, at the entry point."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)
