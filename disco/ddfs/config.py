"""Master address configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_MASTER_HOST = "localhost"
DEFAULT_PORT = 8989

SETTINGS_ENV = "DISCO_SETTINGS"
MASTER_HOST_ENV = "DISCO_MASTER_HOST"
PORT_ENV = "DISCO_PORT"


@dataclass(frozen=True)
class Config:
    """Address of the DDFS master.

    The DDFS port is usually the same as the Disco port, i.e. 8989.
    """

    master_host: str
    master_port: int


def load_settings_file(path: Path) -> Dict[str, str]:
    """Read ``KEY=VALUE`` lines, skipping blanks and ``#`` comments."""

    settings: Dict[str, str] = {}
    if not path.exists():
        return settings
    for line in path.read_text().splitlines():
        if not line or line.strip().startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        settings[key.strip()] = value.strip().strip("'\"")
    return settings


def _settings(environ: Mapping[str, str]) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    settings_path = environ.get(SETTINGS_ENV)
    if settings_path:
        try:
            merged.update(load_settings_file(Path(settings_path).expanduser()))
        except OSError as exc:
            logger.warning("Could not read settings file %s: %s", settings_path, exc)
    # The process environment wins over the settings file.
    merged.update({k: v for k, v in environ.items() if k in {MASTER_HOST_ENV, PORT_ENV}})
    return merged


def default_master_host(environ: Optional[Mapping[str, str]] = None) -> str:
    settings = _settings(os.environ if environ is None else environ)
    return settings.get(MASTER_HOST_ENV, "").strip() or DEFAULT_MASTER_HOST


def default_port(environ: Optional[Mapping[str, str]] = None) -> int:
    settings = _settings(os.environ if environ is None else environ)
    raw = settings.get(PORT_ENV, "").strip()
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        port = -1
    if not 0 < port < 65536:
        logger.warning("Ignoring invalid %s=%r, using %d", PORT_ENV, raw, DEFAULT_PORT)
        return DEFAULT_PORT
    return port


def default_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a config from the process defaults."""

    return Config(master_host=default_master_host(environ), master_port=default_port(environ))


def resolve_config(cfg: Optional[Config] = None) -> Config:
    """Return ``cfg`` unchanged, or the default config when none is given."""

    if cfg is not None:
        return cfg
    return default_config()
