"""
Server settings.

Settings are resolved from several sources, later ones overriding earlier
ones:

1. Built-in defaults.
2. A ``.colsp.toml`` project config file in the workspace root.
3. ``initializationOptions`` sent by the client.
4. ``workspace/didChangeConfiguration`` settings under the ``colang`` key.

Recognised keys (camelCase on the wire, like the rest of LSP):

``maxNumberOfProblems``
    Upper bound on the number of diagnostics published per document.
``logLevel``
    Root logger level (``debug``, ``info``, ``warning`` …).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = '.colsp.toml'
DEFAULT_MAX_PROBLEMS = 1000


def _get(options, key: str):
    """Read *key* from a dict or from an attribute of a typed options object."""
    if options is None:
        return None
    if isinstance(options, dict):
        return options.get(key)
    return getattr(options, key, None)


@dataclass
class ServerSettings:
    max_number_of_problems: int = DEFAULT_MAX_PROBLEMS
    log_level: str | None = None

    def update(self, options) -> None:
        """Apply any recognised keys in *options*; invalid values are ignored."""
        raw_max = _get(options, 'maxNumberOfProblems')
        if raw_max is not None:
            if isinstance(raw_max, int) and not isinstance(raw_max, bool) and raw_max > 0:
                self.max_number_of_problems = raw_max
            else:
                logger.warning('ignoring invalid maxNumberOfProblems: %r', raw_max)

        raw_level = _get(options, 'logLevel')
        if raw_level is not None:
            if parse_log_level(raw_level) is not None:
                self.log_level = raw_level.lower()
            else:
                logger.warning('ignoring invalid logLevel: %r', raw_level)


def parse_log_level(raw) -> int | None:
    """Map a level name in any case ('debug', 'WARNING') to its number, or None."""
    if not isinstance(raw, str) or not raw:
        return None
    level = getattr(logging, raw.upper(), None)
    return level if isinstance(level, int) else None


def apply_log_level(raw: str | None) -> None:
    """Set the root logger level from a string like 'debug', 'warning', etc."""
    level = parse_log_level(raw)
    if level is not None:
        logging.getLogger().setLevel(level)


def read_project_config(workspace_root: str | None) -> dict:
    """Parse ``.colsp.toml`` in *workspace_root*; return {} if absent or invalid."""
    if not workspace_root:
        return {}
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib

    config_path = Path(workspace_root) / CONFIG_FILENAME
    if not config_path.is_file():
        return {}

    try:
        return tomllib.loads(config_path.read_text(encoding='utf-8'))
    except (OSError, tomllib.TOMLDecodeError):
        logger.warning('failed to read %s', config_path, exc_info=True)
        return {}


def load_settings(workspace_root: str | None = None, init_options=None) -> ServerSettings:
    """Resolve settings from the project config file and client init options."""
    settings = ServerSettings()
    settings.update(read_project_config(workspace_root))
    settings.update(init_options)
    return settings
