"""Engine settings with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


ENV_PREFIX = "BITCHESS_"


@dataclass(frozen=True)
class EngineSettings:
    """Tunable engine parameters.

    Values are read once by ``from_env`` and passed down explicitly; nothing in
    the engine reads the environment on its own.
    """

    search_depth: int = 3
    """Plies searched from the root, including the root move"""

    search_workers: int = 8
    """Threads used by the root-parallel search"""

    log_level: str = "INFO"
    """Level passed to ``logging.basicConfig`` by the HTTP app"""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """Build settings from ``BITCHESS_*`` variables.

        Raises:
            ValueError: If a numeric variable is not an integer >= 1.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            search_depth=_positive_int(env, "SEARCH_DEPTH", defaults.search_depth),
            search_workers=_positive_int(env, "SEARCH_WORKERS", defaults.search_workers),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).upper(),
        )


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from e
    if value < 1:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= 1")
    return value
