"""
Runtime settings with environment overrides.
"""

import os
from dataclasses import dataclass
from typing import Optional

# Defaults
DEFAULT_PROGRESS_INTERVAL = 10000
DEFAULT_WORKER_PROGRESS_INTERVAL = 50000
DEFAULT_TOP_N = 10
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _env_int(name: str, default: Optional[int], minimum: int) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if number < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {number}")
    return number


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not number > 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


@dataclass
class Settings:
    """Defaults for a word counting run"""
    max_workers: Optional[int] = None
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    worker_progress_interval: int = DEFAULT_WORKER_PROGRESS_INTERVAL
    timeout: Optional[float] = None
    top_n: int = DEFAULT_TOP_N

    @classmethod
    def from_env(cls) -> 'Settings':
        """
        Build settings from WORDFLUX_* environment variables.

        Raises:
            ValueError: If a variable is not a number or is out of range
        """
        return cls(
            max_workers=_env_int('WORDFLUX_MAX_WORKERS', None, minimum=1),
            progress_interval=_env_int('WORDFLUX_PROGRESS_INTERVAL', DEFAULT_PROGRESS_INTERVAL, minimum=1),
            worker_progress_interval=_env_int('WORDFLUX_WORKER_PROGRESS_INTERVAL',
                                              DEFAULT_WORKER_PROGRESS_INTERVAL, minimum=1),
            timeout=_env_float('WORDFLUX_TIMEOUT', None),
            top_n=_env_int('WORDFLUX_TOP_N', DEFAULT_TOP_N, minimum=0),
        )
