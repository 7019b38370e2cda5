"""Run configuration for DepBump."""

from dataclasses import dataclass

from .errors import ConfigError
from .registry import DEFAULT_REGISTRY_URL

DEFAULT_CONCURRENCY = 10


def validate_concurrency(concurrency) -> int:
    """Return ``concurrency`` if it is a positive integer.

    Raises:
        ConfigError: For zero, negative or non-integer values
    """
    if isinstance(concurrency, bool) or not isinstance(concurrency, int):
        raise ConfigError(f"Concurrency must be an integer, got {concurrency!r}")
    if concurrency < 1:
        raise ConfigError(f"Concurrency must be a positive integer, got {concurrency}")
    return concurrency


@dataclass
class CheckOptions:
    """Settings for one check of a manifest."""

    concurrency: int = DEFAULT_CONCURRENCY
    write: bool = False
    registry_url: str = DEFAULT_REGISTRY_URL
    timeout: float = 30.0
    fail_fast: bool = True  # False skips failed packages instead of aborting

    def __post_init__(self):
        validate_concurrency(self.concurrency)
        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")
        if not self.registry_url.startswith(("http://", "https://")):
            raise ConfigError(f"Registry URL must be http(s), got {self.registry_url!r}")
