"""Runtime configuration state management.

Propagation settings have to be identical on both ends of an exchange, so
they are read from the environment once at import and can be overridden in
process before any propagator is built:
- CTXWIRE_HEADER_PREFIX: prefix of every propagated header field
- CTXWIRE_ALLOW_DUPLICATE_NAMES: "1"/"true" turns off duplicate name checks
"""

import os

DEFAULT_HEADER_PREFIX = "x-ctxwire-"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


# Global runtime configuration state
_config = {
    "header_prefix": os.getenv("CTXWIRE_HEADER_PREFIX") or DEFAULT_HEADER_PREFIX,
    "reject_duplicate_names": not _env_flag("CTXWIRE_ALLOW_DUPLICATE_NAMES"),
}


def set_header_prefix(value: str) -> None:
    _config["header_prefix"] = value


def get_header_prefix() -> str:
    return _config["header_prefix"]


def set_reject_duplicate_names(value: bool) -> None:
    _config["reject_duplicate_names"] = value


def get_reject_duplicate_names() -> bool:
    return _config["reject_duplicate_names"]


def reset() -> None:
    """Restore the defaults, ignoring the environment."""
    _config["header_prefix"] = DEFAULT_HEADER_PREFIX
    _config["reject_duplicate_names"] = True
