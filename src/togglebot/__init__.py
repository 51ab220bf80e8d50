"""togglebot: Rust documentation link search for the togglebot chat bot."""

from __future__ import annotations

import warnings
from importlib import metadata

_FALLBACK_VERSION = "0.0.0+unknown"


def _resolve_version(distribution: str = "togglebot") -> str:
    """Return the installed version of ``distribution``.

    Falls back to ``0.0.0+unknown`` with a RuntimeWarning when the package
    runs from a source tree without installed metadata.
    """
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        warnings.warn(
            f"{distribution} is not installed; reporting version {_FALLBACK_VERSION!r}",
            RuntimeWarning,
            stacklevel=2,
        )
        return _FALLBACK_VERSION


__version__ = _resolve_version()
