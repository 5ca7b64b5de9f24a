"""
Utility helpers for lessongraph.

Provides:
- Structured logging configuration with timestamps.
- Stage timing.
- Path-like reference normalisation shared by slugs, prerequisites and aliases.
"""

import contextlib
import logging
import posixpath
import time
from typing import Generator, Optional

logger = logging.getLogger(__name__)

_STRIPPED_EXTENSIONS = (".md", ".markdown", ".html")


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(
    level: int = logging.INFO,
    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt: str = "%Y-%m-%dT%H:%M:%S%z",
) -> None:
    """Configure the root logger with timestamped structured output."""
    logging.basicConfig(level=level, format=fmt, datefmt=datefmt, force=True)


@contextlib.contextmanager
def timed(label: str) -> Generator[None, None, None]:
    """Context manager that logs elapsed wall-clock time for *label*."""
    t0 = time.monotonic()
    try:
        yield
    finally:
        elapsed = time.monotonic() - t0
        logger.info("%s completed in %.3fs.", label, elapsed)


# ---------------------------------------------------------------------------
# Path normalisation
# ---------------------------------------------------------------------------


def normalize_path(value: str, relative_to: Optional[str] = None) -> str:
    """Reduce a path-like reference to slug form.

    ``/lessons/intro/index.md`` -> ``lessons/intro``. A reference starting
    with ``./`` or ``../`` is resolved against the directory of the
    *relative_to* slug. Returns ``""`` for references that climb above the
    content root.
    """
    ref = value.strip()
    if relative_to is not None and (ref.startswith("./") or ref.startswith("../")):
        ref = posixpath.join(posixpath.dirname(relative_to), ref)
        ref = posixpath.normpath(ref)
        if ref == "." or ref.startswith(".."):
            return ""
    ref = ref.strip("/")
    for ext in _STRIPPED_EXTENSIONS:
        if ref.endswith(ext):
            ref = ref[: -len(ext)]
            break
    if ref == "index":
        return ref
    if ref.endswith("/index"):
        ref = ref[: -len("/index")]
    return ref
