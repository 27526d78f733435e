"""Localizable user-facing messages.

Messages are looked up when rendered, not when an error is raised, so an
application can register a catalog or switch language at any time and
already-raised errors pick it up.

Example:
    ```python
    from tessera import messages

    messages.register_catalog(
        "de", {"openai.error.empty_response": "OpenAI hat keine Antwort geliefert"}
    )
    messages.set_language("de")
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

_catalogs: dict[str, dict[str, str]] = {DEFAULT_LANGUAGE: {}}
_active_language = DEFAULT_LANGUAGE


def register_catalog(language: str, entries: Mapping[str, str]) -> None:
    """Merge *entries* into the catalog for *language*."""
    _catalogs.setdefault(language, {}).update(entries)


def set_language(language: str) -> None:
    """Select the language used for subsequent lookups."""
    global _active_language
    _active_language = language


def get_language() -> str:
    """Return the currently selected language."""
    return _active_language


def localized(key: str, default: str, **fields: Any) -> str:
    """Render *key* in the active language, falling back to *default*.

    ``default`` and catalog entries are ``str.format`` templates filled with
    ``fields``. A catalog entry that references an unknown field falls back to
    the default template instead of failing the render.
    """
    template = _catalogs.get(_active_language, {}).get(key, default)
    try:
        return template.format(**fields)
    except (KeyError, IndexError, ValueError):
        log.debug("Catalog entry %r for %r did not format", key, _active_language)
        return default.format(**fields)
