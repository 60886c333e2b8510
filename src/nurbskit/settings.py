## Copyright (c) 2025 nurbskit contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""Numerical settings with YAML override support.

Tolerances and default resolutions used by the evaluators live in a small
frozen :class:`Settings` record.  Values come from, in increasing priority:

1. the bundled ``data/settings.yaml``
2. the YAML file named by the ``NURBSKIT_SETTINGS`` environment variable
3. an explicit path passed to :func:`load_settings`

Environment Variables:
    NURBSKIT_SETTINGS: path to a YAML file whose keys override the
                       bundled defaults.

Example:
    export NURBSKIT_SETTINGS="$HOME/.config/nurbskit/settings.yaml"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from nurbskit.errors import NumericValidityError

logger = logging.getLogger(__name__)

NURBSKIT_SETTINGS = "NURBSKIT_SETTINGS"

_BUNDLED_SETTINGS = Path(__file__).parent / "data" / "settings.yaml"

LENGTH_METHODS = ("quad", "simpson")


@dataclass(frozen=True)
class Settings:
    """Numerical knobs shared by curves and surfaces."""

    epsilon: float = 5.0e-6
    derivative_step: float = 1.0e-8
    length_method: str = "quad"
    simpson_intervals: int = 32
    quad_max_degree: int = 6
    area_subdivisions: int = 16
    sample_count: int = 64

    def __post_init__(self):
        for name in ("epsilon", "derivative_step"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise NumericValidityError(f"setting '{name}' must be a positive number, got {value!r}")
        for name in ("simpson_intervals", "quad_max_degree", "area_subdivisions", "sample_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise NumericValidityError(f"setting '{name}' must be a positive integer, got {value!r}")
        if self.sample_count < 2:
            raise NumericValidityError("setting 'sample_count' must be >= 2")
        if self.length_method not in LENGTH_METHODS:
            raise NumericValidityError(
                f"setting 'length_method' must be one of {LENGTH_METHODS}, got {self.length_method!r}")

    def updated(self, **changes) -> "Settings":
        """Return a copy with ``changes`` applied (and validated)."""
        return replace(self, **changes)


_FIELD_NAMES = frozenset(f.name for f in fields(Settings))


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise NumericValidityError(f"invalid settings file {path}: expected a mapping at the root")
    schema_version = str(data.pop("schema_version", "1.0"))
    if not schema_version.startswith("1."):
        raise NumericValidityError(
            f"unsupported settings schema version '{schema_version}' in {path}, expected 1.x")
    unknown = set(data) - _FIELD_NAMES
    if unknown:
        raise NumericValidityError(f"unknown settings in {path}: {sorted(unknown)}")
    return data


def _settings_sources(custom_path: Optional[Path]) -> list:
    sources = []
    if _BUNDLED_SETTINGS.exists():
        sources.append(_BUNDLED_SETTINGS)
    env_path = os.environ.get(NURBSKIT_SETTINGS)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"{NURBSKIT_SETTINGS} points to a missing file: {path}")
        sources.append(path)
    if custom_path is not None:
        if not custom_path.exists():
            raise FileNotFoundError(f"settings file not found: {custom_path}")
        sources.append(custom_path)
    return sources


@lru_cache(maxsize=8)
def _load_settings_cached(custom_path_str: Optional[str], env_value: Optional[str]) -> Settings:
    custom_path = Path(custom_path_str) if custom_path_str else None
    merged: Dict[str, Any] = {}
    for source in _settings_sources(custom_path):
        merged.update(_read_yaml(source))
        logger.debug("loaded nurbskit settings from %s", source)
    try:
        return Settings(**merged)
    except TypeError as exc:
        raise NumericValidityError(f"invalid settings: {exc}") from exc


def load_settings(path: Optional[Path | str] = None) -> Settings:
    """Load settings from the bundled defaults, ``$NURBSKIT_SETTINGS`` and ``path``.

    Raises:
        FileNotFoundError: if ``path`` or the environment variable names a
            file that does not exist
        NumericValidityError: if a file holds unknown keys or bad values
    """
    custom = str(Path(path).expanduser()) if path is not None else None
    return _load_settings_cached(custom, os.environ.get(NURBSKIT_SETTINGS))


def get_settings() -> Settings:
    """Return the active settings (bundled defaults plus environment override)."""
    return load_settings()


def clear_cache() -> None:
    """Forget cached settings, e.g. after editing a settings file."""
    _load_settings_cached.cache_clear()


__all__ = [
    "NURBSKIT_SETTINGS",
    "Settings",
    "load_settings",
    "get_settings",
    "clear_cache",
]
