"""Preset loading utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Iterator

import yaml
from pydantic import ValidationError

from .models import TimerPreset

PRESET_SUFFIXES = (".yml", ".yaml")


class PresetLoadError(RuntimeError):
    """Raised when one or more preset files cannot be parsed."""


class PresetNotFoundError(PresetLoadError, ValueError):
    """Raised when no loaded preset has the requested id."""


def _preset_files(directory: Path) -> Iterator[Path]:
    for candidate in sorted(directory.iterdir()):
        if candidate.is_file() and candidate.suffix in PRESET_SUFFIXES:
            yield candidate


def _documents(path: Path) -> list[Any]:
    """A file holds either one preset mapping or a list of them."""

    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return []
    return loaded if isinstance(loaded, list) else [loaded]


class PresetLoader:
    """Reads ``TimerPreset`` definitions from directories of YAML files."""

    def __init__(self, search_paths: Iterable[Path] | None = None) -> None:
        self._directories = [Path(item) for item in search_paths or () if Path(item).is_dir()]

    @property
    def search_paths(self) -> list[Path]:
        return list(self._directories)

    def load_all(self) -> dict[str, TimerPreset]:
        """Return presets keyed by id; a later directory wins on id collisions."""

        catalog: dict[str, TimerPreset] = {}
        problems: list[str] = []
        for directory in self._directories:
            for path in _preset_files(directory):
                try:
                    documents = _documents(path)
                except yaml.YAMLError as exc:
                    problems.append(f"{path}: invalid YAML ({exc})")
                    continue
                for document in documents:
                    try:
                        preset = TimerPreset.model_validate(document)
                    except ValidationError as exc:
                        problems.append(f"{path}: invalid preset ({exc})")
                    else:
                        catalog[preset.id] = preset

        if problems:
            raise PresetLoadError("; ".join(problems))
        return catalog

    def get(self, preset_id: str) -> TimerPreset:
        preset = self.load_all().get(preset_id)
        if preset is None:
            raise PresetNotFoundError(f"Unknown preset '{preset_id}'")
        return preset


__all__ = [
    "PRESET_SUFFIXES",
    "PresetLoadError",
    "PresetLoader",
    "PresetNotFoundError",
    "TimerPreset",
]
