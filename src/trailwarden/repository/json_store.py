"""JSON snapshot store for travel sessions.

A session is persisted as four independent snapshots: ``settings.json``,
``matrix.json``, ``creatures.json`` and ``storages.json``.  Loading is
tolerant: missing fields take their dataclass defaults, and records that
cannot be read are skipped with a warning instead of failing the load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from trailwarden.domain import matrix as matrix_rules
from trailwarden.domain import models as dm
from trailwarden.domain import party
from trailwarden.domain.enums import Terrain

logger = logging.getLogger(__name__)

T = TypeVar("T")

SNAPSHOT_NAMES = ("settings", "matrix", "creatures", "storages")


class JsonSnapshotStore:
    """Persist the settings, matrix, creature and storage snapshots on disk."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._settings_adapter: TypeAdapter[dm.TravelSettings] = TypeAdapter(dm.TravelSettings)
        self._matrix_adapter: TypeAdapter[dm.Matrix] = TypeAdapter(dm.Matrix)
        self._day_adapter: TypeAdapter[dm.EncounterRange] = TypeAdapter(dm.EncounterRange)
        self._night_adapter: TypeAdapter[dm.NightEncounterParams] = TypeAdapter(
            dm.NightEncounterParams
        )
        self._creature_adapter: TypeAdapter[dm.Creature] = TypeAdapter(dm.Creature)
        self._storage_adapter: TypeAdapter[dm.Storage] = TypeAdapter(dm.Storage)
        self._creatures_adapter: TypeAdapter[list[dm.Creature]] = TypeAdapter(list[dm.Creature])
        self._storages_adapter: TypeAdapter[list[dm.Storage]] = TypeAdapter(list[dm.Storage])

    def _path_for(self, name: str) -> Path:
        return self.base_path / f"{name}.json"

    # -- saving -----------------------------------------------------------------

    def save_settings(self, settings: dm.TravelSettings) -> Path:
        return self._write("settings", self._settings_adapter.dump_json(settings, indent=2))

    def save_matrix(self, matrix: dm.Matrix) -> Path:
        return self._write("matrix", self._matrix_adapter.dump_json(matrix, indent=2))

    def save_creatures(self, creatures: list[dm.Creature]) -> Path:
        return self._write("creatures", self._creatures_adapter.dump_json(creatures, indent=2))

    def save_storages(self, storages: list[dm.Storage]) -> Path:
        return self._write("storages", self._storages_adapter.dump_json(storages, indent=2))

    def save_session(self, session: dm.Session) -> None:
        """Write all four snapshots of ``session``."""

        self.save_settings(session.settings)
        self.save_matrix(session.matrix)
        self.save_creatures(session.creatures)
        self.save_storages(session.storages)

    def _write(self, name: str, payload: bytes) -> Path:
        path = self._path_for(name)
        path.write_bytes(payload)
        return path

    # -- loading ----------------------------------------------------------------

    def load_settings(self) -> dm.TravelSettings:
        raw = self._read("settings")
        settings = dm.TravelSettings()
        if isinstance(raw, dict):
            settings = self._validate(self._settings_adapter, raw, "settings") or settings
        party.normalise_watches(settings)
        return settings

    def load_matrix(self) -> dm.Matrix:
        """Load the matrix cell by cell; unreadable terrains fall back to defaults."""

        raw = self._read("matrix")
        matrix = dm.Matrix(day={}, night={})
        if isinstance(raw, dict):
            matrix.day = self._load_cells(raw.get("day"), self._day_adapter, "matrix day")
            matrix.night = self._load_cells(raw.get("night"), self._night_adapter, "matrix night")
        matrix_rules.ensure_complete(matrix)
        return matrix

    def load_creatures(self) -> list[dm.Creature]:
        raw = self._read("creatures")
        if raw is None:
            return dm.default_party()
        return self._load_records(raw, self._creature_adapter, "creature")

    def load_storages(self) -> list[dm.Storage]:
        raw = self._read("storages")
        if raw is None:
            return dm.default_storages()
        records = [_normalise_storage(item) for item in raw] if isinstance(raw, list) else raw
        storages = self._load_records(records, self._storage_adapter, "storage")
        for storage in storages:
            # Drop stock the storage type cannot hold.
            party.set_storage_type(storage, storage.storage_type)
        return storages

    def load_session(self, *, log_limit: int = 200) -> dm.Session:
        """Build a session from disk, filling anything missing with defaults."""

        return dm.Session(
            settings=self.load_settings(),
            matrix=self.load_matrix(),
            creatures=self.load_creatures(),
            storages=self.load_storages(),
            log_limit=log_limit,
        )

    def delete(self) -> None:
        """Remove every snapshot that exists."""

        for name in SNAPSHOT_NAMES:
            path = self._path_for(name)
            if path.exists():
                path.unlink()

    def _read(self, name: str) -> Any:
        path = self._path_for(name)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_bytes())
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable %s snapshot %s: %s", name, path, exc)
            return None

    def _validate(self, adapter: TypeAdapter[T], raw: Any, label: str) -> T | None:
        try:
            return adapter.validate_python(raw)
        except ValidationError as exc:
            logger.warning("Skipping invalid %s record: %s", label, exc)
            return None

    def _load_records(self, raw: Any, adapter: TypeAdapter[T], label: str) -> list[T]:
        if not isinstance(raw, list):
            logger.warning("Expected a list of %s records, got %s", label, type(raw).__name__)
            return []
        records: list[T] = []
        for item in raw:
            record = self._validate(adapter, item, label)
            if record is not None:
                records.append(record)
        return records

    def _load_cells(self, raw: Any, adapter: TypeAdapter[T], label: str) -> dict[Terrain, T]:
        cells: dict[Terrain, T] = {}
        if not isinstance(raw, dict):
            return cells
        for key, value in raw.items():
            try:
                terrain = Terrain(key)
            except ValueError:
                logger.warning("Skipping %s entry for unknown terrain %r", label, key)
                continue
            cell = self._validate(adapter, value, f"{label} '{key}'")
            if cell is not None:
                cells[terrain] = cell
        return cells


def _normalise_storage(item: Any) -> Any:
    """Treat a zero or empty capacity as the default capacity."""

    if isinstance(item, dict) and "max_capacity" in item and not item["max_capacity"]:
        return {key: value for key, value in item.items() if key != "max_capacity"}
    return item
