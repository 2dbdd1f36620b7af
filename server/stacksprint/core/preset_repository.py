# stacksprint/core/preset_repository.py
"""
Preset Repository

Named configuration snapshots persisted as one JSON-encoded list under a
fixed key of a durable key-value store:

    [ {"name": "...", "version": 1, "config": {...GenerationRequest...}}, ... ]

- list order is most-recently-saved first
- names are unique; saving an existing name replaces the old entry
- unreadable or non-list stored data reads as "no presets"
- entries without "version" are treated as version 1
"""
import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from stacksprint.core.config_store import ConfigStore
from stacksprint.models import GenerationRequest, Preset, PresetSnapshot
from stacksprint.utils.config import PRESET_STORAGE_KEY

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class PresetValidationError(ValueError):
    pass


class PresetNotFoundError(KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"preset {self.name!r} not found"


def validate_snapshot(config: Dict[str, Any], version: int = SNAPSHOT_VERSION) -> PresetSnapshot:
    """Check a stored snapshot against the schema of its version."""
    if version > SNAPSHOT_VERSION:
        raise PresetValidationError(f"preset schema version {version} is newer than supported ({SNAPSHOT_VERSION})")
    if not isinstance(config, dict):
        raise PresetValidationError("preset config must be an object")
    try:
        return PresetSnapshot.model_validate(config)
    except ValidationError as e:
        raise PresetValidationError(f"invalid preset config: {e.error_count()} problem(s): "
                                    + "; ".join(_describe(err) for err in e.errors())) from e


def _describe(err: Dict[str, Any]) -> str:
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg', 'invalid')}"


class PresetRepository:
    def __init__(self, storage, key: str = PRESET_STORAGE_KEY):
        self.storage = storage
        self.key = key

    # ----------------------------
    # Persistence
    # ----------------------------
    def _read(self) -> List[Preset]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Preset storage under %r is not valid JSON; treating as empty", self.key)
            return []
        if not isinstance(parsed, list):
            logger.warning("Preset storage under %r is not a list; treating as empty", self.key)
            return []
        presets: List[Preset] = []
        for item in parsed:
            try:
                presets.append(Preset.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed preset entry: %r", item)
        return presets

    def _write(self, presets: List[Preset]) -> None:
        self.storage.set(self.key, json.dumps([p.model_dump() for p in presets], ensure_ascii=False))

    # ----------------------------
    # Operations
    # ----------------------------
    def save(self, name: str, config: Union[GenerationRequest, Dict[str, Any]]) -> Preset:
        clean = (name or "").strip()
        if not clean:
            raise PresetValidationError("Preset name is required.")
        if isinstance(config, GenerationRequest):
            data = config.model_dump(mode="json")
        else:
            data = validate_snapshot(config).model_dump(mode="json", exclude_none=True)
        preset = Preset(name=clean, version=SNAPSHOT_VERSION, config=data)
        others = [p for p in self._read() if p.name != clean]
        self._write([preset] + others)
        return preset

    def list(self) -> List[Preset]:
        return self._read()

    def find(self, name: str) -> Optional[Preset]:
        for preset in self._read():
            if preset.name == name:
                return preset
        return None

    def load(self, name: str) -> PresetSnapshot:
        preset = self.find(name)
        if preset is None:
            raise PresetNotFoundError(name)
        return validate_snapshot(preset.config, preset.version)

    def delete(self, name: str) -> bool:
        presets = self._read()
        remaining = [p for p in presets if p.name != name]
        if len(remaining) == len(presets):
            return False
        self._write(remaining)
        return True

    def restore(self, name: str, store: ConfigStore) -> PresetSnapshot:
        """Load a preset and write it back through the store's mutators."""
        snapshot = self.load(name)
        store.apply_preset(snapshot)
        return snapshot
