"""
app/services/mapping_preset_service.py

Named header-mapping presets stored through a key-value capability.

Keys are ``<namespace>::<name>``; each value holds the saved mapping and
the headers it was built from, so a preset can be re-applied to a file
whose layout has drifted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.mappers.field_mapper import MappingResolution, OrderFieldMapper
from app.repositories.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "::"


class MappingPresetNotFoundError(LookupError):
    """
    Raised when a named preset does not exist.
    """


class InvalidPresetNameError(ValueError):
    """
    Raised when a preset name is empty or contains the key separator.
    """


@dataclass(frozen=True)
class MappingPreset:
    name: str
    mapping: dict[str, str]
    headers: list[str]

    def to_payload(self) -> dict[str, Any]:
        return {"mapping": dict(self.mapping), "headers": list(self.headers)}


class MappingPresetService:
    """
    Save, load, list, delete and apply mapping presets.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        namespace: str,
        mapper: OrderFieldMapper | None = None,
    ) -> None:
        self._store = store
        self._namespace = namespace.strip() or "default"
        self._mapper = mapper or OrderFieldMapper()

    @property
    def namespace(self) -> str:
        return self._namespace

    def save(
        self,
        name: str,
        *,
        mapping: Mapping[str, str],
        headers: Sequence[str],
    ) -> MappingPreset:
        preset = MappingPreset(
            name=_validate_name(name),
            mapping={key: value for key, value in mapping.items() if value},
            headers=list(headers),
        )
        self._store.set(self._key(preset.name), preset.to_payload())
        logger.info("Saved mapping preset namespace=%s name=%s", self._namespace, preset.name)
        return preset

    def load(self, name: str) -> MappingPreset:
        name = _validate_name(name)
        payload = self._store.get(self._key(name))
        if payload is None:
            raise MappingPresetNotFoundError(f"Mapping preset not found: {name}")
        mapping = payload.get("mapping")
        headers = payload.get("headers")
        return MappingPreset(
            name=name,
            mapping={
                str(key): str(value)
                for key, value in (mapping.items() if isinstance(mapping, dict) else ())
                if isinstance(value, str)
            },
            headers=[str(header) for header in headers] if isinstance(headers, list) else [],
        )

    def delete(self, name: str) -> None:
        name = _validate_name(name)
        if not self._store.delete(self._key(name)):
            raise MappingPresetNotFoundError(f"Mapping preset not found: {name}")
        logger.info("Deleted mapping preset namespace=%s name=%s", self._namespace, name)

    def list_names(self) -> list[str]:
        prefix = f"{self._namespace}{KEY_SEPARATOR}"
        return sorted(key[len(prefix):] for key in self._store.keys(prefix))

    def apply(self, name: str, headers: Sequence[str]) -> MappingResolution:
        """
        Load a preset and re-apply it to ``headers``.
        """

        preset = self.load(name)
        return self._mapper.apply_preset(preset.mapping, headers)

    def _key(self, name: str) -> str:
        return f"{self._namespace}{KEY_SEPARATOR}{name}"


def _validate_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned or KEY_SEPARATOR in cleaned:
        raise InvalidPresetNameError("Preset names must be non-empty and must not contain '::'.")
    return cleaned
