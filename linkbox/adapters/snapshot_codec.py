"""
Snapshot serialization.

Written form: {"schemaVersion": 1, "store": {...camelCase store...}}.
A bare store object without the envelope is the legacy browser format and
is read as version 0.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from linkbox.domain.entities import Store

SCHEMA_VERSION = 1


class SnapshotFormatError(ValueError):
    """Snapshot text that cannot be turned back into a Store."""


def encode_snapshot(store: Store) -> str:
    return f'{{"schemaVersion": {SCHEMA_VERSION}, "store": {store.model_dump_json(by_alias=True)}}}'


def decode_snapshot(text: str) -> Store:
    """
    Parse snapshot text.
    Raises SnapshotFormatError for malformed JSON, an unsupported schema
    version, or data that fails validation.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"Malformed snapshot JSON: {e}") from e

    if not isinstance(payload, dict):
        raise SnapshotFormatError("Snapshot must be a JSON object")

    if "schemaVersion" in payload:
        version = payload["schemaVersion"]
        if not isinstance(version, int) or version > SCHEMA_VERSION:
            raise SnapshotFormatError(f"Unsupported snapshot schema version: {version!r}")
        data = payload.get("store")
    else:
        data = payload

    try:
        return Store.model_validate(data)
    except ValidationError as e:
        raise SnapshotFormatError(f"Snapshot validation failed:\n{e}") from e
