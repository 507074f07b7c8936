"""
Asset identifier discovery for upload responses of unknown shape.

The upload service has been observed to answer with a single object, a list
of per-file records, a bare list of identifiers, or any of those wrapped under
varying field names. Resolution runs in two layers:

1. a named-key pass over a fixed priority list of identifier field names;
2. when that finds nothing, a depth-bounded structural search through every
   nested mapping and sequence.

Strings found by the structural search (and bare strings inside sequences)
must be at least ``min_length`` characters long so flags and enum values are
not mistaken for identifiers.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Sequence

from datalens.core.config import DEFAULT_ASSET_ID_KEYS
from datalens.schemas import UploadedFileRecord

_RECORD_LIST_KEYS: tuple[str, ...] = ("results", "files")
_FILE_NAME_KEYS: tuple[str, ...] = ("file_name", "filename", "name")


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


class AssetIdResolver:
    """Extract an ordered, de-duplicated list of asset identifiers."""

    def __init__(
        self,
        *,
        key_names: Iterable[str] = DEFAULT_ASSET_ID_KEYS,
        min_length: int = 10,
        max_depth: int = 10,
    ) -> None:
        self._key_names = tuple(key_names)
        self._min_length = min_length
        self._max_depth = max_depth

    @property
    def key_names(self) -> tuple[str, ...]:
        return self._key_names

    def resolve(self, raw: Any) -> list[str]:
        """Return identifiers in first-seen order. Never raises."""
        found: list[str] = []
        self._visit(raw, 0, found)
        return list(dict.fromkeys(found))

    def resolve_accepted(self, raw: Any) -> list[str]:
        """Like ``resolve`` but drops identifiers whose record reports ``success: false``."""
        resolved = self.resolve(raw)
        rejected = failed_asset_ids(extract_file_records(raw, resolved))
        return [asset_id for asset_id in resolved if asset_id not in rejected]

    def _visit(self, value: Any, depth: int, found: list[str]) -> None:
        if depth > self._max_depth:
            return
        if isinstance(value, Mapping):
            self._visit_mapping(value, depth, found)
        elif isinstance(value, (list, tuple)):
            self._visit_sequence(value, depth, found)

    def _visit_sequence(self, items: Sequence[Any], depth: int, found: list[str]) -> None:
        for item in items:
            if isinstance(item, str):
                if len(item) >= self._min_length:
                    found.append(item)
            elif _is_container(item):
                self._visit(item, depth + 1, found)

    def _visit_mapping(self, mapping: Mapping[str, Any], depth: int, found: list[str]) -> None:
        named = self._match_named_keys(mapping)
        if named:
            found.extend(named)
            return
        for value in mapping.values():
            if _is_container(value):
                self._visit(value, depth + 1, found)

    def _match_named_keys(self, mapping: Mapping[str, Any]) -> list[str]:
        matches: list[str] = []
        for key in self._key_names:
            if key not in mapping:
                continue
            value = mapping[key]
            if _is_text(value):
                matches.append(value)
            elif isinstance(value, (list, tuple)):
                matches.extend(item for item in value if _is_text(item))
        return matches


def _first_text(record: Mapping[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        value = record.get(key)
        if _is_text(value):
            return value
    return ""


def _record_from_mapping(record: Mapping[str, Any]) -> UploadedFileRecord:
    success = record.get("success")
    error = record.get("error")
    return UploadedFileRecord(
        asset_id=_first_text(record, ("asset_id", "id")),
        file_name=_first_text(record, _FILE_NAME_KEYS),
        success=success if isinstance(success, bool) else True,
        error=error if isinstance(error, str) else None,
    )


def extract_file_records(raw: Any, asset_ids: Sequence[str] = ()) -> list[UploadedFileRecord]:
    """Build per-file records from the upload response.

    Record lists under ``results`` or ``files`` (or a top-level list of
    records) are mapped one to one. Otherwise a record is synthesized for
    each resolved identifier, borrowing the top-level file name when the
    response describes a single file.
    """
    record_list: Any = None
    if isinstance(raw, Mapping):
        for key in _RECORD_LIST_KEYS:
            if isinstance(raw.get(key), list):
                record_list = raw[key]
                break
    elif isinstance(raw, list) and any(isinstance(item, Mapping) for item in raw):
        record_list = raw

    if record_list is not None:
        return [
            _record_from_mapping(item)
            for item in record_list
            if isinstance(item, Mapping)
        ]

    file_name = ""
    if isinstance(raw, Mapping) and len(asset_ids) == 1:
        file_name = _first_text(raw, _FILE_NAME_KEYS[:2])
    return [
        UploadedFileRecord(asset_id=asset_id, file_name=file_name, success=True)
        for asset_id in asset_ids
    ]


def failed_asset_ids(records: Iterable[UploadedFileRecord]) -> set[str]:
    """Identifiers the upstream explicitly reported as failed uploads."""
    return {record.asset_id for record in records if not record.success and record.asset_id}


def describe_response(raw: Any, *, max_chars: int = 500) -> dict[str, Any]:
    """Summarize an unresolvable response for debugging."""
    keys = list(raw.keys()) if isinstance(raw, Mapping) else []
    try:
        body = json.dumps(raw, default=str)
    except (TypeError, ValueError):
        body = repr(raw)
    if len(body) > max_chars:
        body = body[: max_chars - 3] + "..."
    return {"raw_keys": [str(key) for key in keys], "raw_preview": body}


__all__ = [
    "AssetIdResolver",
    "describe_response",
    "extract_file_records",
    "failed_asset_ids",
]
