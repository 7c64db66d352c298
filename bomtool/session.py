"""Saving, listing, restoring and deleting session snapshots on disk."""

from __future__ import annotations

import dataclasses
import json
import random
import re
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path, PurePath
from typing import Any

from .models import (
    BomData,
    ColumnMapping,
    ComparisonResult,
    OverrideList,
    RegisteredNameList,
    SynthesisResult,
    to_dict,
)

AUTO_LIMIT = 10
_ID_ALPHABET = string.ascii_letters + string.digits


class SessionError(Exception):
    """A session could not be saved, read or deleted."""


class SessionKind(Enum):
    AUTO = "auto"
    MANUAL = "manual"


def parse_session_kind(kind: str) -> SessionKind:
    """Turn 'auto' or 'manual' (any case) into a SessionKind."""
    try:
        return SessionKind(kind.lower())
    except ValueError:
        raise SessionError("不明なセッション種別です") from None


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_datetime(text: Any) -> datetime:
    if not isinstance(text, str):
        raise ValueError("field 'created_at' must be a string")
    normalized = text.strip()
    if normalized[-1:] in ("Z", "z"):
        normalized = normalized[:-1] + "+00:00"
    normalized = re.sub(
        r"\.(\d+)", lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized
    )
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _file_name(path: str | None) -> str | None:
    if path is None:
        return None
    name = PurePath(path).name
    return name if name and name != ".." else None


def _optional(data: dict, key: str, parse):
    value = data.get(key)
    return None if value is None else parse(value)


def _generate_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=8))
    return f"{int(time.time())}-{suffix}"


@dataclass
class SessionSummary:
    id: str
    label: str | None
    created_at: datetime
    file_a_name: str | None
    file_b_name: str | None


@dataclass
class SessionSnapshot:
    id: str = ""
    label: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    file_a_path: str | None = None
    file_b_path: str | None = None
    column_mapping_a: ColumnMapping | None = None
    column_mapping_b: ColumnMapping | None = None
    bom_a: BomData | None = None
    bom_b: BomData | None = None
    comparison_result: ComparisonResult | None = None
    synthesis_result: SynthesisResult | None = None
    registered_name_list: RegisteredNameList | None = None
    override_list: OverrideList | None = None

    _MODEL_FIELDS = (
        "column_mapping_a",
        "column_mapping_b",
        "bom_a",
        "bom_b",
        "comparison_result",
        "synthesis_result",
        "registered_name_list",
        "override_list",
    )

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-ready form of the snapshot."""
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "created_at": _format_datetime(self.created_at),
            "file_a_path": self.file_a_path,
            "file_b_path": self.file_b_path,
        }
        for name in self._MODEL_FIELDS:
            value = getattr(self, name)
            data[name] = None if value is None else to_dict(value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "SessionSnapshot":
        """Build a snapshot from its plain form; raises ValueError on bad data."""
        if not isinstance(data, dict):
            raise ValueError("session snapshot must be an object")
        if "id" not in data or not isinstance(data["id"], str):
            raise ValueError("field 'id' must be a string")
        if "created_at" not in data:
            raise ValueError("missing field: created_at")

        def opt_str(key: str) -> str | None:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"field '{key}' must be a string")
            return value

        return cls(
            id=data["id"],
            label=opt_str("label"),
            created_at=_parse_datetime(data["created_at"]),
            file_a_path=opt_str("file_a_path"),
            file_b_path=opt_str("file_b_path"),
            column_mapping_a=_optional(data, "column_mapping_a", ColumnMapping.from_dict),
            column_mapping_b=_optional(data, "column_mapping_b", ColumnMapping.from_dict),
            bom_a=_optional(data, "bom_a", BomData.from_dict),
            bom_b=_optional(data, "bom_b", BomData.from_dict),
            comparison_result=_optional(data, "comparison_result", ComparisonResult.from_dict),
            synthesis_result=_optional(data, "synthesis_result", SynthesisResult.from_dict),
            registered_name_list=_optional(
                data, "registered_name_list", RegisteredNameList.from_dict
            ),
            override_list=_optional(data, "override_list", OverrideList.from_dict),
        )

    def summary(self) -> SessionSummary:
        """Short description used in session listings."""
        return SessionSummary(
            id=self.id,
            label=self.label,
            created_at=self.created_at,
            file_a_name=_file_name(self.file_a_path),
            file_b_name=_file_name(self.file_b_path),
        )


class SessionStore:
    """Snapshots kept as JSON files under '<root>/auto' and '<root>/manual'."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _dir(self, kind: SessionKind) -> Path:
        directory = self.root / kind.value
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SessionError(f"ディレクトリ作成に失敗しました: {exc}") from exc
        return directory

    def _path(self, kind: SessionKind, session_id: str) -> Path:
        return self._dir(kind) / f"{session_id}.json"

    @staticmethod
    def _read(path: Path) -> SessionSnapshot:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SessionError(f"セッションを開けません: {exc}") from exc
        try:
            return SessionSnapshot.from_dict(json.loads(content))
        except ValueError as exc:
            raise SessionError(f"セッションの解析に失敗しました: {exc}") from exc

    def save(self, snapshot: SessionSnapshot, kind: SessionKind) -> SessionSummary:
        """Write a snapshot, giving it an id if it has none; auto sessions are pruned."""
        if not snapshot.id:
            snapshot = dataclasses.replace(snapshot, id=_generate_id())
        path = self._path(kind, snapshot.id)
        content = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise SessionError(f"セッション保存に失敗しました: {exc}") from exc
        if kind is SessionKind.AUTO:
            self._prune_auto()
        return snapshot.summary()

    def _prune_auto(self) -> None:
        directory = self._dir(SessionKind.AUTO)
        for summary in self.collect(SessionKind.AUTO)[AUTO_LIMIT:]:
            (directory / f"{summary.id}.json").unlink(missing_ok=True)

    def collect(self, kind: SessionKind) -> list[SessionSummary]:
        """Summaries of all readable snapshots, newest first."""
        directory = self._dir(kind)
        try:
            paths = [p for p in directory.iterdir() if p.suffix == ".json"]
        except OSError as exc:
            raise SessionError(
                f"セッションディレクトリの読み込みに失敗しました: {exc}"
            ) from exc
        summaries = []
        for path in paths:
            try:
                summaries.append(self._read(path).summary())
            except SessionError:
                continue
        return sorted(summaries, key=lambda s: s.created_at, reverse=True)

    def load(self, kind: SessionKind, session_id: str) -> SessionSnapshot:
        """Read one snapshot by id."""
        return self._read(self._path(kind, session_id))

    def delete(self, kind: SessionKind, session_id: str) -> None:
        """Remove one snapshot by id."""
        try:
            self._path(kind, session_id).unlink()
        except OSError as exc:
            raise SessionError(f"セッションの削除に失敗しました: {exc}") from exc