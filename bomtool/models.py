"""Data model shared by the BOM comparison, synthesis and session code."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_MISSING = object()

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


def _get(data: Any, key: str, default: Any = _MISSING) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object while reading '{key}'")
    if key in data:
        return data[key]
    if default is _MISSING:
        raise ValueError(f"missing field: {key}")
    return default


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string")
    return value


def _as_opt_str(value: Any, key: str) -> str | None:
    return None if value is None else _as_str(value, key)


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"field '{key}' must be a boolean")
    return value


def _as_index(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field '{key}' must be a non-negative integer")
    return value


def _as_opt_index(value: Any, key: str) -> int | None:
    return None if value is None else _as_index(value, key)


def _as_list(value: Any, key: str) -> list:
    if not isinstance(value, list):
        raise ValueError(f"field '{key}' must be a list")
    return value


def _as_str_map(value: Any, key: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ValueError(f"field '{key}' must be an object")
    return {_as_str(k, key): _as_str(v, key) for k, v in value.items()}


def to_dict(obj: Any) -> dict[str, Any]:
    """Return a plain, JSON-ready dictionary for a model instance."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"not a model instance: {type(obj).__name__}")


@dataclass
class BomRow:
    part_number: str
    model_number: str
    attributes: dict[str, str] = field(default_factory=dict)


def _bom_row(data: Any) -> BomRow:
    return BomRow(
        part_number=_as_str(_get(data, "part_number"), "part_number"),
        model_number=_as_str(_get(data, "model_number"), "model_number"),
        attributes=_as_str_map(_get(data, "attributes"), "attributes"),
    )


@dataclass
class BomData:
    headers: list[str] = field(default_factory=list)
    rows: list[BomRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "BomData":
        headers = [_as_str(h, "headers") for h in _as_list(_get(data, "headers"), "headers")]
        rows = [_bom_row(r) for r in _as_list(_get(data, "rows"), "rows")]
        return cls(headers=headers, rows=rows)


@dataclass
class ColumnMapping:
    part_number: int
    model_number: int
    manufacturer: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ColumnMapping":
        return cls(
            part_number=_as_index(_get(data, "part_number"), "part_number"),
            model_number=_as_index(_get(data, "model_number"), "model_number"),
            manufacturer=_as_opt_index(_get(data, "manufacturer", None), "manufacturer"),
        )


@dataclass
class ComparisonRow:
    part_number: str
    model_a: str
    model_b: str
    status: str
    change_type: str = "UNCHANGED"


def _comparison_row(data: Any) -> ComparisonRow:
    return ComparisonRow(
        part_number=_as_str(_get(data, "part_number"), "part_number"),
        model_a=_as_str(_get(data, "model_a"), "model_a"),
        model_b=_as_str(_get(data, "model_b"), "model_b"),
        status=_as_str(_get(data, "status"), "status"),
        change_type=_as_str(_get(data, "change_type", "UNCHANGED"), "change_type"),
    )


@dataclass
class ComparisonResult:
    common_parts: list[ComparisonRow] = field(default_factory=list)
    a_only_parts: list[ComparisonRow] = field(default_factory=list)
    b_only_parts: list[ComparisonRow] = field(default_factory=list)
    modified_parts: list[ComparisonRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ComparisonResult":
        def rows(key: str, default: Any = _MISSING) -> list[ComparisonRow]:
            return [_comparison_row(r) for r in _as_list(_get(data, key, default), key)]

        return cls(
            common_parts=rows("common_parts"),
            a_only_parts=rows("a_only_parts"),
            b_only_parts=rows("b_only_parts"),
            modified_parts=rows("modified_parts", []),
        )


@dataclass
class SynthesisRow:
    part_number: str
    model_a: str
    model_b: str
    status: str


@dataclass
class SynthesisResult:
    rows: list[SynthesisRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "SynthesisResult":
        return cls(
            rows=[
                SynthesisRow(
                    part_number=_as_str(_get(r, "part_number"), "part_number"),
                    model_a=_as_str(_get(r, "model_a"), "model_a"),
                    model_b=_as_str(_get(r, "model_b"), "model_b"),
                    status=_as_str(_get(r, "status"), "status"),
                )
                for r in _as_list(_get(data, "rows"), "rows")
            ]
        )


@dataclass
class PreprocessRules:
    remove_parentheses: bool
    expand_ranges: bool
    fullwidth_to_halfwidth: bool
    lowercase_to_uppercase: bool


@dataclass
class RegisteredNameEntry:
    part_model: str
    registered_name: str


@dataclass
class RegisteredNameList:
    entries: list[RegisteredNameEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "RegisteredNameList":
        return cls(
            entries=[
                RegisteredNameEntry(
                    part_model=_as_str(_get(e, "part_model"), "part_model"),
                    registered_name=_as_str(_get(e, "registered_name"), "registered_name"),
                )
                for e in _as_list(_get(data, "entries"), "entries")
            ]
        )


@dataclass
class OverrideEntry:
    part_number: str
    registered_name: str


@dataclass
class OverrideList:
    entries: list[OverrideEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "OverrideList":
        return cls(
            entries=[
                OverrideEntry(
                    part_number=_as_str(_get(e, "part_number"), "part_number"),
                    registered_name=_as_str(_get(e, "registered_name"), "registered_name"),
                )
                for e in _as_list(_get(data, "entries"), "entries")
            ]
        )


@dataclass
class ValidationError:
    row_number: int
    field: str
    message: str


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)


@dataclass
class AutoCorrection:
    row_number: int
    column_index: int
    column_name: str
    original_value: str
    corrected_value: str
    rule: str


@dataclass
class FormatRule:
    pattern: str = ""
    action: str = ""


@dataclass
class AppSettings:
    makers: list[str] = field(default_factory=list)
    format_rules: list[FormatRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "AppSettings":
        makers = [_as_str(m, "makers") for m in _as_list(_get(data, "makers"), "makers")]
        rules = [
            FormatRule(
                pattern=_as_str(_get(r, "pattern"), "pattern"),
                action=_as_str(_get(r, "action"), "action"),
            )
            for r in _as_list(_get(data, "format_rules"), "format_rules")
        ]
        return cls(makers=makers, format_rules=rules)


@dataclass
class ColumnDictionaryEntry:
    column_type: str = ""
    display_name: str | None = None
    patterns: list[str] = field(default_factory=list)


@dataclass
class ColumnDictionary:
    columns: list[ColumnDictionaryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ColumnDictionary":
        return cls(
            columns=[
                ColumnDictionaryEntry(
                    column_type=_as_str(_get(c, "column_type"), "column_type"),
                    display_name=_as_opt_str(_get(c, "display_name", None), "display_name"),
                    patterns=[
                        _as_str(p, "patterns")
                        for p in _as_list(_get(c, "patterns", []), "patterns")
                    ],
                )
                for c in _as_list(_get(data, "columns"), "columns")
            ]
        )

    def entry_for(self, column_type: str) -> ColumnDictionaryEntry | None:
        """Find the entry for a column type, ignoring surrounding blanks and case."""
        needle = _ascii_lower(column_type.strip().lower())
        return next(
            (e for e in self.columns if _ascii_lower(e.column_type.strip()) == needle),
            None,
        )

    def patterns_for(self, column_type: str) -> list[str]:
        """Return the trimmed, non-empty patterns of a column type."""
        entry = self.entry_for(column_type)
        if entry is None:
            return []
        return [p.strip() for p in entry.patterns if p.strip()]


@dataclass
class PreviewTable:
    headers: list[str]
    rows: list[list[str]]
    total_rows: int