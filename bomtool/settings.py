"""Application settings and column dictionary: normalisation and persistence."""

from __future__ import annotations

import json
from pathlib import Path

from .models import (
    AppSettings,
    ColumnDictionary,
    ColumnDictionaryEntry,
    FormatRule,
    to_dict,
)

SETTINGS_FILE_NAME = "bom_settings.json"
DICTIONARY_FILE_NAME = "custom_dict.json"
SETTINGS_ACTIONS = ("copy_above", "expand_range", "replace_with", "ignore")

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


class SettingsError(ValueError):
    """Settings or dictionary data is invalid or could not be read or written."""


def _same_ignoring_ascii_case(left: str, right: str) -> bool:
    return left.translate(_ASCII_LOWER) == right.translate(_ASCII_LOWER)


def normalize_settings(settings: AppSettings) -> AppSettings:
    """Trim and de-duplicate makers and format rules; reject blanks and unknown actions."""
    makers: list[str] = []
    seen_makers: set[str] = set()
    for maker in settings.makers:
        trimmed = maker.strip()
        if not trimmed:
            raise SettingsError("メーカー名に空の値は使用できません")
        if trimmed not in seen_makers:
            seen_makers.add(trimmed)
            makers.append(trimmed)

    rules: list[FormatRule] = []
    seen_rules: set[tuple[str, str]] = set()
    for rule in settings.format_rules:
        pattern = rule.pattern.strip()
        action = rule.action.strip().lower()
        if action not in SETTINGS_ACTIONS:
            raise SettingsError(f"無効な処理方法です: {action}")
        key = (pattern, action)
        if key not in seen_rules:
            seen_rules.add(key)
            rules.append(FormatRule(pattern=pattern, action=action))

    return AppSettings(makers=makers, format_rules=rules)


def default_column_dictionary() -> ColumnDictionary:
    """The built-in column dictionary used when none is configured."""
    return ColumnDictionary(
        columns=[
            ColumnDictionaryEntry(
                column_type="part_number",
                display_name="部品番号",
                patterns=[
                    "部品番号",
                    "品番",
                    "部番",
                    "part number",
                    "part no",
                    "part#",
                    "reference",
                    "refdes",
                ],
            ),
            ColumnDictionaryEntry(
                column_type="model_number",
                display_name="型番/部品名",
                patterns=["型番", "部品名", "品名", "item", "part name", "description"],
            ),
            ColumnDictionaryEntry(
                column_type="manufacturer",
                display_name="メーカー",
                patterns=["ﾒｰｶｰ", "メーカー", "maker", "manufacturer", "vendor"],
            ),
        ]
    )


def normalize_dictionary(dictionary: ColumnDictionary) -> ColumnDictionary:
    """Merge entries by column type, trim names and patterns, and sort them.

    An empty result falls back to the built-in dictionary.
    """
    merged: dict[str, ColumnDictionaryEntry] = {}

    for entry in dictionary.columns:
        key = entry.column_type.strip().lower()
        if not key:
            raise SettingsError("列タイプ名は必須です")

        display_name = entry.display_name.strip() if entry.display_name is not None else None
        if not display_name:
            display_name = None

        patterns = sorted({p.strip() for p in entry.patterns if p.strip()})

        target = merged.get(key)
        if target is None:
            target = ColumnDictionaryEntry(column_type=key, display_name=display_name)
            merged[key] = target
        if display_name is not None:
            target.display_name = display_name

        for pattern in patterns:
            if not any(_same_ignoring_ascii_case(existing, pattern) for existing in target.patterns):
                target.patterns.append(pattern)

    columns = []
    for key in sorted(merged):
        entry = merged[key]
        entry.patterns.sort()
        columns.append(entry)

    if not columns:
        columns = default_column_dictionary().columns
    return ColumnDictionary(columns=columns)


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"{what}ファイルの読み込みに失敗しました: {exc}") from exc


def _write_json(data: dict, path: Path, what: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SettingsError(f"{what}フォルダの作成に失敗しました: {exc}") from exc
    content = json.dumps(data, indent=2, ensure_ascii=False)
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"{what}ファイルの保存に失敗しました: {exc}") from exc


def load_settings(path: str | Path) -> AppSettings:
    """Read and normalise settings; a missing or blank file gives empty settings."""
    path = Path(path)
    if not path.exists():
        return AppSettings()
    content = _read_text(path, "設定")
    if not content.strip():
        return AppSettings()
    try:
        raw = AppSettings.from_dict(json.loads(content))
    except ValueError as exc:
        raise SettingsError(f"設定ファイルの解析に失敗しました: {exc}") from exc
    return normalize_settings(raw)


def write_settings(settings: AppSettings, path: str | Path) -> None:
    """Write settings as pretty JSON, creating the folder if needed."""
    _write_json(to_dict(settings), Path(path), "設定")


def load_dictionary(path: str | Path) -> ColumnDictionary:
    """Read and normalise the column dictionary.

    A missing file is created with the built-in dictionary; a blank one gives it.
    """
    path = Path(path)
    if not path.exists():
        defaults = default_column_dictionary()
        try:
            write_dictionary(defaults, path)
        except SettingsError:
            pass
        return defaults
    content = _read_text(path, "辞書")
    if not content.strip():
        return default_column_dictionary()
    try:
        raw = ColumnDictionary.from_dict(json.loads(content))
    except ValueError as exc:
        raise SettingsError(f"辞書ファイルの解析に失敗しました: {exc}") from exc
    return normalize_dictionary(raw)


def write_dictionary(dictionary: ColumnDictionary, path: str | Path) -> None:
    """Write the column dictionary as pretty JSON, creating the folder if needed."""
    _write_json(to_dict(dictionary), Path(path), "辞書")