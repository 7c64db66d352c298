"""Application state and the commands that act on it."""

from __future__ import annotations

import copy
import json
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from . import cad
from .cad import CadError
from .models import (
    AppSettings,
    BomData,
    ColumnDictionary,
    ComparisonResult,
    OverrideEntry,
    OverrideList,
    RegisteredNameList,
    SynthesisResult,
    to_dict,
)
from .session import (
    SessionError,
    SessionKind,
    SessionSnapshot,
    SessionStore,
    SessionSummary,
    parse_session_kind,
)
from .settings import (
    DICTIONARY_FILE_NAME,
    SETTINGS_FILE_NAME,
    SettingsError,
    default_column_dictionary,
    load_dictionary,
    load_settings,
    normalize_dictionary,
    normalize_settings,
    write_dictionary,
    write_settings,
)
from .synthesis import perform_synthesis, save_synthesis_result

_SIDES = ("a", "b")


class CommandError(Exception):
    """A command could not be carried out; the message is meant for the user."""


@contextmanager
def _reported() -> Iterator[None]:
    try:
        yield
    except (SettingsError, SessionError, CadError) as exc:
        raise CommandError(str(exc)) from exc


def _side_key(side: str) -> str:
    key = side.lower()
    if key not in _SIDES:
        raise CommandError("サイド指定が無効です")
    return key


def _write_json_file(data: dict, file_path: str | Path) -> None:
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CommandError(f"ディレクトリの作成に失敗しました: {exc}") from exc
    return path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _upsert_override(overrides: OverrideList, entry: OverrideEntry) -> None:
    existing = next(
        (e for e in overrides.entries if e.part_number == entry.part_number), None
    )
    if existing is not None:
        existing.registered_name = entry.registered_name
    else:
        overrides.entries.append(entry)


class AppState:
    """Everything the application holds between commands.

    Files live under ``root``: settings in ``sessions/settings``, sessions in
    ``sessions/auto`` and ``sessions/manual``, CAD exports in ``sessions/cad``
    and the column dictionary in ``dictionary``.
    """

    def __init__(self, root: str | Path = "..") -> None:
        self.root = Path(root)
        self.settings_path = self.root / "sessions" / "settings" / SETTINGS_FILE_NAME
        self.dictionary_path = self.root / "dictionary" / DICTIONARY_FILE_NAME
        self.cad_dir = self.root / "sessions" / "cad"
        self.sessions = SessionStore(self.root / "sessions")
        self._lock = threading.RLock()

        self.bom_a: BomData | None = None
        self.bom_b: BomData | None = None
        self.comparison_result: ComparisonResult | None = None
        self.synthesis_result: SynthesisResult | None = None
        self.registered_name_list: RegisteredNameList | None = None
        self.override_list: OverrideList | None = None
        self.file_a_path: str | None = None
        self.file_b_path: str | None = None
        self.column_mapping_a = None
        self.column_mapping_b = None

        try:
            self.settings = load_settings(self.settings_path)
        except SettingsError:
            self.settings = AppSettings()
        try:
            self.column_dictionary = load_dictionary(self.dictionary_path)
        except SettingsError:
            self.column_dictionary = default_column_dictionary()

    # --- settings -------------------------------------------------------

    def load_settings(self) -> AppSettings:
        with self._lock:
            return copy.deepcopy(self.settings)

    def save_settings(self, settings: AppSettings) -> str:
        with self._lock, _reported():
            normalized = normalize_settings(settings)
            write_settings(normalized, self.settings_path)
            self.settings = normalized
        return "設定を保存しました"

    def import_settings(self, file_path: str | Path) -> AppSettings:
        path = Path(file_path)
        if not path.exists():
            raise CommandError("設定ファイルが見つかりません")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CommandError(f"設定ファイルの読み込みに失敗しました: {exc}") from exc
        try:
            raw = AppSettings.from_dict(json.loads(content))
        except ValueError as exc:
            raise CommandError(f"設定ファイルの解析に失敗しました: {exc}") from exc
        with self._lock, _reported():
            normalized = normalize_settings(raw)
            write_settings(normalized, self.settings_path)
            self.settings = normalized
            return copy.deepcopy(normalized)

    def export_settings(self, file_path: str | Path) -> str:
        with self._lock:
            data = to_dict(self.settings)
        try:
            _write_json_file(data, file_path)
        except OSError as exc:
            raise CommandError(f"設定ファイルの書き込みに失敗しました: {exc}") from exc
        return f"設定をエクスポートしました: {file_path}"

    # --- column dictionary ----------------------------------------------

    def load_column_dictionary(self) -> ColumnDictionary:
        with self._lock:
            return copy.deepcopy(self.column_dictionary)

    def save_column_dictionary(self, dictionary: ColumnDictionary) -> str:
        with self._lock, _reported():
            normalized = normalize_dictionary(dictionary)
            write_dictionary(normalized, self.dictionary_path)
            self.column_dictionary = normalized
        return "辞書を保存しました"

    def import_column_dictionary(self, file_path: str | Path) -> ColumnDictionary:
        path = Path(file_path)
        if not path.exists():
            raise CommandError("辞書ファイルが見つかりません")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CommandError(f"辞書ファイルの読み込みに失敗しました: {exc}") from exc
        try:
            raw = ColumnDictionary.from_dict(json.loads(content))
        except ValueError as exc:
            raise CommandError(f"辞書ファイルの解析に失敗しました: {exc}") from exc
        with self._lock, _reported():
            normalized = normalize_dictionary(raw)
            write_dictionary(normalized, self.dictionary_path)
            self.column_dictionary = normalized
            return copy.deepcopy(normalized)

    def export_column_dictionary(self, file_path: str | Path) -> str:
        with self._lock:
            data = to_dict(self.column_dictionary)
        try:
            _write_json_file(data, file_path)
        except OSError as exc:
            raise CommandError(f"辞書ファイルの書き込みに失敗しました: {exc}") from exc
        return f"辞書をエクスポートしました: {file_path}"

    # --- BOM data -------------------------------------------------------

    def _bom(self, key: str) -> BomData | None:
        return self.bom_a if key == "a" else self.bom_b

    def _set_bom(self, key: str, bom: BomData | None) -> None:
        if key == "a":
            self.bom_a = bom
        else:
            self.bom_b = bom

    def synthesize_boms(self) -> SynthesisResult:
        with self._lock:
            if self.bom_a is None or self.bom_b is None:
                raise CommandError("部品表AまたはBが読み込まれていません")
            result = perform_synthesis(self.bom_a, self.bom_b)
            self.synthesis_result = result
            return copy.deepcopy(result)

    def update_bom_data(self, side: str, bom_data: BomData) -> str:
        key = _side_key(side)
        with self._lock:
            self._set_bom(key, copy.deepcopy(bom_data))
            self.comparison_result = None
            self.save_auto_session()
        return f"部品表{key.upper()}を更新しました"

    def get_bom_snapshot(self, side: str) -> BomData | None:
        key = _side_key(side)
        with self._lock:
            return copy.deepcopy(self._bom(key))

    # --- registered names and overrides ---------------------------------

    def set_overrides(
        self,
        entry: OverrideEntry | None = None,
        entries: list[OverrideEntry] | None = None,
        remove_part_number: str | None = None,
        replace: bool | None = None,
    ) -> OverrideList:
        """Edit the override list and return it, sorted by part number."""
        with self._lock:
            overrides = copy.deepcopy(self.override_list) or OverrideList()

            if remove_part_number is not None:
                overrides.entries = [
                    e for e in overrides.entries if e.part_number != remove_part_number
                ]

            if entries is not None:
                if replace is None or replace:
                    overrides.entries = copy.deepcopy(list(entries))
                else:
                    for item in entries:
                        _upsert_override(overrides, copy.deepcopy(item))

            if entry is not None:
                _upsert_override(overrides, copy.deepcopy(entry))

            overrides.entries.sort(key=lambda e: e.part_number)
            self.override_list = overrides
            self.save_auto_session()
            return copy.deepcopy(overrides)

    def get_registered_name_list(self) -> RegisteredNameList | None:
        with self._lock:
            return copy.deepcopy(self.registered_name_list)

    def get_override_list(self) -> OverrideList | None:
        with self._lock:
            return copy.deepcopy(self.override_list)

    # --- clearing -------------------------------------------------------

    def clear_data(self, mode: str) -> str:
        mode_key = mode.lower()
        if mode_key not in ("all", "session_keep"):
            raise CommandError("無効なクリアモードです")
        with self._lock:
            self.bom_a = None
            self.bom_b = None
            self.comparison_result = None
            self.synthesis_result = None
            self.file_a_path = None
            self.file_b_path = None
            self.column_mapping_a = None
            self.column_mapping_b = None
            if mode_key == "all":
                self.registered_name_list = None
                self.override_list = None
            self.save_auto_session()
        if mode_key == "all":
            return "全データをクリアしました"
        return "登録名と上書きを保持してクリアしました"

    def clear_sheets(self) -> str:
        return self.clear_data("all")

    # --- sessions -------------------------------------------------------

    def list_sessions(self, kind: str) -> list[SessionSummary]:
        with _reported():
            return self.sessions.collect(parse_session_kind(kind))

    def save_manual_session(self, label: str | None = None) -> list[SessionSummary]:
        cleaned = label.strip() if label is not None else None
        with self._lock, _reported():
            snapshot = self.create_snapshot(True, cleaned or None)
            self.sessions.save(snapshot, SessionKind.MANUAL)
        return self.list_sessions("manual")

    def restore_session(self, kind: str, session_id: str) -> SessionSnapshot:
        with self._lock, _reported():
            snapshot = self.sessions.load(parse_session_kind(kind), session_id)
            self.apply_snapshot(snapshot)
        return snapshot

    def delete_session(self, kind: str, session_id: str) -> list[SessionSummary]:
        with _reported():
            self.sessions.delete(parse_session_kind(kind), session_id)
        return self.list_sessions(kind)

    def create_snapshot(self, include_results: bool, label: str | None = None) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                id="",
                label=label,
                created_at=datetime.now(timezone.utc),
                file_a_path=self.file_a_path,
                file_b_path=self.file_b_path,
                column_mapping_a=copy.deepcopy(self.column_mapping_a),
                column_mapping_b=copy.deepcopy(self.column_mapping_b),
                bom_a=copy.deepcopy(self.bom_a),
                bom_b=copy.deepcopy(self.bom_b),
                comparison_result=copy.deepcopy(self.comparison_result) if include_results else None,
                synthesis_result=copy.deepcopy(self.synthesis_result) if include_results else None,
                registered_name_list=copy.deepcopy(self.registered_name_list),
                override_list=copy.deepcopy(self.override_list),
            )

    def apply_snapshot(self, snapshot: SessionSnapshot) -> None:
        with self._lock:
            self.bom_a = copy.deepcopy(snapshot.bom_a)
            self.bom_b = copy.deepcopy(snapshot.bom_b)
            self.file_a_path = snapshot.file_a_path
            self.file_b_path = snapshot.file_b_path
            self.column_mapping_a = copy.deepcopy(snapshot.column_mapping_a)
            self.column_mapping_b = copy.deepcopy(snapshot.column_mapping_b)
            self.comparison_result = copy.deepcopy(snapshot.comparison_result)
            self.synthesis_result = copy.deepcopy(snapshot.synthesis_result)
            self.registered_name_list = copy.deepcopy(snapshot.registered_name_list)
            self.override_list = copy.deepcopy(snapshot.override_list)

    def save_auto_session(self) -> None:
        """Store an automatic snapshot, unless neither BOM is loaded."""
        with self._lock:
            if self.bom_a is None and self.bom_b is None:
                return
            snapshot = self.create_snapshot(False, None)
            with _reported():
                self.sessions.save(snapshot, SessionKind.AUTO)

    # --- output ---------------------------------------------------------

    def save_synthesis(self, file_path: str | Path, format: str) -> str:
        with self._lock:
            result = copy.deepcopy(self.synthesis_result)
        if result is None:
            raise CommandError("合成結果がありません")
        try:
            return save_synthesis_result(result, file_path, format)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc
        except OSError as exc:
            raise CommandError(f"保存エラー: {exc}") from exc

    def generate_cad_file(
        self, format: str, bom_data: BomData, output_path: str | Path | None = None
    ) -> str:
        with _reported():
            return cad.generate_cad_file(format, bom_data, output_path, self.cad_dir)