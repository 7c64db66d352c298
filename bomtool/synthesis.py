"""Merging two BOMs into a combined list that shows which side lacks a part."""

from __future__ import annotations

from pathlib import Path

from .file_handler import save_csv_file, save_txt_file
from .models import BomData, SynthesisResult, SynthesisRow

_STATUS_TEXT = {
    "common": "共通",
    "missing_a": "A欠品",
    "missing_b": "B欠品",
}

_CSV_HEADER = ["部品番号", "型番A", "型番B", "ステータス"]


def status_text(status: str) -> str:
    """Human-readable label for a synthesis status."""
    return _STATUS_TEXT.get(status, "不明")


def perform_synthesis(bom_a: BomData, bom_b: BomData) -> SynthesisResult:
    """Combine both BOMs by part number, sorted by part number."""
    models_a = {row.part_number: row.model_number for row in bom_a.rows}
    models_b = {row.part_number: row.model_number for row in bom_b.rows}

    rows = []
    for part_number in sorted(models_a.keys() | models_b.keys()):
        in_a = part_number in models_a
        in_b = part_number in models_b
        if in_a and in_b:
            status = "common"
        elif in_a:
            status = "missing_b"
        else:
            status = "missing_a"
        rows.append(
            SynthesisRow(
                part_number=part_number,
                model_a=models_a.get(part_number, ""),
                model_b=models_b.get(part_number, ""),
                status=status,
            )
        )
    return SynthesisResult(rows=rows)


def get_synthesis_stats(result: SynthesisResult) -> dict[str, int]:
    """Count rows in total and per status."""
    stats = {"total": len(result.rows)}
    for status in ("common", "missing_a", "missing_b"):
        stats[status] = sum(1 for row in result.rows if row.status == status)
    return stats


def filter_synthesis_result(result: SynthesisResult, status: str | None) -> SynthesisResult:
    """Keep only rows with the given status; a missing or blank status keeps all."""
    if status is None or not status.strip():
        return SynthesisResult(rows=list(result.rows))
    wanted = status.lower()
    return SynthesisResult(rows=[row for row in result.rows if row.status.lower() == wanted])


def collect_missing_parts(
    result: SynthesisResult,
) -> tuple[list[SynthesisRow], list[SynthesisRow]]:
    """Return the rows missing from A and the rows missing from B."""
    missing_a = [row for row in result.rows if row.status == "missing_a"]
    missing_b = [row for row in result.rows if row.status == "missing_b"]
    return missing_a, missing_b


def save_synthesis_result(result: SynthesisResult, file_path: str | Path, format: str) -> str:
    """Save the result as 'csv' or 'txt'; return a confirmation message."""
    if format == "csv":
        csv_data = [list(_CSV_HEADER)]
        csv_data.extend(
            [row.part_number, row.model_a, row.model_b, status_text(row.status)]
            for row in result.rows
        )
        save_csv_file(csv_data, file_path, "utf-8")
    elif format == "txt":
        stats = get_synthesis_stats(result)
        lines = [
            "=== 代替合成部品表 ===\n\n",
            f"総部品数: {stats['total']}件\n",
            f"共通部品: {stats['common']}件\n",
            f"A欠品: {stats['missing_a']}件\n",
            f"B欠品: {stats['missing_b']}件\n\n",
            "=== 部品一覧 ===\n",
        ]
        lines.extend(
            f"{row.part_number} | {row.model_a} | {row.model_b} | {status_text(row.status)}\n"
            for row in result.rows
        )
        save_txt_file("".join(lines), file_path, "utf-8")
    else:
        raise ValueError("サポートされていないフォーマットです")
    return "合成結果を保存しました"