import pytest

from bomtool.models import BomData, BomRow, SynthesisResult, SynthesisRow
from bomtool.synthesis import (
    collect_missing_parts,
    filter_synthesis_result,
    get_synthesis_stats,
    perform_synthesis,
    save_synthesis_result,
    status_text,
)


def bom_a():
    return BomData(
        headers=["部品番号", "型番"],
        rows=[BomRow("PART001", "MODEL001"), BomRow("PART002", "MODEL002")],
    )


def bom_b():
    return BomData(
        headers=["部品番号", "型番"],
        rows=[BomRow("PART001", "MODEL001"), BomRow("PART003", "MODEL003")],
    )


def find(result, part):
    return next(r for r in result.rows if r.part_number == part)


def test_perform_synthesis():
    result = perform_synthesis(bom_a(), bom_b())
    assert len(result.rows) == 3
    assert find(result, "PART001").status == "common"
    assert find(result, "PART002").status == "missing_b"
    assert find(result, "PART003").status == "missing_a"


def test_perform_synthesis_sorted_and_models():
    result = perform_synthesis(bom_b(), bom_a())
    assert [r.part_number for r in result.rows] == ["PART001", "PART002", "PART003"]
    part2 = find(result, "PART002")
    assert part2.model_a == ""
    assert part2.model_b == "MODEL002"


def test_get_synthesis_stats_empty():
    stats = get_synthesis_stats(SynthesisResult(rows=[]))
    assert stats["total"] == 0
    assert stats["common"] == 0


def test_get_synthesis_stats_counts():
    stats = get_synthesis_stats(perform_synthesis(bom_a(), bom_b()))
    assert stats == {"total": 3, "common": 1, "missing_a": 1, "missing_b": 1}


def test_filter_synthesis_result():
    row1 = SynthesisRow("PART001", "MODEL001", "MODEL001", "common")
    row2 = SynthesisRow("PART002", "MODEL002", "", "missing_b")
    result = SynthesisResult(rows=[row1, row2])
    filtered = filter_synthesis_result(result, "common")
    assert len(filtered.rows) == 1
    assert filtered.rows[0].part_number == "PART001"


@pytest.mark.parametrize("status", [None, "", "   "])
def test_filter_without_status_keeps_all(status):
    result = perform_synthesis(bom_a(), bom_b())
    assert filter_synthesis_result(result, status).rows == result.rows


def test_filter_ignores_case():
    result = perform_synthesis(bom_a(), bom_b())
    filtered = filter_synthesis_result(result, "MISSING_A")
    assert [r.part_number for r in filtered.rows] == ["PART003"]


def test_collect_missing_parts():
    missing_a, missing_b = collect_missing_parts(perform_synthesis(bom_a(), bom_b()))
    assert [r.part_number for r in missing_a] == ["PART003"]
    assert [r.part_number for r in missing_b] == ["PART002"]


def test_status_text():
    assert status_text("common") == "共通"
    assert status_text("missing_a") == "A欠品"
    assert status_text("missing_b") == "B欠品"
    assert status_text("other") == "不明"


def test_save_csv(tmp_path):
    path = tmp_path / "out.csv"
    message = save_synthesis_result(perform_synthesis(bom_a(), bom_b()), path, "csv")
    assert message == "合成結果を保存しました"
    data = path.read_bytes()
    assert data.startswith(b"\xef\xbb\xbf")
    lines = data[3:].decode("utf-8").splitlines()
    assert lines[0] == "部品番号,型番A,型番B,ステータス"
    assert "PART002,MODEL002,,B欠品" in lines
    assert len(lines) == 4


def test_save_txt(tmp_path):
    path = tmp_path / "out.txt"
    save_synthesis_result(perform_synthesis(bom_a(), bom_b()), path, "txt")
    text = path.read_text(encoding="utf-8")
    assert text.startswith("=== 代替合成部品表 ===\n\n")
    assert "総部品数: 3件\n" in text
    assert "PART001 | MODEL001 | MODEL001 | 共通\n" in text
    assert "PART003 |  | MODEL003 | A欠品\n" in text


def test_save_unsupported_format(tmp_path):
    with pytest.raises(ValueError):
        save_synthesis_result(SynthesisResult(), tmp_path / "x.bin", "xml")
    assert not (tmp_path / "x.bin").exists()