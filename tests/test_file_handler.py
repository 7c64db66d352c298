import json
from pathlib import Path

import pytest

from bomtool.file_handler import (
    add_timestamp_to_filename,
    get_current_date_string,
    load_dictionary,
    save_csv_file,
    save_dictionary,
    save_part_ccf_format,
    save_part_eco_format,
    save_part_msf_format,
    save_parts_saver_format,
    save_txt_file,
)
from bomtool.models import BomData, BomRow


@pytest.fixture
def bom():
    return BomData(
        headers=["部品番号", "型番"],
        rows=[
            BomRow("PART001", "MODEL001", {"部品番号": "PART001", "型番": "MODEL001"}),
            BomRow("PART002", "MODEL002", {"部品番号": "PART002"}),
        ],
    )


def test_get_current_date_string():
    date_str = get_current_date_string()
    assert len(date_str) == 8
    assert date_str.isdigit()


def test_add_timestamp_to_filename():
    result = add_timestamp_to_filename("/path/to/file.csv", "comparison")
    assert "comparison_" in result
    assert "file.csv" in result


def test_add_timestamp_to_filename_layout():
    result = add_timestamp_to_filename("/path/to/file.csv", "comparison")
    expected = Path("/path/to") / f"comparison_{get_current_date_string()}_file.csv"
    assert result == str(expected)


def test_add_timestamp_keeps_trailing_dot_without_extension():
    result = add_timestamp_to_filename("report", "synthesis")
    assert result == f"synthesis_{get_current_date_string()}_report."


def test_dictionary_round_trip(tmp_path, bom):
    path = tmp_path / "dict.json"
    save_dictionary(bom, path)
    assert load_dictionary(path) == {"PART001": "MODEL001", "PART002": "MODEL002"}


def test_load_dictionary_missing_file(tmp_path):
    assert load_dictionary(tmp_path / "none.json") == {}


def test_load_dictionary_rejects_non_string_values(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"P": 1}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_dictionary(path)


def test_load_dictionary_rejects_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_dictionary(path)


def test_save_csv_utf8_has_bom(tmp_path):
    path = tmp_path / "out.csv"
    save_csv_file([["a", "b"], ["1", "2"]], path, "UTF-8")
    raw = path.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")
    assert raw[3:].decode("utf-8") == "a,b\n1,2\n"


def test_save_csv_shift_jis(tmp_path):
    path = tmp_path / "out.csv"
    save_csv_file([["部品番号", "型番"]], path, "Shift-JIS")
    raw = path.read_bytes()
    assert not raw.startswith(b"\xef\xbb\xbf")
    assert raw.decode("cp932") == "部品番号,型番\n"


def test_save_txt_unknown_encoding_falls_back_to_utf8(tmp_path):
    path = tmp_path / "out.txt"
    save_txt_file("共通", path, "latin-1")
    assert path.read_bytes() == "共通".encode("utf-8")


def test_save_txt_shift_jis_replaces_unmappable(tmp_path):
    path = tmp_path / "out.txt"
    save_txt_file("A\U0001F600", path, "shift-jis")
    assert path.read_bytes() == b"A&#128512;"


def test_parts_saver_format(tmp_path, bom):
    path = tmp_path / "ALL.csv"
    save_parts_saver_format(bom, path)
    text = path.read_bytes()[3:].decode("utf-8")
    assert text.splitlines() == [
        "部品番号,型番",
        "PART001,MODEL001",
        ",",
        "PART002,",
        ",",
    ]


@pytest.mark.parametrize(
    "writer,name,first_line",
    [
        (save_part_eco_format, "partECO", "PART001;MODEL001"),
        (save_part_ccf_format, "partCCF", "CCF:PART001:MODEL001"),
        (save_part_msf_format, "partMSF", "MSF:PART001:MODEL001"),
    ],
)
def test_part_list_formats(tmp_path, bom, writer, name, first_line):
    path = tmp_path / "out.txt"
    writer(bom, path)
    lines = path.read_text(encoding="utf-8").split("\n")
    assert lines[0] == f"# {name} format"
    assert lines[1] == "# Generated by Kyoden BOM Tool"
    assert lines[2] == f"# Date: {get_current_date_string()}"
    assert lines[3] == ""
    assert lines[4] == first_line
    assert len(lines) == 7
    assert lines[-1] == ""