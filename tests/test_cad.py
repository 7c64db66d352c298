import re
from pathlib import Path

import pytest

from bomtool.cad import (
    CadError,
    CadFormat,
    build_cad_output,
    determine_cad_output_path,
    generate_cad_file,
)
from bomtool.models import BomData, BomRow


def _bom(headers=None, attributes=None):
    return BomData(
        headers=headers if headers is not None else [],
        rows=[
            BomRow(part_number="R1", model_number="RES-10K", attributes=attributes or {}),
            BomRow(part_number="C1", model_number="CAP-1U"),
        ],
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("PADS", CadFormat.PADS),
        ("  pads ", CadFormat.PADS),
        ("bd", CadFormat.BD),
        ("Pws", CadFormat.PWS),
    ],
)
def test_parse_accepts_known_formats(text, expected):
    assert CadFormat.parse(text) is expected


def test_parse_rejects_unknown_format():
    with pytest.raises(CadError, match="未対応のCADフォーマットです: DXF"):
        CadFormat.parse(" dxf ")


def test_format_extension_and_display_name(tmp_path):
    assert CadFormat.parse("pads").default_extension == "pads"
    assert CadFormat.parse("bd").display_name == "BD"
    result = determine_cad_output_path(CadFormat.parse("pws"), tmp_path / "board", tmp_path)
    assert result.suffix == ".pws"


def test_pads_output_lines():
    lines = build_cad_output(CadFormat.PADS, _bom())
    assert lines == [
        "!KYODEN BOM TOOL CAD EXPORT - PADS",
        "PART_NUMBER\tMODEL_NUMBER",
        "R1\tRES-10K",
        "C1\tCAP-1U",
    ]


def test_bd_output_lines():
    lines = build_cad_output("bd", _bom())
    assert lines == [
        "# Kyoden BOM Tool CAD Export (BD)",
        "PART_NUMBER,MODEL_NUMBER",
        "R1,RES-10K",
        "C1,CAP-1U",
    ]


def test_pws_output_lines():
    lines = build_cad_output(CadFormat.PWS, _bom())
    assert lines == [
        "# Kyoden BOM Tool CAD Export (PWS)",
        "[Component List]",
        "R1=RES-10K",
        "C1=CAP-1U",
    ]


def test_attributes_section_skips_rows_without_attributes():
    bom = _bom(headers=["ref", "value"], attributes={"ref": "R1", "value": "10k"})
    lines = build_cad_output(CadFormat.BD, bom)
    assert lines[4:] == ["", "# Attributes", "R1 => ref=R1, value=10k"]


def test_no_attributes_section_without_headers():
    bom = _bom(attributes={"ref": "R1"})
    lines = build_cad_output(CadFormat.BD, bom)
    assert "# Attributes" not in lines
    assert len(lines) == 2 + len(bom.rows)


def test_provided_path_without_extension_gets_default(tmp_path):
    result = determine_cad_output_path(CadFormat.PWS, tmp_path / "out", tmp_path)
    assert result == tmp_path / "out.pws"


def test_provided_path_with_extension_is_kept(tmp_path):
    result = determine_cad_output_path(CadFormat.PADS, tmp_path / "out.txt", tmp_path)
    assert result == tmp_path / "out.txt"


def test_default_path_is_timestamped_under_base_dir(tmp_path):
    result = determine_cad_output_path(CadFormat.PADS, None, tmp_path)
    assert result.parent == tmp_path
    assert re.fullmatch(r"cad_pads_\d{8}_\d{6}\.pads", result.name)


def test_generate_writes_joined_lines(tmp_path):
    bom = _bom()
    target = tmp_path / "nested" / "export"
    written = generate_cad_file("BD", bom, str(target), tmp_path)
    assert written == str(tmp_path / "nested" / "export.bd")
    content = Path(written).read_text(encoding="utf-8")
    assert content == "\n".join(build_cad_output(CadFormat.BD, bom))


def test_generate_uses_base_dir_when_no_path(tmp_path):
    written = generate_cad_file(CadFormat.PWS, _bom(), None, tmp_path / "cad")
    path = Path(written)
    assert path.parent == tmp_path / "cad"
    assert path.read_text(encoding="utf-8").splitlines()[1] == "[Component List]"


def test_generate_rejects_empty_bom(tmp_path):
    with pytest.raises(CadError, match="出力対象の部品表にデータがありません"):
        generate_cad_file(CadFormat.PADS, BomData(), tmp_path / "x", tmp_path)
    assert list(tmp_path.iterdir()) == []


def test_generate_rejects_unknown_format(tmp_path):
    with pytest.raises(CadError):
        generate_cad_file("step", _bom(), tmp_path / "x", tmp_path)