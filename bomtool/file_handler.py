"""Reading and writing of dictionaries, CSV/TXT exports and CAD part lists."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from .models import BomData

_UTF8_BOM = b"\xef\xbb\xbf"
_GENERATOR_LINE = "# Generated by Kyoden BOM Tool\n"


def _encode(text: str, encoding: str) -> bytes:
    if encoding.lower() == "shift-jis":
        return text.encode("cp932", errors="xmlcharrefreplace")
    return text.encode("utf-8")


def save_dictionary(bom_data: BomData, file_path: str | Path) -> None:
    """Write a part-number to model-number mapping as pretty JSON."""
    dictionary = {row.part_number: row.model_number for row in bom_data.rows}
    Path(file_path).write_text(
        json.dumps(dictionary, indent=2, ensure_ascii=False), encoding="utf-8"
    )


def load_dictionary(file_path: str | Path) -> dict[str, str]:
    """Read a mapping written by save_dictionary; a missing file gives an empty one."""
    path = Path(file_path)
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise ValueError("dictionary file must map strings to strings")
    return data


def get_current_date_string() -> str:
    """Today's local date as YYYYMMDD."""
    return datetime.now().strftime("%Y%m%d")


def add_timestamp_to_filename(file_path: str | Path, prefix: str) -> str:
    """Return the path with its name turned into '<prefix>_<date>_<stem>.<ext>'."""
    path = Path(file_path)
    parent = path.parent
    stem = path.stem if path.name else "file"
    extension = path.suffix[1:] if path.suffix else ""
    filename = f"{prefix}_{get_current_date_string()}_{stem}"
    return str(parent / f"{filename}.{extension}")


def save_csv_file(data: list[list[str]], file_path: str | Path, encoding: str) -> None:
    """Write rows joined by commas; UTF-8 output starts with a byte-order mark."""
    with open(file_path, "wb") as fh:
        if encoding.lower() == "utf-8":
            fh.write(_UTF8_BOM)
        for row in data:
            fh.write(_encode(",".join(row) + "\n", encoding))


def save_txt_file(content: str, file_path: str | Path, encoding: str) -> None:
    """Write text in UTF-8 or Shift_JIS."""
    Path(file_path).write_bytes(_encode(content, encoding))


def save_parts_saver_format(bom_data: BomData, file_path: str | Path) -> None:
    """Write the ALL.csv layout: header row, then each row followed by a blank one."""
    blank = [""] * len(bom_data.headers)
    csv_data = [list(bom_data.headers)]
    for row in bom_data.rows:
        csv_data.append([row.attributes.get(h, "") for h in bom_data.headers])
        csv_data.append(list(blank))
    save_csv_file(csv_data, file_path, "utf-8")


def _save_part_list(bom_data: BomData, file_path: str | Path, name: str, line_format: str) -> None:
    header = (
        f"# {name} format\n"
        f"{_GENERATOR_LINE}"
        f"# Date: {get_current_date_string()}\n"
        "\n"
    )
    body = "".join(
        line_format.format(part=row.part_number, model=row.model_number) + "\n"
        for row in bom_data.rows
    )
    save_txt_file(header + body, file_path, "utf-8")


def save_part_eco_format(bom_data: BomData, file_path: str | Path) -> None:
    """Write the partECO list: 'part;model' per line."""
    _save_part_list(bom_data, file_path, "partECO", "{part};{model}")


def save_part_ccf_format(bom_data: BomData, file_path: str | Path) -> None:
    """Write the partCCF list: 'CCF:part:model' per line."""
    _save_part_list(bom_data, file_path, "partCCF", "CCF:{part}:{model}")


def save_part_msf_format(bom_data: BomData, file_path: str | Path) -> None:
    """Write the partMSF list: 'MSF:part:model' per line."""
    _save_part_list(bom_data, file_path, "partMSF", "MSF:{part}:{model}")