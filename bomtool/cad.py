"""Export of a BOM's part list to simple CAD-oriented text formats."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from .models import BomData

DEFAULT_CAD_DIR = Path("../sessions/cad")


class CadError(ValueError):
    """A CAD export could not be prepared or written."""


class CadFormat(Enum):
    PADS = "PADS"
    BD = "BD"
    PWS = "PWS"

    @classmethod
    def parse(cls, text: str) -> "CadFormat":
        """Accept a format name in any case, ignoring surrounding blanks."""
        name = text.strip().upper()
        try:
            return cls(name)
        except ValueError:
            raise CadError(f"未対応のCADフォーマットです: {name}") from None

    @property
    def default_extension(self) -> str:
        return self.value.lower()

    @property
    def display_name(self) -> str:
        return self.value


def _coerce_format(fmt: CadFormat | str) -> CadFormat:
    return fmt if isinstance(fmt, CadFormat) else CadFormat.parse(fmt)


def build_cad_output(fmt: CadFormat | str, bom: BomData) -> list[str]:
    """Return the lines of the export for the given format."""
    fmt = _coerce_format(fmt)
    if fmt is CadFormat.PADS:
        lines = ["!KYODEN BOM TOOL CAD EXPORT - PADS", "PART_NUMBER\tMODEL_NUMBER"]
        lines.extend(f"{row.part_number}\t{row.model_number}" for row in bom.rows)
    elif fmt is CadFormat.BD:
        lines = ["# Kyoden BOM Tool CAD Export (BD)", "PART_NUMBER,MODEL_NUMBER"]
        lines.extend(f"{row.part_number},{row.model_number}" for row in bom.rows)
    else:
        lines = ["# Kyoden BOM Tool CAD Export (PWS)", "[Component List]"]
        lines.extend(f"{row.part_number}={row.model_number}" for row in bom.rows)

    if bom.headers:
        lines.append("")
        lines.append("# Attributes")
        for row in bom.rows:
            if not row.attributes:
                continue
            attrs = ", ".join(f"{key}={value}" for key, value in row.attributes.items())
            lines.append(f"{row.part_number} => {attrs}")
    return lines


def _has_extension(path: Path) -> bool:
    return path.name.rfind(".") > 0


def determine_cad_output_path(
    fmt: CadFormat | str,
    provided: str | Path | None,
    base_dir: str | Path = DEFAULT_CAD_DIR,
) -> Path:
    """Choose the output path.

    A given path without an extension gets the format's one; with no path, a
    timestamped name under base_dir is used.
    """
    fmt = _coerce_format(fmt)
    if provided is not None:
        path = Path(provided)
        if path.name and not _has_extension(path):
            return path.with_name(f"{path.name}.{fmt.default_extension}")
        return path

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    file_name = f"cad_{fmt.display_name.lower()}_{timestamp}.{fmt.default_extension}"
    return Path(base_dir) / file_name


def generate_cad_file(
    fmt: CadFormat | str,
    bom: BomData,
    output_path: str | Path | None = None,
    base_dir: str | Path = DEFAULT_CAD_DIR,
) -> str:
    """Write the export and return the path it was written to."""
    fmt = _coerce_format(fmt)
    if not bom.rows:
        raise CadError("出力対象の部品表にデータがありません")

    content = "\n".join(build_cad_output(fmt, bom))
    target = determine_cad_output_path(fmt, output_path, base_dir)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CadError(f"出力ディレクトリを作成できません: {exc}") from exc
    try:
        target.write_bytes(content.encode("utf-8"))
    except OSError as exc:
        raise CadError(f"CADファイルの書き込みに失敗しました: {exc}") from exc
    return str(target)