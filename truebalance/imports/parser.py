"""
Import File Parser

Reads CSV, XLS and XLSX uploads into rows of strings with pandas.

DESIGN DECISION: Every cell is read as a string (dtype=str, blanks as "").
Interpreting "1.234,56" or "05/01/2024" is the job of the pt-BR normalizers;
letting pandas guess types would turn Brazilian decimals into garbage.
"""

from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

import pandas as pd
import structlog

from truebalance.config import ImportSettings, get_settings
from truebalance.exceptions import FileValidationError
from truebalance.models.imports import EntityKind


logger = structlog.get_logger(__name__)

Source = Union[str, Path, BinaryIO]

UNIFIED_SHEETS = {
    "Contas": EntityKind.BILL,
    "Cartões de Crédito": EntityKind.CREDIT_CARD,
    "Faturas": EntityKind.INVOICE,
}

EXCEL_ENGINES = {
    "xlsx": "openpyxl",
    "xls": "xlrd",
}


def file_extension(filename: str) -> str:
    return Path(filename).suffix.lstrip(".").lower()


def validate_file(
    filename: str,
    size_bytes: int,
    settings: Optional[ImportSettings] = None,
) -> str:
    """
    Check extension and size of an upload.

    Returns:
        The lowercase extension

    Raises:
        FileValidationError: Unsupported format or file too large
    """
    settings = settings or get_settings().imports
    extension = file_extension(filename)

    if extension not in settings.supported_formats_list:
        formats = ", ".join(f.upper() for f in settings.supported_formats_list)
        raise FileValidationError(f"Formato de arquivo inválido. Use {formats}")

    if size_bytes > settings.max_file_size_bytes:
        raise FileValidationError(
            f"Arquivo muito grande. Tamanho máximo: {settings.max_file_size_mb}MB. "
            f"Tamanho do arquivo: {size_bytes / 1024 / 1024:.2f}MB"
        )

    return extension


def parse_import_file(source: Source, filename: str) -> list[dict[str, Any]]:
    """
    Read the first sheet (or the CSV) into a list of row dicts.

    Args:
        source: Path or binary buffer
        filename: Original file name; its extension selects the reader

    Raises:
        FileValidationError: The file could not be parsed
    """
    extension = file_extension(filename)
    try:
        if extension == "csv":
            frame = _read_csv(source)
        else:
            frame = pd.read_excel(
                source,
                sheet_name=0,
                dtype=str,
                keep_default_na=False,
                engine=EXCEL_ENGINES.get(extension),
            )
    except pd.errors.EmptyDataError:
        return []
    except Exception as e:
        raise FileValidationError("Erro ao fazer parse do arquivo") from e

    rows = _frame_to_rows(frame)
    logger.info("import_file_parsed", filename=filename, rows=len(rows))
    return rows


def parse_unified_workbook(source: Source, filename: str) -> dict[EntityKind, list[dict[str, Any]]]:
    """
    Read the Contas, Cartões de Crédito and Faturas sheets of a workbook.

    Missing sheets yield empty lists. Other sheets are ignored.

    Raises:
        FileValidationError: Not a workbook, or unreadable
    """
    extension = file_extension(filename)
    if extension not in EXCEL_ENGINES:
        raise FileValidationError("Importação unificada requer arquivo XLS ou XLSX")

    try:
        sheets = pd.read_excel(
            source,
            sheet_name=None,
            dtype=str,
            keep_default_na=False,
            engine=EXCEL_ENGINES[extension],
        )
    except Exception as e:
        raise FileValidationError("Erro ao fazer parse do arquivo") from e

    result = {kind: [] for kind in EntityKind}
    for sheet_name, frame in sheets.items():
        kind = UNIFIED_SHEETS.get(str(sheet_name).strip())
        if kind is None:
            continue
        result[kind] = _frame_to_rows(frame)

    logger.info(
        "unified_workbook_parsed",
        filename=filename,
        **{kind.value: len(rows) for kind, rows in result.items()},
    )
    return result


def _read_csv(source: Source) -> pd.DataFrame:
    # sep=None sniffs comma vs semicolon exports
    return pd.read_csv(
        source,
        sep=None,
        engine="python",
        dtype=str,
        keep_default_na=False,
        encoding="utf-8-sig",
    )


def _frame_to_rows(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """Strip header whitespace and drop rows where every cell is blank."""
    frame = frame.rename(columns=lambda c: str(c).strip()).fillna("")
    if frame.empty:
        return []
    frame = frame[(frame != "").any(axis=1)]
    return frame.to_dict(orient="records")
