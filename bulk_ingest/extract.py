from io import BytesIO
import logging
import struct
from typing import Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
import xlrd
from xlrd.compdoc import CompDocError

from bulk_ingest.errors import EmptyFileError, UnreadableFileError
from bulk_ingest.schemas import RawRow


logger = logging.getLogger(__name__)

HEADER_ROW_NUMBER = 1

# Legacy .xls files are OLE2 compound documents.
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def _header_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace("\xa0", " ").strip()


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _read_xlsx_rows(file_bytes: bytes) -> list[tuple[Any, ...]]:
    try:
        workbook = load_workbook(BytesIO(file_bytes), read_only=True, data_only=True)
        try:
            if not workbook.sheetnames:
                raise EmptyFileError("Workbook has no sheets.")
            sheet = workbook[workbook.sheetnames[0]]
            # Read-only sheets parse their XML lazily, inside iter_rows.
            return [tuple(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()
    # ElementTree and lxml parse errors both subclass SyntaxError.
    except (BadZipFile, InvalidFileException, KeyError, OSError, ValueError, SyntaxError) as exc:
        raise UnreadableFileError(f"Could not read workbook: {exc}") from exc


def _xls_cell_value(cell: xlrd.sheet.Cell, datemode: int) -> Any:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(cell.value, datemode)
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
        return int(cell.value)
    return cell.value


def _read_xls_rows(file_bytes: bytes) -> list[tuple[Any, ...]]:
    try:
        book = xlrd.open_workbook(file_contents=file_bytes, on_demand=True)
        try:
            if book.nsheets == 0:
                raise EmptyFileError("Workbook has no sheets.")
            sheet = book.sheet_by_index(0)
            return [
                tuple(_xls_cell_value(cell, book.datemode) for cell in sheet.row(index))
                for index in range(sheet.nrows)
            ]
        finally:
            book.release_resources()
    except (xlrd.XLRDError, CompDocError, struct.error, IndexError, ValueError) as exc:
        raise UnreadableFileError(f"Could not read legacy workbook: {exc}") from exc


def _read_first_sheet(file_bytes: bytes) -> list[tuple[Any, ...]]:
    if not file_bytes:
        raise EmptyFileError("Uploaded file is empty.")
    if file_bytes.startswith(OLE2_SIGNATURE):
        return _read_xls_rows(file_bytes)
    return _read_xlsx_rows(file_bytes)


def _header_columns(header_row: tuple[Any, ...]) -> list[tuple[int, str]]:
    columns: list[tuple[int, str]] = []
    seen: set[str] = set()
    for index, value in enumerate(header_row):
        header = _header_text(value)
        if not header:
            continue
        if header in seen:
            logger.warning("duplicate header ignored", extra={"header": header, "column": index + 1})
            continue
        seen.add(header)
        columns.append((index, header))
    return columns


def read_headers(file_bytes: bytes) -> list[str]:
    rows = _read_first_sheet(file_bytes)
    if not rows:
        raise EmptyFileError("Sheet has no header row.")
    return [header for _, header in _header_columns(rows[0])]


def extract_rows(file_bytes: bytes) -> list[RawRow]:
    rows = _read_first_sheet(file_bytes)
    if not rows:
        raise EmptyFileError("Sheet has no header row.")

    columns = _header_columns(rows[0])
    if not columns:
        raise EmptyFileError("Sheet has no header row.")

    extracted: list[RawRow] = []
    for row_number, row in enumerate(rows[1:], start=HEADER_ROW_NUMBER + 1):
        if all(_is_blank(value) for value in row):
            continue
        cells = {header: (row[index] if index < len(row) else None) for index, header in columns}
        extracted.append(RawRow(row_number=row_number, cells=cells))

    if not extracted:
        raise EmptyFileError("Sheet has a header row but no data rows.")

    logger.debug("rows extracted", extra={"row_count": len(extracted), "column_count": len(columns)})
    return extracted
