from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from bulk_ingest.registry import schema_for


SHEET_TITLES = {
    "offer": "Offers",
    "offer_request": "Offer Requests",
    "contact": "Contacts",
}


def template_headers(record_kind: str) -> list[str]:
    return [spec.label for spec in schema_for(record_kind).fields]


def emit_template(record_kind: str, *, include_example: bool = True) -> bytes:
    schema = schema_for(record_kind)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLES.get(schema.record_kind, schema.record_kind)

    sheet.append([spec.label for spec in schema.fields])
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    if include_example:
        sheet.append(["" if spec.example is None else spec.example for spec in schema.fields])

    for index, spec in enumerate(schema.fields, start=1):
        width = max(len(spec.label), len(str(spec.example or ""))) + 2
        sheet.column_dimensions[sheet.cell(row=1, column=index).column_letter].width = width
    sheet.freeze_panes = "A2"

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
