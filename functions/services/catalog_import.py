"""Excel import of catalog records using openpyxl.

The first sheet is read; the first row holding a recognizable column header
is the header row. Header names are matched case- and accent-insensitively
against the Spanish and English names analysts use in their spreadsheets.
"""

import io
import re
from typing import Any, Dict, List, Optional, Sequence

import openpyxl
import structlog

from config.errors import CosteoError, ErrorCode
from models.catalog import MaterialRecord, ProfessionalRecord
from services.catalog_search import normalize_text
from services.numeric import coerce_number

logger = structlog.get_logger()

HEADER_SCAN_ROWS = 20

PROFESSIONAL_COLUMNS: Dict[str, Sequence[str]] = {
    "role": ("perfil", "cargo", "rol", "role", "profile"),
    "monthly_value": ("valor mensual", "salario", "tarifa", "monthly value", "valor"),
    "seniority": ("experiencia", "anos", "seniority", "anos de experiencia"),
    "notes": ("notas", "observaciones", "notes"),
}

MATERIAL_COLUMNS: Dict[str, Sequence[str]] = {
    "name": ("item", "material", "nombre", "descripcion", "name"),
    "unit": ("unidad", "unit", "um"),
    "unit_price": ("valor unitario", "precio", "precio unitario", "unit price", "valor"),
    "category": ("tipo", "categoria", "category"),
    "notes": ("notas", "observaciones", "notes"),
}


class CatalogImportError(CosteoError):
    """The spreadsheet could not be read or has no usable header."""

    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code=ErrorCode.IMPORT_FAILED, message=message, details=details)


def parse_money(value: Any) -> float:
    """Parse a spreadsheet money cell ("$ 5.000.000", 5000000, "4,500,000.50")."""
    if isinstance(value, (int, float)):
        return coerce_number(value, 0.0, 1e12, 0.0)
    text = re.sub(r"[^\d.,-]", "", str(value or ""))
    if not text:
        return 0.0
    # Thousands separators: drop every separator except a trailing decimal part
    if text.count(",") + text.count(".") > 1 or re.search(r"[.,]\d{3}$", text):
        text = re.sub(r"[.,](?=\d{3}(\D|$))", "", text)
    return coerce_number(text.replace(",", "."), 0.0, 1e12, 0.0)


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _map_header(row: Sequence[Any], columns: Dict[str, Sequence[str]]) -> Dict[str, int]:
    """Column index per field for a candidate header row."""
    mapping: Dict[str, int] = {}
    for index, cell in enumerate(row):
        header = normalize_text(_cell_text(cell))
        if not header:
            continue
        for field_name, names in columns.items():
            if field_name not in mapping and header in names:
                mapping[field_name] = index
                break
    return mapping


def read_rows(file_bytes: bytes, columns: Dict[str, Sequence[str]], key_field: str) -> List[Dict[str, Any]]:
    """Read the first sheet into dicts keyed by field name.

    Args:
        file_bytes: .xlsx content.
        columns: Accepted header names per field.
        key_field: Field that must be mapped; rows where it is blank are skipped.

    Returns:
        One dict per data row.

    Raises:
        CatalogImportError: Unreadable file or no header with key_field.
    """
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
    except Exception as e:
        raise CatalogImportError(f"Could not read Excel file: {e}") from e

    try:
        worksheet = workbook[workbook.sheetnames[0]]
        rows = list(worksheet.iter_rows(values_only=True))
    finally:
        workbook.close()

    header_index = None
    mapping: Dict[str, int] = {}
    for index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        mapping = _map_header(row, columns)
        if key_field in mapping:
            header_index = index
            break

    if header_index is None:
        raise CatalogImportError(
            "No header row found",
            details={"expected_any_of": list(columns[key_field])}
        )

    records = []
    for row in rows[header_index + 1:]:
        values = {
            name: (row[col] if col < len(row) else None)
            for name, col in mapping.items()
        }
        if not _cell_text(values.get(key_field)):
            continue
        records.append(values)
    return records


def import_professionals(file_bytes: bytes) -> List[ProfessionalRecord]:
    """Parse a professionals spreadsheet into catalog records."""
    rows = read_rows(file_bytes, PROFESSIONAL_COLUMNS, "role")
    records = [
        ProfessionalRecord(
            role=_cell_text(row.get("role")),
            monthly_value=parse_money(row.get("monthly_value")),
            seniority=_cell_text(row.get("seniority")),
            notes=_cell_text(row.get("notes")),
        )
        for row in rows
    ]
    logger.info("professionals_imported", count=len(records))
    return records


def import_materials(file_bytes: bytes) -> List[MaterialRecord]:
    """Parse a materials spreadsheet into catalog records."""
    rows = read_rows(file_bytes, MATERIAL_COLUMNS, "name")
    records = [
        MaterialRecord(
            name=_cell_text(row.get("name")),
            unit=_cell_text(row.get("unit")),
            unit_price=parse_money(row.get("unit_price")),
            category=_cell_text(row.get("category")),
            notes=_cell_text(row.get("notes")),
        )
        for row in rows
    ]
    logger.info("materials_imported", count=len(records))
    return records
