"""Sheet row parsing — header mapping and cell type coercion for asset imports.

The first row of the sheet holds column headers; every following row is a
data row. Data-row index 0 is sheet row 2, which is what drawing anchors
(0-based, header at 0) are reconciled against.
"""

import logging
import math
from collections.abc import Callable
from datetime import date, datetime, time
from io import BytesIO
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel

from lablend.domain.entities import ParsedRow, normalize_group_key
from lablend.domain.exceptions import MalformedArchiveError

logger = logging.getLogger(__name__)

RawRow = dict[str, Any]

_TRUE_TOKENS = frozenset({"y", "yes", "true", "1", "是", "固定资产"})
_FALSE_TOKENS = frozenset({"n", "no", "false", "0", "否", "非固定资产"})
_DATE_FORMATS = ("%Y/%m/%d", "%Y.%m.%d", "%Y年%m月%d日", "%d/%m/%Y")


# ── Cell coercion ────────────────────────────────────────────────────

def as_string(value: Any) -> str | None:
    """Trimmed text, or None for empty cells."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, datetime):
        return _format_datetime(value)
    elif isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def as_number(value: Any) -> float | int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    text = as_string(value)
    if text is None:
        return None
    try:
        number = float(text.replace(",", ""))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def as_bool(value: Any) -> bool | None:
    """Map yes/no style tokens (English and Chinese) to booleans.

    Unrecognised text is absent rather than False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    text = as_string(value)
    if text is None:
        return None
    token = text.lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return None


def as_date_iso(value: Any) -> str | None:
    """Normalise a date cell to ISO-8601.

    Accepts native datetimes (date-formatted cells), Excel serial numbers and
    date-like text. Midnight values collapse to a plain ``YYYY-MM-DD``.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        try:
            converted = from_excel(value)
        except (OverflowError, ValueError):
            return None
        if isinstance(converted, datetime):
            return _format_datetime(converted)
        if isinstance(converted, date):
            return converted.isoformat()
        return None

    text = as_string(value)
    if text is None:
        return None
    try:
        return _format_datetime(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return _format_datetime(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def _format_datetime(value: datetime) -> str:
    if value.time() == time(0, 0) and value.tzinfo is None:
        return value.date().isoformat()
    return value.isoformat()


# ── Header → field table ─────────────────────────────────────────────

HEADER_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "Is Fixed Assets": ("is_fixed_assets", as_bool),
    "Category": ("category", as_string),
    "Asset description": ("asset_description", as_string),
    "Serial No": ("serial_no", as_string),
    "location": ("location", as_string),
    "user": ("excel_user", as_string),
    "Manufacturer": ("manufacturer", as_string),
    "Value (CNY)": ("value_cny", as_number),
    "Commissioning Time": ("commissioning_time", as_date_iso),
    "Metrology Validity Period": ("metrology_validity_period", as_date_iso),
    "Metrology Requirement": ("metrology_requirement", as_string),
    "Metrology Cost": ("metrology_cost", as_number),
    "Remarks": ("remarks", as_string),
    "Image URL": ("image_url", as_string),
}

_HEADER_LOOKUP = {header.casefold(): spec for header, spec in HEADER_FIELDS.items()}


def map_row(raw: RawRow) -> dict[str, Any]:
    """Map recognised headers to typed fields; absent values are omitted."""
    fields: dict[str, Any] = {}
    for header, value in raw.items():
        spec = _HEADER_LOOKUP.get(header.strip().casefold())
        if spec is None:
            continue
        field_name, coerce = spec
        coerced = coerce(value)
        if coerced is not None:
            fields[field_name] = coerced
    return fields


def rows_to_asset_payloads(raw_rows: list[RawRow]) -> list[ParsedRow]:
    """Turn raw sheet rows into creation payloads, dropping rows without a description.

    Each kept row remembers its data-row position so embedded images can be
    associated with it.
    """
    parsed: list[ParsedRow] = []
    for data_row_index, raw in enumerate(raw_rows):
        fields = map_row(raw)
        description = (fields.get("asset_description") or "").strip()
        if not description:
            continue
        fields["asset_description"] = description
        parsed.append(
            ParsedRow(
                source_row_index=data_row_index,
                group_key=normalize_group_key(description),
                fields=fields,
            )
        )
    return parsed


# ── Sheet reading ────────────────────────────────────────────────────

def read_sheet_rows(content: bytes, sheet_name: str) -> list[RawRow]:
    """Read a sheet as header → value dicts using openpyxl.

    Raises:
        MalformedArchiveError: If openpyxl cannot load the workbook or the sheet.
    """
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise MalformedArchiveError(f"workbook could not be loaded ({exc})") from exc

    try:
        if sheet_name not in wb.sheetnames:
            raise MalformedArchiveError(f"sheet '{sheet_name}' not found")
        ws = wb[sheet_name]

        rows_iter = ws.iter_rows(values_only=True)
        header_row = next(rows_iter, None)
        if header_row is None:
            return []
        headers = [as_string(h) or "" for h in header_row]

        rows: list[RawRow] = []
        for values in rows_iter:
            rows.append(
                {
                    header: value
                    for header, value in zip(headers, values)
                    if header
                }
            )
    finally:
        wb.close()

    logger.debug("Read %d data rows from sheet '%s'", len(rows), sheet_name)
    return rows
