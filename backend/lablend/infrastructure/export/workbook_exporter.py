"""Asset inventory export — writes all units to an .xlsx workbook with openpyxl.

Column headers reuse the import header table so an exported file can be
re-imported; lending columns are appended after them.
"""

from io import BytesIO

from openpyxl import Workbook

from lablend.domain.entities import AssetUnit
from lablend.infrastructure.spreadsheet.row_parser import HEADER_FIELDS

_LENDING_COLUMNS = ("group_key", "current_holder", "status", "scrapped")
_EXPORTED_FIELDS = [
    (header, field_name)
    for header, (field_name, _) in HEADER_FIELDS.items()
    if field_name != "image_url"
]


class AssetWorkbookExporter:
    """Serialises asset units into a single-sheet workbook."""

    sheet_title = "Assets"

    def export(self, units: list[AssetUnit]) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = self.sheet_title

        ws.append([header for header, _ in _EXPORTED_FIELDS] + ["Asset name", *_LENDING_COLUMNS])

        for unit in units:
            descriptive = unit.descriptive_fields()
            descriptive["asset_description"] = unit.asset_description
            ws.append(
                [descriptive.get(field_name) for _, field_name in _EXPORTED_FIELDS]
                + [
                    unit.asset_name,
                    unit.group_key,
                    unit.current_holder or "",
                    unit.status.value,
                    unit.scrapped,
                ]
            )

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
