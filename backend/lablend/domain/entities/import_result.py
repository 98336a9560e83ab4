"""Domain values produced by the spreadsheet import pipeline."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EmbeddedImage:
    """A raster picture anchored in a sheet's drawing layer."""

    anchor_row: int      # 0-based, header row is 0
    anchor_col: int
    filename: str
    content: bytes


@dataclass
class ParsedRow:
    """A valid data row ready to become an AssetUnit creation payload."""

    source_row_index: int          # 0-based data-row position (sheet row - 1)
    group_key: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class ReconciliationResult:
    """Rows of the target sheet plus the row → image association."""

    sheet_name: str
    rows: list[ParsedRow]
    images_by_row_index: dict[int, EmbeddedImage]
    parsed_rows: int = 0
    embedded_images_found: int = 0


@dataclass
class ImportOutcome:
    """Summary of a best-effort import; failures are collected as warnings."""

    sheet_name: str
    parsed_rows: int
    valid_units: int
    embedded_images_found: int
    embedded_images_mapped: int
    import_batch_id: str | None = None
    created_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
