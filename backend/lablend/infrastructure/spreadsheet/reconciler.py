"""Spreadsheet import reconciler — rows, embedded images, and their association."""

import logging

from lablend.domain.entities import EmbeddedImage, ReconciliationResult
from lablend.domain.exceptions import MalformedArchiveError
from lablend.infrastructure.spreadsheet.row_parser import read_sheet_rows, rows_to_asset_payloads
from lablend.infrastructure.spreadsheet.xlsx_package import XlsxPackage

logger = logging.getLogger(__name__)


def associate_images(images: list[EmbeddedImage]) -> dict[int, EmbeddedImage]:
    """Map data-row index → first image anchored on that row.

    Anchor rows are 0-based with the header at 0, so the data-row index is
    ``anchor_row - 1``; header anchors are discarded. When several pictures
    sit on one row the first in parse order wins.
    """
    by_row: dict[int, EmbeddedImage] = {}
    for image in images:
        data_row_index = image.anchor_row - 1
        if data_row_index < 0:
            continue
        by_row.setdefault(data_row_index, image)
    return by_row


class SpreadsheetReconciler:
    """Parses one .xlsx archive into asset payloads plus a row → image map.

    Pure and synchronous: the input bytes are never mutated and each call
    returns a fresh result.
    """

    def reconcile(self, content: bytes, sheet_name: str | None = None) -> ReconciliationResult:
        """Reconcile a workbook.

        Args:
            content: Raw .xlsx bytes.
            sheet_name: Target sheet; defaults to the first sheet.

        Raises:
            MalformedArchiveError: If the workbook manifest or the target sheet
                cannot be read.
        """
        with XlsxPackage(content) as package:
            names = package.sheet_names()
            if not names:
                raise MalformedArchiveError("workbook lists no sheets")

            target = sheet_name or names[0]
            if target not in names:
                raise MalformedArchiveError(f"sheet '{target}' not found")

            raw_rows = read_sheet_rows(content, target)
            images = package.embedded_images(target)

        rows = rows_to_asset_payloads(raw_rows)
        images_by_row = associate_images(images)

        logger.info(
            "Reconciled sheet '%s': %d data rows, %d valid, %d images (%d mapped)",
            target, len(raw_rows), len(rows), len(images), len(images_by_row),
        )

        return ReconciliationResult(
            sheet_name=target,
            rows=rows,
            images_by_row_index=images_by_row,
            parsed_rows=len(raw_rows),
            embedded_images_found=len(images),
        )
