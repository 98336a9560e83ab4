"""Spreadsheet import service — turns an uploaded workbook into asset units.

Pipeline: Reconcile → Store source → Create batch → Submit rows → Done

The batch is best-effort: each row is submitted on its own and a failing
row becomes a warning instead of undoing rows that were already created.
"""

import logging
import mimetypes

from lablend.application.interfaces import (
    AssetRepository,
    ImageFetcher,
    ImportBatchRepository,
)
from lablend.domain.entities import (
    AssetUnit,
    EmbeddedImage,
    ImportBatch,
    ImportOutcome,
    ParsedRow,
)
from lablend.domain.exceptions import InvalidOperationError
from lablend.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage
from lablend.infrastructure.spreadsheet.reconciler import SpreadsheetReconciler
from lablend.infrastructure.storage.local_file_storage import LocalFileStorage

logger = logging.getLogger(__name__)
plog = PipelineLogger("AssetImportService")


class RowSubmissionFailed(Exception):
    """A single row could not be stored; collected as a warning."""

    def __init__(self, sheet_row: int, reason: str):
        self.sheet_row = sheet_row
        self.reason = reason
        super().__init__(f"Row {sheet_row}: {reason}")


class AssetImportService:
    """Application service that orchestrates spreadsheet imports."""

    def __init__(
        self,
        asset_repository: AssetRepository,
        import_batch_repository: ImportBatchRepository,
        file_storage: LocalFileStorage,
        reconciler: SpreadsheetReconciler | None = None,
        image_fetcher: ImageFetcher | None = None,
        max_image_bytes: int = 10 * 1024 * 1024,
    ):
        self._assets = asset_repository
        self._batches = import_batch_repository
        self._storage = file_storage
        self._reconciler = reconciler or SpreadsheetReconciler()
        self._image_fetcher = image_fetcher
        self._max_image_bytes = max_image_bytes

    async def import_workbook(
        self,
        content: bytes,
        filename: str,
        created_by: str,
        notes: str = "",
        sheet_name: str | None = None,
    ) -> ImportOutcome:
        """Import one workbook.

        Raises:
            MalformedArchiveError: If the workbook or target sheet is unreadable.
            InvalidOperationError: If no row has a description.
        """
        plog.separator(f"Import: {filename}")
        plog.step_start(PipelineStage.UPLOAD, f"Received workbook '{filename}'", size_bytes=len(content))

        with plog.timed_step(PipelineStage.RECONCILE, "Reconciling rows and embedded images"):
            result = self._reconciler.reconcile(content, sheet_name)

        plog.detail(
            f"Sheet '{result.sheet_name}'",
            parsed_rows=result.parsed_rows,
            valid_rows=len(result.rows),
            images=result.embedded_images_found,
            mapped=len(result.images_by_row_index),
        )
        if not result.rows:
            raise InvalidOperationError("No valid rows parsed")

        outcome = ImportOutcome(
            sheet_name=result.sheet_name,
            parsed_rows=result.parsed_rows,
            valid_units=len(result.rows),
            embedded_images_found=result.embedded_images_found,
            embedded_images_mapped=len(result.images_by_row_index),
        )

        outcome.import_batch_id = await self._create_batch(
            content, filename, created_by, notes, outcome.warnings
        )

        plog.step_start(PipelineStage.SUBMIT, f"Submitting {len(result.rows)} rows")
        for row in result.rows:
            try:
                unit = await self._submit_row(
                    row,
                    result.images_by_row_index.get(row.source_row_index),
                    outcome.import_batch_id,
                    outcome.warnings,
                )
            except Exception as exc:
                failure = RowSubmissionFailed(row.source_row_index + 2, str(exc))
                plog.step_error(PipelineStage.SUBMIT, str(failure), error=exc)
                outcome.warnings.append(f"Row {failure.sheet_row} submission failed: {exc}")
                continue
            outcome.created_ids.append(unit.id)

        plog.step_complete(
            PipelineStage.COMPLETE,
            f"Import of '{filename}' finished",
            created=len(outcome.created_ids),
            warnings=len(outcome.warnings),
        )
        return outcome

    async def list_batches(self, skip: int = 0, limit: int = 100) -> list[ImportBatch]:
        return await self._batches.get_all(skip=skip, limit=limit)

    # ── Pipeline steps ──────────────────────────────────────────────

    async def _create_batch(
        self,
        content: bytes,
        filename: str,
        created_by: str,
        notes: str,
        warnings: list[str],
    ) -> str | None:
        """Store the source file and record the batch; failure is only a warning."""
        try:
            stored = await self._storage.store_file(content, filename)
            plog.step_complete(PipelineStage.STORAGE, f"Stored source '{filename}'", path=stored.stored_path)
            batch = await self._batches.create(
                ImportBatch(
                    source_file_ref=stored.stored_path,
                    created_by=created_by,
                    notes=notes.strip(),
                )
            )
        except Exception as exc:
            plog.step_error(PipelineStage.STORAGE, "Import batch record creation failed", error=exc)
            warnings.append(f"Import batch record creation failed: {exc}")
            return None

        plog.detail("Import batch created", id=batch.id)
        return batch.id

    async def _submit_row(
        self,
        row: ParsedRow,
        embedded: EmbeddedImage | None,
        import_batch_id: str | None,
        warnings: list[str],
    ) -> AssetUnit:
        fields = dict(row.fields)
        image_url = fields.pop("image_url", None)

        unit = AssetUnit(group_key=row.group_key, import_ref=import_batch_id, **fields)
        unit.image_ref = await self._resolve_image(row, embedded, image_url, warnings)

        try:
            return await self._assets.create(unit)
        except Exception:
            if unit.image_ref:
                await self._storage.delete_file(unit.image_ref)
            raise

    async def _resolve_image(
        self,
        row: ParsedRow,
        embedded: EmbeddedImage | None,
        image_url: str | None,
        warnings: list[str],
    ) -> str | None:
        """Store the row's picture: embedded first, then the ``Image URL`` column."""
        sheet_row = row.source_row_index + 2

        if embedded is not None:
            if len(embedded.content) > self._max_image_bytes:
                warnings.append(f"Embedded image for row {sheet_row} exceeds size limit; skipped")
                return None
            stored = await self._storage.store_image(embedded.content, embedded.filename)
            return stored.stored_path

        if not image_url or self._image_fetcher is None or not self._image_fetcher.supports(image_url):
            return None

        try:
            fetched = await self._image_fetcher.fetch(image_url)
        except Exception as exc:
            plog.step_warning(PipelineStage.EXTRACT_IMAGES, f"Image URL for row {sheet_row} failed: {exc}")
            warnings.append(f"Failed to fetch image_url for row {sheet_row}")
            return None

        extension = mimetypes.guess_extension(fetched.mime_type) or ".jpg"
        stored = await self._storage.store_image(fetched.content, f"row_{sheet_row}{extension}")
        return stored.stored_path
