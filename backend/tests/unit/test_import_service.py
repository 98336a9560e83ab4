"""Unit tests for the AssetImportService pipeline."""

from pathlib import Path

import httpx
import pytest

from lablend.application.interfaces import AssetRepository, ImportBatchRepository
from lablend.application.services import AssetImportService
from lablend.domain.entities import AssetUnit, ImportBatch
from lablend.domain.exceptions import InvalidOperationError, MalformedArchiveError
from lablend.infrastructure.http import HttpxImageFetcher
from lablend.infrastructure.storage.local_file_storage import LocalFileStorage


class FakeAssetRepository(AssetRepository):
    """Keeps created units in memory; descriptions in ``reject`` fail to persist."""

    def __init__(self, reject: set[str] | None = None):
        self.units: list[AssetUnit] = []
        self._reject = reject or set()

    async def get_by_id(self, unit_id):
        return next((u for u in self.units if u.id == unit_id), None)

    async def get_all(self, *, group_key=None, holder=None, include_scrapped=False):
        return list(self.units)

    async def create(self, unit: AssetUnit) -> AssetUnit:
        if unit.asset_description in self._reject:
            raise ValueError("value too long for column")
        self.units.append(unit)
        return unit

    async def update(self, unit):
        return unit

    async def delete(self, unit_id):
        return False

    async def mark_scrapped(self, unit_id):
        return False


class FakeImportBatchRepository(ImportBatchRepository):

    def __init__(self, fail: bool = False):
        self.batches: list[ImportBatch] = []
        self._fail = fail

    async def create(self, batch: ImportBatch) -> ImportBatch:
        if self._fail:
            raise RuntimeError("asset_imports table is read-only")
        self.batches.append(batch)
        return batch

    async def get_by_id(self, batch_id):
        return next((b for b in self.batches if b.id == batch_id), None)

    async def get_all(self, skip: int = 0, limit: int = 100):
        return self.batches[skip : skip + limit]


def _image_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/missing.png":
        return httpx.Response(404)
    return httpx.Response(200, content=b"remote-image", headers={"content-type": "image/png"})


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(upload_dir=str(tmp_path / "uploads"))


@pytest.fixture
def assets() -> FakeAssetRepository:
    return FakeAssetRepository()


@pytest.fixture
def batches() -> FakeImportBatchRepository:
    return FakeImportBatchRepository()


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient(transport=httpx.MockTransport(_image_handler)) as client:
        yield client


@pytest.fixture
def service(assets, batches, storage, http_client) -> AssetImportService:
    return AssetImportService(
        asset_repository=assets,
        import_batch_repository=batches,
        file_storage=storage,
        image_fetcher=HttpxImageFetcher(http_client=http_client),
        max_image_bytes=1024,
    )


@pytest.mark.asyncio
async def test_import_creates_units_with_embedded_image(
    service, assets, batches, make_xlsx, asset_row, png_bytes
):
    content = make_xlsx(
        [asset_row("Multimeter"), asset_row("Oscilloscope"), asset_row("Multimeter")],
        images=[(2, 0, png_bytes)],
    )

    outcome = await service.import_workbook(content, "lab.xlsx", created_by="admin-1", notes=" Q1 ")

    assert outcome.sheet_name == "Assets"
    assert (outcome.parsed_rows, outcome.valid_units) == (3, 3)
    assert (outcome.embedded_images_found, outcome.embedded_images_mapped) == (1, 1)
    assert outcome.warnings == []
    assert outcome.created_ids == [u.id for u in assets.units]

    [batch] = batches.batches
    assert outcome.import_batch_id == batch.id
    assert batch.created_by == "admin-1"
    assert batch.notes == "Q1"
    assert Path(batch.source_file_ref).read_bytes() == content

    multimeter, scope, second_multimeter = assets.units
    assert multimeter.image_ref is None
    assert Path(scope.image_ref).read_bytes() == png_bytes
    assert multimeter.group_key == second_multimeter.group_key == "Multimeter"
    assert all(u.import_ref == batch.id for u in assets.units)


@pytest.mark.asyncio
async def test_import_without_valid_rows_writes_nothing(service, assets, batches, make_xlsx, asset_row):
    content = make_xlsx([asset_row(None, {"Category": "orphan"})])

    with pytest.raises(InvalidOperationError):
        await service.import_workbook(content, "empty.xlsx", created_by="admin-1")

    assert assets.units == []
    assert batches.batches == []


@pytest.mark.asyncio
async def test_import_malformed_archive_propagates(service):
    with pytest.raises(MalformedArchiveError):
        await service.import_workbook(b"PK-not-really", "broken.xlsx", created_by="admin-1")


@pytest.mark.asyncio
async def test_failing_row_becomes_warning(batches, storage, make_xlsx, asset_row):
    assets = FakeAssetRepository(reject={"Broken"})
    service = AssetImportService(assets, batches, storage)
    content = make_xlsx([asset_row("Good"), asset_row("Broken"), asset_row("Also good")])

    outcome = await service.import_workbook(content, "lab.xlsx", created_by="admin-1")

    assert [u.asset_description for u in assets.units] == ["Good", "Also good"]
    assert len(outcome.created_ids) == 2
    assert len(outcome.warnings) == 1
    assert outcome.warnings[0].startswith("Row 3 submission failed")


@pytest.mark.asyncio
async def test_failing_row_does_not_leave_its_image_behind(
    batches, storage, tmp_path, make_xlsx, asset_row, png_bytes
):
    assets = FakeAssetRepository(reject={"Broken"})
    service = AssetImportService(assets, batches, storage)
    content = make_xlsx(
        [asset_row("Good"), asset_row("Broken")],
        images=[(1, 0, png_bytes), (2, 0, png_bytes)],
    )

    outcome = await service.import_workbook(content, "lab.xlsx", created_by="admin-1")

    stored_images = list((tmp_path / "uploads" / "images").iterdir())
    assert len(outcome.created_ids) == 1
    assert stored_images == [Path(assets.units[0].image_ref)]


@pytest.mark.asyncio
async def test_batch_failure_is_best_effort(assets, storage, make_xlsx, asset_row):
    service = AssetImportService(assets, FakeImportBatchRepository(fail=True), storage)
    content = make_xlsx([asset_row("Scope")])

    outcome = await service.import_workbook(content, "lab.xlsx", created_by="admin-1")

    assert outcome.import_batch_id is None
    assert len(outcome.created_ids) == 1
    assert assets.units[0].import_ref is None
    assert any("Import batch record creation failed" in w for w in outcome.warnings)


@pytest.mark.asyncio
async def test_image_url_column_is_fallback(
    service, assets, make_xlsx, asset_row, png_bytes, default_headers
):
    headers = default_headers + ["Image URL"]
    content = make_xlsx(
        [
            asset_row("Embedded wins") + ["https://images.test/ignored.png"],
            asset_row("Fetched") + ["https://images.test/scope.png"],
            asset_row("Broken link") + ["https://images.test/missing.png"],
            asset_row("Local path") + ["C:\\pics\\a.png"],
        ],
        headers=headers,
        images=[(1, 0, png_bytes)],
    )

    outcome = await service.import_workbook(content, "lab.xlsx", created_by="admin-1")

    embedded, fetched, broken, local = assets.units
    assert Path(embedded.image_ref).read_bytes() == png_bytes
    assert Path(fetched.image_ref).read_bytes() == b"remote-image"
    assert fetched.image_ref.endswith(".png")
    assert broken.image_ref is None
    assert local.image_ref is None
    assert outcome.warnings == ["Failed to fetch image_url for row 4"]


@pytest.mark.asyncio
async def test_oversized_embedded_image_is_skipped(service, assets, make_xlsx, asset_row):
    content = make_xlsx([asset_row("Scope")], images=[(1, 0, b"x" * 2048)])

    outcome = await service.import_workbook(content, "lab.xlsx", created_by="admin-1")

    assert assets.units[0].image_ref is None
    assert len(outcome.created_ids) == 1
    assert "exceeds size limit" in outcome.warnings[0]


@pytest.mark.asyncio
async def test_list_batches(service, batches, make_xlsx, asset_row):
    await service.import_workbook(make_xlsx([asset_row("Scope")]), "a.xlsx", created_by="admin-1")
    assert [b.id for b in await service.list_batches()] == [b.id for b in batches.batches]
