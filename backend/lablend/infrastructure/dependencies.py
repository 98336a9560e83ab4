"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from lablend.config import get_settings
from lablend.application.services import (
    AssetImportService,
    InventoryService,
    LendingService,
    UserService,
)
from lablend.domain.entities import User
from lablend.infrastructure.database.session import get_db_session
from lablend.infrastructure.database.repositories import (
    SQLAlchemyAssetRepository,
    SQLAlchemyAtomicStore,
    SQLAlchemyImportBatchRepository,
    SQLAlchemyLendRecordRepository,
    SQLAlchemyUserRepository,
)
from lablend.infrastructure.http import HttpxImageFetcher
from lablend.infrastructure.storage.local_file_storage import LocalFileStorage


async def get_user_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[UserService, None]:
    """Provides a UserService instance with its repository wired up."""
    yield UserService(SQLAlchemyUserRepository(session))


async def get_inventory_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[InventoryService, None]:
    """Provides an InventoryService with the asset repository and file storage."""
    settings = get_settings()
    yield InventoryService(
        SQLAlchemyAssetRepository(session),
        file_storage=LocalFileStorage(upload_dir=settings.upload_dir),
    )


async def get_lending_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[LendingService, None]:
    """Provides a LendingService whose transitions run on the request session."""
    yield LendingService(
        atomic_store=SQLAlchemyAtomicStore(session),
        record_repository=SQLAlchemyLendRecordRepository(session),
    )


async def get_import_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AssetImportService, None]:
    """Provides an AssetImportService with storage and the image-URL fetcher."""
    settings = get_settings()
    yield AssetImportService(
        asset_repository=SQLAlchemyAssetRepository(session),
        import_batch_repository=SQLAlchemyImportBatchRepository(session),
        file_storage=LocalFileStorage(upload_dir=settings.upload_dir),
        image_fetcher=HttpxImageFetcher(
            timeout=settings.image_fetch_timeout,
            max_bytes=settings.max_image_bytes,
        ),
        max_image_bytes=settings.max_image_bytes,
    )


# ── Request identity ────────────────────────────────────────────────


async def get_request_user(
    x_user_id: str | None = Header(None),
    service: UserService = Depends(get_user_service),
) -> User:
    """Resolve the ``X-User-Id`` header (user id or identity), suspended users included."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    user = await service.resolve(x_user_id.strip())
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user


async def get_current_user(user: User = Depends(get_request_user)) -> User:
    """The calling user, who must not be suspended."""
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User is suspended",
        )
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return current_user
