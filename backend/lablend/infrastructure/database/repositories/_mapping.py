"""ORM model ↔ domain entity mapping shared by the repositories and the atomic store."""

from datetime import datetime, timezone

from lablend.domain.entities import (
    AssetUnit,
    ImportBatch,
    LendAction,
    LendRecord,
    User,
    UserRole,
)
from lablend.infrastructure.database.models import (
    AssetUnitModel,
    ImportBatchModel,
    LendRecordModel,
    UserModel,
)


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def asset_to_entity(model: AssetUnitModel) -> AssetUnit:
    return AssetUnit(
        id=model.id,
        asset_description=model.asset_description,
        group_key=model.group_key,
        asset_name=model.asset_name,
        current_holder=model.current_holder,
        scrapped=model.scrapped,
        image_ref=model.image_ref,
        import_ref=model.import_ref,
        is_fixed_assets=model.is_fixed_assets,
        category=model.category,
        serial_no=model.serial_no,
        location=model.location,
        excel_user=model.excel_user,
        manufacturer=model.manufacturer,
        value_cny=model.value_cny,
        commissioning_time=model.commissioning_time,
        metrology_validity_period=model.metrology_validity_period,
        metrology_requirement=model.metrology_requirement,
        metrology_cost=model.metrology_cost,
        remarks=model.remarks,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def asset_to_model(entity: AssetUnit) -> AssetUnitModel:
    return AssetUnitModel(
        id=entity.id,
        asset_description=entity.asset_description,
        group_key=entity.group_key,
        asset_name=entity.asset_name,
        status=entity.status.value,
        current_holder=entity.current_holder,
        scrapped=entity.scrapped,
        image_ref=entity.image_ref,
        import_ref=entity.import_ref,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        **entity.descriptive_fields(),
    )


def record_to_entity(model: LendRecordModel) -> LendRecord:
    return LendRecord(
        id=model.id,
        user=model.user,
        group_key=model.group_key,
        asset_description=model.asset_description,
        asset_unit=model.asset_unit,
        action=LendAction(model.action),
        occurred_at=as_utc(model.occurred_at),
    )


def record_to_model(entity: LendRecord) -> LendRecordModel:
    return LendRecordModel(
        id=entity.id,
        user=entity.user,
        group_key=entity.group_key,
        asset_description=entity.asset_description,
        asset_unit=entity.asset_unit,
        action=entity.action.value,
        occurred_at=entity.occurred_at,
    )


def user_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        identity=model.identity,
        role=UserRole(model.role),
        is_active=model.is_active,
        created_at=as_utc(model.created_at),
    )


def batch_to_entity(model: ImportBatchModel) -> ImportBatch:
    return ImportBatch(
        id=model.id,
        source_file_ref=model.source_file_ref,
        created_by=model.created_by,
        notes=model.notes,
        created_at=as_utc(model.created_at),
    )
