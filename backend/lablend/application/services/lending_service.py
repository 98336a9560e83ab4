"""Lending transition engine — atomic borrow/return over a pool of fungible units."""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from lablend.application.interfaces import (
    AtomicStore,
    LendingTransaction,
    LendRecordRepository,
    TransactionAborted,
)
from lablend.domain.entities import (
    LendAction,
    LendRecord,
    OutstandingHolding,
    TransitionErrorKind,
    TransitionResult,
    normalize_group_key,
)

logger = logging.getLogger(__name__)


def _utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def compute_outstanding_holdings(records: Iterable[LendRecord]) -> list[OutstandingHolding]:
    """Fold the lend log into per-(user, group_key) balances.

    Records are sorted chronologically before folding; lends sort ahead of
    returns at the same instant and ``id`` breaks any remaining tie, so the
    result does not depend on input order. The running balance is floored
    at zero, which discards stray returns.
    """
    ordered = sorted(
        records,
        key=lambda r: (_utc(r.occurred_at), r.action != LendAction.LEND, r.id),
    )

    balances: dict[tuple[str, str], int] = {}
    for record in ordered:
        key = (record.user, record.group_key)
        delta = 1 if record.action == LendAction.LEND else -1
        balances[key] = max(0, balances.get(key, 0) + delta)

    return [
        OutstandingHolding(user=user, group_key=group_key, balance=balance)
        for (user, group_key), balance in sorted(balances.items())
        if balance > 0
    ]


class LendingService:
    """Applies borrow/return transitions through an ``AtomicStore``.

    Every call is a single unit of work: select one eligible unit, swap its
    holder, append the audit record. Failures come back as
    ``TransitionResult`` values and are never retried here.
    """

    def __init__(
        self,
        atomic_store: AtomicStore,
        record_repository: LendRecordRepository | None = None,
    ):
        self._store = atomic_store
        self._records = record_repository

    # ── Transitions ─────────────────────────────────────────────────

    async def transition(self, group_key: str, user_id: str, action: str) -> TransitionResult:
        """Dispatch on ``action`` (``"lend"`` or ``"return"``)."""
        try:
            parsed = LendAction(action)
        except ValueError:
            return TransitionResult.failed(
                TransitionErrorKind.INVALID_INPUT,
                f"Invalid action '{action}'. Use \"lend\" or \"return\"",
            )
        if parsed == LendAction.LEND:
            return await self.borrow(group_key, user_id)
        return await self.return_unit(group_key, user_id)

    async def borrow(self, group_key: str, user_id: str) -> TransitionResult:
        invalid = self._validate(group_key, user_id)
        if invalid is not None:
            return invalid
        key = normalize_group_key(group_key)

        async def _borrow(tx: LendingTransaction) -> TransitionResult:
            await self._require_user(tx, user_id, active=True)

            unit = await tx.next_available_unit(key)
            if unit is None or not await tx.compare_and_set_holder(unit.id, None, user_id):
                raise TransactionAborted(
                    TransitionErrorKind.NO_AVAILABLE_UNIT,
                    f"No available unit in group '{key}'",
                )

            record = await tx.append_record(
                LendRecord(
                    user=user_id,
                    group_key=key,
                    action=LendAction.LEND,
                    asset_description=unit.asset_description,
                    asset_unit=unit.id,
                )
            )
            return TransitionResult.ok(unit.id, record.id)

        return await self._run(_borrow, LendAction.LEND, key, user_id)

    async def return_unit(self, group_key: str, user_id: str) -> TransitionResult:
        invalid = self._validate(group_key, user_id)
        if invalid is not None:
            return invalid
        key = normalize_group_key(group_key)

        async def _return(tx: LendingTransaction) -> TransitionResult:
            await self._require_user(tx, user_id, active=False)

            unit = await tx.next_held_unit(key, user_id)
            if unit is None or not await tx.compare_and_set_holder(unit.id, user_id, None):
                raise TransactionAborted(
                    TransitionErrorKind.NO_HELD_UNIT,
                    f"You hold no unit in group '{key}'",
                )

            record = await tx.append_record(
                LendRecord(
                    user=user_id,
                    group_key=key,
                    action=LendAction.RETURN,
                    asset_description=unit.asset_description,
                    asset_unit=unit.id,
                )
            )
            return TransitionResult.ok(unit.id, record.id)

        return await self._run(_return, LendAction.RETURN, key, user_id)

    # ── Read side ───────────────────────────────────────────────────

    async def list_records(self, user_id: str | None = None) -> list[LendRecord]:
        """Lend records, newest first; all users when ``user_id`` is None."""
        return await self._require_records().get_all(user_id=user_id)

    async def outstanding_holdings(self, user_id: str | None = None) -> list[OutstandingHolding]:
        records = await self._require_records().get_all(user_id=user_id)
        return compute_outstanding_holdings(records)

    # ── Internals ───────────────────────────────────────────────────

    @staticmethod
    def _validate(group_key: object, user_id: object) -> TransitionResult | None:
        if not isinstance(group_key, str) or not normalize_group_key(group_key):
            return TransitionResult.failed(
                TransitionErrorKind.INVALID_INPUT, "group_key is required"
            )
        if not isinstance(user_id, str) or not user_id.strip():
            return TransitionResult.failed(
                TransitionErrorKind.INVALID_INPUT, "user id is required"
            )
        return None

    @staticmethod
    async def _require_user(tx: LendingTransaction, user_id: str, *, active: bool) -> None:
        """Abort unless the user exists; borrowing also needs an active account.

        Suspended users may still return what they hold.
        """
        user = await tx.get_user(user_id)
        if user is None:
            raise TransactionAborted(
                TransitionErrorKind.INVALID_INPUT, f"User '{user_id}' does not exist"
            )
        if active and not user.is_active:
            raise TransactionAborted(
                TransitionErrorKind.INVALID_INPUT, f"User '{user_id}' is suspended"
            )

    async def _run(self, fn, action: LendAction, group_key: str, user_id: str) -> TransitionResult:
        try:
            result = await self._store.run_atomic(fn)
        except TransactionAborted as aborted:
            logger.warning(
                "%s refused: %s (group=%s, user=%s)",
                action.value, aborted.reason.value, group_key, user_id,
            )
            return TransitionResult.failed(aborted.reason, aborted.message)

        logger.info(
            "%s ok: unit=%s record=%s (group=%s, user=%s)",
            action.value, result.unit_id, result.lend_record_id, group_key, user_id,
        )
        return result

    def _require_records(self) -> LendRecordRepository:
        if self._records is None:
            raise RuntimeError("LendingService was built without a record repository")
        return self._records
