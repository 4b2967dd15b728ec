"""Transaction mutation engine: commit, edit, rescale and delete transactions with their splits.

This module composes validation, the split policies and reconciliation, and
writes the results through the Store so each user action is saved atomically.
"""

import logging
from decimal import Decimal
from uuid import UUID

from .balances import pairwise_balance
from .config import Settings
from .exceptions import InvalidStateTransitionError, TransactionNotFoundError
from .identity import CurrentUser
from .models import (
    Payer,
    RawInputs,
    Split,
    SplitDraft,
    Transaction,
    TransactionState,
)
from .money import MIN_TOTAL, parse_decimal, round2
from .reconciler import reconcile, rescale
from .splitter import (
    compute_splits,
    raw_amount_for,
    raw_inputs_from_splits,
    stable_order,
)
from .store import Store
from .validation import validate_draft, validate_total

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[TransactionState, set[TransactionState]] = {
    TransactionState.DRAFT: {TransactionState.COMMITTED, TransactionState.DELETED},
    TransactionState.COMMITTED: {TransactionState.EDITED, TransactionState.DELETED},
    TransactionState.EDITED: {TransactionState.COMMITTED, TransactionState.DELETED},
    TransactionState.DELETED: set(),
}


def advance(current: TransactionState, target: TransactionState) -> TransactionState:
    """
    Move a transaction to `target`, enforcing the lifecycle.

    Draft -> Committed, Committed -> Edited -> Committed, any -> Deleted.

    Raises:
        InvalidStateTransitionError: If the move is not allowed
    """
    if target not in _TRANSITIONS[current]:
        raise InvalidStateTransitionError(current.value, target.value)
    logger.debug(f"Transaction state {current.value} -> {target.value}")
    return target


class TransactionService:
    """Service for recording transactions and keeping their splits consistent."""

    def __init__(
        self,
        settings: Settings,
        database: Store,
        identity: CurrentUser | None = None,
    ):
        """Initialize the transaction service."""
        self.settings = settings
        self.db = database
        self.identity = identity or CurrentUser(database, settings)

    # ========================================================================
    # Split computation
    # ========================================================================

    def preview(self, draft: SplitDraft) -> dict[UUID, Decimal]:
        """
        Compute owed amounts for a draft without validating or saving.

        With no participants selected the current user owns the whole split.
        Totals above the configured maximum preview as zero.
        """
        total = draft.total
        if total > self.settings.max_amount:
            logger.debug(f"Preview total {total} exceeds the maximum; showing zero")
            total = Decimal("0")

        participants = draft.participants or [self.identity.current_user_id]
        return compute_splits(
            round2(total),
            participants,
            draft.raw_inputs,
            draft.split_method,
            policy=self.settings.residual_policy,
        )

    def _build_payers(
        self, transaction: Transaction, payer_inputs: dict[UUID, str], default_payer: UUID
    ) -> list[Payer]:
        """Payer records: a single (or default) payer covers the whole total."""
        if len(payer_inputs) <= 1:
            person_id = next(iter(payer_inputs), default_payer)
            return [
                Payer(
                    transaction_id=transaction.id,
                    person_id=person_id,
                    amount=transaction.amount,
                )
            ]

        entered = {
            pid: round2(parse_decimal(payer_inputs[pid], Decimal("0")))
            for pid in stable_order(payer_inputs)
        }
        paid = reconcile(transaction.amount, entered, policy=self.settings.residual_policy)
        return [
            Payer(transaction_id=transaction.id, person_id=pid, amount=amount)
            for pid, amount in paid.items()
        ]

    @staticmethod
    def _build_splits(
        transaction: Transaction, owed: dict[UUID, Decimal], raw_inputs: RawInputs
    ) -> list[Split]:
        return [
            Split(
                transaction_id=transaction.id,
                owed_by_id=pid,
                amount=amount,
                raw_amount=raw_amount_for(raw_inputs.get(pid)),
            )
            for pid, amount in owed.items()
        ]

    # ========================================================================
    # Mutations
    # ========================================================================

    def commit(self, draft: SplitDraft) -> Transaction:
        """
        Save a new transaction with one split per participant.

        Args:
            draft: The composed transaction

        Returns:
            The persisted transaction

        Raises:
            SplitValidationError: If the draft fails validation (nothing written)
            InvalidStateTransitionError: If the draft was re-opened from a saved
                transaction (use `edit`) or that transaction has been deleted
            StoreWriteFailedError: If saving fails (everything rolled back)
        """
        advance(self._state_of(draft.transaction_id), TransactionState.COMMITTED)
        title = validate_draft(draft, self.settings)
        total = round2(draft.total)

        current_user = self.identity.get_or_create()
        participants = draft.participants or [current_user.id]
        if not draft.participants:
            logger.warning("No participants selected; assigning the split to the current user")

        owed = compute_splits(
            total,
            participants,
            draft.raw_inputs,
            draft.split_method,
            policy=self.settings.residual_policy,
        )

        transaction = Transaction(
            title=title,
            amount=total,
            currency=draft.currency or self.settings.default_currency,
            date=draft.transaction_date,
            split_method=draft.split_method,
            note=(draft.note or "").strip() or None,
            created_by_id=current_user.id,
        )
        payers = self._build_payers(transaction, draft.payer_inputs, current_user.id)
        splits = self._build_splits(transaction, owed, draft.raw_inputs)

        try:
            with self.db.atomic():
                self.db.create(transaction)
                for payer in payers:
                    self.db.create(payer)
                for split in splits:
                    self.db.create(split)
        except Exception as e:
            logger.error(f"Failed to save transaction '{title}': {e}")
            raise

        logger.info(
            f"Committed transaction {transaction.id} '{title}' "
            f"({transaction.split_method.value}, {len(splits)} splits, total {total})"
        )
        return transaction

    def edit(self, transaction_id: UUID, draft: SplitDraft) -> Transaction:
        """
        Re-derive a committed transaction from an edited draft.

        Existing splits and payers are replaced in the same save as the
        transaction update.
        """
        existing = self._begin(transaction_id, TransactionState.EDITED)

        title = validate_draft(draft, self.settings)
        total = round2(draft.total)
        current_user = self.identity.get_or_create()
        participants = draft.participants or [current_user.id]

        owed = compute_splits(
            total,
            participants,
            draft.raw_inputs,
            draft.split_method,
            policy=self.settings.residual_policy,
        )

        updated = existing.model_copy(
            update={
                "title": title,
                "amount": total,
                "currency": draft.currency or existing.currency,
                "date": draft.transaction_date,
                "split_method": draft.split_method,
                "note": (draft.note or "").strip() or None,
            }
        )
        payers = self._build_payers(updated, draft.payer_inputs, current_user.id)
        splits = self._build_splits(updated, owed, draft.raw_inputs)

        try:
            with self.db.atomic():
                for old_split in self.get_splits(transaction_id):
                    self.db.delete(old_split)
                for old_payer in self.get_payers(transaction_id):
                    self.db.delete(old_payer)
                self.db.update(updated)
                for payer in payers:
                    self.db.create(payer)
                for split in splits:
                    self.db.create(split)
        except Exception as e:
            logger.error(f"Failed to update transaction {transaction_id}: {e}")
            raise

        advance(TransactionState.EDITED, TransactionState.COMMITTED)
        logger.info(f"Re-derived {len(splits)} splits for transaction {transaction_id}")
        return updated

    def update_amount(self, transaction_id: UUID, new_amount: Decimal) -> Transaction:
        """
        Change the total of a committed transaction.

        When the total moves by more than a cent, every persisted split (and
        payer) is scaled by new_total / old_total and reconciled; the split
        method is not re-run. Smaller changes only reconcile the existing
        amounts against the new total.
        """
        existing = self._begin(transaction_id, TransactionState.EDITED)

        validate_total(new_amount, self.settings.max_amount)
        new_total = round2(new_amount)
        old_total = existing.amount
        policy = self.settings.residual_policy

        splits = sorted(self.get_splits(transaction_id), key=lambda s: str(s.owed_by_id))
        payers = sorted(self.get_payers(transaction_id), key=lambda p: str(p.person_id))
        split_amounts = {s.id: s.amount for s in splits}
        payer_amounts = {p.id: p.amount for p in payers}

        if abs(new_total - old_total) > self.settings.amount_tolerance and old_total > MIN_TOTAL:
            new_splits = rescale(split_amounts, old_total, new_total, policy=policy)
            new_payers = rescale(payer_amounts, old_total, new_total, policy=policy)
            logger.info(
                f"Rescaled transaction {transaction_id} from {old_total} to {new_total}"
            )
        else:
            new_splits = reconcile(new_total, split_amounts, policy=policy)
            new_payers = reconcile(new_total, payer_amounts, policy=policy)

        updated = existing.model_copy(update={"amount": new_total})
        try:
            with self.db.atomic():
                self.db.update(updated)
                for split in splits:
                    self.db.update(split.model_copy(update={"amount": new_splits[split.id]}))
                for payer in payers:
                    self.db.update(payer.model_copy(update={"amount": new_payers[payer.id]}))
        except Exception as e:
            logger.error(f"Failed to update amount of transaction {transaction_id}: {e}")
            raise

        advance(TransactionState.EDITED, TransactionState.COMMITTED)
        return updated

    def delete(self, transaction_id: UUID) -> None:
        """
        Delete a transaction together with its splits and payers.

        Either everything is removed or, on a store failure, nothing is.
        """
        existing = self._begin(transaction_id, TransactionState.DELETED)
        splits = self.get_splits(transaction_id)
        payers = self.get_payers(transaction_id)

        try:
            with self.db.atomic():
                for split in splits:
                    self.db.delete(split)
                for payer in payers:
                    self.db.delete(payer)
                self.db.delete(existing)
        except Exception as e:
            logger.error(f"Failed to delete transaction {transaction_id}: {e}")
            raise

        logger.info(f"Deleted transaction {transaction_id} and {len(splits)} splits")

    # ========================================================================
    # Queries
    # ========================================================================

    def _state_of(self, transaction_id: UUID | None) -> TransactionState:
        """Lifecycle state as recorded in the store (a missing row is deleted)."""
        if transaction_id is None:
            return TransactionState.DRAFT
        if self.db.get(Transaction, transaction_id) is None:
            return TransactionState.DELETED
        return TransactionState.COMMITTED

    def _begin(self, transaction_id: UUID, target: TransactionState) -> Transaction:
        """
        Load a saved transaction and move it towards `target`.

        Raises:
            TransactionNotFoundError: If the transaction is deleted or unknown
        """
        existing = self.db.get(Transaction, transaction_id)
        current = TransactionState.COMMITTED if existing else TransactionState.DELETED
        try:
            advance(current, target)
        except InvalidStateTransitionError:
            if existing is None:
                raise TransactionNotFoundError(transaction_id, target.value) from None
            raise
        assert existing is not None
        return existing

    def _get_or_raise(self, transaction_id: UUID) -> Transaction:
        transaction = self.db.get(Transaction, transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def get(self, transaction_id: UUID) -> Transaction | None:
        """Get a transaction by id."""
        return self.db.get(Transaction, transaction_id)

    def list_transactions(self) -> list[Transaction]:
        """All transactions, newest first."""
        transactions = self.db.fetch(Transaction)
        return sorted(transactions, key=lambda t: (t.date, t.created_at), reverse=True)

    def get_splits(self, transaction_id: UUID) -> list[Split]:
        """Splits of a transaction."""
        return self.db.fetch(Split, transaction_id=transaction_id)

    def get_payers(self, transaction_id: UUID) -> list[Payer]:
        """Payer records of a transaction."""
        return self.db.fetch(Payer, transaction_id=transaction_id)

    def load_draft(self, transaction_id: UUID) -> SplitDraft:
        """
        Re-open a committed transaction as an editable draft.

        Raw inputs are rebuilt from the persisted splits; a lone payer who is
        the current user is left implicit.
        """
        transaction = self._get_or_raise(transaction_id)
        splits = self.get_splits(transaction_id)
        payers = self.get_payers(transaction_id)

        payer_inputs = {p.person_id: str(round2(p.amount)) for p in payers}
        if len(payers) == 1 and self.identity.is_current_user(payers[0].person_id):
            payer_inputs = {}

        return SplitDraft(
            transaction_id=transaction.id,
            title=transaction.title,
            amount=str(round2(transaction.amount)),
            transaction_date=transaction.date,
            currency=transaction.currency,
            note=transaction.note,
            participants=stable_order(s.owed_by_id for s in splits),
            split_method=transaction.split_method,
            raw_inputs=raw_inputs_from_splits(
                transaction.split_method, splits, transaction.amount
            ),
            payer_inputs=payer_inputs,
        )

    def balance_with(self, person_id: UUID) -> Decimal:
        """
        Net balance between the current user and `person_id`.

        Positive means they owe the current user. Per-transaction shares are
        summed unrounded and the total is rounded once.
        """
        me = self.identity.current_user_id
        balance = Decimal("0")
        for transaction in self.db.fetch(Transaction):
            balance += pairwise_balance(
                self.get_payers(transaction.id),
                self.get_splits(transaction.id),
                me,
                person_id,
            )
        return round2(balance)
