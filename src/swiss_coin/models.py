"""Pydantic domain models for Swiss Coin."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .money import parse_decimal

# ============================================================================
# Enums
# ============================================================================


class SplitMethod(str, Enum):
    """Strategy used to turn raw inputs into owed amounts."""

    EQUAL = "equal"
    PERCENTAGE = "percentage"
    AMOUNT = "amount"  # exact amounts
    ADJUSTMENT = "adjustment"
    SHARES = "shares"


class TransactionState(str, Enum):
    """Lifecycle of a transaction with respect to its splits."""

    DRAFT = "draft"
    COMMITTED = "committed"
    EDITED = "edited"
    DELETED = "deleted"


# Raw Input Map: participant id -> user-entered string for the active method.
RawInputs = dict[UUID, str]


# ============================================================================
# Stored records
# ============================================================================


class Person(BaseModel):
    """A contact that can pay for or owe part of a transaction."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    phone_number: str | None = None
    color_hex: str = "#808080"


class Transaction(BaseModel):
    """A recorded expense."""

    id: UUID = Field(default_factory=uuid4)
    title: str
    amount: Decimal
    currency: str = "USD"
    date: date
    split_method: SplitMethod = SplitMethod.EQUAL
    note: str | None = None
    created_by_id: UUID | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class Payer(BaseModel):
    """Amount a person contributed toward a transaction's total."""

    id: UUID = Field(default_factory=uuid4)
    transaction_id: UUID
    person_id: UUID
    amount: Decimal


class Split(BaseModel):
    """The portion of a transaction owed by one participant."""

    id: UUID = Field(default_factory=uuid4)
    transaction_id: UUID
    owed_by_id: UUID
    amount: Decimal
    raw_amount: Decimal | None = None  # raw input kept for re-editing


# ============================================================================
# Edit session
# ============================================================================


class SplitDraft(BaseModel):
    """
    An in-progress transaction being composed or edited.

    Holds the caller-owned Raw Input Map. Changing the split method or the
    participant set reinitialises the map with the method's default seeds.
    """

    transaction_id: UUID | None = None  # set when re-opened from a saved transaction
    title: str = ""
    amount: str = ""
    transaction_date: date = Field(default_factory=date.today)
    currency: str = "USD"
    note: str | None = None
    participants: list[UUID] = Field(default_factory=list)
    split_method: SplitMethod = SplitMethod.EQUAL
    raw_inputs: RawInputs = Field(default_factory=dict)
    payer_inputs: dict[UUID, str] = Field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        """
        Total amount parsed leniently (0 while the field is unusable).

        Not bounded, so validation can report oversized totals.
        """
        return parse_decimal(self.amount, Decimal("0"), limit=None)

    def change_method(self, method: SplitMethod) -> None:
        """Switch split method and reseed the raw inputs."""
        self.split_method = method
        self.reset_raw_inputs()

    def set_participants(self, participants: list[UUID]) -> None:
        """Replace the participant set and reseed the raw inputs."""
        # dict.fromkeys keeps first-seen order while dropping duplicates
        self.participants = list(dict.fromkeys(participants))
        self.reset_raw_inputs()

    def toggle_participant(self, person_id: UUID) -> None:
        """Add or remove a participant."""
        if person_id in self.participants:
            remaining = [p for p in self.participants if p != person_id]
        else:
            remaining = [*self.participants, person_id]
        self.set_participants(remaining)

    def reset_raw_inputs(self) -> None:
        """Reinitialise the raw input map for the current method."""
        from .splitter import seed_raw_inputs

        self.raw_inputs = seed_raw_inputs(
            self.split_method, self.participants, parse_decimal(self.amount, Decimal("0"))
        )
