"""Custom exceptions for Swiss Coin."""


class SwissCoinError(Exception):
    """Base exception for all Swiss Coin errors."""

    kind = "SwissCoinError"


class ConfigurationError(SwissCoinError):
    """Raised when configuration is invalid or missing."""

    kind = "Configuration"


class SplitValidationError(SwissCoinError, ValueError):
    """
    Base class for recoverable input errors.

    Raised before any mutation is applied; the caller may correct the inputs
    and retry. `kind` is a stable identifier for the error category.
    """

    kind = "Validation"


class EmptyTitleError(SplitValidationError):
    """Raised when the trimmed transaction title is empty."""

    kind = "EmptyTitle"

    def __init__(self, message: str = "Please enter a title"):
        super().__init__(message)


class NonPositiveAmountError(SplitValidationError):
    """Raised when the transaction total is zero or negative."""

    kind = "NonPositiveAmount"

    def __init__(self, message: str = "Amount must be greater than zero"):
        super().__init__(message)


class AmountTooLargeError(SplitValidationError):
    """Raised when the transaction total exceeds the configured maximum."""

    kind = "AmountTooLarge"

    def __init__(self, message: str = "Amount exceeds maximum allowed"):
        super().__init__(message)


class InvalidAmountError(SplitValidationError):
    """Raised when a money string cannot be parsed."""

    kind = "InvalidAmount"


class PercentagesNotFullError(SplitValidationError):
    """Raised when percentage inputs do not add up to 100."""

    kind = "PercentagesNotFull"

    def __init__(self, total_percent, message: str | None = None):
        self.total_percent = total_percent
        super().__init__(
            message or f"Percentages must add up to 100% (currently {total_percent}%)"
        )


class AmountsDoNotMatchTotalError(SplitValidationError):
    """Raised when exact amount inputs do not add up to the transaction total."""

    kind = "AmountsDoNotMatchTotal"

    def __init__(self, entered, expected, message: str | None = None):
        self.entered = entered
        self.expected = expected
        super().__init__(
            message or f"Amounts must equal the total ({entered} entered, {expected} expected)"
        )


class PayerAmountsMismatchError(SplitValidationError):
    """Raised when multi-payer contributions do not add up to the total."""

    kind = "PayerAmountsMismatch"

    def __init__(self, paid, expected):
        self.paid = paid
        self.expected = expected
        super().__init__(
            f"Paid-by amounts must equal the total ({paid} paid, {expected} expected)"
        )


class InvalidSharesError(SplitValidationError):
    """Raised when a share weight is not a whole number of at least 1."""

    kind = "InvalidShares"


class NoParticipantsError(SplitValidationError):
    """Raised when a split has to be placed but nobody participates."""

    kind = "NoParticipants"

    def __init__(self, message: str = "Select at least one person to split with"):
        super().__init__(message)


class NegativeShareError(SplitValidationError):
    """Raised when a computed owed amount would be negative."""

    kind = "NegativeShare"


class InvalidStateTransitionError(SwissCoinError):
    """Raised when a transaction lifecycle transition is not allowed."""

    kind = "InvalidStateTransition"

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move a transaction from {current} to {target}")


class TransactionNotFoundError(InvalidStateTransitionError):
    """
    Raised when a transaction id does not exist in the store.

    A missing row is a deleted (or never saved) transaction, so every
    transition out of it is refused.
    """

    kind = "TransactionNotFound"

    def __init__(self, transaction_id, target=None):
        self.transaction_id = transaction_id
        self.current = "deleted"
        self.target = target
        SwissCoinError.__init__(self, f"Transaction {transaction_id} not found")


class PersonNotFoundError(SwissCoinError):
    """Raised when a person cannot be resolved."""

    kind = "PersonNotFound"


class StoreError(SwissCoinError):
    """Base class for persistence errors."""

    kind = "Store"


class StoreWriteFailedError(StoreError):
    """Raised when saving to the store fails; pending writes are rolled back."""

    kind = "StoreWriteFailed"
