"""Swiss Coin - Split shared expenses and keep every split consistent with its total."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .db import Database
from .identity import CurrentUser
from .models import (
    Payer,
    Person,
    Split,
    SplitDraft,
    SplitMethod,
    Transaction,
    TransactionState,
)
from .reconciler import ResidualPolicy, reconcile, rescale
from .service import TransactionService
from .splitter import compute_splits, seed_raw_inputs
from .store import Store

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "Store",
    "CurrentUser",
    "Payer",
    "Person",
    "Split",
    "SplitDraft",
    "SplitMethod",
    "Transaction",
    "TransactionState",
    "ResidualPolicy",
    "reconcile",
    "rescale",
    "compute_splits",
    "seed_raw_inputs",
    "TransactionService",
]
