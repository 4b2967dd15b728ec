"""Identity resolution for the person using the app."""

import logging
from uuid import UUID, uuid4

from .config import Settings
from .models import Person
from .store import Store

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user_id"
DEFAULT_NAME = "Me"
DEFAULT_COLOR_HEX = "#34C759"


class CurrentUser:
    """
    Resolves "me" by identifier comparison.

    The id comes from settings when configured, otherwise from the store's
    config table. A new id is generated in memory on first read and only
    written when the "Me" person record is created, so lookups never write.
    """

    def __init__(self, store: Store, settings: Settings):
        """Initialize identity resolution."""
        self.store = store
        self.settings = settings
        self._current_user_id: UUID | None = settings.current_user_id

    @property
    def current_user_id(self) -> UUID:
        """The current user's id, generating one (unsaved) if needed."""
        if self._current_user_id is None:
            stored = self.store.get_config(CURRENT_USER_KEY)
            self._current_user_id = UUID(stored) if stored else uuid4()
        return self._current_user_id

    def is_current_user(self, person_id: UUID | None) -> bool:
        """Check if a given id belongs to the current user."""
        if person_id is None:
            return False
        return person_id == self.current_user_id

    def get_or_create(self) -> Person:
        """Get the current user's Person record, creating it if missing."""
        user_id = self.current_user_id
        existing = self.store.get(Person, user_id)
        if existing:
            return existing

        user = Person(id=user_id, name=DEFAULT_NAME, color_hex=DEFAULT_COLOR_HEX)
        with self.store.atomic():
            if self.settings.current_user_id is None:
                self.store.set_config(CURRENT_USER_KEY, str(user_id))
            self.store.create(user)
        logger.info(f"Created current user record {user_id}")
        return user

    def set_current_user(self, person_id: UUID) -> None:
        """Make `person_id` the current user (login / account switch)."""
        with self.store.atomic():
            self.store.set_config(CURRENT_USER_KEY, str(person_id))
        self._current_user_id = person_id

    def reset(self) -> None:
        """Forget the cached id; the next lookup reads the store again."""
        self._current_user_id = self.settings.current_user_id
