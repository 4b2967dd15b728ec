"""Contact management for people who take part in transactions."""

import logging
from uuid import UUID

from .exceptions import PersonNotFoundError
from .models import Person
from .store import Store

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Normalize a display name for matching (lowercase, stripped)."""
    return name.lower().strip()


class PeopleService:
    """Manages the people records transactions refer to."""

    def __init__(self, database: Store):
        """Initialize the people service."""
        self.db = database

    def add_person(
        self, name: str, phone_number: str | None = None, color_hex: str | None = None
    ) -> Person:
        """Create and save a new person."""
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Name cannot be empty")

        person = Person(name=cleaned, phone_number=phone_number)
        if color_hex:
            person.color_hex = color_hex

        with self.db.atomic():
            self.db.create(person)

        logger.info(f"Added person '{cleaned}' ({person.id})")
        return person

    def list_people(self) -> list[Person]:
        """All people, sorted by name."""
        return sorted(self.db.fetch(Person), key=lambda p: normalize_name(p.name))

    def get_person(self, person_id: UUID) -> Person | None:
        """Get a person by id."""
        return self.db.get(Person, person_id)

    def find_person(self, name_or_id: str) -> Person:
        """
        Resolve a person by id or case-insensitive name.

        Raises:
            PersonNotFoundError: If nobody (or more than one person) matches
        """
        try:
            person = self.get_person(UUID(name_or_id))
            if person:
                return person
        except ValueError:
            pass  # not a UUID, match by name

        wanted = normalize_name(name_or_id)
        matches = [p for p in self.db.fetch(Person) if normalize_name(p.name) == wanted]
        if not matches:
            raise PersonNotFoundError(f"No person named '{name_or_id}'")
        if len(matches) > 1:
            raise PersonNotFoundError(
                f"'{name_or_id}' matches {len(matches)} people; use the id instead"
            )
        return matches[0]
