"""Interactive prompts for choosing participants and entering split inputs."""

import logging
from typing import Any
from uuid import UUID

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .models import Person, RawInputs, SplitMethod

logger = logging.getLogger(__name__)

_INPUT_LABELS = {
    SplitMethod.PERCENTAGE: "%",
    SplitMethod.AMOUNT: "amount",
    SplitMethod.ADJUSTMENT: "+/- adjustment",
    SplitMethod.SHARES: "shares",
}


class PersonCompleter(Completer):
    """Fuzzy search completer for people."""

    def __init__(self, people: list[Person]):
        """Initialize the completer with the known people."""
        self.people = people
        self.name_to_id = {person.name: person.id for person in people}

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for person in self.people:
            if not query or self._fuzzy_match(query, person.name.lower()):
                yield Completion(
                    text=person.name,
                    start_position=-len(document.text),
                    display=person.name,
                )

    def _fuzzy_match(self, query: str, text: str) -> bool:
        """
        Fuzzy match: all characters in query must appear in order in text.

        Example:
            query="al" matches "Alice"
            query="bb" matches "Bob B."
        """
        query_idx = 0
        for char in text:
            if query_idx < len(query) and char == query[query_idx]:
                query_idx += 1
        return query_idx == len(query)


def select_participants_interactive(people: list[Person]) -> list[UUID]:
    """
    Pick participants one at a time with fuzzy search.

    An empty line finishes the selection; Ctrl+C cancels it.

    Returns:
        Selected person ids in the order they were picked
    """
    completer = PersonCompleter(people)
    session: PromptSession[str] = PromptSession(completer=completer)
    selected: list[UUID] = []

    print("\n👥 Who is splitting? Type to search, Enter on an empty line to finish\n")

    try:
        while True:
            result = session.prompt("Person: ", complete_while_typing=True).strip()
            if not result:
                return selected

            person_id = completer.name_to_id.get(result)
            if person_id is None:
                print("❌ Unknown person. Please select from the list or press Tab to complete.")
                continue

            if person_id not in selected:
                selected.append(person_id)
                logger.info(f"User selected participant: {result}")

    except KeyboardInterrupt:
        print("\n⏭️  Cancelled")
        return []
    except EOFError:
        return selected


def prompt_raw_inputs(
    people: list[Person],
    method: SplitMethod,
    seeds: RawInputs,
    max_shares: int = 99,
) -> RawInputs:
    """
    Ask for each participant's raw input, pre-filled with the method's seed.

    Args:
        people: Participants, in display order
        method: Active split method
        seeds: Default raw inputs to pre-fill
        max_shares: Upper bound accepted for share counts

    Returns:
        The entered Raw Input Map (seeds for anyone skipped)
    """
    if method == SplitMethod.EQUAL:
        return {}

    session: PromptSession[str] = PromptSession()
    raw_inputs = dict(seeds)
    label = _INPUT_LABELS[method]

    try:
        for person in people:
            value = session.prompt(
                f"{person.name} ({label}): ", default=seeds.get(person.id, "")
            ).strip()
            if method == SplitMethod.SHARES and value.isdigit() and int(value) > max_shares:
                print(f"   Capped at {max_shares} shares")
                value = str(max_shares)
            raw_inputs[person.id] = value
    except (KeyboardInterrupt, EOFError):
        print("\n⏭️  Keeping defaults for the remaining people")

    return raw_inputs


def confirm(message: str) -> bool:
    """Simple yes/no confirmation."""
    response = input(f"{message} [y/N] ").strip().lower()
    return response in ("y", "yes")
