"""Tests for interactive prompt helpers."""

from prompt_toolkit.document import Document

from swiss_coin.models import Person, SplitMethod
from swiss_coin.ui import PersonCompleter, prompt_raw_inputs


def completions(completer, text):
    return [c.text for c in completer.get_completions(Document(text), None)]


class TestPersonCompleter:
    def test_empty_query_lists_everyone(self):
        completer = PersonCompleter([Person(name="Alice"), Person(name="Bob")])
        assert completions(completer, "") == ["Alice", "Bob"]

    def test_fuzzy_match(self):
        completer = PersonCompleter(
            [Person(name="Alice"), Person(name="Bob B."), Person(name="Carol")]
        )
        assert completions(completer, "ali") == ["Alice"]
        assert completions(completer, "bb") == ["Bob B."]
        assert completions(completer, "co") == ["Carol"]
        assert completions(completer, "xyz") == []

    def test_name_to_id(self):
        alice = Person(name="Alice")
        completer = PersonCompleter([alice])
        assert completer.name_to_id == {"Alice": alice.id}


def test_equal_split_needs_no_prompt():
    assert prompt_raw_inputs([Person(name="Alice")], SplitMethod.EQUAL, {}) == {}
