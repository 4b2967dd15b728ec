"""Tests for the editable draft and its raw input map."""

from decimal import Decimal
from uuid import uuid4

from swiss_coin.models import SplitDraft, SplitMethod

A, B = uuid4(), uuid4()


class TestSplitDraft:
    def test_total_is_lenient(self):
        assert SplitDraft(amount="$1,200.50").total == Decimal("1200.50")
        assert SplitDraft(amount="12abc").total == Decimal("0")

    def test_change_method_reseeds(self):
        draft = SplitDraft(amount="100")
        draft.set_participants([A, B])
        draft.change_method(SplitMethod.PERCENTAGE)
        draft.raw_inputs[A] = "70"

        draft.change_method(SplitMethod.SHARES)

        assert draft.raw_inputs == {A: "1", B: "1"}

    def test_set_participants_deduplicates_and_reseeds(self):
        draft = SplitDraft(amount="100", split_method=SplitMethod.AMOUNT)
        draft.set_participants([A, B, A])

        assert draft.participants == [A, B]
        assert draft.raw_inputs == {A: "50.00", B: "50.00"}

    def test_toggle_participant(self):
        draft = SplitDraft(amount="90", split_method=SplitMethod.ADJUSTMENT)
        draft.toggle_participant(A)
        draft.toggle_participant(B)
        assert draft.participants == [A, B]

        draft.toggle_participant(A)
        assert draft.participants == [B]
        assert draft.raw_inputs == {B: "0"}
