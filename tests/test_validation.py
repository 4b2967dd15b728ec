"""Tests for pre-commit validation."""

from decimal import Decimal
from uuid import uuid4

import pytest

from swiss_coin.exceptions import (
    AmountsDoNotMatchTotalError,
    AmountTooLargeError,
    EmptyTitleError,
    InvalidSharesError,
    NonPositiveAmountError,
    PayerAmountsMismatchError,
    PercentagesNotFullError,
    SplitValidationError,
)
from swiss_coin.models import SplitDraft, SplitMethod
from swiss_coin.validation import (
    validate_draft,
    validate_payers,
    validate_split_inputs,
    validate_title,
    validate_total,
)

A, B, C = uuid4(), uuid4(), uuid4()


class TestTitle:
    def test_trims(self):
        assert validate_title("  Dinner  ") == "Dinner"

    def test_blank_rejected(self):
        with pytest.raises(EmptyTitleError) as exc_info:
            validate_title("   ")
        assert exc_info.value.kind == "EmptyTitle"
        assert str(exc_info.value) == "Please enter a title"


class TestTotal:
    @pytest.mark.parametrize("total", ["0", "-5", "0.001"])
    def test_non_positive(self, total):
        with pytest.raises(NonPositiveAmountError):
            validate_total(Decimal(total))

    def test_smallest_valid(self):
        validate_total(Decimal("0.01"))

    def test_too_large(self):
        with pytest.raises(AmountTooLargeError):
            validate_total(Decimal("1000000000"))

    def test_custom_maximum(self):
        with pytest.raises(AmountTooLargeError):
            validate_total(Decimal("101"), max_amount=Decimal("100"))


class TestPayers:
    def test_single_payer_needs_no_amount(self):
        validate_payers(Decimal("100"), {A: ""})

    def test_multiple_payers_must_match(self):
        validate_payers(Decimal("100"), {A: "60", B: "40"})
        validate_payers(Decimal("100"), {A: "60", B: "39.99"})

    def test_mismatch(self):
        with pytest.raises(PayerAmountsMismatchError) as exc_info:
            validate_payers(Decimal("100"), {A: "60", B: "30"})
        assert exc_info.value.paid == Decimal("90")


class TestSplitInputs:
    def test_percentages_must_be_full(self):
        with pytest.raises(PercentagesNotFullError) as exc_info:
            validate_split_inputs(
                Decimal("250"),
                [A, B, C],
                {A: "50", B: "30", C: "19"},
                SplitMethod.PERCENTAGE,
            )
        assert exc_info.value.kind == "PercentagesNotFull"
        assert exc_info.value.total_percent == Decimal("99")

    def test_seeded_thirds_are_within_tolerance(self):
        validate_split_inputs(
            Decimal("100"),
            [A, B, C],
            {A: "33.3", B: "33.3", C: "33.3"},
            SplitMethod.PERCENTAGE,
        )

    def test_amounts_must_match_total(self):
        with pytest.raises(AmountsDoNotMatchTotalError) as exc_info:
            validate_split_inputs(
                Decimal("100"), [A, B], {A: "40", B: "50"}, SplitMethod.AMOUNT
            )
        assert exc_info.value.kind == "AmountsDoNotMatchTotal"
        assert exc_info.value.entered == Decimal("90")

    def test_amounts_within_a_cent(self):
        validate_split_inputs(
            Decimal("100"), [A, B], {A: "50", B: "49.99"}, SplitMethod.AMOUNT
        )

    @pytest.mark.parametrize("raw", ["0", "1.5", "-2"])
    def test_invalid_shares(self, raw):
        with pytest.raises(InvalidSharesError):
            validate_split_inputs(
                Decimal("90"), [A, B], {A: raw, B: "1"}, SplitMethod.SHARES
            )

    def test_blank_share_is_accepted(self):
        validate_split_inputs(Decimal("90"), [A, B], {A: "", B: "2"}, SplitMethod.SHARES)

    def test_equal_and_adjustment_have_no_sum_check(self):
        validate_split_inputs(Decimal("90"), [A, B], {}, SplitMethod.EQUAL)
        validate_split_inputs(
            Decimal("90"), [A, B], {A: "5", B: "7"}, SplitMethod.ADJUSTMENT
        )


class TestValidateDraft:
    """Checks run in order and stop at the first failure."""

    def test_title_checked_before_amount(self, settings):
        draft = SplitDraft(title=" ", amount="0")
        with pytest.raises(EmptyTitleError):
            validate_draft(draft, settings)

    def test_amount_checked_before_inputs(self, settings):
        draft = SplitDraft(
            title="Dinner",
            amount="",
            participants=[A, B],
            split_method=SplitMethod.PERCENTAGE,
            raw_inputs={A: "10"},
        )
        with pytest.raises(NonPositiveAmountError):
            validate_draft(draft, settings)

    def test_payers_checked_before_inputs(self, settings):
        draft = SplitDraft(
            title="Dinner",
            amount="100",
            participants=[A, B],
            split_method=SplitMethod.PERCENTAGE,
            raw_inputs={A: "10"},
            payer_inputs={A: "10", B: "10"},
        )
        with pytest.raises(PayerAmountsMismatchError):
            validate_draft(draft, settings)

    def test_valid_draft_returns_trimmed_title(self, settings):
        draft = SplitDraft(title=" Dinner ", amount="$90", participants=[A, B])
        assert validate_draft(draft, settings) == "Dinner"

    def test_all_errors_are_value_errors(self, settings):
        with pytest.raises(ValueError):
            validate_draft(SplitDraft(title="", amount="10"), settings)
        assert issubclass(PercentagesNotFullError, SplitValidationError)
