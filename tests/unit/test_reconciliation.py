"""Tests for domain.reconciliation: balance computation and payment validation."""

from decimal import Decimal

import pytest

from domain.errors import ValidationFailed
from domain.models import Balance, CodeErreur
from domain.reconciliation import CaseBalanceReconciler, as_montant


class TestComputeBalance:
    """Tests for CaseBalanceReconciler.compute_balance."""

    def test_partial_payments(self):
        balance = CaseBalanceReconciler.compute_balance(
            Decimal("1000"), [Decimal("300"), Decimal("200")]
        )
        assert balance.paid == Decimal("500")
        assert balance.remaining == Decimal("500")
        assert balance.progress_ratio == Decimal("0.5")
        assert balance.is_settled is False

    def test_fully_paid_is_settled(self):
        balance = CaseBalanceReconciler.compute_balance(
            Decimal("1000"), [Decimal("800"), Decimal("200")]
        )
        assert balance.remaining == Decimal("0")
        assert balance.is_settled is True
        assert balance.progress_ratio == Decimal("1")

    def test_no_payments(self):
        balance = CaseBalanceReconciler.compute_balance(Decimal("5000"), [])
        assert balance.paid == Decimal("0")
        assert balance.remaining == Decimal("5000")
        assert balance.progress_ratio == Decimal("0")
        assert balance.is_settled is False

    def test_zero_total_is_never_settled(self):
        balance = CaseBalanceReconciler.compute_balance(Decimal("0"), [])
        assert balance.remaining == Decimal("0")
        assert balance.progress_ratio == Decimal("0")
        assert balance.is_settled is False

    def test_overpaid_remaining_is_clamped_to_zero(self):
        balance = CaseBalanceReconciler.compute_balance(Decimal("1000"), [Decimal("1200")])
        assert balance.remaining == Decimal("0")
        assert balance.is_settled is True

    def test_negative_total_is_refused(self):
        with pytest.raises(ValidationFailed) as exc:
            CaseBalanceReconciler.compute_balance(Decimal("-500"), [Decimal("100")])
        assert exc.value.codes == [CodeErreur.NEGATIVE_TOTAL]
        assert exc.value.errors[0].details == {"total": Decimal("-500")}

    @pytest.mark.parametrize(
        "total,payments",
        [
            ("1000", ["1000"]),
            ("1000", ["250", "250", "250"]),
            ("150000", ["50000", "100000"]),
            ("0.03", ["0.01", "0.01"]),
            ("7", []),
        ],
    )
    def test_remaining_is_total_minus_paid(self, total, payments):
        total = Decimal(total)
        amounts = [Decimal(p) for p in payments]
        balance = CaseBalanceReconciler.compute_balance(total, amounts)
        assert balance.remaining == total - sum(amounts, Decimal("0"))
        assert balance.is_settled == (balance.remaining == 0 and total > 0)

    def test_decimal_arithmetic_has_no_float_drift(self):
        balance = CaseBalanceReconciler.compute_balance(
            Decimal("0.3"), [Decimal("0.1"), Decimal("0.1"), Decimal("0.1")]
        )
        assert balance.remaining == Decimal("0")
        assert balance.is_settled is True

    def test_accepts_int_and_str_amounts(self):
        balance = CaseBalanceReconciler.compute_balance(1000, ["400", 100])
        assert balance.paid == Decimal("500")

    def test_is_idempotent(self):
        payments = [Decimal("100"), Decimal("250")]
        first = CaseBalanceReconciler.compute_balance(Decimal("1000"), payments)
        second = CaseBalanceReconciler.compute_balance(Decimal("1000"), payments)
        assert first == second
        assert payments == [Decimal("100"), Decimal("250")]

    def test_returns_frozen_balance(self):
        balance = CaseBalanceReconciler.compute_balance(Decimal("10"), [Decimal("5")])
        assert isinstance(balance, Balance)
        with pytest.raises(AttributeError):
            balance.paid = Decimal("0")


class TestPourcentage:
    """Display ratio, half-up at 2 decimals."""

    def test_one_third(self):
        balance = CaseBalanceReconciler.compute_balance(Decimal("3"), [Decimal("1")])
        assert balance.pourcentage == Decimal("33.33")

    def test_two_thirds_rounds_up(self):
        balance = CaseBalanceReconciler.compute_balance(Decimal("3"), [Decimal("2")])
        assert balance.pourcentage == Decimal("66.67")

    def test_half_rounds_up(self):
        # 1/8 = 0.125 -> 12.5 %, and 1/800 = 0.00125 -> 0.125 % -> 0.13
        balance = CaseBalanceReconciler.compute_balance(Decimal("800"), [Decimal("1")])
        assert balance.pourcentage == Decimal("0.13")

    def test_settled_is_hundred(self):
        balance = CaseBalanceReconciler.compute_balance(Decimal("500"), [Decimal("500")])
        assert balance.pourcentage == Decimal("100.00")


class TestValidateNewPayment:
    """Tests for CaseBalanceReconciler.validate_new_payment."""

    @pytest.mark.parametrize("montant", ["0", "-1", "-0.01"])
    @pytest.mark.parametrize("total,deja_paye", [("1000", "0"), ("0", "0"), ("1000", "999")])
    def test_rejects_non_positive_amounts(self, montant, total, deja_paye):
        error = CaseBalanceReconciler.validate_new_payment(
            Decimal(total), Decimal(deja_paye), Decimal(montant)
        )
        assert error is not None
        assert error.code is CodeErreur.NON_POSITIVE_AMOUNT

    def test_rejects_missing_amount(self):
        error = CaseBalanceReconciler.validate_new_payment(Decimal("1000"), Decimal("0"), None)
        assert error.code is CodeErreur.NON_POSITIVE_AMOUNT

    def test_rejects_overdraw(self):
        error = CaseBalanceReconciler.validate_new_payment(
            Decimal("1000"), Decimal("800"), Decimal("300")
        )
        assert error is not None
        assert error.code is CodeErreur.EXCEEDS_REMAINING_BALANCE
        assert "200" in error.message
        assert error.details["montant"] == Decimal("300")

    def test_accepts_exact_remaining_and_settles(self):
        error = CaseBalanceReconciler.validate_new_payment(
            Decimal("1000"), Decimal("800"), Decimal("200")
        )
        assert error is None
        balance = CaseBalanceReconciler.compute_balance(
            Decimal("1000"), [Decimal("800"), Decimal("200")]
        )
        assert balance.remaining == Decimal("0")
        assert balance.is_settled is True

    def test_accepts_partial_payment(self):
        assert CaseBalanceReconciler.validate_new_payment(
            Decimal("1000"), Decimal("0"), Decimal("1")
        ) is None


class TestValidateCaseCreation:
    """Tests for CaseBalanceReconciler.validate_case_creation."""

    @pytest.mark.parametrize("premier", [None, Decimal("0"), Decimal("-10")])
    def test_missing_initial_payment(self, premier):
        error = CaseBalanceReconciler.validate_case_creation(Decimal("5000"), premier)
        assert error.code is CodeErreur.MISSING_INITIAL_PAYMENT
        assert "pas d'affaire sans paiement" in error.message

    def test_first_payment_exceeds_total(self):
        error = CaseBalanceReconciler.validate_case_creation(Decimal("5000"), Decimal("6000"))
        assert error.code is CodeErreur.AMOUNT_EXCEEDS_TOTAL

    def test_full_first_payment_is_valid(self):
        assert CaseBalanceReconciler.validate_case_creation(
            Decimal("5000"), Decimal("5000")
        ) is None

    def test_partial_first_payment_is_valid(self):
        assert CaseBalanceReconciler.validate_case_creation(
            Decimal("5000"), Decimal("1000")
        ) is None


class TestAsMontant:
    def test_float_goes_through_str(self):
        assert as_montant(0.1) == Decimal("0.1")

    def test_none(self):
        assert as_montant(None) is None

    def test_decimal_unchanged(self):
        value = Decimal("12.50")
        assert as_montant(value) is value
