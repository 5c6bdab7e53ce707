"""Case balance reconciliation — pure functions, zero external dependencies.

Only stdlib and domain imports allowed.
"""

from __future__ import annotations

from decimal import Decimal

from domain.errors import ValidationFailed
from domain.models import Balance, CodeErreur, ValidationError
from domain.normalization import format_montant

ZERO = Decimal("0")


def as_montant(value) -> Decimal | None:
    """Coerce an int/str/float/Decimal amount to Decimal (floats go through str)."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class CaseBalanceReconciler:
    """Balance and validation rules for the payments of a single case."""

    @staticmethod
    def compute_balance(total_amount, payments) -> Balance:
        """Compute paid, remaining, progress ratio and settlement for a case.

        Args:
            total_amount: Total fine amount of the case.
            payments: Amounts of the payments that count (VALIDE ones).

        Raises:
            ValidationFailed: if the total is negative.
        """
        total = as_montant(total_amount)
        if total < 0:
            raise ValidationFailed([
                ValidationError(
                    code=CodeErreur.NEGATIVE_TOTAL,
                    message="Le montant total de l'affaire ne peut pas être négatif",
                    details={"total": total},
                )
            ])
        paid = sum((as_montant(p) for p in payments), ZERO)
        remaining = max(total - paid, ZERO)
        ratio = paid / total if total > 0 else ZERO
        return Balance(
            paid=paid,
            remaining=remaining,
            progress_ratio=ratio,
            is_settled=remaining == 0 and total > 0,
        )

    @staticmethod
    def validate_new_payment(total_amount, already_paid, new_payment_amount):
        """Return a ValidationError if the payment is not positive or overdraws the case."""
        montant = as_montant(new_payment_amount)
        if montant is None or montant <= 0:
            return ValidationError(
                code=CodeErreur.NON_POSITIVE_AMOUNT,
                message="Le montant encaissé doit être positif",
                details={"montant": montant},
            )
        total = as_montant(total_amount)
        deja_paye = as_montant(already_paid) or ZERO
        if deja_paye + montant > total:
            return ValidationError(
                code=CodeErreur.EXCEEDS_REMAINING_BALANCE,
                message=(
                    f"Le montant {format_montant(montant)} dépasse le solde restant "
                    f"{format_montant(max(total - deja_paye, ZERO))}"
                ),
                details={
                    "total": total,
                    "deja_paye": deja_paye,
                    "montant": montant,
                },
            )
        return None

    @staticmethod
    def validate_case_creation(total_amount, first_payment_amount):
        """Return a ValidationError if a case cannot be created with this first payment.

        A case never exists without a positive first payment.
        """
        premier = as_montant(first_payment_amount)
        if premier is None or premier <= 0:
            return ValidationError(
                code=CodeErreur.MISSING_INITIAL_PAYMENT,
                message=(
                    "Le montant encaissé est obligatoire "
                    "(règle : pas d'affaire sans paiement)"
                ),
                details={"montant": premier},
            )
        total = as_montant(total_amount)
        if premier > total:
            return ValidationError(
                code=CodeErreur.AMOUNT_EXCEEDS_TOTAL,
                message="Montant encaissé supérieur à l'amende !",
                details={"total": total, "montant": premier},
            )
        return None
