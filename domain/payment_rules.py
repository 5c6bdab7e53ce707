"""Payment field rules — pure functions, zero external dependencies.

Each rule returns a ValidationError, or None when the payment passes.
Only stdlib and domain.models imports allowed.
"""

from datetime import date

from domain.models import CodeErreur, ValidationError


def check_date_not_future(encaissement, today=None):
    """Check that the payment is dated and not later than today."""
    if encaissement.date_encaissement is None:
        return ValidationError(
            code=CodeErreur.MISSING_DATE,
            message="La date d'encaissement est obligatoire",
        )
    today = today or date.today()
    if encaissement.date_encaissement > today:
        return ValidationError(
            code=CodeErreur.FUTURE_DATE,
            message="La date d'encaissement ne peut pas être dans le futur",
            details={
                "date": str(encaissement.date_encaissement),
                "aujourd_hui": str(today),
            },
        )
    return None


def check_bank_reference(encaissement):
    """Check that bank and cheque number are both present when the mode needs them."""
    if not encaissement.mode_reglement.necessite_banque:
        return None
    manquants = []
    if encaissement.banque is None:
        manquants.append("banque")
    if not (encaissement.numero_cheque or "").strip():
        manquants.append("numero_cheque")
    if manquants:
        return ValidationError(
            code=CodeErreur.MISSING_BANK_REFERENCE,
            message="La banque et le numéro de chèque sont obligatoires pour un chèque",
            details={"manquants": manquants},
        )
    return None


def check_payment_fields(encaissement, today=None):
    """Run every field rule and return the list of failures."""
    results = [
        check_date_not_future(encaissement, today),
        check_bank_reference(encaissement),
    ]
    return [r for r in results if r is not None]
