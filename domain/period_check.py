"""Mandate-period soft check — pure function, zero external dependencies.

Only stdlib and domain imports allowed.
"""

from domain.models import PaymentPeriodWarning


def check_payment_period(payment_date, registry):
    """Warn when a payment falls outside the active mandate ("affaire à cheval").

    Advisory only: callers must never refuse a save because of it.
    Returns None when the date lies within the active mandate.
    """
    if registry.is_within_active_mandate(payment_date):
        return None
    actif = registry.get_active_mandate()
    return PaymentPeriodWarning(
        date_encaissement=payment_date,
        numero_mandat=actif.numero_mandat if actif else None,
    )
