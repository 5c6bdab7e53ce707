from datetime import date
from decimal import Decimal

import pytest

from domain.models import CodeErreur, Encaissement, ModeReglement
from domain.payment_rules import (
    check_bank_reference,
    check_date_not_future,
    check_payment_fields,
)
from domain.referentiel import Banque

TODAY = date(2024, 6, 1)
BANQUE = Banque(code="BQ01", libelle="Banque Atlantique")


def _enc(**kwargs):
    defaults = dict(reference="2406R00001", date_encaissement=date(2024, 5, 30), montant=Decimal("100"))
    defaults.update(kwargs)
    return Encaissement(**defaults)


class TestCheckDateNotFuture:
    def test_past_date(self):
        assert check_date_not_future(_enc(), TODAY) is None

    def test_today_is_allowed(self):
        assert check_date_not_future(_enc(date_encaissement=TODAY), TODAY) is None

    def test_future_date(self):
        error = check_date_not_future(_enc(date_encaissement=date(2024, 6, 2)), TODAY)
        assert error.code is CodeErreur.FUTURE_DATE

    def test_missing_date(self):
        error = check_date_not_future(_enc(date_encaissement=None), TODAY)
        assert error.code is CodeErreur.MISSING_DATE

    def test_defaults_to_system_date(self):
        assert check_date_not_future(_enc(date_encaissement=date(2000, 1, 1))) is None


class TestCheckBankReference:
    @pytest.mark.parametrize(
        "mode", [ModeReglement.ESPECES, ModeReglement.VIREMENT, ModeReglement.MANDAT]
    )
    def test_only_cheque_needs_bank(self, mode):
        assert check_bank_reference(_enc(mode_reglement=mode)) is None

    def test_complete_cheque(self):
        enc = _enc(mode_reglement=ModeReglement.CHEQUE, banque=BANQUE, numero_cheque="0012345")
        assert check_bank_reference(enc) is None

    def test_cheque_without_anything(self):
        error = check_bank_reference(_enc(mode_reglement=ModeReglement.CHEQUE))
        assert error.code is CodeErreur.MISSING_BANK_REFERENCE
        assert error.details["manquants"] == ["banque", "numero_cheque"]

    def test_blank_cheque_number(self):
        enc = _enc(mode_reglement=ModeReglement.CHEQUE, banque=BANQUE, numero_cheque="   ")
        error = check_bank_reference(enc)
        assert error.details["manquants"] == ["numero_cheque"]


class TestCheckPaymentFields:
    def test_valid_payment(self):
        assert check_payment_fields(_enc(), TODAY) == []

    def test_reports_every_failure(self):
        enc = _enc(date_encaissement=date(2025, 1, 1), mode_reglement=ModeReglement.CHEQUE)
        codes = [e.code for e in check_payment_fields(enc, TODAY)]
        assert codes == [CodeErreur.FUTURE_DATE, CodeErreur.MISSING_BANK_REFERENCE]
