"""Tests for domain port interfaces (ABC contracts).

Every port must be an ABC that cannot be instantiated directly.
"""

from __future__ import annotations

from abc import ABC

import pytest

from domain.models import Mandat, StatutMandat
from domain.ports import AffaireRepository, EncaissementRepository, MandatRepository


# ── Repository ports are ABCs ────────────────────────────────────────────


@pytest.mark.parametrize(
    "port", [AffaireRepository, EncaissementRepository, MandatRepository]
)
class TestRepositoryPorts:
    def test_is_abstract(self, port):
        assert issubclass(port, ABC)

    def test_cannot_instantiate(self, port):
        with pytest.raises(TypeError):
            port()


# ── A concrete fake satisfies the contract ──────────────────────────────


class FakeMandatRepository(MandatRepository):
    def __init__(self):
        self.store = {}

    def find_by_numero(self, numero_mandat):
        return self.store.get(numero_mandat)

    def find_active(self):
        return next((m for m in self.store.values() if m.est_actif), None)

    def save(self, mandat):
        self.store[mandat.numero_mandat] = mandat
        return mandat

    def list_all(self, statut=None):
        return [m for m in self.store.values() if statut is None or m.statut is statut]

    def last_numero(self, prefix):
        return max((n for n in self.store if n.startswith(prefix)), default=None)


class TestFakeImplementation:
    def test_concrete_subclass_can_be_instantiated(self):
        repo = FakeMandatRepository()
        assert isinstance(repo, MandatRepository)

    def test_round_trip(self):
        from datetime import date

        repo = FakeMandatRepository()
        mandat = Mandat(
            numero_mandat="2401M0001",
            date_debut=date(2024, 1, 1),
            date_fin=date(2024, 1, 31),
            statut=StatutMandat.ACTIF,
        )
        repo.save(mandat)
        assert repo.find_active() is mandat
        assert repo.last_numero("2401M") == "2401M0001"

    def test_partial_subclass_cannot_be_instantiated(self):
        class Partial(EncaissementRepository):
            def save(self, encaissement):
                return encaissement

        with pytest.raises(TypeError):
            Partial()
