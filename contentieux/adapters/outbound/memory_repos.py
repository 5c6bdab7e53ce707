"""In-memory implementations of the repository ports.

Intended for tests and for running the domain without a database. Objects
are copied in and out so callers never share state with the store.
"""

from __future__ import annotations

from copy import deepcopy

from domain.errors import EntityNotFound, InvalidStateError
from domain.models import Affaire, Encaissement, Mandat, StatutMandat
from domain.ports import AffaireRepository, EncaissementRepository, MandatRepository


def _last_matching(keys, prefix):
    matching = sorted(k for k in keys if k.startswith(prefix))
    return matching[-1] if matching else None


class InMemoryMandatRepository(MandatRepository):
    """MandatRepository backed by a dict; refuses a second ACTIF mandate."""

    def __init__(self) -> None:
        self._store: dict[str, Mandat] = {}
        self._next_id = 1

    def save(self, mandat: Mandat) -> Mandat:
        if mandat.statut is StatutMandat.ACTIF:
            autre = self.find_active()
            if autre is not None and autre.numero_mandat != mandat.numero_mandat:
                raise InvalidStateError(
                    f"Le mandat {autre.numero_mandat} est déjà actif"
                )
        if mandat.id is None:
            existing = self._store.get(mandat.numero_mandat)
            mandat.id = existing.id if existing else self._allocate_id()
        self._store[mandat.numero_mandat] = deepcopy(mandat)
        return mandat

    def find_by_numero(self, numero_mandat: str) -> Mandat | None:
        found = self._store.get(numero_mandat)
        return deepcopy(found) if found else None

    def find_active(self) -> Mandat | None:
        for mandat in self._store.values():
            if mandat.statut is StatutMandat.ACTIF:
                return deepcopy(mandat)
        return None

    def list_all(self, statut: StatutMandat | None = None) -> list[Mandat]:
        return [
            deepcopy(m)
            for numero, m in sorted(self._store.items(), reverse=True)
            if statut is None or m.statut is statut
        ]

    def last_numero(self, prefix: str) -> str | None:
        return _last_matching(self._store, prefix)

    def _allocate_id(self) -> int:
        self._next_id += 1
        return self._next_id - 1


class InMemoryAffaireRepository(AffaireRepository):
    """AffaireRepository backed by a dict; payments live in the paired EncaissementRepository."""

    def __init__(self, encaissements: InMemoryEncaissementRepository | None = None) -> None:
        self._store: dict[str, Affaire] = {}
        self.encaissements = encaissements or InMemoryEncaissementRepository(self)
        self.encaissements.affaires = self

    def save(self, affaire: Affaire) -> Affaire:
        if affaire.id is None:
            existing = self._store.get(affaire.numero_affaire)
            affaire.id = existing.id if existing else len(self._store) + 1
        stored = deepcopy(affaire)
        stored.encaissements = []
        self._store[affaire.numero_affaire] = stored
        return affaire

    def load(self, numero_affaire: str) -> Affaire | None:
        found = self._store.get(numero_affaire)
        if found is None:
            return None
        affaire = deepcopy(found)
        affaire.encaissements = self.encaissements.list_by_affaire(numero_affaire)
        return affaire

    def list_all(self) -> list[Affaire]:
        return [self.load(numero) for numero in sorted(self._store)]

    def last_numero(self, prefix: str) -> str | None:
        return _last_matching(self._store, prefix)

    def __contains__(self, numero_affaire: str) -> bool:
        return numero_affaire in self._store


class InMemoryEncaissementRepository(EncaissementRepository):
    """EncaissementRepository backed by an insertion-ordered dict."""

    def __init__(self, affaires: InMemoryAffaireRepository | None = None) -> None:
        self._store: dict[str, Encaissement] = {}
        self.affaires = affaires

    def save(self, encaissement: Encaissement) -> Encaissement:
        existing = self._store.get(encaissement.reference)
        if existing is not None:
            if existing.numero_affaire != encaissement.numero_affaire:
                raise InvalidStateError(
                    f"La référence {encaissement.reference} est déjà utilisée "
                    f"sur l'affaire {existing.numero_affaire}"
                )
            existing.statut = encaissement.statut
            encaissement.id = existing.id
            return encaissement
        if self.affaires is not None and encaissement.numero_affaire not in self.affaires:
            raise EntityNotFound(f"Affaire {encaissement.numero_affaire} introuvable")
        encaissement.id = len(self._store) + 1
        self._store[encaissement.reference] = deepcopy(encaissement)
        return encaissement

    def list_by_affaire(self, numero_affaire: str) -> list[Encaissement]:
        return [
            deepcopy(e) for e in self._store.values()
            if e.numero_affaire == numero_affaire
        ]

    def last_reference(self, prefix: str) -> str | None:
        return _last_matching(self._store, prefix)
