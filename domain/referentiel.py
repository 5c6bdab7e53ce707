"""Reference data: bureaux, services, centres, banks and contraventions.

Every reference type shares the same code/libelle/description/actif shape, so
lookups and filters work on any of them without knowing the concrete type.
Only stdlib imports allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class ElementReferentiel:
    """Common shape of every reference-data record."""

    code: str
    libelle: str
    description: str | None = None
    actif: bool = True
    id: int | None = None

    def libelle_complet(self) -> str:
        return f"{self.code} - {self.libelle}"


@dataclass
class Bureau(ElementReferentiel):
    pass


@dataclass
class Service(ElementReferentiel):
    pass


@dataclass
class Centre(ElementReferentiel):
    pass


@dataclass
class Banque(ElementReferentiel):
    pass


@dataclass
class Contravention(ElementReferentiel):
    """A fine type, carrying the amount it adds to a case."""

    montant: Decimal = Decimal("0")

    def libelle_complet(self) -> str:
        return f"{self.code} - {self.libelle} ({self.montant} FCFA)"


def actifs(items):
    """Return the active records, keeping their order."""
    return [item for item in items if item.actif]


def trouver_par_code(items, code):
    """Return the record with this code (case-insensitive), or None."""
    if not code:
        return None
    wanted = code.strip().upper()
    for item in items:
        if item.code.upper() == wanted:
            return item
    return None


def rechercher(items, terme, seulement_actifs=True):
    """Search records whose code or libelle contains *terme*."""
    candidats = actifs(items) if seulement_actifs else list(items)
    if not terme:
        return candidats
    needle = terme.strip().lower()
    return [
        item for item in candidats
        if needle in item.code.lower() or needle in item.libelle.lower()
    ]
