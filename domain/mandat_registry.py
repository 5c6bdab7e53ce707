"""Mandate registry: which fiscal period is currently active.

The registry holds no state of its own: the repository is the single source
of truth, and the "one ACTIF mandate" rule is also enforced by the data layer.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from domain.errors import EntityNotFound, InvalidStateError, ValidationFailed
from domain.models import CodeErreur, Mandat, StatutMandat, ValidationError
from domain.numerotation import prefixe_mandat, prochain_numero_mandat
from domain.ports import MandatRepository


class MandatRegistry:
    """Creates, activates and closes mandates through a MandatRepository."""

    def __init__(self, repository: MandatRepository) -> None:
        self._repository = repository

    # ── Queries ────────────────────────────────────────────────────────

    def get_active_mandate(self) -> Mandat | None:
        return self._repository.find_active()

    def is_within_active_mandate(self, jour: date | None) -> bool:
        """True iff a mandate is active and *jour* falls within its bounds (inclusive)."""
        actif = self.get_active_mandate()
        return actif is not None and actif.contient(jour)

    def list_mandats(self, statut: StatutMandat | None = None) -> list[Mandat]:
        return self._repository.list_all(statut)

    # ── Commands ───────────────────────────────────────────────────────

    def create(self, description, date_debut, date_fin) -> Mandat:
        """Create a BROUILLON mandate numbered after the month of *date_debut*."""
        if date_debut is None or date_fin is None or date_debut > date_fin:
            raise ValidationFailed([
                ValidationError(
                    code=CodeErreur.INVALID_PERIOD,
                    message="La date de début doit être avant la date de fin",
                    details={"debut": str(date_debut), "fin": str(date_fin)},
                )
            ])
        dernier = self._repository.last_numero(prefixe_mandat(date_debut))
        mandat = Mandat(
            numero_mandat=prochain_numero_mandat(dernier, date_debut),
            date_debut=date_debut,
            date_fin=date_fin,
            description=description,
        )
        return self._repository.save(mandat)

    def activate(self, numero_mandat: str) -> Mandat:
        """Make *numero_mandat* the only ACTIF mandate.

        The previously active mandate goes back to EN_ATTENTE first, so the
        data layer never sees two active rows.
        """
        mandat = self._get(numero_mandat)
        if mandat.statut is StatutMandat.ACTIF:
            return mandat
        if mandat.statut is StatutMandat.CLOTURE:
            raise InvalidStateError(
                f"Impossible d'activer le mandat clôturé {numero_mandat}"
            )

        precedent = self._repository.find_active()
        if precedent is not None:
            self._repository.save(replace(precedent, statut=StatutMandat.EN_ATTENTE))
        return self._repository.save(replace(mandat, statut=StatutMandat.ACTIF))

    def close(self, numero_mandat: str, now: datetime | None = None) -> Mandat:
        """ACTIF -> CLOTURE. A closed mandate can never change again."""
        mandat = self._get(numero_mandat)
        if mandat.statut is not StatutMandat.ACTIF:
            raise InvalidStateError(
                f"Le mandat {numero_mandat} n'est pas actif "
                f"(statut: {mandat.statut.value})"
            )
        return self._repository.save(
            replace(mandat, statut=StatutMandat.CLOTURE, date_cloture=now or datetime.now())
        )

    # ── Internal helpers ───────────────────────────────────────────────

    def _get(self, numero_mandat: str) -> Mandat:
        mandat = self._repository.find_by_numero(numero_mandat)
        if mandat is None:
            raise EntityNotFound(f"Mandat introuvable : {numero_mandat}")
        return mandat
