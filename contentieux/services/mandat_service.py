"""Mandate use cases: create, activate, close, and per-mandate statistics."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from contentieux.adapters.outbound.sqlalchemy_repos import (
    SqlAlchemyAffaireRepository,
    SqlAlchemyMandatRepository,
)
from contentieux.services.unit_of_work import transaction
from domain.analytics.mandats import statistiques_mandat
from domain.errors import EntityNotFound
from domain.mandat_registry import MandatRegistry
from domain.models import Mandat, MandatStatistiques, StatutMandat
from domain.ports import AffaireRepository

logger = logging.getLogger(__name__)


class MandatService:
    """Transactional wrapper around MandatRegistry."""

    def __init__(
        self, session: Session, registry: MandatRegistry, affaires: AffaireRepository,
    ) -> None:
        self._session = session
        self._registry = registry
        self._affaires = affaires

    @classmethod
    def from_session(cls, session: Session) -> MandatService:
        return cls(
            session,
            MandatRegistry(SqlAlchemyMandatRepository(session)),
            SqlAlchemyAffaireRepository(session),
        )

    @property
    def registry(self) -> MandatRegistry:
        return self._registry

    # ── Commands ───────────────────────────────────────────────────────

    def creer_mandat(self, description, date_debut, date_fin) -> Mandat:
        with transaction(self._session, "Création de mandat"):
            mandat = self._registry.create(description, date_debut, date_fin)
        logger.info("Mandat %s créé (%s)", mandat.numero_mandat, mandat.periode)
        return mandat

    def activer_mandat(self, numero_mandat: str) -> Mandat:
        """Activate a mandate; a concurrent activation fails on the unique index and rolls back."""
        with transaction(self._session, f"Activation du mandat {numero_mandat}"):
            mandat = self._registry.activate(numero_mandat)
        logger.info("Mandat %s actif", numero_mandat)
        return mandat

    def cloturer_mandat(self, numero_mandat: str | None = None) -> Mandat:
        """Close *numero_mandat*, or the active mandate when no number is given."""
        if numero_mandat is None:
            actif = self._registry.get_active_mandate()
            if actif is None:
                raise EntityNotFound("Aucun mandat actif à clôturer")
            numero_mandat = actif.numero_mandat
        with transaction(self._session, f"Clôture du mandat {numero_mandat}"):
            mandat = self._registry.close(numero_mandat)
        logger.info("Mandat %s clôturé", numero_mandat)
        return mandat

    # ── Queries ────────────────────────────────────────────────────────

    def mandat_actif(self) -> Mandat | None:
        return self._registry.get_active_mandate()

    def lister(self, statut: StatutMandat | None = None) -> list[Mandat]:
        return self._registry.list_mandats(statut)

    def statistiques(self, numero_mandat: str) -> MandatStatistiques:
        return statistiques_mandat(numero_mandat, self._affaires.list_all())
