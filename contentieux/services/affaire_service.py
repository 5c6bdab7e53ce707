"""Case and payment use cases, each run in a single database transaction.

Every entry point (unified case+payment dialog, two-step form, payment form)
goes through these methods, so the "no case without payment" rule and the
overdraw checks are applied the same way everywhere.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

from sqlalchemy.orm import Session

from contentieux.adapters.outbound.sqlalchemy_repos import (
    SqlAlchemyAffaireRepository,
    SqlAlchemyEncaissementRepository,
    SqlAlchemyMandatRepository,
)
from contentieux.services.unit_of_work import transaction
from domain.errors import EntityNotFound
from domain.lifecycle import CaseLifecycle
from domain.mandat_registry import MandatRegistry
from domain.models import Affaire, Encaissement, RepartitionResultat, ResultatOperation
from domain.numerotation import (
    prefixe_affaire,
    prefixe_encaissement,
    prochain_numero_affaire,
    prochain_numero_encaissement,
)
from domain.period_check import check_payment_period
from domain.ports import AffaireRepository, EncaissementRepository
from domain.repartition import calculer_repartition

logger = logging.getLogger(__name__)


class AffaireService:
    """Opens cases and records, validates or rejects their payments."""

    def __init__(
        self,
        session: Session,
        affaires: AffaireRepository,
        encaissements: EncaissementRepository,
        registry: MandatRegistry,
        lifecycle: CaseLifecycle | None = None,
    ) -> None:
        self._session = session
        self._affaires = affaires
        self._encaissements = encaissements
        self._registry = registry
        self._lifecycle = lifecycle or CaseLifecycle()

    @classmethod
    def from_session(cls, session: Session) -> AffaireService:
        """Wire the service on SQLAlchemy repositories sharing *session*."""
        return cls(
            session,
            SqlAlchemyAffaireRepository(session),
            SqlAlchemyEncaissementRepository(session),
            MandatRegistry(SqlAlchemyMandatRepository(session)),
        )

    # ── Commands ───────────────────────────────────────────────────────

    def creer_affaire(
        self,
        affaire: Affaire,
        premier_encaissement: Encaissement | None,
        today: date | None = None,
    ) -> ResultatOperation:
        """Create a case together with its mandatory first payment.

        Both rows are written in one transaction: if the payment insert
        fails, the case is rolled back too.

        Raises:
            ValidationFailed: before anything is written.
        """
        today = today or date.today()
        if not affaire.numero_affaire:
            affaire = replace(affaire, numero_affaire=self._prochain_numero_affaire(today))
        if premier_encaissement is not None:
            premier_encaissement = self._preparer(premier_encaissement, today)

        ouverte, balance = self._lifecycle.open_case(affaire, premier_encaissement, today)
        avertissement = check_payment_period(premier_encaissement.date_encaissement, self._registry)

        with transaction(self._session, f"Création de l'affaire {ouverte.numero_affaire}"):
            self._affaires.save(ouverte)
            for encaissement in ouverte.encaissements:
                self._encaissements.save(encaissement)

        logger.info(
            "Affaire %s créée (%s, encaissé %s / %s)",
            ouverte.numero_affaire, ouverte.statut.value,
            balance.paid, ouverte.montant_total,
        )
        self._signaler(avertissement, ouverte)
        return ResultatOperation(affaire=ouverte, balance=balance, avertissement=avertissement)

    def enregistrer_encaissement(
        self,
        numero_affaire: str,
        encaissement: Encaissement,
        today: date | None = None,
    ) -> ResultatOperation:
        """Record a further payment on an existing case."""
        today = today or date.today()
        affaire = self.charger_affaire(numero_affaire)
        encaissement = self._preparer(encaissement, today)

        updated, balance = self._lifecycle.record_payment(affaire, encaissement, today)
        avertissement = check_payment_period(encaissement.date_encaissement, self._registry)

        with transaction(self._session, f"Encaissement {encaissement.reference}"):
            self._affaires.save(updated)
            self._encaissements.save(updated.encaissements[-1])

        logger.info(
            "Encaissement %s de %s enregistré sur l'affaire %s",
            encaissement.reference, encaissement.montant, numero_affaire,
        )
        self._signaler(avertissement, updated)
        return ResultatOperation(affaire=updated, balance=balance, avertissement=avertissement)

    def valider_encaissement(self, numero_affaire: str, reference: str) -> ResultatOperation:
        """EN_ATTENTE -> VALIDE; the case may become SOLDEE."""
        affaire = self.charger_affaire(numero_affaire)
        updated, balance = self._lifecycle.validate_payment(affaire, reference)
        self._persister_transition(updated, reference, "Validation")
        return ResultatOperation(affaire=updated, balance=balance)

    def rejeter_encaissement(self, numero_affaire: str, reference: str) -> ResultatOperation:
        """EN_ATTENTE -> REJETE; the amount is released from the case."""
        affaire = self.charger_affaire(numero_affaire)
        updated, balance = self._lifecycle.reject_payment(affaire, reference)
        self._persister_transition(updated, reference, "Rejet")
        return ResultatOperation(affaire=updated, balance=balance)

    # ── Queries ────────────────────────────────────────────────────────

    def charger_affaire(self, numero_affaire: str) -> Affaire:
        affaire = self._affaires.load(numero_affaire)
        if affaire is None:
            raise EntityNotFound(f"Affaire introuvable : {numero_affaire}")
        return affaire

    def encaissements(self, numero_affaire: str) -> list[Encaissement]:
        return self._encaissements.list_by_affaire(numero_affaire)

    def situation(self, numero_affaire: str):
        """Current balance of a case."""
        return self._lifecycle.balance(self.charger_affaire(numero_affaire))

    def repartition(self, numero_affaire: str, reference: str) -> RepartitionResultat:
        """Split of a validated payment between its beneficiaries."""
        affaire = self.charger_affaire(numero_affaire)
        encaissement = affaire.encaissement(reference)
        if encaissement is None:
            raise EntityNotFound(
                f"Encaissement {reference} introuvable sur l'affaire {numero_affaire}"
            )
        resultat = calculer_repartition(encaissement, affaire)
        logger.info(
            "Répartition de %s : indicateur %s, FLCF %s, Trésor %s, ayants droit %s",
            reference, resultat.part_indicateur, resultat.part_flcf,
            resultat.part_tresor, resultat.produit_net_droits,
        )
        return resultat

    # ── Internal helpers ───────────────────────────────────────────────

    def _preparer(self, encaissement: Encaissement, today: date) -> Encaissement:
        """Number the payment and tag it with the active mandate."""
        changes = {}
        if not encaissement.reference:
            dernier = self._encaissements.last_reference(prefixe_encaissement(today))
            changes["reference"] = prochain_numero_encaissement(dernier, today)
        if encaissement.numero_mandat is None:
            actif = self._registry.get_active_mandate()
            if actif is not None:
                changes["numero_mandat"] = actif.numero_mandat
        return replace(encaissement, **changes) if changes else encaissement

    def _prochain_numero_affaire(self, today: date) -> str:
        dernier = self._affaires.last_numero(prefixe_affaire(today))
        return prochain_numero_affaire(dernier, today)

    def _persister_transition(self, affaire: Affaire, reference: str, operation: str) -> None:
        encaissement = affaire.encaissement(reference)
        with transaction(self._session, f"{operation} de l'encaissement {reference}"):
            self._encaissements.save(encaissement)
            self._affaires.save(affaire)
        logger.info(
            "%s de l'encaissement %s : affaire %s %s",
            operation, reference, affaire.numero_affaire, affaire.statut.value,
        )

    @staticmethod
    def _signaler(avertissement, affaire: Affaire) -> None:
        if avertissement is not None:
            logger.warning(
                "Affaire %s à cheval : encaissement du %s hors du mandat actif %s",
                affaire.numero_affaire,
                avertissement.date_encaissement,
                avertissement.numero_mandat or "(aucun)",
            )
