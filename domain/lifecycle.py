"""Case lifecycle: status transitions of an affaire as payments accrue.

Pure domain logic: inputs are never mutated, updated copies are returned so
that a failed validation leaves nothing half-applied for the caller to persist.
Only stdlib and domain imports allowed.
"""

from __future__ import annotations

from dataclasses import replace

from domain.errors import EntityNotFound, InvalidStateError, ValidationFailed
from domain.models import (
    CodeErreur,
    StatutAffaire,
    StatutEncaissement,
    ValidationError,
)
from domain.payment_rules import check_payment_fields
from domain.reconciliation import ZERO, CaseBalanceReconciler


class CaseLifecycle:
    """Single entry point for opening cases and recording payments on them."""

    def __init__(self, reconciler: CaseBalanceReconciler | None = None) -> None:
        self._reconciler = reconciler or CaseBalanceReconciler()

    # ── Queries ────────────────────────────────────────────────────────

    def balance(self, affaire):
        """Balance of a case; only VALIDE payments count as paid."""
        return self._reconciler.compute_balance(
            affaire.montant_total,
            [e.montant for e in affaire.encaissements if e.est_valide],
        )

    @staticmethod
    def derive_status(current, balance):
        """SOLDEE once settled, otherwise the current unsettled status (OUVERTE by default)."""
        if balance.is_settled:
            return StatutAffaire.SOLDEE
        if current is None or current is StatutAffaire.SOLDEE:
            return StatutAffaire.OUVERTE
        return current

    # ── Commands ───────────────────────────────────────────────────────

    def open_case(self, affaire, premier_encaissement, today=None):
        """Validate and open a new case together with its first payment.

        Returns:
            (affaire, balance) where affaire is an updated copy holding the payment.

        Raises:
            ValidationFailed: with every failed rule, before anything is applied.
        """
        if affaire.encaissements:
            raise InvalidStateError(
                f"L'affaire {affaire.numero_affaire} a déjà des encaissements"
            )

        errors = self._check_case_fields(affaire)
        montant = None
        if (
            premier_encaissement is not None
            and premier_encaissement.statut is not StatutEncaissement.REJETE
        ):
            montant = premier_encaissement.montant
        creation_error = self._reconciler.validate_case_creation(
            affaire.montant_total, montant
        )
        if creation_error:
            errors.append(creation_error)
        if premier_encaissement is not None:
            errors.extend(check_payment_fields(premier_encaissement, today))
        if errors:
            raise ValidationFailed(errors)

        premier = replace(premier_encaissement, numero_affaire=affaire.numero_affaire)
        return self._apply(affaire, [premier], StatutAffaire.OUVERTE)

    def record_payment(self, affaire, encaissement, today=None):
        """Validate a new payment, append it and recompute balance and status.

        Pending payments already count against the remaining balance so that
        validating them later can never overdraw the case.
        """
        if encaissement.statut is StatutEncaissement.REJETE:
            raise InvalidStateError("Un encaissement rejeté ne peut pas être enregistré")

        errors = []
        engage = sum(
            (e.montant for e in affaire.encaissements if e.est_engage), ZERO
        )
        payment_error = self._reconciler.validate_new_payment(
            affaire.montant_total, engage, encaissement.montant
        )
        if payment_error:
            errors.append(payment_error)
        errors.extend(check_payment_fields(encaissement, today))
        if affaire.encaissement(encaissement.reference) is not None:
            errors.append(
                ValidationError(
                    code=CodeErreur.DUPLICATE_REFERENCE,
                    message=f"La référence {encaissement.reference} existe déjà",
                    details={"reference": encaissement.reference},
                )
            )
        if errors:
            raise ValidationFailed(errors)

        nouveau = replace(encaissement, numero_affaire=affaire.numero_affaire)
        return self._apply(affaire, [*affaire.encaissements, nouveau], affaire.statut)

    def validate_payment(self, affaire, reference):
        """EN_ATTENTE -> VALIDE, then recompute the case status."""
        return self._transition(affaire, reference, StatutEncaissement.VALIDE)

    def reject_payment(self, affaire, reference):
        """EN_ATTENTE -> REJETE; a rejected payment no longer counts anywhere.

        Raises:
            InvalidStateError: if the case would be left with no payment
                other than rejected ones.
        """
        restants = [
            e for e in affaire.encaissements
            if e.reference != reference and e.est_engage
        ]
        if affaire.encaissement(reference) is not None and not restants:
            raise InvalidStateError(
                f"Impossible de rejeter {reference} : l'affaire "
                f"{affaire.numero_affaire} n'aurait plus aucun encaissement"
            )
        return self._transition(affaire, reference, StatutEncaissement.REJETE)

    # ── Internal helpers ───────────────────────────────────────────────

    def _transition(self, affaire, reference, cible):
        encaissement = affaire.encaissement(reference)
        if encaissement is None:
            raise EntityNotFound(
                f"Encaissement {reference} introuvable sur l'affaire {affaire.numero_affaire}"
            )
        if encaissement.statut is not StatutEncaissement.EN_ATTENTE:
            raise InvalidStateError(
                f"L'encaissement {reference} ne peut plus être modifié "
                f"(statut: {encaissement.statut.value})"
            )
        encaissements = [
            replace(e, statut=cible) if e.reference == reference else e
            for e in affaire.encaissements
        ]
        return self._apply(affaire, encaissements, affaire.statut)

    def _apply(self, affaire, encaissements, statut):
        updated = replace(affaire, encaissements=encaissements)
        balance = self.balance(updated)
        updated.statut = self.derive_status(statut, balance)
        return updated, balance

    @staticmethod
    def _check_case_fields(affaire):
        errors = []
        if affaire.contrevenant is None:
            errors.append(ValidationError(
                code=CodeErreur.MISSING_CONTREVENANT,
                message="Le contrevenant est obligatoire",
            ))
        if affaire.montant_total <= 0:
            errors.append(ValidationError(
                code=CodeErreur.MISSING_FINE_AMOUNT,
                message="Le montant de l'amende doit être renseigné",
            ))
        if not affaire.acteurs:
            errors.append(ValidationError(
                code=CodeErreur.MISSING_ACTOR,
                message="Sélectionnez au moins un acteur (saisissant ou chef)",
            ))
        return errors
