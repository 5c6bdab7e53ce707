"""Split of a validated payment between its statutory beneficiaries.

First level: the indicateur (when the case has one) takes 10 % of the payment,
then the FLCF and the Trésor take 10 % and 15 % of what remains. Second level:
the rest is shared between chefs, saisissants, mutuelle, masse commune and
intéressement. Every share is rounded half-up to the cent; the masse commune
takes the rounding difference so that the shares always add up to the payment.

Only stdlib and domain imports allowed.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from domain.errors import InvalidStateError
from domain.models import RepartitionResultat, RoleSurAffaire, StatutEncaissement

TAUX_INDICATEUR = Decimal("0.10")
TAUX_FLCF = Decimal("0.10")
TAUX_TRESOR = Decimal("0.15")

TAUX_CHEFS = Decimal("0.15")
TAUX_SAISISSANTS = Decimal("0.35")
TAUX_MUTUELLE = Decimal("0.05")
TAUX_MASSE_COMMUNE = Decimal("0.30")
TAUX_INTERESSEMENT = Decimal("0.15")

_CENTIEME = Decimal("0.01")
ZERO = Decimal("0")


def arrondir(montant: Decimal) -> Decimal:
    return montant.quantize(_CENTIEME, rounding=ROUND_HALF_UP)


def _codes_par_role(affaire, role):
    codes = []
    for acteur in affaire.acteurs:
        if acteur.role is role and acteur.agent.code not in codes:
            codes.append(acteur.agent.code)
    return codes


def _parts_individuelles(affaire, part_chefs, part_saisissants):
    """Equal split of the chef and saisissant pools; an agent holding both roles gets both."""
    parts: dict[str, Decimal] = {}
    for role, pool in (
        (RoleSurAffaire.CHEF, part_chefs),
        (RoleSurAffaire.SAISISSANT, part_saisissants),
    ):
        codes = _codes_par_role(affaire, role)
        if not codes:
            continue
        part = arrondir(pool / len(codes))
        for code in codes:
            parts[code] = parts.get(code, ZERO) + part
    return parts


def calculer_repartition(encaissement, affaire) -> RepartitionResultat:
    """Compute the split of one payment of a case.

    Raises:
        InvalidStateError: if the payment is not VALIDE or not positive.
    """
    if encaissement.statut is not StatutEncaissement.VALIDE:
        raise InvalidStateError(
            f"Seul un encaissement validé peut être réparti "
            f"({encaissement.reference}: {encaissement.statut.value})"
        )
    produit_disponible = encaissement.montant
    if produit_disponible is None or produit_disponible <= 0:
        raise InvalidStateError(
            f"Montant non réparti pour l'encaissement {encaissement.reference}"
        )

    a_indicateur = any(a.role is RoleSurAffaire.INDICATEUR for a in affaire.acteurs)
    part_indicateur = arrondir(produit_disponible * TAUX_INDICATEUR) if a_indicateur else ZERO
    produit_net = produit_disponible - part_indicateur

    part_flcf = arrondir(produit_net * TAUX_FLCF)
    part_tresor = arrondir(produit_net * TAUX_TRESOR)
    produit_net_droits = produit_net - part_flcf - part_tresor

    part_chefs = arrondir(produit_net_droits * TAUX_CHEFS)
    part_saisissants = arrondir(produit_net_droits * TAUX_SAISISSANTS)
    part_mutuelle = arrondir(produit_net_droits * TAUX_MUTUELLE)
    part_interessement = arrondir(produit_net_droits * TAUX_INTERESSEMENT)
    part_masse_commune = (
        produit_net_droits - part_chefs - part_saisissants - part_mutuelle - part_interessement
    )

    return RepartitionResultat(
        reference=encaissement.reference,
        produit_disponible=produit_disponible,
        part_indicateur=part_indicateur,
        produit_net=produit_net,
        part_flcf=part_flcf,
        part_tresor=part_tresor,
        produit_net_droits=produit_net_droits,
        part_chefs=part_chefs,
        part_saisissants=part_saisissants,
        part_mutuelle=part_mutuelle,
        part_masse_commune=part_masse_commune,
        part_interessement=part_interessement,
        parts_agents=_parts_individuelles(affaire, part_chefs, part_saisissants),
    )
