"""Domain mandate analytics — pure functions, zero external dependencies.

Only stdlib and domain.models imports allowed.
"""

from collections import Counter
from decimal import Decimal

from domain.models import MandatStatistiques, StatutAffaire


def affaires_du_mandat(numero_mandat, affaires):
    """Cases with at least one payment recorded under this mandate."""
    return [
        a for a in affaires
        if any(e.numero_mandat == numero_mandat for e in a.encaissements)
    ]


def statistiques_mandat(numero_mandat, affaires):
    """Aggregate case and payment figures for one mandate.

    Only VALIDE payments recorded under the mandate are counted and summed.
    """
    concernees = affaires_du_mandat(numero_mandat, affaires)
    encaissements = [
        e
        for a in concernees
        for e in a.encaissements
        if e.numero_mandat == numero_mandat and e.est_valide
    ]
    agents = {acteur.agent.code for a in concernees for acteur in a.acteurs}
    soldees = sum(1 for a in concernees if a.statut is StatutAffaire.SOLDEE)
    return MandatStatistiques(
        numero_mandat=numero_mandat,
        nombre_affaires=len(concernees),
        affaires_soldees=soldees,
        affaires_en_cours=len(concernees) - soldees,
        nombre_encaissements=len(encaissements),
        montant_total_encaisse=sum((e.montant for e in encaissements), Decimal("0")),
        nombre_agents=len(agents),
    )


def repartition_par_statut(affaires):
    """Count cases per status value, every status present even when zero."""
    counts = Counter(a.statut for a in affaires)
    return {statut.value: counts.get(statut, 0) for statut in StatutAffaire}
