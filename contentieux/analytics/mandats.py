"""Mandate analytics -- pandas facade over the encaissements table.

Amounts stay Decimal (object dtype) and are summed in Python, never as floats.
Domain-pure equivalents: domain.analytics.mandats (statistiques_mandat,
repartition_par_statut).
"""

from decimal import Decimal

import pandas as pd
from sqlalchemy.orm import Session

from contentieux.adapters.outbound.sqlalchemy_models import Affaire, Encaissement

_COLUMNS = [
    "reference", "numero_affaire", "numero_mandat", "date_encaissement",
    "montant", "mode_reglement", "statut", "statut_affaire",
]


def _somme(serie):
    return sum(serie, Decimal("0"))


def encaissements_dataframe(session: Session, numero_mandat: str | None = None) -> pd.DataFrame:
    """All payments joined with their case status, optionally for one mandate."""
    query = (
        session.query(
            Encaissement.reference,
            Affaire.numero_affaire,
            Encaissement.numero_mandat,
            Encaissement.date_encaissement,
            Encaissement.montant,
            Encaissement.mode_reglement,
            Encaissement.statut,
            Affaire.statut.label("statut_affaire"),
        )
        .join(Affaire, Encaissement.affaire_id == Affaire.id)
        .order_by(Encaissement.id)
    )
    if numero_mandat is not None:
        query = query.filter(Encaissement.numero_mandat == numero_mandat)
    return pd.DataFrame(query.all(), columns=_COLUMNS)


def recapitulatif_par_mandat(session: Session) -> pd.DataFrame:
    """One row per mandate: cases, settled cases, VALIDE payments and total collected."""
    df = encaissements_dataframe(session)
    df = df[(df["statut"] == "VALIDE") & df["numero_mandat"].notna()]
    if df.empty:
        return pd.DataFrame(columns=[
            "numero_mandat", "nombre_affaires", "affaires_soldees",
            "nombre_encaissements", "montant_total",
        ])

    soldees = (
        df[df["statut_affaire"] == "SOLDEE"]
        .groupby("numero_mandat")["numero_affaire"]
        .nunique()
    )
    grouped = df.groupby("numero_mandat")
    result = pd.DataFrame({
        "nombre_affaires": grouped["numero_affaire"].nunique(),
        "nombre_encaissements": grouped["reference"].count(),
        "montant_total": grouped["montant"].apply(_somme),
    })
    result["affaires_soldees"] = soldees.reindex(result.index, fill_value=0)
    result = result.reset_index()
    return result[[
        "numero_mandat", "nombre_affaires", "affaires_soldees",
        "nombre_encaissements", "montant_total",
    ]].sort_values("numero_mandat", ascending=False).reset_index(drop=True)


def encaissements_par_mode(session: Session, numero_mandat: str | None = None) -> pd.DataFrame:
    """VALIDE payment count and total per payment mode, largest total first."""
    df = encaissements_dataframe(session, numero_mandat)
    df = df[df["statut"] == "VALIDE"]
    if df.empty:
        return pd.DataFrame(columns=["mode_reglement", "nombre", "montant_total"])
    grouped = df.groupby("mode_reglement")
    result = pd.DataFrame({
        "nombre": grouped["reference"].count(),
        "montant_total": grouped["montant"].apply(_somme),
    }).reset_index()
    return result.sort_values("montant_total", ascending=False).reset_index(drop=True)
