#!/usr/bin/env python3
"""Load a small demo data set: one active mandate, three cases in various states.

Usage:
    PYTHONPATH=. python scripts/load_demo_data.py

One case is settled, one is partially paid with a pending cheque, and one
was paid after the end of the active mandate ("affaire à cheval").
"""
import os
import sys
from datetime import date
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from contentieux.app import create_app
from domain.models import (
    ActeurAffaire, Affaire, Agent, Contrevenant, Encaissement,
    ModeReglement, RoleSurAffaire, StatutEncaissement,
)
from domain.referentiel import Banque, Contravention

DB_URL = "sqlite:///data/contentieux_demo.db"


def main():
    app = create_app(database_url=DB_URL)
    today = date(2024, 2, 5)

    chef = Agent(code="AG001", nom="DIALLO Mamadou", grade="Inspecteur")
    saisissant = Agent(code="AG002", nom="NDIAYE Awa", grade="Contrôleur")
    acteurs = [
        ActeurAffaire(agent=chef, role=RoleSurAffaire.CHEF),
        ActeurAffaire(agent=saisissant, role=RoleSurAffaire.SAISISSANT),
    ]

    with app.mandats() as mandats:
        mandat = mandats.creer_mandat("Mandat de janvier", date(2024, 1, 1), date(2024, 1, 31))
        mandats.activer_mandat(mandat.numero_mandat)

    with app.affaires() as affaires:
        # Affaire 1: settled with a single cash payment
        affaires.creer_affaire(
            Affaire(
                numero_affaire="",
                date_creation=date(2024, 1, 10),
                contrevenant=Contrevenant(code="CV001", nom="Société KANE SARL"),
                contraventions=[
                    Contravention(code="C01", libelle="Défaut de déclaration", montant=Decimal("50000")),
                ],
                acteurs=acteurs,
                centre="CTR01",
            ),
            Encaissement(reference="", date_encaissement=date(2024, 1, 10), montant=Decimal("50000")),
            today=today,
        )

        # Affaire 2: partial payment, then a pending cheque
        resultat = affaires.creer_affaire(
            Affaire(
                numero_affaire="",
                date_creation=date(2024, 1, 15),
                contrevenant=Contrevenant(code="CV002", nom="SOW Ibrahima"),
                montant_amende_total=Decimal("200000"),
                acteurs=acteurs,
                centre="CTR01",
            ),
            Encaissement(reference="", date_encaissement=date(2024, 1, 15), montant=Decimal("80000")),
            today=today,
        )
        affaires.enregistrer_encaissement(
            resultat.affaire.numero_affaire,
            Encaissement(
                reference="",
                date_encaissement=date(2024, 1, 25),
                montant=Decimal("70000"),
                mode_reglement=ModeReglement.CHEQUE,
                statut=StatutEncaissement.EN_ATTENTE,
                banque=Banque(code="BQ01", libelle="Banque Atlantique"),
                numero_cheque="0012345",
            ),
            today=today,
        )

        # Affaire 3: paid after the mandate ended
        affaires.creer_affaire(
            Affaire(
                numero_affaire="",
                date_creation=date(2024, 1, 30),
                contrevenant=Contrevenant(code="CV003", nom="Établissements FALL"),
                montant_amende_total=Decimal("150000"),
                acteurs=acteurs[:1],
                centre="CTR02",
            ),
            Encaissement(reference="", date_encaissement=date(2024, 2, 5), montant=Decimal("150000")),
            today=today,
        )

    print(f"Demo data loaded into {DB_URL}")


if __name__ == "__main__":
    main()
