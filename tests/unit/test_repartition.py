"""Tests for domain.repartition.calculer_repartition."""

from datetime import date
from decimal import Decimal

import pytest

from domain.errors import InvalidStateError
from domain.models import (
    ActeurAffaire,
    Affaire,
    Agent,
    Encaissement,
    RepartitionResultat,
    RoleSurAffaire,
    StatutEncaissement,
)
from domain.repartition import (
    TAUX_CHEFS,
    TAUX_INTERESSEMENT,
    TAUX_MASSE_COMMUNE,
    TAUX_MUTUELLE,
    TAUX_SAISISSANTS,
    calculer_repartition,
)


def _acteur(code, role):
    return ActeurAffaire(agent=Agent(code=code, nom=f"Agent {code}"), role=role)


def _affaire(*acteurs):
    return Affaire(
        numero_affaire="240300001",
        date_creation=date(2024, 3, 1),
        montant_amende_total=Decimal("1000000"),
        acteurs=list(acteurs),
    )


def _enc(montant, statut=StatutEncaissement.VALIDE):
    return Encaissement(
        reference="2403R00001",
        date_encaissement=date(2024, 3, 10),
        montant=Decimal(montant),
        statut=statut,
    )


AVEC_INDICATEUR = _affaire(
    _acteur("AG001", RoleSurAffaire.CHEF),
    _acteur("AG002", RoleSurAffaire.CHEF),
    _acteur("AG003", RoleSurAffaire.SAISISSANT),
    _acteur("AG004", RoleSurAffaire.SAISISSANT),
    _acteur("AG005", RoleSurAffaire.SAISISSANT),
    _acteur("AG009", RoleSurAffaire.INDICATEUR),
)

SANS_INDICATEUR = _affaire(
    _acteur("AG001", RoleSurAffaire.CHEF),
    _acteur("AG001", RoleSurAffaire.SAISISSANT),
    _acteur("AG002", RoleSurAffaire.SAISISSANT),
)


class TestPremierNiveau:
    def test_with_indicateur(self):
        r = calculer_repartition(_enc("100000"), AVEC_INDICATEUR)
        assert r.produit_disponible == Decimal("100000")
        assert r.part_indicateur == Decimal("10000.00")
        assert r.produit_net == Decimal("90000.00")
        assert r.part_flcf == Decimal("9000.00")
        assert r.part_tresor == Decimal("13500.00")
        assert r.produit_net_droits == Decimal("67500.00")

    def test_without_indicateur(self):
        r = calculer_repartition(_enc("100000"), SANS_INDICATEUR)
        assert r.part_indicateur == Decimal("0")
        assert r.produit_net == Decimal("100000")
        assert r.part_flcf == Decimal("10000.00")
        assert r.part_tresor == Decimal("15000.00")
        assert r.produit_net_droits == Decimal("75000.00")


class TestSecondNiveau:
    def test_with_indicateur(self):
        r = calculer_repartition(_enc("100000"), AVEC_INDICATEUR)
        assert r.part_chefs == Decimal("10125.00")
        assert r.part_saisissants == Decimal("23625.00")
        assert r.part_mutuelle == Decimal("3375.00")
        assert r.part_masse_commune == Decimal("20250.00")
        assert r.part_interessement == Decimal("10125.00")

    def test_without_indicateur(self):
        r = calculer_repartition(_enc("100000"), SANS_INDICATEUR)
        assert r.part_chefs == Decimal("11250.00")
        assert r.part_saisissants == Decimal("26250.00")
        assert r.part_mutuelle == Decimal("3750.00")
        assert r.part_masse_commune == Decimal("22500.00")
        assert r.part_interessement == Decimal("11250.00")

    def test_rates_cover_the_whole_net(self):
        total = TAUX_CHEFS + TAUX_SAISISSANTS + TAUX_MUTUELLE + TAUX_MASSE_COMMUNE + TAUX_INTERESSEMENT
        assert total == Decimal("1.00")

    def test_masse_commune_absorbs_rounding(self):
        # 8333.32 * 0.30 = 2499.996 would round to 2500.00 and overshoot by a cent
        r = calculer_repartition(_enc("12345.67"), AVEC_INDICATEUR)
        assert r.part_indicateur == Decimal("1234.57")
        assert r.part_tresor == Decimal("1666.67")
        assert r.produit_net_droits == Decimal("8333.32")
        assert r.part_saisissants == Decimal("2916.66")
        assert r.part_mutuelle == Decimal("416.67")
        assert r.part_masse_commune == Decimal("2499.99")


class TestPartsAgents:
    def test_equal_split_between_chefs_and_saisissants(self):
        r = calculer_repartition(_enc("100000"), AVEC_INDICATEUR)
        assert r.parts_agents == {
            "AG001": Decimal("5062.50"),
            "AG002": Decimal("5062.50"),
            "AG003": Decimal("7875.00"),
            "AG004": Decimal("7875.00"),
            "AG005": Decimal("7875.00"),
        }

    def test_indicateur_is_not_a_beneficiary(self):
        r = calculer_repartition(_enc("100000"), AVEC_INDICATEUR)
        assert "AG009" not in r.parts_agents

    def test_chef_and_saisissant_gets_both_shares(self):
        r = calculer_repartition(_enc("100000"), SANS_INDICATEUR)
        assert r.parts_agents["AG001"] == Decimal("11250.00") + Decimal("13125.00")
        assert r.parts_agents["AG002"] == Decimal("13125.00")

    def test_odd_split_rounds_half_up(self):
        affaire = _affaire(*(_acteur(f"AG00{i}", RoleSurAffaire.CHEF) for i in range(1, 4)))
        # net droits 75.01, 75.01 * 0.15 = 11.2515 -> 11.25, then 11.25 / 3 = 3.75
        r = calculer_repartition(_enc("100.01"), affaire)
        assert r.part_chefs == Decimal("11.25")
        assert set(r.parts_agents.values()) == {Decimal("3.75")}

    def test_no_actor_leaves_pools_undistributed(self):
        r = calculer_repartition(_enc("100000"), _affaire())
        assert r.parts_agents == {}
        assert r.part_chefs == Decimal("11250.00")


class TestCoherence:
    @pytest.mark.parametrize("montant", ["100000", "12345.67", "0.07", "1", "999999.99", "33333.33"])
    @pytest.mark.parametrize("affaire", [AVEC_INDICATEUR, SANS_INDICATEUR], ids=["indicateur", "sans"])
    def test_shares_sum_to_the_payment(self, montant, affaire):
        r = calculer_repartition(_enc(montant), affaire)
        assert r.total_reparti == Decimal(montant)
        assert r.total_beneficiaires == r.produit_net_droits
        assert r.est_coherent is True

    def test_smallest_amount(self):
        r = calculer_repartition(_enc("0.07"), SANS_INDICATEUR)
        assert r.part_flcf == Decimal("0.01")
        assert r.part_tresor == Decimal("0.01")
        assert r.produit_net_droits == Decimal("0.05")
        assert r.part_mutuelle == Decimal("0.00")
        assert r.part_masse_commune == Decimal("0.01")

    def test_tampered_result_is_not_coherent(self):
        r = calculer_repartition(_enc("100000"), SANS_INDICATEUR)
        faux = RepartitionResultat(**{**r.__dict__, "part_tresor": Decimal("14999.99")})
        assert faux.est_coherent is False


class TestRefus:
    @pytest.mark.parametrize("statut", [StatutEncaissement.EN_ATTENTE, StatutEncaissement.REJETE])
    def test_only_valid_payments_are_split(self, statut):
        with pytest.raises(InvalidStateError):
            calculer_repartition(_enc("1000", statut), SANS_INDICATEUR)

    def test_non_positive_amount(self):
        with pytest.raises(InvalidStateError):
            calculer_repartition(_enc("0"), SANS_INDICATEUR)

    def test_result_is_frozen(self):
        r = calculer_repartition(_enc("1000"), SANS_INDICATEUR)
        with pytest.raises(AttributeError):
            r.part_flcf = Decimal("0")
