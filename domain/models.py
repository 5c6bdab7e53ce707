"""Domain models — pure Python, zero external dependencies.

Only stdlib (dataclasses, datetime, decimal, enum) and domain.referentiel imports allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from domain.referentiel import Banque, Contravention


class StatutAffaire(Enum):
    """Status of a case. OUVERTE and EN_COURS both mean "not yet settled"."""

    OUVERTE = "OUVERTE"
    EN_COURS = "EN_COURS"
    SOLDEE = "SOLDEE"

    @property
    def est_soldee(self) -> bool:
        return self is StatutAffaire.SOLDEE


class StatutEncaissement(Enum):
    """Status of a payment."""

    EN_ATTENTE = "EN_ATTENTE"
    VALIDE = "VALIDE"
    REJETE = "REJETE"


class ModeReglement(Enum):
    """Payment mode."""

    ESPECES = "ESPECES"
    CHEQUE = "CHEQUE"
    VIREMENT = "VIREMENT"
    MANDAT = "MANDAT"

    @property
    def necessite_banque(self) -> bool:
        return self is ModeReglement.CHEQUE


class StatutMandat(Enum):
    """Status of a fiscal mandate."""

    BROUILLON = "BROUILLON"
    EN_ATTENTE = "EN_ATTENTE"
    ACTIF = "ACTIF"
    CLOTURE = "CLOTURE"


class RoleSurAffaire(Enum):
    """Role of an agent on a case."""

    SAISISSANT = "SAISISSANT"
    CHEF = "CHEF"
    INDICATEUR = "INDICATEUR"


class CodeErreur(Enum):
    """Validation error codes."""

    NON_POSITIVE_AMOUNT = "NonPositiveAmount"
    EXCEEDS_REMAINING_BALANCE = "ExceedsRemainingBalance"
    MISSING_INITIAL_PAYMENT = "MissingInitialPayment"
    AMOUNT_EXCEEDS_TOTAL = "AmountExceedsTotal"
    FUTURE_DATE = "FutureDate"
    MISSING_DATE = "MissingDate"
    MISSING_BANK_REFERENCE = "MissingBankReference"
    MISSING_CONTREVENANT = "MissingContrevenant"
    MISSING_FINE_AMOUNT = "MissingFineAmount"
    MISSING_ACTOR = "MissingActor"
    DUPLICATE_REFERENCE = "DuplicateReference"
    INVALID_PERIOD = "InvalidPeriod"
    NEGATIVE_TOTAL = "NegativeTotal"


# ── Value Objects ───────────────────────────────────────────────────────


_CENTIEME = Decimal("0.01")


@dataclass(frozen=True)
class Balance:
    """Payment state of a case: what was paid, what remains, and whether it is settled."""

    paid: Decimal
    remaining: Decimal
    progress_ratio: Decimal
    is_settled: bool

    @property
    def pourcentage(self) -> Decimal:
        """Progress ratio as a percentage, rounded half-up to 2 decimals."""
        return (self.progress_ratio * 100).quantize(_CENTIEME, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ValidationError:
    """A single business-rule violation, reported to the caller as a message."""

    code: CodeErreur
    message: str
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentPeriodWarning:
    """Non-blocking warning: the payment date falls outside the active mandate."""

    date_encaissement: date
    numero_mandat: str | None
    message: str = "Attention : Date hors du mandat actif (affaire à cheval)"


# ── Entities ────────────────────────────────────────────────────────────


@dataclass
class Contrevenant:
    """The offending party of a case."""

    code: str
    nom: str
    type_contrevenant: str = "PERSONNE_PHYSIQUE"
    adresse: str | None = None
    id: int | None = None


@dataclass
class Agent:
    """An agent who can be assigned to cases."""

    code: str
    nom: str
    grade: str | None = None
    id: int | None = None


@dataclass
class ActeurAffaire:
    """An agent assignment on a case."""

    agent: Agent
    role: RoleSurAffaire


@dataclass
class Encaissement:
    """A payment recorded against a case."""

    reference: str
    date_encaissement: date | None
    montant: Decimal
    mode_reglement: ModeReglement = ModeReglement.ESPECES
    statut: StatutEncaissement = StatutEncaissement.VALIDE
    banque: Banque | None = None
    numero_cheque: str | None = None
    numero_affaire: str | None = None
    numero_mandat: str | None = None
    id: int | None = None

    @property
    def est_valide(self) -> bool:
        return self.statut is StatutEncaissement.VALIDE

    @property
    def est_engage(self) -> bool:
        """True when the amount counts against the remaining balance (not rejected)."""
        return self.statut is not StatutEncaissement.REJETE


@dataclass
class Affaire:
    """A case built on one or more contraventions against a contrevenant."""

    numero_affaire: str
    date_creation: date
    contrevenant: Contrevenant | None = None
    contraventions: list[Contravention] = field(default_factory=list)
    montant_amende_total: Decimal | None = None
    statut: StatutAffaire = StatutAffaire.OUVERTE
    bureau: str | None = None
    service: str | None = None
    centre: str | None = None
    acteurs: list[ActeurAffaire] = field(default_factory=list)
    encaissements: list[Encaissement] = field(default_factory=list)
    id: int | None = None

    @property
    def montant_total(self) -> Decimal:
        """Total fine: the amount set on the case, else the sum of its contraventions."""
        if self.montant_amende_total is not None:
            return self.montant_amende_total
        return sum((c.montant for c in self.contraventions), Decimal("0"))

    def encaissement(self, reference: str) -> Encaissement | None:
        for enc in self.encaissements:
            if enc.reference == reference:
                return enc
        return None


@dataclass
class Mandat:
    """A fiscal period. At most one mandate is ACTIF at any time."""

    numero_mandat: str
    date_debut: date
    date_fin: date
    description: str | None = None
    statut: StatutMandat = StatutMandat.BROUILLON
    date_cloture: datetime | None = None
    id: int | None = None

    @property
    def est_actif(self) -> bool:
        return self.statut is StatutMandat.ACTIF

    def contient(self, jour: date | None) -> bool:
        """True if *jour* falls within [date_debut, date_fin], bounds included."""
        if jour is None:
            return False
        return self.date_debut <= jour <= self.date_fin

    @property
    def periode(self) -> str:
        return (
            f"{self.date_debut.strftime('%d/%m/%Y')} au "
            f"{self.date_fin.strftime('%d/%m/%Y')}"
        )


# ── Result Value Objects ────────────────────────────────────────────────


@dataclass(frozen=True)
class ResultatOperation:
    """Outcome of a case/payment use case, ready for display."""

    affaire: Affaire
    balance: Balance
    avertissement: PaymentPeriodWarning | None = None

    @property
    def message(self) -> str:
        if self.balance.is_settled:
            return f"L'affaire {self.affaire.numero_affaire} est maintenant SOLDÉE"
        return f"L'affaire {self.affaire.numero_affaire} reste {self.affaire.statut.value}"


@dataclass(frozen=True)
class MandatStatistiques:
    """Read-only aggregate figures for one mandate."""

    numero_mandat: str
    nombre_affaires: int
    affaires_soldees: int
    affaires_en_cours: int
    nombre_encaissements: int
    montant_total_encaisse: Decimal
    nombre_agents: int


@dataclass(frozen=True)
class RepartitionResultat:
    """Split of one payment between the indicateur, the FLCF, the Trésor and the beneficiaries.

    parts_agents maps an agent code to the sum of its chef and saisissant shares.
    """

    reference: str
    produit_disponible: Decimal
    part_indicateur: Decimal
    produit_net: Decimal
    part_flcf: Decimal
    part_tresor: Decimal
    produit_net_droits: Decimal
    part_chefs: Decimal
    part_saisissants: Decimal
    part_mutuelle: Decimal
    part_masse_commune: Decimal
    part_interessement: Decimal
    parts_agents: dict[str, Decimal] = field(default_factory=dict)

    @property
    def total_beneficiaires(self) -> Decimal:
        return (
            self.part_chefs + self.part_saisissants + self.part_mutuelle
            + self.part_masse_commune + self.part_interessement
        )

    @property
    def total_reparti(self) -> Decimal:
        return self.part_indicateur + self.part_flcf + self.part_tresor + self.total_beneficiaires

    @property
    def est_coherent(self) -> bool:
        """Both levels of the split add up to the amount they divide."""
        premier_niveau = self.part_flcf + self.part_tresor + self.produit_net_droits
        return (
            premier_niveau == self.produit_net
            and self.total_beneficiaires == self.produit_net_droits
            and self.total_reparti == self.produit_disponible
        )
