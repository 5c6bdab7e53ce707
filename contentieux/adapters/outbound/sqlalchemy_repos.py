"""SQLAlchemy implementations of domain repository ports.

Each adapter translates between ORM models (sqlalchemy_models) and
pure domain models (domain.models), keeping the domain layer free
of any infrastructure dependency. Adapters only flush: committing or
rolling back is the calling service's job.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from contentieux.adapters.outbound.sqlalchemy_models import (
    Affaire as OrmAffaire,
    AffaireActeur as OrmAffaireActeur,
    AffaireContravention as OrmAffaireContravention,
    Agent as OrmAgent,
    Contrevenant as OrmContrevenant,
    Encaissement as OrmEncaissement,
    Mandat as OrmMandat,
)
from domain.errors import EntityNotFound, InvalidStateError
from domain.models import (
    ActeurAffaire,
    Affaire as DomainAffaire,
    Agent as DomainAgent,
    Contrevenant as DomainContrevenant,
    Encaissement as DomainEncaissement,
    Mandat as DomainMandat,
    ModeReglement,
    RoleSurAffaire,
    StatutAffaire,
    StatutEncaissement,
    StatutMandat,
)
from domain.ports import AffaireRepository, EncaissementRepository, MandatRepository
from domain.referentiel import Banque, Contravention


def _last_matching(session: Session, column, prefix: str) -> str | None:
    """Return the greatest value of *column* starting with *prefix*."""
    stmt = (
        select(column)
        .where(column.like(f"{prefix}%"))
        .order_by(column.desc())
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()


class SqlAlchemyEncaissementRepository(EncaissementRepository):
    """SQLAlchemy adapter for the EncaissementRepository port."""

    def __init__(self, session: Session) -> None:
        self._session = session

    # ── Commands ───────────────────────────────────────────────────────

    def save(self, encaissement: DomainEncaissement) -> DomainEncaissement:
        """Insert a new payment, or update the status of an existing one.

        Everything but the status is immutable once recorded.

        Raises:
            InvalidStateError: if the reference is already used on another case.
        """
        existing = self._session.execute(
            select(OrmEncaissement).where(OrmEncaissement.reference == encaissement.reference)
        ).scalar_one_or_none()
        if existing is not None:
            if existing.affaire.numero_affaire != encaissement.numero_affaire:
                raise InvalidStateError(
                    f"La référence {encaissement.reference} est déjà utilisée "
                    f"sur l'affaire {existing.affaire.numero_affaire}"
                )
            existing.statut = encaissement.statut.value
            self._session.flush()
            encaissement.id = existing.id
            return encaissement

        affaire_id = self._session.execute(
            select(OrmAffaire.id).where(OrmAffaire.numero_affaire == encaissement.numero_affaire)
        ).scalar_one_or_none()
        if affaire_id is None:
            raise EntityNotFound(f"Affaire {encaissement.numero_affaire} introuvable")

        orm_obj = OrmEncaissement(
            reference=encaissement.reference,
            affaire_id=affaire_id,
            date_encaissement=encaissement.date_encaissement,
            montant=encaissement.montant,
            mode_reglement=encaissement.mode_reglement.value,
            statut=encaissement.statut.value,
            banque_code=encaissement.banque.code if encaissement.banque else None,
            banque_libelle=encaissement.banque.libelle if encaissement.banque else None,
            numero_cheque=encaissement.numero_cheque,
            numero_mandat=encaissement.numero_mandat,
        )
        self._session.add(orm_obj)
        self._session.flush()
        encaissement.id = orm_obj.id
        return encaissement

    # ── Queries ────────────────────────────────────────────────────────

    def list_by_affaire(self, numero_affaire: str) -> list[DomainEncaissement]:
        """Return the payments of a case in recording order."""
        stmt = (
            select(OrmEncaissement)
            .join(OrmAffaire, OrmEncaissement.affaire_id == OrmAffaire.id)
            .where(OrmAffaire.numero_affaire == numero_affaire)
            .order_by(OrmEncaissement.id)
        )
        return [
            self.to_domain(orm, numero_affaire)
            for orm in self._session.scalars(stmt)
        ]

    def last_reference(self, prefix: str) -> str | None:
        return _last_matching(self._session, OrmEncaissement.reference, prefix)

    # ── Internal helpers ───────────────────────────────────────────────

    @staticmethod
    def to_domain(orm: OrmEncaissement, numero_affaire: str | None = None) -> DomainEncaissement:
        """Convert an ORM Encaissement row to a domain Encaissement."""
        banque = None
        if orm.banque_code:
            banque = Banque(code=orm.banque_code, libelle=orm.banque_libelle or orm.banque_code)
        return DomainEncaissement(
            reference=orm.reference,
            date_encaissement=orm.date_encaissement,
            montant=orm.montant,
            mode_reglement=ModeReglement(orm.mode_reglement),
            statut=StatutEncaissement(orm.statut),
            banque=banque,
            numero_cheque=orm.numero_cheque,
            numero_affaire=numero_affaire or orm.affaire.numero_affaire,
            numero_mandat=orm.numero_mandat,
            id=orm.id,
        )


class SqlAlchemyAffaireRepository(AffaireRepository):
    """SQLAlchemy adapter for the AffaireRepository port.

    Payments are written through SqlAlchemyEncaissementRepository; this
    adapter only reads them back when loading a case.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ── Commands ───────────────────────────────────────────────────────

    def save(self, affaire: DomainAffaire) -> DomainAffaire:
        """Insert a new case with its contraventions and actors, or update an existing one.

        On update only the status, total and organisational codes change:
        the case number and its composition are fixed at creation.
        """
        orm = self._session.execute(
            select(OrmAffaire).where(OrmAffaire.numero_affaire == affaire.numero_affaire)
        ).scalar_one_or_none()

        if orm is None:
            orm = OrmAffaire(
                numero_affaire=affaire.numero_affaire,
                date_creation=affaire.date_creation,
                contrevenant_id=self._contrevenant_id(affaire.contrevenant),
            )
            orm.contraventions = [
                OrmAffaireContravention(code=c.code, libelle=c.libelle, montant=c.montant)
                for c in affaire.contraventions
            ]
            orm.acteurs = [
                OrmAffaireActeur(agent_id=self._agent_id(a.agent), role=a.role.value)
                for a in affaire.acteurs
            ]
            self._session.add(orm)

        orm.montant_amende_total = affaire.montant_amende_total
        orm.statut = affaire.statut.value
        orm.bureau = affaire.bureau
        orm.service = affaire.service
        orm.centre = affaire.centre
        self._session.flush()
        affaire.id = orm.id
        return affaire

    # ── Queries ────────────────────────────────────────────────────────

    def load(self, numero_affaire: str) -> DomainAffaire | None:
        """Return the case with its contraventions, actors and payments, or None."""
        orm = self._session.execute(
            select(OrmAffaire).where(OrmAffaire.numero_affaire == numero_affaire)
        ).scalar_one_or_none()
        if orm is None:
            return None
        return self._to_domain(orm)

    def list_all(self) -> list[DomainAffaire]:
        stmt = select(OrmAffaire).order_by(OrmAffaire.numero_affaire)
        return [self._to_domain(orm) for orm in self._session.scalars(stmt)]

    def last_numero(self, prefix: str) -> str | None:
        return _last_matching(self._session, OrmAffaire.numero_affaire, prefix)

    # ── Internal helpers ───────────────────────────────────────────────

    def _contrevenant_id(self, contrevenant: DomainContrevenant | None) -> int | None:
        if contrevenant is None:
            return None
        existing = self._session.execute(
            select(OrmContrevenant).where(OrmContrevenant.code == contrevenant.code)
        ).scalar_one_or_none()
        if existing is None:
            existing = OrmContrevenant(
                code=contrevenant.code,
                nom=contrevenant.nom,
                type_contrevenant=contrevenant.type_contrevenant,
                adresse=contrevenant.adresse,
            )
            self._session.add(existing)
            self._session.flush()
        contrevenant.id = existing.id
        return existing.id

    def _agent_id(self, agent: DomainAgent) -> int:
        existing = self._session.execute(
            select(OrmAgent).where(OrmAgent.code == agent.code)
        ).scalar_one_or_none()
        if existing is None:
            existing = OrmAgent(code=agent.code, nom=agent.nom, grade=agent.grade)
            self._session.add(existing)
            self._session.flush()
        agent.id = existing.id
        return existing.id

    @staticmethod
    def _to_domain(orm: OrmAffaire) -> DomainAffaire:
        """Convert an ORM Affaire row (and its children) to a domain Affaire."""
        contrevenant = None
        if orm.contrevenant:
            contrevenant = DomainContrevenant(
                code=orm.contrevenant.code,
                nom=orm.contrevenant.nom,
                type_contrevenant=orm.contrevenant.type_contrevenant or "PERSONNE_PHYSIQUE",
                adresse=orm.contrevenant.adresse,
                id=orm.contrevenant.id,
            )
        return DomainAffaire(
            numero_affaire=orm.numero_affaire,
            date_creation=orm.date_creation,
            contrevenant=contrevenant,
            contraventions=[
                Contravention(code=c.code, libelle=c.libelle, montant=c.montant, id=c.id)
                for c in orm.contraventions
            ],
            montant_amende_total=orm.montant_amende_total,
            statut=StatutAffaire(orm.statut),
            bureau=orm.bureau,
            service=orm.service,
            centre=orm.centre,
            acteurs=[
                ActeurAffaire(
                    agent=DomainAgent(
                        code=a.agent.code, nom=a.agent.nom, grade=a.agent.grade, id=a.agent.id,
                    ),
                    role=RoleSurAffaire(a.role),
                )
                for a in orm.acteurs
            ],
            encaissements=[
                SqlAlchemyEncaissementRepository.to_domain(e, orm.numero_affaire)
                for e in orm.encaissements
            ],
            id=orm.id,
        )


class SqlAlchemyMandatRepository(MandatRepository):
    """SQLAlchemy adapter for the MandatRepository port.

    The ``actif`` column mirrors ``statut == ACTIF`` and carries the partial
    unique index that keeps a single active mandate.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ── Commands ───────────────────────────────────────────────────────

    def save(self, mandat: DomainMandat) -> DomainMandat:
        orm = self._session.execute(
            select(OrmMandat).where(OrmMandat.numero_mandat == mandat.numero_mandat)
        ).scalar_one_or_none()
        if orm is None:
            orm = OrmMandat(numero_mandat=mandat.numero_mandat)
            self._session.add(orm)
        orm.description = mandat.description
        orm.date_debut = mandat.date_debut
        orm.date_fin = mandat.date_fin
        orm.statut = mandat.statut.value
        orm.actif = mandat.statut is StatutMandat.ACTIF
        orm.date_cloture = mandat.date_cloture
        self._session.flush()
        mandat.id = orm.id
        return mandat

    # ── Queries ────────────────────────────────────────────────────────

    def find_by_numero(self, numero_mandat: str) -> DomainMandat | None:
        orm = self._session.execute(
            select(OrmMandat).where(OrmMandat.numero_mandat == numero_mandat)
        ).scalar_one_or_none()
        return self._to_domain(orm) if orm is not None else None

    def find_active(self) -> DomainMandat | None:
        orm = self._session.execute(
            select(OrmMandat).where(OrmMandat.actif == True)  # noqa: E712
        ).scalar_one_or_none()
        return self._to_domain(orm) if orm is not None else None

    def list_all(self, statut: StatutMandat | None = None) -> list[DomainMandat]:
        """Return mandates, most recent number first, optionally filtered by status."""
        stmt = select(OrmMandat).order_by(OrmMandat.numero_mandat.desc())
        if statut is not None:
            stmt = stmt.where(OrmMandat.statut == statut.value)
        return [self._to_domain(orm) for orm in self._session.scalars(stmt)]

    def last_numero(self, prefix: str) -> str | None:
        return _last_matching(self._session, OrmMandat.numero_mandat, prefix)

    # ── Internal helpers ───────────────────────────────────────────────

    @staticmethod
    def _to_domain(orm: OrmMandat) -> DomainMandat:
        return DomainMandat(
            numero_mandat=orm.numero_mandat,
            date_debut=orm.date_debut,
            date_fin=orm.date_fin,
            description=orm.description,
            statut=StatutMandat(orm.statut),
            date_cloture=orm.date_cloture,
            id=orm.id,
        )
