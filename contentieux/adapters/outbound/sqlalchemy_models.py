from datetime import datetime, timezone
from sqlalchemy import (
    Boolean, Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Index,
    UniqueConstraint, text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


def _now():
    return datetime.now(timezone.utc)


class Contrevenant(Base):
    __tablename__ = "contrevenants"

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True)
    nom = Column(String, nullable=False)
    type_contrevenant = Column(String, default="PERSONNE_PHYSIQUE")
    adresse = Column(Text)

    affaires = relationship("Affaire", back_populates="contrevenant")


class Agent(Base):
    __tablename__ = "agents"

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True)
    nom = Column(String, nullable=False)
    grade = Column(String)


class Affaire(Base):
    __tablename__ = "affaires"

    id = Column(Integer, primary_key=True)
    numero_affaire = Column(String, nullable=False, unique=True)
    date_creation = Column(Date, nullable=False)
    contrevenant_id = Column(Integer, ForeignKey("contrevenants.id"))
    montant_amende_total = Column(Numeric(15, 2))  # NULL: sum of contraventions
    statut = Column(String, nullable=False, default="OUVERTE")
    bureau = Column(String)
    service = Column(String)
    centre = Column(String)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)

    contrevenant = relationship("Contrevenant", back_populates="affaires")
    contraventions = relationship(
        "AffaireContravention", back_populates="affaire", cascade="all, delete-orphan",
    )
    acteurs = relationship("AffaireActeur", back_populates="affaire", cascade="all, delete-orphan")
    encaissements = relationship(
        "Encaissement", back_populates="affaire", order_by="Encaissement.id",
    )

    __table_args__ = (
        Index("idx_affaires_statut", "statut"),
        Index("idx_affaires_contrevenant", "contrevenant_id"),
    )


class AffaireContravention(Base):
    __tablename__ = "affaire_contraventions"

    id = Column(Integer, primary_key=True)
    affaire_id = Column(Integer, ForeignKey("affaires.id"), nullable=False)
    code = Column(String, nullable=False)
    libelle = Column(Text, nullable=False)
    montant = Column(Numeric(15, 2), nullable=False)

    affaire = relationship("Affaire", back_populates="contraventions")


class AffaireActeur(Base):
    __tablename__ = "affaire_acteurs"

    id = Column(Integer, primary_key=True)
    affaire_id = Column(Integer, ForeignKey("affaires.id"), nullable=False)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=False)
    role = Column(String, nullable=False)  # "SAISISSANT", "CHEF", "INDICATEUR"

    affaire = relationship("Affaire", back_populates="acteurs")
    agent = relationship("Agent")

    __table_args__ = (
        UniqueConstraint("affaire_id", "agent_id", "role", name="uq_affaire_acteur_role"),
    )


class Encaissement(Base):
    __tablename__ = "encaissements"

    id = Column(Integer, primary_key=True)
    reference = Column(String, nullable=False, unique=True)
    affaire_id = Column(Integer, ForeignKey("affaires.id"), nullable=False)
    date_encaissement = Column(Date, nullable=False)
    montant = Column(Numeric(15, 2), nullable=False)
    mode_reglement = Column(String, nullable=False, default="ESPECES")
    statut = Column(String, nullable=False, default="VALIDE")
    banque_code = Column(String)
    banque_libelle = Column(String)
    numero_cheque = Column(String)
    numero_mandat = Column(String)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)

    affaire = relationship("Affaire", back_populates="encaissements")

    __table_args__ = (
        Index("idx_encaissements_affaire", "affaire_id"),
        Index("idx_encaissements_mandat", "numero_mandat"),
        Index("idx_encaissements_date", "date_encaissement"),
    )


class Mandat(Base):
    __tablename__ = "mandats"

    id = Column(Integer, primary_key=True)
    numero_mandat = Column(String, nullable=False, unique=True)
    description = Column(Text)
    date_debut = Column(Date, nullable=False)
    date_fin = Column(Date, nullable=False)
    statut = Column(String, nullable=False, default="BROUILLON")
    actif = Column(Boolean, nullable=False, default=False)
    date_cloture = Column(DateTime)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)

    __table_args__ = (
        # At most one active mandate: unique over the rows where actif is true.
        Index(
            "uq_mandats_actif", "actif", unique=True,
            sqlite_where=text("actif = 1"),
            postgresql_where=text("actif"),
        ),
        Index("idx_mandats_statut", "statut"),
    )
