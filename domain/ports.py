"""Domain ports — abstract interfaces for repositories.

Only stdlib (abc) and domain.models imports allowed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from domain.models import Affaire, Encaissement, Mandat, StatutMandat


# ── Repository Ports ──────────────────────────────────────────────────────


class AffaireRepository(ABC):
    """Persistence port for cases."""

    @abstractmethod
    def load(self, numero_affaire: str) -> Affaire | None: ...

    @abstractmethod
    def save(self, affaire: Affaire) -> Affaire: ...

    @abstractmethod
    def list_all(self) -> list[Affaire]: ...

    @abstractmethod
    def last_numero(self, prefix: str) -> str | None: ...


class EncaissementRepository(ABC):
    """Persistence port for payments."""

    @abstractmethod
    def list_by_affaire(self, numero_affaire: str) -> list[Encaissement]: ...

    @abstractmethod
    def save(self, encaissement: Encaissement) -> Encaissement: ...

    @abstractmethod
    def last_reference(self, prefix: str) -> str | None: ...


class MandatRepository(ABC):
    """Persistence port for mandates."""

    @abstractmethod
    def find_by_numero(self, numero_mandat: str) -> Mandat | None: ...

    @abstractmethod
    def find_active(self) -> Mandat | None: ...

    @abstractmethod
    def save(self, mandat: Mandat) -> Mandat: ...

    @abstractmethod
    def list_all(self, statut: StatutMandat | None = None) -> list[Mandat]: ...

    @abstractmethod
    def last_numero(self, prefix: str) -> str | None: ...
