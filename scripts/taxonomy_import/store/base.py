"""
Contrato del almacenamiento de taxonomía.

El importador no conoce el motor de base de datos; solo necesita búsquedas
exactas o sin distinguir mayúsculas, altas, actualizaciones y
activaciones en lote.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Tuple

from ..models import PersistedRecord


class TaxonomyStore(ABC):
    """
    Clase base para almacenes de categorías y subcategorías.

    ``kind`` es siempre models.CATEGORY o models.SUBCATEGORY.
    """

    @abstractmethod
    def find_by_slug(self, kind: str, slug: str) -> Optional[PersistedRecord]:
        """Busca un registro (activo o no) por slug exacto."""

    @abstractmethod
    def find_by_name(
        self,
        kind: str,
        name: str,
        locale: str,
        category_id: Optional[int] = None,
    ) -> Optional[PersistedRecord]:
        """
        Busca por nombre sin distinguir mayúsculas en el locale indicado.

        Para subcategorías la búsqueda se limita a ``category_id``.
        """

    @abstractmethod
    def slug_exists(self, kind: str, slug: str, exclude_id: Optional[int] = None) -> bool:
        """True si algún registro distinto de ``exclude_id`` usa el slug."""

    @abstractmethod
    def create(
        self,
        kind: str,
        *,
        slug: Optional[str],
        sort_order: int,
        is_active: bool = True,
        category_id: Optional[int] = None,
    ) -> int:
        """Inserta un registro y devuelve su id."""

    @abstractmethod
    def update(
        self,
        kind: str,
        record_id: int,
        *,
        sort_order: int,
        is_active: bool,
        slug: Optional[str] = None,
    ) -> None:
        """Actualiza orden y estado; el slug solo se escribe si no es None."""

    @abstractmethod
    def upsert_translation(self, kind: str, record_id: int, locale: str, name: str) -> None:
        """Crea o reemplaza el nombre del registro en un locale."""

    @abstractmethod
    def set_active(self, kind: str, ids: Iterable[int], active: bool) -> int:
        """Cambia el estado de los ids indicados. Devuelve filas afectadas."""

    @abstractmethod
    def deactivate_except(self, kind: str, ids: Iterable[int]) -> int:
        """Desactiva todos los registros cuyo id no esté en ``ids``."""

    @abstractmethod
    def list_active_tree(self, locale: str) -> List[Tuple[PersistedRecord, List[PersistedRecord]]]:
        """Categorías activas con sus subcategorías activas, por sort_order."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Agrupa las operaciones; confirma al salir o revierte si hay error."""

    @abstractmethod
    def acquire_import_lock(self) -> None:
        """
        Bloqueo exclusivo de importación.

        Se libera al terminar la transacción en curso.
        """
