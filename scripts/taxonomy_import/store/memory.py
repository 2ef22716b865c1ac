"""
Almacén de taxonomía en memoria.

Implementa el mismo contrato que el store de PostgreSQL. Útil para pruebas
y para ensayar importaciones sin base de datos.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import TaxonomyStoreError
from ..models import CATEGORY, KINDS, SUBCATEGORY, PersistedRecord
from .base import TaxonomyStore

logger = logging.getLogger(__name__)


class MemoryTaxonomyStore(TaxonomyStore):
    """Store en memoria con transacciones por instantánea."""

    def __init__(self):
        self._records: Dict[str, Dict[int, PersistedRecord]] = {kind: {} for kind in KINDS}
        self._next_id = 1
        self._import_lock = threading.Lock()
        self._state = threading.local()

    def _table(self, kind: str) -> Dict[int, PersistedRecord]:
        if kind not in self._records:
            raise ValueError(f"Tipo de entidad desconocido: {kind}")
        return self._records[kind]

    def get(self, kind: str, record_id: int) -> Optional[PersistedRecord]:
        return self._table(kind).get(record_id)

    def all(self, kind: str) -> List[PersistedRecord]:
        """Todos los registros del tipo, incluidos los inactivos."""
        return list(self._table(kind).values())

    def find_by_slug(self, kind: str, slug: str) -> Optional[PersistedRecord]:
        for record in self._table(kind).values():
            if record.slug == slug:
                return record
        return None

    def find_by_name(
        self,
        kind: str,
        name: str,
        locale: str,
        category_id: Optional[int] = None,
    ) -> Optional[PersistedRecord]:
        wanted = name.lower()
        for record in self._table(kind).values():
            if kind == SUBCATEGORY and record.category_id != category_id:
                continue
            current = record.names.get(locale)
            if current is not None and current.lower() == wanted:
                return record
        return None

    def slug_exists(self, kind: str, slug: str, exclude_id: Optional[int] = None) -> bool:
        return any(
            record.slug == slug and record.id != exclude_id
            for record in self._table(kind).values()
        )

    def create(
        self,
        kind: str,
        *,
        slug: Optional[str],
        sort_order: int,
        is_active: bool = True,
        category_id: Optional[int] = None,
    ) -> int:
        table = self._table(kind)
        if slug is not None and self.slug_exists(kind, slug):
            raise TaxonomyStoreError(f"Slug duplicado en {kind}: {slug}")
        if kind == SUBCATEGORY and category_id not in self._records[CATEGORY]:
            raise TaxonomyStoreError(f"Categoría inexistente: {category_id}")

        record_id = self._next_id
        self._next_id += 1
        table[record_id] = PersistedRecord(
            id=record_id,
            slug=slug,
            sort_order=sort_order,
            is_active=is_active,
            category_id=category_id if kind == SUBCATEGORY else None,
        )
        return record_id

    def update(
        self,
        kind: str,
        record_id: int,
        *,
        sort_order: int,
        is_active: bool,
        slug: Optional[str] = None,
    ) -> None:
        record = self._table(kind).get(record_id)
        if record is None:
            raise TaxonomyStoreError(f"{kind} {record_id} no existe")
        if slug is not None and self.slug_exists(kind, slug, exclude_id=record_id):
            raise TaxonomyStoreError(f"Slug duplicado en {kind}: {slug}")

        record.sort_order = sort_order
        record.is_active = is_active
        if slug is not None:
            record.slug = slug

    def upsert_translation(self, kind: str, record_id: int, locale: str, name: str) -> None:
        record = self._table(kind).get(record_id)
        if record is None:
            raise TaxonomyStoreError(f"{kind} {record_id} no existe")
        record.names[locale] = name

    def set_active(self, kind: str, ids: Iterable[int], active: bool) -> int:
        wanted = set(ids)
        affected = 0
        for record in self._table(kind).values():
            if record.id in wanted:
                record.is_active = active
                affected += 1
        return affected

    def deactivate_except(self, kind: str, ids: Iterable[int]) -> int:
        keep = set(ids)
        affected = 0
        for record in self._table(kind).values():
            if record.id not in keep:
                record.is_active = False
                affected += 1
        return affected

    def list_active_tree(self, locale: str) -> List[Tuple[PersistedRecord, List[PersistedRecord]]]:
        categories = sorted(
            (c for c in self._records[CATEGORY].values() if c.is_active),
            key=lambda c: (c.sort_order, c.id),
        )
        tree = []
        for category in categories:
            subcategories = sorted(
                (
                    s for s in self._records[SUBCATEGORY].values()
                    if s.is_active and s.category_id == category.id
                ),
                key=lambda s: (s.sort_order, s.id),
            )
            tree.append((category, subcategories))
        return tree

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Transacción por instantánea.

        Se ejecuta entera con el bloqueo de importación tomado; la instantánea
        se copia ya dentro del bloqueo.
        """
        if getattr(self._state, "in_transaction", False):
            raise TaxonomyStoreError("Transacción anidada no soportada")

        with self._import_lock:
            snapshot = copy.deepcopy(self._records)
            next_id = self._next_id
            self._state.in_transaction = True
            try:
                yield
            except Exception:
                self._records = snapshot
                self._next_id = next_id
                logger.warning("Transacción revertida en el store en memoria")
                raise
            finally:
                self._state.in_transaction = False

    def acquire_import_lock(self) -> None:
        # El bloqueo ya se tomó al abrir la transacción
        if not getattr(self._state, "in_transaction", False):
            raise TaxonomyStoreError("El bloqueo de importación requiere una transacción")
