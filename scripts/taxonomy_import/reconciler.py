"""
Conciliación del árbol importado con la taxonomía almacenada.

Para cada categoría (y después cada subcategoría) se busca un registro
existente con una lista ordenada de estrategias; si existe se actualiza y si
no se crea. En modo sync, lo que no aparece en el archivo se desactiva.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, List, Optional, Sequence, Set, Tuple

from .models import (
    CATEGORY,
    DEFAULT_LOCALE,
    SUBCATEGORY,
    Counts,
    ParsedCategory,
    PersistedRecord,
)
from .normalize import normalize_whitespace
from .slugs import SlugAssigner, slugify
from .store.base import TaxonomyStore

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
SKIPPED = "skipped"


@dataclass(frozen=True)
class MatchQuery:
    """Datos con los que se busca un registro existente."""

    kind: str
    name: str
    slug: str
    locale: str
    category_id: Optional[int] = None
    # ids ya resueltos en esta ejecución
    resolved_ids: AbstractSet[int] = frozenset()


Matcher = Callable[[TaxonomyStore, MatchQuery], Optional[PersistedRecord]]


def match_by_slug(store: TaxonomyStore, query: MatchQuery) -> Optional[PersistedRecord]:
    """
    Coincidencia exacta de slug.

    Se descarta si el registro ya se usó en esta ejecución o, para
    subcategorías, si cuelga de otra categoría: dos nombres distintos pueden
    producir el mismo slug.
    """
    if not query.slug:
        return None
    record = store.find_by_slug(query.kind, query.slug)
    if record is None or record.id in query.resolved_ids:
        return None
    if query.kind == SUBCATEGORY and record.category_id != query.category_id:
        return None
    return record


def match_by_name(store: TaxonomyStore, query: MatchQuery) -> Optional[PersistedRecord]:
    """
    Coincidencia de nombre sin distinguir mayúsculas.

    Global para categorías; dentro de la categoría padre para subcategorías.
    """
    return store.find_by_name(
        query.kind,
        query.name,
        query.locale,
        category_id=query.category_id if query.kind == SUBCATEGORY else None,
    )


DEFAULT_MATCHERS: Tuple[Matcher, ...] = (match_by_slug, match_by_name)


@dataclass
class ReconcileResult:
    """Resultado bruto de una conciliación."""

    outcomes: Counter = field(default_factory=Counter)  # (outcome, kind) -> n
    category_ids: Set[int] = field(default_factory=set)
    subcategory_ids: Set[int] = field(default_factory=set)
    deactivated: Counts = field(default_factory=Counts)

    def count(self, outcome: str, kind: str) -> int:
        return self.outcomes[(outcome, kind)]


class Reconciler:
    """
    Aplica un árbol importado sobre un TaxonomyStore.

    No gestiona transacciones ni bloqueos: el llamador debe abrir
    ``store.transaction()`` y adquirir el bloqueo de importación antes de
    llamar a run().
    """

    def __init__(
        self,
        store: TaxonomyStore,
        locale: str = DEFAULT_LOCALE,
        matchers: Sequence[Matcher] = DEFAULT_MATCHERS,
    ):
        """
        Args:
            store: Almacén de taxonomía.
            locale: Locale canónico en el que se escriben los nombres.
            matchers: Estrategias de búsqueda, probadas en orden.
        """
        self.store = store
        self.locale = locale
        self.matchers = list(matchers)
        self._slugs = {
            CATEGORY: SlugAssigner(store, CATEGORY),
            SUBCATEGORY: SlugAssigner(store, SUBCATEGORY),
        }

    def find_existing(self, query: MatchQuery) -> Optional[PersistedRecord]:
        for matcher in self.matchers:
            record = matcher(self.store, query)
            if record is not None:
                logger.debug(f"{query.kind} '{query.name}' encontrado por {matcher.__name__}")
                return record
        return None

    def _reconcile_one(
        self,
        kind: str,
        name: str,
        sort_order: int,
        slug_base: str,
        resolved_ids: AbstractSet[int],
        category_id: Optional[int] = None,
    ) -> Tuple[int, str]:
        """Crea o actualiza un registro. Devuelve (id, resultado)."""
        query = MatchQuery(
            kind=kind,
            name=name,
            slug=slug_base,
            locale=self.locale,
            category_id=category_id,
            resolved_ids=resolved_ids,
        )
        existing = self.find_existing(query)
        slugs = self._slugs[kind]

        if existing is not None:
            slug = None
            if existing.slug:
                slugs.claim(existing.slug)
            else:
                slug = slugs.assign(slug_base, exclude_id=existing.id)
            self.store.update(
                kind,
                existing.id,
                sort_order=sort_order,
                is_active=True,
                slug=slug,
            )
            record_id, outcome = existing.id, UPDATED
        else:
            record_id = self.store.create(
                kind,
                slug=slugs.assign(slug_base),
                sort_order=sort_order,
                is_active=True,
                category_id=category_id,
            )
            outcome = CREATED

        self.store.upsert_translation(kind, record_id, self.locale, name)
        return record_id, outcome

    def run(self, categories: List[ParsedCategory], sync: bool = False) -> ReconcileResult:
        """
        Concilia las categorías importadas.

        Args:
            categories: Árbol producido por el parser.
            sync: Si True, desactiva todo lo que no esté en el archivo.

        Returns:
            ReconcileResult con contadores e ids importados.
        """
        result = ReconcileResult()

        for category in categories:
            name = normalize_whitespace(category.name)
            if not name:
                result.outcomes[(SKIPPED, CATEGORY)] += 1
                continue

            category_id, outcome = self._reconcile_one(
                CATEGORY, name, category.sort_order, slugify(name), result.category_ids
            )
            result.outcomes[(outcome, CATEGORY)] += 1
            result.category_ids.add(category_id)

            for subcategory in category.subcategories:
                sub_name = normalize_whitespace(subcategory.name)
                if not sub_name:
                    result.outcomes[(SKIPPED, SUBCATEGORY)] += 1
                    continue

                subcategory_id, sub_outcome = self._reconcile_one(
                    SUBCATEGORY,
                    sub_name,
                    subcategory.sort_order,
                    slugify(f"{name}-{sub_name}"),
                    result.subcategory_ids,
                    category_id=category_id,
                )
                result.outcomes[(sub_outcome, SUBCATEGORY)] += 1
                result.subcategory_ids.add(subcategory_id)

        if sync:
            self._sync(result)

        return result

    def _sync(self, result: ReconcileResult) -> None:
        """Segunda pasada sobre toda la taxonomía almacenada; nunca borra."""
        for kind, ids in ((CATEGORY, result.category_ids), (SUBCATEGORY, result.subcategory_ids)):
            deactivated = self.store.deactivate_except(kind, ids)
            self.store.set_active(kind, ids, True)
            result.deactivated.add(kind, deactivated)

        logger.info(
            f"Sync: {result.deactivated.categories} categorías y "
            f"{result.deactivated.subcategories} subcategorías desactivadas"
        )
