"""
Almacén de taxonomía sobre PostgreSQL.

Las operaciones no confirman por su cuenta: todo ocurre dentro de
``transaction()`` para que una importación se aplique completa o no se
aplique.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import psycopg2
from psycopg2 import sql
from psycopg2.extras import RealDictCursor

from ..errors import TaxonomyStoreError
from ..models import CATEGORY, SUBCATEGORY, PersistedRecord
from .base import TaxonomyStore

logger = logging.getLogger(__name__)

# tabla, tabla de traducciones, columna FK de la traducción
TABLES = {
    CATEGORY: ("categories", "category_translations", "category_id"),
    SUBCATEGORY: ("subcategories", "subcategory_translations", "subcategory_id"),
}

IMPORT_LOCK_NAME = "taxonomy_import"


class PostgresTaxonomyStore(TaxonomyStore):
    """Store de categorías y subcategorías en PostgreSQL."""

    def __init__(self, connection):
        """
        Args:
            connection: Conexión psycopg2 (ver database.get_connection).
        """
        self.conn = connection

    def _tables(self, kind: str) -> Tuple[sql.Identifier, sql.Identifier, sql.Identifier]:
        try:
            table, translations, fk = TABLES[kind]
        except KeyError:
            raise ValueError(f"Tipo de entidad desconocido: {kind}")
        return sql.Identifier(table), sql.Identifier(translations), sql.Identifier(fk)

    def _execute(self, query, params=None, fetch: Optional[str] = None) -> Any:
        """Ejecuta una sentencia y traduce los errores de psycopg2."""
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, params)
                if fetch == "one":
                    return cursor.fetchone()
                if fetch == "all":
                    return cursor.fetchall()
                return cursor.rowcount
        except psycopg2.Error as e:
            logger.error(f"✗ Error de base de datos: {e}")
            raise TaxonomyStoreError(str(e)) from e

    def _names(self, kind: str, record_id: int) -> Dict[str, str]:
        _, translations, fk = self._tables(kind)
        rows = self._execute(
            sql.SQL("SELECT locale, name FROM {} WHERE {} = %s").format(translations, fk),
            (record_id,),
            fetch="all",
        )
        return {row["locale"]: row["name"] for row in rows}

    def _to_record(self, kind: str, row: Optional[Dict[str, Any]]) -> Optional[PersistedRecord]:
        if not row:
            return None
        return PersistedRecord(
            id=row["id"],
            slug=row["slug"],
            sort_order=row["sort_order"],
            is_active=row["is_active"],
            category_id=row.get("category_id"),
            names=self._names(kind, row["id"]),
        )

    def find_by_slug(self, kind: str, slug: str) -> Optional[PersistedRecord]:
        table, _, _ = self._tables(kind)
        row = self._execute(
            sql.SQL("SELECT * FROM {} WHERE slug = %s LIMIT 1").format(table),
            (slug,),
            fetch="one",
        )
        return self._to_record(kind, row)

    def find_by_name(
        self,
        kind: str,
        name: str,
        locale: str,
        category_id: Optional[int] = None,
    ) -> Optional[PersistedRecord]:
        table, translations, fk = self._tables(kind)
        query = sql.SQL(
            """
            SELECT r.*
            FROM {table} r
            JOIN {translations} t ON t.{fk} = r.id
            WHERE t.locale = %s AND lower(t.name) = lower(%s)
            """
        ).format(table=table, translations=translations, fk=fk)
        params: List[Any] = [locale, name]

        if kind == SUBCATEGORY:
            query = query + sql.SQL(" AND r.category_id = %s")
            params.append(category_id)

        row = self._execute(query + sql.SQL(" ORDER BY r.id LIMIT 1"), params, fetch="one")
        return self._to_record(kind, row)

    def slug_exists(self, kind: str, slug: str, exclude_id: Optional[int] = None) -> bool:
        table, _, _ = self._tables(kind)
        row = self._execute(
            sql.SQL(
                "SELECT 1 AS found FROM {} WHERE slug = %s AND (%s IS NULL OR id <> %s) LIMIT 1"
            ).format(table),
            (slug, exclude_id, exclude_id),
            fetch="one",
        )
        return row is not None

    def create(
        self,
        kind: str,
        *,
        slug: Optional[str],
        sort_order: int,
        is_active: bool = True,
        category_id: Optional[int] = None,
    ) -> int:
        table, _, _ = self._tables(kind)
        if kind == SUBCATEGORY:
            query = sql.SQL(
                """
                INSERT INTO {} (category_id, slug, sort_order, is_active)
                VALUES (%s, %s, %s, %s)
                RETURNING id
                """
            ).format(table)
            params = (category_id, slug, sort_order, is_active)
        else:
            query = sql.SQL(
                """
                INSERT INTO {} (slug, sort_order, is_active)
                VALUES (%s, %s, %s)
                RETURNING id
                """
            ).format(table)
            params = (slug, sort_order, is_active)

        row = self._execute(query, params, fetch="one")
        return row["id"]

    def update(
        self,
        kind: str,
        record_id: int,
        *,
        sort_order: int,
        is_active: bool,
        slug: Optional[str] = None,
    ) -> None:
        table, _, _ = self._tables(kind)
        self._execute(
            sql.SQL(
                """
                UPDATE {}
                SET sort_order = %s,
                    is_active = %s,
                    slug = COALESCE(%s, slug),
                    updated_at = NOW()
                WHERE id = %s
                """
            ).format(table),
            (sort_order, is_active, slug, record_id),
        )

    def upsert_translation(self, kind: str, record_id: int, locale: str, name: str) -> None:
        _, translations, fk = self._tables(kind)
        self._execute(
            sql.SQL(
                """
                INSERT INTO {translations} ({fk}, locale, name)
                VALUES (%s, %s, %s)
                ON CONFLICT ({fk}, locale)
                DO UPDATE SET name = EXCLUDED.name
                """
            ).format(translations=translations, fk=fk),
            (record_id, locale, name),
        )

    def set_active(self, kind: str, ids: Iterable[int], active: bool) -> int:
        id_list = list(ids)
        if not id_list:
            return 0
        table, _, _ = self._tables(kind)
        return self._execute(
            sql.SQL(
                "UPDATE {} SET is_active = %s, updated_at = NOW() WHERE id = ANY(%s)"
            ).format(table),
            (active, id_list),
        )

    def deactivate_except(self, kind: str, ids: Iterable[int]) -> int:
        table, _, _ = self._tables(kind)
        id_list = list(ids)
        if not id_list:
            return self._execute(
                sql.SQL("UPDATE {} SET is_active = FALSE, updated_at = NOW()").format(table)
            )
        return self._execute(
            sql.SQL(
                "UPDATE {} SET is_active = FALSE, updated_at = NOW() WHERE NOT (id = ANY(%s))"
            ).format(table),
            (id_list,),
        )

    def list_active_tree(self, locale: str) -> List[Tuple[PersistedRecord, List[PersistedRecord]]]:
        categories = self._execute(
            """
            SELECT c.id, c.slug, c.sort_order, c.is_active, t.name
            FROM categories c
            LEFT JOIN category_translations t ON t.category_id = c.id AND t.locale = %s
            WHERE c.is_active
            ORDER BY c.sort_order, c.id
            """,
            (locale,),
            fetch="all",
        )
        subcategories = self._execute(
            """
            SELECT s.id, s.category_id, s.slug, s.sort_order, s.is_active, t.name
            FROM subcategories s
            LEFT JOIN subcategory_translations t ON t.subcategory_id = s.id AND t.locale = %s
            WHERE s.is_active
            ORDER BY s.sort_order, s.id
            """,
            (locale,),
            fetch="all",
        )

        by_category: Dict[int, List[PersistedRecord]] = {}
        for row in subcategories:
            by_category.setdefault(row["category_id"], []).append(
                PersistedRecord(
                    id=row["id"],
                    slug=row["slug"],
                    sort_order=row["sort_order"],
                    is_active=row["is_active"],
                    category_id=row["category_id"],
                    names={locale: row["name"]} if row["name"] is not None else {},
                )
            )

        tree = []
        for row in categories:
            category = PersistedRecord(
                id=row["id"],
                slug=row["slug"],
                sort_order=row["sort_order"],
                is_active=row["is_active"],
                names={locale: row["name"]} if row["name"] is not None else {},
            )
            tree.append((category, by_category.get(category.id, [])))
        return tree

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
        except Exception:
            self.conn.rollback()
            logger.warning("Transacción de importación revertida")
            raise

        try:
            self.conn.commit()
        except psycopg2.Error as e:
            self.conn.rollback()
            raise TaxonomyStoreError(str(e)) from e

    def acquire_import_lock(self) -> None:
        # pg_advisory_xact_lock se libera solo al confirmar o revertir
        self._execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (IMPORT_LOCK_NAME,))
        logger.debug("Bloqueo de importación adquirido")
