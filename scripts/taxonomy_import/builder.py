"""
Construcción del árbol categoría -> subcategorías.

El orden de salida depende solo del orden de filas y columnas del archivo;
nunca se ordena alfabéticamente porque ese orden se guarda como sort_order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from .layout import ColumnLayout, Layout, ListLayout
from .models import SUBCATEGORY, Counts, ImportSettings, ParsedCategory, ParsedSubcategory
from .normalize import normalize_whitespace

logger = logging.getLogger(__name__)

SENTENCE_PUNCTUATION_RE = re.compile(r"[.!?]")


@dataclass(frozen=True)
class DescriptionFilter:
    """
    Descarta celdas que parecen descripciones y no etiquetas cortas.

    Los umbrales por defecto vienen de los datos de un comercio concreto.
    """

    max_length: int = 80
    max_words: int = 12
    sentence_words: int = 6
    comma_words: int = 8

    @classmethod
    def from_settings(cls, settings: ImportSettings) -> "DescriptionFilter":
        return cls(
            max_length=settings.desc_max_length,
            max_words=settings.desc_max_words,
            sentence_words=settings.desc_sentence_words,
            comma_words=settings.desc_comma_words,
        )

    def is_description(self, value: str) -> bool:
        normalized = normalize_whitespace(value)
        if not normalized:
            return False
        words = normalized.split(" ")
        if len(normalized) >= self.max_length:
            return True
        if len(words) >= self.max_words:
            return True
        if SENTENCE_PUNCTUATION_RE.search(normalized) and len(words) >= self.sentence_words:
            return True
        if "," in normalized and len(words) >= self.comma_words:
            return True
        return False

    def accepts(self, value: str) -> bool:
        """True si el valor puede ser una subcategoría."""
        return bool(value) and not self.is_description(value)


def _cell(row: List[str], idx: int) -> str:
    return row[idx] if idx < len(row) else ""


def _skip(skipped: Optional[Counts], kind: str) -> None:
    if skipped is not None:
        skipped.add(kind)


def build_from_list_rows(
    rows: List[List[str]],
    header_index: int,
    description_filter: DescriptionFilter,
    skipped: Optional[Counts] = None,
) -> List[ParsedCategory]:
    categories: Dict[str, ParsedCategory] = {}

    for row in rows[header_index + 1:]:
        category_name = _cell(row, 0)
        subcategory_name = _cell(row, 1)
        if not category_name:
            if subcategory_name:
                logger.debug(f"Fila sin categoría: {subcategory_name[:40]}")
                _skip(skipped, SUBCATEGORY)
            continue

        entry = categories.get(category_name)
        if entry is None:
            entry = ParsedCategory(name=category_name, sort_order=len(categories))
            categories[category_name] = entry

        if not description_filter.accepts(subcategory_name):
            if subcategory_name:
                logger.debug(f"Descartada como descripción: {subcategory_name[:40]}...")
                _skip(skipped, SUBCATEGORY)
            continue

        if subcategory_name not in entry.subcategory_names():
            entry.subcategories.append(
                ParsedSubcategory(name=subcategory_name, sort_order=len(entry.subcategories))
            )

    return list(categories.values())


def build_from_columns(
    rows: List[List[str]],
    header_index: int,
    description_filter: DescriptionFilter,
    skipped: Optional[Counts] = None,
) -> List[ParsedCategory]:
    header_row = rows[header_index] if header_index < len(rows) else []
    categories: List[ParsedCategory] = []

    for column_idx, name in enumerate(header_row):
        if not name:
            continue

        subcategories: List[ParsedSubcategory] = []
        seen = set()
        for row in rows[header_index + 1:]:
            cell = _cell(row, column_idx)
            if not cell or cell in seen:
                continue
            if description_filter.is_description(cell):
                logger.debug(f"Descartada como descripción: {cell[:40]}...")
                _skip(skipped, SUBCATEGORY)
                continue
            seen.add(cell)
            subcategories.append(ParsedSubcategory(name=cell, sort_order=len(subcategories)))

        categories.append(
            ParsedCategory(name=name, sort_order=len(categories), subcategories=subcategories)
        )

    return categories


def build_tree(
    rows: List[List[str]],
    layout: Layout,
    description_filter: DescriptionFilter,
    skipped: Optional[Counts] = None,
) -> List[ParsedCategory]:
    """
    Construye el árbol según el formato detectado.

    Args:
        rows: Filas normalizadas.
        layout: Resultado de detect_layout.
        description_filter: Filtro de celdas descriptivas.
        skipped: Si se indica, acumula lo descartado.

    Returns:
        Lista de categorías en orden de aparición.
    """
    if isinstance(layout, ListLayout):
        return build_from_list_rows(rows, layout.header_index, description_filter, skipped)
    if isinstance(layout, ColumnLayout):
        return build_from_columns(rows, layout.header_index, description_filter, skipped)
    raise TypeError(f"Formato desconocido: {layout!r}")
