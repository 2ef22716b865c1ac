"""
Detección del formato de la hoja.

Dos formatos posibles:
- ListLayout: una columna de categoría y otra de subcategoría, una fila por par.
- ColumnLayout: cada cabecera es una categoría y las celdas de debajo sus
  subcategorías.

La detección es heurística; ante la duda se asume ColumnLayout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .normalize import normalize_whitespace

logger = logging.getLogger(__name__)

CATEGORY_TOKENS = ("category", "categor", "катег")
SUBCATEGORY_TOKENS = ("subcategor", "подкат")


@dataclass(frozen=True)
class ListLayout:
    header_index: int


@dataclass(frozen=True)
class ColumnLayout:
    header_index: int


Layout = Union[ListLayout, ColumnLayout]


def _normalize_header(value: str) -> str:
    return normalize_whitespace(value).lower()


def is_list_header(row: List[str]) -> bool:
    """True si la fila es una cabecera "categoría | subcategoría"."""
    if len(row) < 2:
        return False
    left = _normalize_header(row[0])
    right = _normalize_header(row[1])
    left_match = any(token in left for token in CATEGORY_TOKENS)
    right_match = any(token in right for token in SUBCATEGORY_TOKENS)
    return left_match and right_match


def find_list_header(rows: List[List[str]]) -> Optional[int]:
    for idx, row in enumerate(rows):
        if is_list_header(row):
            return idx
    return None


def pick_header_row_index(
    rows: List[List[str]],
    scan_limit: int = 10,
    preferred_row: Optional[int] = 3,
) -> int:
    """
    Elige la fila de cabecera para el formato por columnas.

    Si la fila preferida existe y tiene contenido se usa; si no, la fila con
    más celdas no vacías entre las primeras ``scan_limit`` (gana la primera
    en caso de empate).
    """
    if preferred_row is not None and 0 <= preferred_row < len(rows):
        if any(rows[preferred_row]):
            return preferred_row

    best_index = 0
    best_count = 0
    for idx, row in enumerate(rows[:scan_limit]):
        count = sum(1 for cell in row if cell)
        if count > best_count:
            best_count = count
            best_index = idx
    return best_index


def detect_layout(
    rows: List[List[str]],
    scan_limit: int = 10,
    preferred_row: Optional[int] = 3,
) -> Layout:
    """
    Clasifica la matriz ya limpia.

    Args:
        rows: Filas normalizadas sin filas vacías.
        scan_limit: Filas examinadas para elegir cabecera en formato columnas.
        preferred_row: Fila de cabecera habitual en las plantillas.

    Returns:
        ListLayout o ColumnLayout con el índice de la cabecera.
    """
    list_header = find_list_header(rows)
    if list_header is not None:
        logger.debug(f"Formato lista, cabecera en fila {list_header}")
        return ListLayout(header_index=list_header)

    header_index = pick_header_row_index(rows, scan_limit, preferred_row)
    logger.debug(f"Formato por columnas, cabecera en fila {header_index}")
    return ColumnLayout(header_index=header_index)
