"""
Normalización de celdas.

Convierte cualquier valor de celda (texto, número, fecha, vacío) en un string
limpio. Nunca lanza excepciones.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any

logger = logging.getLogger(__name__)

BOM = "\ufeff"


def strip_bom(text: str) -> str:
    """Elimina marcas de orden de bytes (BOM) en cualquier posición."""
    return text.replace(BOM, "")


def normalize_whitespace(value: str) -> str:
    """Recorta y colapsa espacios internos (incluye NBSP, tabs y saltos)."""
    return " ".join(strip_bom(value).split())


def normalize_cell(value: Any) -> str:
    """
    Normaliza un valor de celda a string.

    Reglas:
    - None y vacíos -> ""
    - Números enteros guardados como float (12.0) -> "12"
    - Fechas -> ISO 8601
    - Cualquier otro tipo -> str() con espacios colapsados

    Args:
        value: Valor crudo de la celda.

    Returns:
        String normalizado.
    """
    if value is None:
        return ""

    if isinstance(value, str):
        return normalize_whitespace(value)

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)

    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")

    if isinstance(value, (date, time)):
        return value.isoformat()

    try:
        text = str(value)
    except Exception as e:
        logger.debug(f"Celda no convertible a texto ({type(value).__name__}): {e}")
        return ""

    return normalize_whitespace(text)
