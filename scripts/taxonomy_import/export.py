"""
Exportación de la taxonomía activa a CSV.

El archivo generado usa el formato lista y puede volver a importarse sin
perder nombres de categorías ni subcategorías.
"""

from __future__ import annotations

import csv
import io
import logging

from .models import DEFAULT_LOCALE
from .store.base import TaxonomyStore

logger = logging.getLogger(__name__)

DELIMITER = ";"


def export_taxonomy_csv(store: TaxonomyStore, locale: str = DEFAULT_LOCALE) -> str:
    """
    Genera el CSV de la taxonomía activa.

    Una fila por par (categoría, subcategoría); las categorías sin
    subcategorías se exportan con la segunda columna vacía.

    Args:
        store: Almacén de taxonomía.
        locale: Locale de los nombres exportados.

    Returns:
        Contenido CSV separado por punto y coma.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=DELIMITER, lineterminator="\n")
    writer.writerow([f"category_{locale}", f"subcategory_{locale}"])

    rows = 0
    for category, subcategories in store.list_active_tree(locale):
        category_name = category.name(locale) or str(category.id)
        if not subcategories:
            writer.writerow([category_name, ""])
            rows += 1
            continue
        for subcategory in subcategories:
            writer.writerow([category_name, subcategory.name(locale) or str(subcategory.id)])
            rows += 1

    logger.info(f"Exportadas {rows} filas de taxonomía ({locale})")
    return buffer.getvalue()
