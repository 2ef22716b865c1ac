"""
Parser de archivos de taxonomía.

Acepta CSV (coma o punto y coma) y XLSX con formatos no acordados de
antemano y devuelve un árbol limpio de categorías y subcategorías.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .builder import DescriptionFilter, build_tree
from .errors import UnsupportedFileError
from .layout import ColumnLayout, detect_layout
from .models import ImportSettings, ParseResult
from .normalize import normalize_cell
from .tokenizer import decode_text, drop_blank_rows, read_text_rows, read_workbook_rows

logger = logging.getLogger(__name__)

FILE_KIND_CSV = "csv"
FILE_KIND_XLSX = "xlsx"

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ZIP_MAGIC = b"PK\x03\x04"

NO_ROWS_WARNING = "No se encontraron filas en el archivo de taxonomía."
NO_CATEGORIES_WARNING = "No se detectaron categorías en el archivo de taxonomía."


def parse_rows(
    rows: List[List[object]],
    settings: Optional[ImportSettings] = None,
) -> ParseResult:
    """
    Analiza una matriz de celdas y construye el árbol.

    Args:
        rows: Filas con valores crudos o ya normalizados.
        settings: Ajustes del importador (umbrales, cabecera preferida).

    Returns:
        ParseResult con categorías y avisos.
    """
    settings = settings or ImportSettings()
    result = ParseResult()

    normalized = drop_blank_rows([[normalize_cell(cell) for cell in row] for row in rows])
    if not normalized:
        result.warnings.append(NO_ROWS_WARNING)
        return result

    layout = detect_layout(
        normalized,
        scan_limit=settings.header_scan_limit,
        preferred_row=settings.preferred_header_row,
    )

    if isinstance(layout, ColumnLayout):
        header = normalized[layout.header_index]
        if sum(1 for cell in header if cell) == 2:
            result.warnings.append(
                "Formato ambiguo: no hay cabecera categoría/subcategoría, "
                "se interpretó cada columna como una categoría."
            )

    result.categories = build_tree(
        normalized, layout, DescriptionFilter.from_settings(settings), result.skipped
    )

    if not result.categories:
        result.warnings.append(NO_CATEGORIES_WARNING)

    logger.info(
        f"Taxonomía analizada ({type(layout).__name__}): "
        f"{len(result.categories)} categorías, "
        f"{result.total_subcategories()} subcategorías"
    )
    return result


def parse_csv(content: str, settings: Optional[ImportSettings] = None) -> ParseResult:
    """Analiza el contenido de texto de un CSV."""
    return parse_rows(read_text_rows(content), settings)


def parse_workbook(content: bytes, settings: Optional[ImportSettings] = None) -> ParseResult:
    """Analiza un XLSX (solo la primera hoja)."""
    rows, errors = read_workbook_rows(content)
    if errors:
        return ParseResult(errors=errors)
    return parse_rows(rows, settings)


def detect_file_kind(
    filename: Optional[str],
    content_type: Optional[str] = None,
    content: Optional[bytes] = None,
) -> str:
    """
    Decide si el archivo es CSV o XLSX.

    Se mira la extensión, después el content-type y por último la firma ZIP
    de los XLSX.

    Raises:
        UnsupportedFileError: Si no es ninguno de los dos.
    """
    name = (filename or "").lower()
    mime = (content_type or "").lower()

    if name.endswith(".csv") or "csv" in mime:
        return FILE_KIND_CSV
    if name.endswith(".xlsx") or mime == XLSX_MIME:
        return FILE_KIND_XLSX
    if content is not None and content.startswith(ZIP_MAGIC):
        return FILE_KIND_XLSX
    if mime.startswith("text/plain") or name.endswith(".txt"):
        return FILE_KIND_CSV

    raise UnsupportedFileError(f"Tipo de archivo no soportado: {filename or mime or 'desconocido'}")


def parse_upload(
    content: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    settings: Optional[ImportSettings] = None,
) -> ParseResult:
    """
    Analiza un archivo subido eligiendo el lector adecuado.

    Raises:
        UnsupportedFileError: Si el tipo de archivo no es CSV ni XLSX.
    """
    kind = detect_file_kind(filename, content_type, content)
    logger.debug(f"Archivo {filename or '(sin nombre)'} tratado como {kind}")

    if kind == FILE_KIND_XLSX:
        return parse_workbook(content, settings)

    text = decode_text(content)
    if text is None:
        return ParseResult(errors=["No se pudo decodificar el archivo de texto."])
    return parse_csv(text, settings)
