"""
Lectura de filas desde CSV y XLSX.

- Texto: detección de delimitador (coma o punto y coma) y escáner de campos
  con soporte de comillas.
- Hoja de cálculo: primera hoja del libro como matriz de strings.
"""

from __future__ import annotations

import io
import logging
import re
from typing import List, Optional, Tuple

import openpyxl

from .normalize import normalize_cell, strip_bom

logger = logging.getLogger(__name__)

Grid = List[List[str]]

LINE_SPLIT_RE = re.compile(r"\r?\n")

# Codificaciones probadas en orden; cp1251 cubre exportaciones antiguas de Excel en ruso
TEXT_ENCODINGS = ("utf-8-sig", "cp1251")


def is_blank_row(row: List[str]) -> bool:
    return all(not cell for cell in row)


def drop_blank_rows(rows: Grid) -> Grid:
    return [row for row in rows if row and not is_blank_row(row)]


def decode_text(content: bytes) -> Optional[str]:
    """
    Decodifica el contenido de un archivo de texto.

    Returns:
        Texto decodificado o None si ninguna codificación es válida.
    """
    for encoding in TEXT_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"El archivo no es {encoding}")
    return None


def sniff_delimiter(text: str) -> str:
    """
    Elige el delimitador del archivo a partir de la primera línea no vacía.

    Se usa punto y coma solo si supera estrictamente a las comas; algunas
    configuraciones regionales exportan CSV con ";".

    Args:
        text: Contenido completo del archivo.

    Returns:
        "," o ";".
    """
    sample = ""
    for line in LINE_SPLIT_RE.split(strip_bom(text)):
        if line.strip():
            sample = line
            break

    commas = sample.count(",")
    semicolons = sample.count(";")
    return ";" if semicolons > commas else ","


def split_line(line: str, delimiter: str) -> List[str]:
    """
    Divide una línea en campos respetando comillas.

    Una comilla alterna el estado "dentro de comillas"; dos comillas seguidas
    dentro de un campo entrecomillado producen una comilla literal.

    Returns:
        Lista de campos normalizados.
    """
    cells: List[str] = []
    current: List[str] = []
    in_quotes = False
    idx = 0
    length = len(line)

    while idx < length:
        char = line[idx]
        if char == '"':
            if in_quotes and idx + 1 < length and line[idx + 1] == '"':
                current.append('"')
                idx += 2
                continue
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            cells.append(normalize_cell("".join(current)))
            current = []
        else:
            current.append(char)
        idx += 1

    cells.append(normalize_cell("".join(current)))
    return cells


def read_text_rows(text: str) -> Grid:
    """
    Convierte el texto de un CSV en filas, descartando las vacías.

    El delimitador se decide una sola vez por archivo.
    """
    sanitized = strip_bom(text)
    delimiter = sniff_delimiter(sanitized)
    logger.debug(f"Delimitador detectado: {delimiter!r}")

    rows = [split_line(line, delimiter) for line in LINE_SPLIT_RE.split(sanitized)]
    return drop_blank_rows(rows)


def read_workbook_rows(content: bytes) -> Tuple[Grid, List[str]]:
    """
    Lee la primera hoja de un XLSX.

    No se mezclan hojas: solo se usa la primera del libro.

    Args:
        content: Bytes del archivo.

    Returns:
        Tupla (filas, errores). Si hay errores, filas estará vacío.
    """
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        logger.error(f"No se pudo abrir el libro: {e}")
        return [], ["No se pudo leer el archivo de taxonomía."]

    try:
        if not workbook.sheetnames:
            return [], ["El archivo de taxonomía no tiene hojas."]

        sheet = workbook.worksheets[0]
        logger.debug(f"Leyendo hoja: {sheet.title}")

        rows = [
            [normalize_cell(value) for value in row]
            for row in sheet.iter_rows(values_only=True)
        ]
    except Exception as e:
        logger.error(f"Error al leer la hoja: {e}")
        return [], ["No se pudo leer el archivo de taxonomía."]
    finally:
        workbook.close()

    return drop_blank_rows(rows), []
