"""
Orquestación de una importación de taxonomía.

Recibe los bytes del archivo y el modo (preview, import, sync) y devuelve
la respuesta con avisos, errores e informe.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import FileTooLargeError, InvalidModeError
from .models import MODE_PREVIEW, MODE_SYNC, MODES, ImportSettings, ReconciliationReport
from .parser import parse_upload
from .reconciler import Reconciler
from .report import build_report, build_response
from .store.base import TaxonomyStore

logger = logging.getLogger(__name__)


def _log_summary(mode: str, report: ReconciliationReport, duration: float) -> None:
    logger.info("=" * 50)
    logger.info(f"RESUMEN ({mode})")
    logger.info("=" * 50)
    logger.info(
        f"Totales: {report.totals.categories} categorías, "
        f"{report.totals.subcategories} subcategorías"
    )
    logger.info(
        f"Creadas: {report.created.categories} / {report.created.subcategories}"
    )
    logger.info(
        f"Actualizadas: {report.updated.categories} / {report.updated.subcategories}"
    )
    logger.info(
        f"Omitidas: {report.skipped.categories} / {report.skipped.subcategories}"
    )
    logger.info(f"Duración: {duration:.1f}s")
    logger.info("=" * 50)


def import_taxonomy(
    content: bytes,
    filename: Optional[str] = None,
    mode: str = MODE_PREVIEW,
    store: Optional[TaxonomyStore] = None,
    content_type: Optional[str] = None,
    settings: Optional[ImportSettings] = None,
) -> Dict[str, Any]:
    """
    Importa un archivo de taxonomía.

    Args:
        content: Bytes del archivo subido.
        filename: Nombre original (se usa para detectar CSV o XLSX).
        mode: "preview", "import" o "sync".
        store: Almacén de taxonomía; no se usa en modo preview.
        content_type: MIME declarado por el cliente.
        settings: Ajustes del importador.

    Returns:
        Diccionario {preview, warnings, errors, report}.

    Raises:
        InvalidModeError: Si el modo no es válido.
        FileTooLargeError: Si el archivo supera el tamaño máximo.
        UnsupportedFileError: Si no es CSV ni XLSX.
        TaxonomyStoreError: Si falla el almacenamiento (la transacción se revierte).
    """
    settings = settings or ImportSettings()

    if mode not in MODES:
        raise InvalidModeError(f"Modo no soportado: {mode}")

    if len(content) > settings.max_file_size:
        raise FileTooLargeError(len(content), settings.max_file_size)

    inicio = datetime.now()
    logger.info(f"Importando taxonomía {filename or '(sin nombre)'} en modo {mode}")

    parsed = parse_upload(content, filename, content_type, settings)

    for warning in parsed.warnings:
        logger.warning(warning)

    if mode == MODE_PREVIEW:
        return build_response(parsed, build_report(parsed), preview=True)

    if parsed.errors:
        for error in parsed.errors:
            logger.error(error)
        logger.error("No se concilia: el archivo tiene errores")
        return build_response(parsed, build_report(parsed), preview=False)

    if store is None:
        raise ValueError(f"El modo {mode} requiere un store")

    reconciler = Reconciler(store, locale=settings.locale)
    with store.transaction():
        store.acquire_import_lock()
        result = reconciler.run(parsed.categories, sync=mode == MODE_SYNC)

    report = build_report(parsed, result)
    _log_summary(mode, report, (datetime.now() - inicio).total_seconds())
    return build_response(parsed, report, preview=False)
