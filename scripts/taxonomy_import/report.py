"""
Informe de importación.

Solo agrega contadores; no contiene lógica de negocio.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .models import CATEGORY, SUBCATEGORY, Counts, ParseResult, ReconciliationReport
from .reconciler import CREATED, SKIPPED, UPDATED, ReconcileResult


def _counts(result: ReconcileResult, outcome: str, extra: Optional[Counts] = None) -> Counts:
    extra = extra or Counts()
    return Counts(
        categories=result.count(outcome, CATEGORY) + extra.categories,
        subcategories=result.count(outcome, SUBCATEGORY) + extra.subcategories,
    )


def build_report(
    parsed: ParseResult,
    result: Optional[ReconcileResult] = None,
) -> ReconciliationReport:
    """
    Construye el informe a partir del árbol y, si hubo, la conciliación.

    Sin ``result`` (vista previa o error de parseo) solo se rellenan los
    totales. En una conciliación, ``skipped`` suma lo que descartó el
    constructor del árbol y los nombres vacíos que omitió el reconciliador.
    """
    report = ReconciliationReport(
        totals=Counts(
            categories=len(parsed.categories),
            subcategories=parsed.total_subcategories(),
        )
    )
    if result is not None:
        report.created = _counts(result, CREATED)
        report.updated = _counts(result, UPDATED)
        report.skipped = _counts(result, SKIPPED, parsed.skipped)
    return report


def build_response(
    parsed: ParseResult,
    report: ReconciliationReport,
    preview: bool,
) -> Dict[str, Any]:
    """Respuesta final: avisos y errores del parser tal cual, más el informe."""
    return {
        "preview": preview,
        "warnings": list(parsed.warnings),
        "errors": list(parsed.errors),
        "report": report.to_dict(),
    }
