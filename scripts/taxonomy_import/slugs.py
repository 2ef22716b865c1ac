"""
Generación de slugs únicos.

El slug es opcional: si el nombre no produce caracteres válidos el registro
se guarda sin slug.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from .store.base import TaxonomyStore

logger = logging.getLogger(__name__)

CYRILLIC_TRANSLIT = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "yo",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "kh", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "shch",
    "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
    # Letras uzbekas y ucranianas frecuentes en los catálogos
    "ў": "o", "қ": "q", "ғ": "g", "ҳ": "h", "і": "i", "ї": "yi", "є": "ye",
    "ґ": "g",
}


def slugify(text: str) -> str:
    """
    Convierte un nombre en un identificador apto para URL.

    Minúsculas, cirílico transliterado, acentos eliminados y cualquier
    carácter no alfanumérico sustituido por guiones.

    Returns:
        Slug o "" si el texto no contiene caracteres utilizables.
    """
    text = (text or "").lower()
    text = "".join(CYRILLIC_TRANSLIT.get(char, char) for char in text)

    # Eliminar acentos
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))

    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


class SlugAssigner:
    """
    Reserva slugs únicos durante una conciliación.

    Consulta tanto el store como los slugs ya reclamados en la misma
    ejecución, añadiendo -2, -3... hasta encontrar uno libre. Debe usarse de
    forma secuencial dentro de una sola importación.
    """

    def __init__(self, store: "TaxonomyStore", kind: str):
        self.store = store
        self.kind = kind
        self._claimed: Set[str] = set()

    def _is_taken(self, candidate: str, exclude_id: Optional[int]) -> bool:
        if candidate in self._claimed:
            return True
        return self.store.slug_exists(self.kind, candidate, exclude_id=exclude_id)

    def assign(self, base: str, exclude_id: Optional[int] = None) -> Optional[str]:
        """
        Devuelve un slug libre derivado de ``base``.

        Args:
            base: Slug base ya pasado por slugify.
            exclude_id: Registro a ignorar al comprobar duplicados.

        Returns:
            Slug reservado o None si base está vacío.
        """
        if not base:
            return None

        candidate = base
        suffix = 2
        while self._is_taken(candidate, exclude_id):
            candidate = f"{base}-{suffix}"
            suffix += 1

        if candidate != base:
            logger.debug(f"Slug {base} ocupado, se usa {candidate}")

        self._claimed.add(candidate)
        return candidate

    def claim(self, slug: Optional[str]) -> None:
        """Marca como usado un slug existente."""
        if slug:
            self._claimed.add(slug)
