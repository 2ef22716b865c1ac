"""
Descarga de archivos de taxonomía por HTTP.

Capa fina sobre requests con:
- Timeout configurable
- Reintentos con backoff exponencial
- Manejo de rate limiting (429)
- Límite de tamaño de descarga
"""

from __future__ import annotations

import logging
import posixpath
import time
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import FileTooLargeError

logger = logging.getLogger(__name__)


@dataclass
class DownloadedFile:
    content: bytes
    filename: Optional[str]
    content_type: Optional[str]


def _filename_from_url(url: str) -> Optional[str]:
    name = posixpath.basename(unquote(urlparse(url).path))
    return name or None


class HttpClient:
    """Cliente HTTP con retry y backoff."""

    DEFAULT_HEADERS = {
        "User-Agent": "stalviapp-taxonomy-import/1.0",
        "Accept": "text/csv, application/vnd.openxmlformats-officedocument.spreadsheetml.sheet, */*",
    }

    def __init__(
        self,
        timeout: int = 30,
        max_retries: int = 3,
        max_size: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Inicializa el cliente HTTP.

        Args:
            timeout: Timeout por request en segundos.
            max_retries: Número máximo de reintentos.
            max_size: Tamaño máximo aceptado en bytes (None = sin límite).
            headers: Headers adicionales para las peticiones.
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.max_size = max_size
        self.session = requests.Session()
        self.session.headers.update(self.DEFAULT_HEADERS)
        if headers:
            self.session.headers.update(headers)

    def download(self, url: str) -> Optional[DownloadedFile]:
        """
        Descarga un archivo con retry y backoff.

        Args:
            url: URL del archivo.

        Returns:
            DownloadedFile o None si falla tras todos los intentos.

        Raises:
            FileTooLargeError: Si el archivo supera max_size.
        """
        for attempt in range(self.max_retries):
            try:
                logger.debug(f"GET {url} (intento {attempt + 1}/{self.max_retries})")
                response = self.session.get(url, timeout=self.timeout)

                # Rate limiting
                if response.status_code == 429:
                    wait_time = 2 ** (attempt + 1)
                    logger.warning(f"Rate limited (429). Esperando {wait_time}s...")
                    time.sleep(wait_time)
                    continue

                # Otros errores de servidor
                if response.status_code >= 500:
                    wait_time = 2 ** attempt
                    logger.warning(
                        f"Error de servidor ({response.status_code}). "
                        f"Reintentando en {wait_time}s..."
                    )
                    time.sleep(wait_time)
                    continue

                response.raise_for_status()
                content = response.content

                if self.max_size is not None and len(content) > self.max_size:
                    raise FileTooLargeError(len(content), self.max_size)

                content_type = response.headers.get("Content-Type")
                logger.info(f"Descargados {len(content)} bytes de {url}")
                return DownloadedFile(
                    content=content,
                    filename=_filename_from_url(url),
                    content_type=content_type.split(";")[0].strip() if content_type else None,
                )

            except requests.Timeout:
                logger.warning(f"Timeout en {url} (intento {attempt + 1})")
                if attempt < self.max_retries - 1:
                    time.sleep(2 ** attempt)

            except requests.RequestException as e:
                logger.error(f"Error en GET {url}: {e}")
                if attempt < self.max_retries - 1:
                    time.sleep(2 ** attempt)

        logger.error(f"Falló después de {self.max_retries} intentos: {url}")
        return None
