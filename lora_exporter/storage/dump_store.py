"""Persistencia de payloads crudos para diagnóstico.

Cada dump es un archivo `<folder>/YYYYMMDD-HHMMSS.fff.dump` con el body tal
como llegó. Un fallo de escritura nunca interrumpe el request: se registra
y se devuelve igualmente la ruta que se intentó escribir.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)


class DumpStore:
    """Escribe payloads crudos en una carpeta local."""

    def __init__(
        self,
        folder: Union[str, Path],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.folder = Path(folder)
        self._clock = clock or datetime.now
        self._lock = threading.Lock()

    def _filename(self) -> str:
        now = self._clock()
        return now.strftime("%Y%m%d-%H%M%S.") + f"{now.microsecond // 1000:03d}.dump"

    def _reserve(self) -> Path:
        # Dos dumps en el mismo milisegundo reciben sufijo numérico
        base = self.folder / self._filename()
        path = base
        suffix = 1
        while path.exists():
            path = base.with_name(f"{base.stem}-{suffix}{base.suffix}")
            suffix += 1
        path.touch()
        return path

    def persist(self, raw: bytes) -> str:
        """Guarda el body crudo y devuelve la ruta del archivo."""
        path = self.folder / self._filename()
        try:
            with self._lock:
                self.folder.mkdir(parents=True, exist_ok=True)
                path = self._reserve()
            path.write_bytes(raw)
        except OSError as e:
            logger.error("[DUMP] Failed to write dump filename=%s error=%s", path, e)
            return str(path)

        logger.debug("[DUMP] Wrote %d bytes filename=%s", len(raw), path)
        return str(path)
