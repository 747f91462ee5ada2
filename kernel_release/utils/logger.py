"""
logger.py — Logging para kernel-release usando Rich + archivo.

Dual output:
- Rich console: colores y formato legible en el log del runner
- Archivo rotativo: logs/kernel_release.log para debugging post-mortem

Además entiende los "workflow commands" de GitHub Actions:
- ::group:: / ::endgroup:: para plegar secciones del log
- ::warning:: para que las advertencias aparezcan como anotaciones

Uso:
    from kernel_release.utils.logger import get_logger
    logger = get_logger("kernel_release.publisher")
    with logger.group("Creating GitHub Release"):
        logger.info("Subiendo archivos...")
    logger.success("Release creado")
"""

from __future__ import annotations

import io
import logging
import os
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

# Fix para runners Windows: la consola usa cp1252 por defecto.
# NOTA: No aplicar si estamos en pytest (conflicto con capture system)
_in_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ
if sys.platform == "win32" and not _in_pytest:
    if hasattr(sys.stdout, "buffer"):
        sys.stdout = io.TextIOWrapper(
            sys.stdout.buffer, encoding="utf-8", errors="replace"
        )

release_theme = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "step": "bold magenta",
})

# Consola global, compartida por todos los módulos
console = Console(theme=release_theme)

# ================================================================
# File logging setup
# ================================================================

_file_logger: logging.Logger | None = None


def _in_github_actions() -> bool:
    """True si estamos corriendo dentro de un runner de GitHub Actions."""
    return os.environ.get("GITHUB_ACTIONS", "").lower() == "true"


def _setup_file_logger() -> logging.Logger:
    """Configura el logger de archivo con rotacion."""
    global _file_logger
    if _file_logger is not None:
        return _file_logger

    # No crear logs en pytest
    if _in_pytest:
        _file_logger = logging.getLogger("kernel_release.null")
        _file_logger.addHandler(logging.NullHandler())
        return _file_logger

    log_dir = Path(os.environ.get("KERNEL_RELEASE_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    _file_logger = logging.getLogger("kernel_release.file")
    _file_logger.setLevel(logging.DEBUG)

    # Evitar handlers duplicados
    if not _file_logger.handlers:
        handler = RotatingFileHandler(
            log_dir / "kernel_release.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        _file_logger.addHandler(handler)

    return _file_logger


class ReleaseLogger:
    """
    Logger que escribe en la consola (Rich) y en archivo.

    Cada módulo crea su propio logger con un nombre para
    identificar de dónde viene cada mensaje.

    Args:
        name: Nombre del módulo (ej: "kernel_release.pruner")
    """

    def __init__(self, name: str):
        self._name = name
        self._file = _setup_file_logger()

    def info(self, message: str) -> None:
        """Mensaje informativo (cyan)."""
        console.print(f"[info]i  {escape(message)}[/info]", highlight=False)
        self._file.info(f"[{self._name}] {message}")

    def success(self, message: str) -> None:
        """Mensaje de éxito (verde)."""
        console.print(f"[success][OK] {escape(message)}[/success]", highlight=False)
        self._file.info(f"[{self._name}] OK: {message}")

    def warning(self, message: str) -> None:
        """
        Mensaje de advertencia (amarillo).

        En GitHub Actions se emite además como anotación ::warning::
        para que aparezca en el resumen del workflow.
        """
        if _in_github_actions():
            _write_command(f"::warning::{_escape_command_data(message)}")
        else:
            console.print(f"[warning][!] {escape(message)}[/warning]", highlight=False)
        self._file.warning(f"[{self._name}] {message}")

    def error(self, message: str) -> None:
        """Mensaje de error (rojo)."""
        console.print(f"[error][X] {escape(message)}[/error]", highlight=False)
        self._file.error(f"[{self._name}] {message}")

    def step(self, number: int, total: int, message: str) -> None:
        """Mensaje de paso en un proceso."""
        console.print(f"[step]  [{number}/{total}] {escape(message)}[/step]", highlight=False)
        self._file.info(f"[{self._name}] [{number}/{total}] {message}")

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        """
        Agrupa los mensajes de un bloque bajo un título.

        En GitHub Actions usa ::group:: / ::endgroup:: (sección plegable).
        Fuera de CI dibuja una línea separadora con Rich.
        El grupo se cierra aunque el bloque lance una excepción.
        """
        self._file.info(f"[{self._name}] >>> {title}")
        if _in_github_actions():
            _write_command(f"::group::{title}")
        else:
            console.rule(f"[step]{escape(title)}[/step]")
        try:
            yield
        finally:
            if _in_github_actions():
                _write_command("::endgroup::")
            self._file.info(f"[{self._name}] <<< {title}")


def _escape_command_data(message: str) -> str:
    """Escapa %, \\r y \\n como lo pide el formato de workflow commands."""
    return (
        message.replace("%", "%25")
        .replace("\r", "%0D")
        .replace("\n", "%0A")
    )


def _write_command(line: str) -> None:
    """Escribe un workflow command tal cual, sin markup de Rich."""
    console.print(line, markup=False, highlight=False, soft_wrap=True)


def get_logger(name: str = "kernel_release") -> ReleaseLogger:
    """
    Obtiene un logger para el módulo especificado.

    Args:
        name: Nombre del módulo.

    Returns:
        ReleaseLogger configurado.
    """
    return ReleaseLogger(name)
