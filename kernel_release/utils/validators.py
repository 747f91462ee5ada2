"""
validators.py -- Validacion de valores de configuracion de kernel-release.

Cada funcion retorna una tupla (es_valido, mensaje_de_error).
Si es_valido es True, el mensaje sera una cadena vacia.
Si es_valido es False, el mensaje explica que salio mal.

Por que tuplas y no excepciones?
    `config --validate` quiere reportar TODOS los problemas de una vez,
    no detenerse en el primero. El publisher, en cambio, si lanza
    excepciones cuando algo obligatorio falta.

Uso:
    from kernel_release.utils.validators import validate_keep_count

    valido, error = validate_keep_count(3)
    if not valido:
        print(f"keep_count invalido: {error}")
"""

from __future__ import annotations

import re
from typing import Any


# =====================================================================
# Constantes de validacion
# =====================================================================

# Arquitecturas que el build de kernel sabe compilar.
VALID_ARCHES: list[str] = ["arm", "arm64", "x86", "x86_64"]

# owner/repo tal como viene en GITHUB_REPOSITORY
REPOSITORY_PATTERN: re.Pattern = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def validate_token(token: str) -> tuple[bool, str]:
    """Valida que el token de acceso no este vacio."""
    if not token or not token.strip():
        return False, "access-token vacio (GITHUB_TOKEN no configurado)"
    return True, ""


def validate_keep_count(keep_count: Any) -> tuple[bool, str]:
    """
    Valida el numero de releases automaticos a conservar.

    Acepta enteros >= 0. Los booleanos se rechazan aunque en Python
    sean subclase de int.
    """
    if isinstance(keep_count, bool) or not isinstance(keep_count, int):
        return False, f"keep_count debe ser entero, recibido: {keep_count!r}"
    if keep_count < 0:
        return False, f"keep_count no puede ser negativo: {keep_count}"
    return True, ""


def validate_repository(repository: str) -> tuple[bool, str]:
    """Valida un slug owner/repo."""
    if not repository:
        return False, "GITHUB_REPOSITORY no configurado"
    if not REPOSITORY_PATTERN.match(repository):
        return False, f"Repositorio invalido (se espera owner/repo): {repository}"
    return True, ""


def validate_arch(arch: str) -> tuple[bool, str]:
    """Valida la arquitectura destino del kernel."""
    if arch not in VALID_ARCHES:
        return False, (
            f"Arquitectura desconocida: {arch!r}. "
            f"Validas: {', '.join(VALID_ARCHES)}"
        )
    return True, ""
