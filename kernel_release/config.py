"""
config.py — Carga y gestiona la configuración de kernel-release.

Se encarga de:
1. Cargar release.yaml (descripción del build: defconfig, rama, features)
2. Cargar .env (secretos: GITHUB_TOKEN)
3. Resolver variables de entorno en los valores de config
4. Construir el ReleaseConfig inmutable que consume el publisher

¿Por qué separar release.yaml de .env?
    - release.yaml: Valores que SÍ se suben a Git (no sensibles)
    - .env: Valores que NUNCA se suben a Git (tokens)

En CI lo normal es que no exista .env: el token llega como
variable de entorno (secrets.GITHUB_TOKEN) y las opciones del CLI
pisan lo que diga release.yaml.

Uso:
    from kernel_release.config import load_config
    app_config = load_config()
    release_config = app_config.to_release_config(arch="arm64")
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


CONFIG_FILENAME = "release.yaml"


# ============================================================
# Dataclasses de configuración
# ============================================================

@dataclass(frozen=True)
class FeatureFlags:
    """Features opcionales compilados en el kernel."""
    ksu: bool = False
    nethunter: bool = False
    lxc: bool = False
    kvm: bool = False
    rekernel: bool = False


@dataclass(frozen=True)
class ReleaseConfig:
    """
    Descripción inmutable de un build, construida una vez por invocación.

    Campos:
        token: Token de acceso a la API de GitHub
        build_dir: Directorio con los artefactos a publicar
        kernel_url: URL del repo fuente del kernel
        kernel_branch: Rama del kernel compilada
        config: Nombre del defconfig (ej: "gki_defconfig")
        arch: Arquitectura destino (ej: "arm64")
        features: FeatureFlags del build
    """
    token: str
    build_dir: str
    kernel_url: str = ""
    kernel_branch: str = ""
    config: str = ""
    arch: str = "arm64"
    features: FeatureFlags = field(default_factory=FeatureFlags)


@dataclass
class BuildConfig:
    """Sección `build` de release.yaml."""
    build_dir: str = "out/release"
    kernel_url: str = ""
    kernel_branch: str = ""
    config: str = ""
    arch: str = "arm64"


@dataclass
class CleanupConfig:
    """Sección `cleanup` de release.yaml."""
    enabled: bool = False
    keep_count: int = 3


@dataclass
class AppConfig:
    """Configuración completa de la aplicación."""
    build: BuildConfig = field(default_factory=BuildConfig)
    features: FeatureFlags = field(default_factory=FeatureFlags)
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)

    # Valores del entorno (no están en release.yaml)
    github_token: str = ""

    def to_release_config(self, **overrides: Any) -> ReleaseConfig:
        """
        Construye el ReleaseConfig inmutable para esta invocación.

        Los overrides con valor None se ignoran, así las opciones del
        CLI que no se pasaron no pisan lo que dice release.yaml.
        Los nombres de features (ksu, lxc, ...) también se aceptan
        como override.

        Raises:
            TypeError: Si se pasa un override desconocido.
        """
        overrides = {k: v for k, v in overrides.items() if v is not None}

        feature_names = {f.name for f in fields(FeatureFlags)}
        feature_overrides = {
            k: overrides.pop(k) for k in list(overrides) if k in feature_names
        }
        features = FeatureFlags(**{
            **{name: getattr(self.features, name) for name in feature_names},
            **feature_overrides,
        })

        valores = {
            "token": self.github_token,
            "build_dir": self.build.build_dir,
            "kernel_url": self.build.kernel_url,
            "kernel_branch": self.build.kernel_branch,
            "config": self.build.config,
            "arch": self.build.arch,
        }
        desconocidos = set(overrides) - set(valores)
        if desconocidos:
            raise TypeError(f"Overrides desconocidos: {sorted(desconocidos)}")
        valores.update(overrides)

        return ReleaseConfig(features=features, **valores)


# ============================================================
# Funciones de carga
# ============================================================

def _resolve_env_vars(value: str) -> str:
    """
    Resuelve variables de entorno en un string.

    Ejemplo:
        "${GITHUB_WORKSPACE}/out" → "/home/runner/work/kernel/out"

    Si la variable no existe se deja el placeholder tal cual.
    """
    patron = re.compile(r"\$\{(\w+)\}")

    def reemplazar(match: re.Match) -> str:
        nombre_var = match.group(1)
        return os.environ.get(nombre_var, match.group(0))

    return patron.sub(reemplazar, value)


def _resolve_env_recursive(data: Any) -> Any:
    """Resuelve variables de entorno recursivamente en un dict/list."""
    if isinstance(data, str):
        return _resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_recursive(item) for item in data]
    return data


def _dict_to_dataclass(data: dict, cls: type) -> Any:
    """
    Convierte un diccionario a una dataclass, ignorando keys desconocidas.

    Un YAML con una key de más (o con un typo) no debe tumbar el build.
    """
    tipos = {f.name: f.type for f in cls.__dataclass_fields__.values()}
    datos_filtrados = {
        k: _coerce_value(v, tipos[k], k) for k, v in data.items()
        if k in tipos and v is not None
    }
    return cls(**datos_filtrados)


_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def _coerce_value(value: Any, tipo: Any, nombre: str) -> Any:
    """
    Convierte strings del YAML (típicamente de ${VAR}) al tipo del campo.

    Solo se tocan campos bool e int; el resto pasa tal cual.

    Raises:
        ValueError: Si el valor no se puede convertir.
    """
    # Con `from __future__ import annotations` el tipo llega como string
    tipo = getattr(tipo, "__name__", tipo)

    if tipo == "bool":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS:
            return True
        if isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
            return False
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise ValueError(f"{nombre} debe ser booleano (true/false), recibido: {value!r}")

    if tipo == "int":
        if isinstance(value, bool):
            raise ValueError(f"{nombre} debe ser entero, recibido: {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise ValueError(f"{nombre} debe ser entero, recibido: {value!r}")

    return value


def _find_config_dir() -> Path:
    """
    Encuentra el directorio raíz del proyecto (donde está release.yaml).

    Busca hacia arriba desde el directorio actual. Si no lo encuentra,
    usa el directorio actual.
    """
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / CONFIG_FILENAME).exists():
            return parent
    return current


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Carga la configuración completa de kernel-release.

    Pasos:
    1. Carga .env para tener las variables de entorno disponibles
    2. Lee release.yaml
    3. Resuelve ${VARIABLES} en los valores del YAML
    4. Convierte cada sección a su dataclass (bool/int desde string)
    5. Agrega el token del entorno (GITHUB_TOKEN, o ACCESS_TOKEN)

    Args:
        config_path: Ruta al release.yaml. Si es None, busca automáticamente.

    Returns:
        AppConfig con toda la configuración lista para usar.

    Raises:
        ValueError: Si un campo bool o int de release.yaml no se puede convertir.
    """
    # Paso 1: Cargar .env
    proyecto_dir = _find_config_dir()
    env_path = proyecto_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    # Paso 2: Leer release.yaml
    if config_path is None:
        config_path = proyecto_dir / CONFIG_FILENAME

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    else:
        raw_config = {}

    # Paso 3: Resolver variables de entorno
    config_resuelto = _resolve_env_recursive(raw_config)

    # Paso 4: Convertir cada sección a su dataclass
    app_config = AppConfig(
        build=_dict_to_dataclass(config_resuelto.get("build") or {}, BuildConfig),
        features=_dict_to_dataclass(
            config_resuelto.get("features") or {}, FeatureFlags
        ),
        cleanup=_dict_to_dataclass(
            config_resuelto.get("cleanup") or {}, CleanupConfig
        ),
    )

    # Paso 5: Agregar valores del entorno
    app_config.github_token = (
        os.environ.get("GITHUB_TOKEN") or os.environ.get("ACCESS_TOKEN", "")
    )

    return app_config
