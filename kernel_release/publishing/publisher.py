"""
publisher.py — Publica los artefactos del build como un GitHub Release.

Flujo:
    1. Validar el token (antes de tocar disco o red)
    2. Derivar tag (last-ci-<sha>), título y body
    3. Enumerar los archivos del directorio de build
    4. Crear el release marcado como "latest"
    5. Subir cada archivo como asset, uno tras otro

Si no hay archivos, falla ANTES de llamar a la API: nunca se crea
un release vacío. Si la creación o algún upload falla, el error se
envuelve y se propaga; lo que ya se creó en GitHub se queda ahí
(no hay rollback).

Uso:
    from kernel_release.publishing.publisher import create_release
    create_release(release_config, ExecutionContext.from_env())
"""

from __future__ import annotations

from pathlib import Path

from kernel_release.config import ReleaseConfig
from kernel_release.context import ExecutionContext
from kernel_release.publishing.github_client import GitHubReleasesClient
from kernel_release.publishing.release_body import generate_release_body
from kernel_release.utils.logger import get_logger

logger = get_logger("kernel_release.publisher")

RELEASE_TITLE = "Last CI build kernel"


def collect_candidate_files(build_dir: str | Path) -> list[Path]:
    """
    Lista los archivos regulares directamente dentro de build_dir.

    No entra en subdirectorios. Respeta el orden en que el sistema
    de archivos entrega las entradas. Un directorio inexistente
    cuenta como "cero archivos", no como error.

    Args:
        build_dir: Directorio de salida del build.

    Returns:
        Lista de rutas a publicar (puede estar vacía).
    """
    directorio = Path(build_dir)
    if not directorio.is_dir():
        return []
    return [entry for entry in directorio.iterdir() if entry.is_file()]


def create_release(
    config: ReleaseConfig,
    context: ExecutionContext,
    client: GitHubReleasesClient | None = None,
) -> None:
    """
    Crea el release last-ci-<sha> y sube todos los archivos del build.

    Args:
        config: Configuración del build (token, build_dir, features...).
        context: Contexto del run de CI (sha, owner/repo, workflow).
        client: Cliente de la API. Si es None se crea con config.token.

    Raises:
        ValueError: Si no hay token.
        FileNotFoundError: Si no hay archivos que publicar.
        RuntimeError: Si falla la creación del release o algún upload.
    """
    with logger.group("Creating GitHub Release"):
        if not config.token:
            raise ValueError("access-token is required when release is set to true")

        tag_name = context.tag_name
        body = generate_release_body(config, context)

        files = collect_candidate_files(config.build_dir)
        if not files:
            raise FileNotFoundError(
                f"No files to release: {config.build_dir} is empty or does not exist"
            )

        if client is None:
            client = GitHubReleasesClient(
                config.token, context.owner, context.repo, api_url=context.api_url
            )

        try:
            release = client.create_release(
                tag_name=tag_name,
                name=RELEASE_TITLE,
                body=body,
                make_latest=True,
            )
            logger.info(f"Created release: {release.get('html_url', tag_name)}")

            for number, path in enumerate(files, start=1):
                logger.step(number, len(files), f"Subiendo {path.name}")
                client.upload_release_asset(release, path.name, path.read_bytes())
                logger.info(f"Uploaded: {path.name}")

        except Exception as e:
            raise RuntimeError(f"Failed to create release: {e}") from e

    logger.success(f"Release {tag_name} publicado con {len(files)} archivo(s)")
