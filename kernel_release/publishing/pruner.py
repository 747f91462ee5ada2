"""
pruner.py — Borra releases automáticos viejos (last-ci-*).

Es limpieza "best-effort": si algo falla, se registra una advertencia
y se devuelve un CleanupResult con el error, pero NUNCA se lanza la
excepción. Un fallo de limpieza no debe tumbar el pipeline que acaba
de publicar un build.

Solo se tocan releases cuyo tag empieza con "last-ci-". Los releases
creados a mano no se consideran, sin importar keep_count.

Orden: la API lista los releases del más nuevo al más viejo, pero no
lo garantiza explícitamente. Si todos los candidatos traen created_at
se reordenan por esa fecha (estable); si no, se confía en el orden
de la lista.

Ojo: correr el pruner en paralelo con el publisher sobre el mismo
repo puede borrar un release al que todavía se le están subiendo
assets. Coordinar eso es responsabilidad de quien los invoca.

Uso:
    from kernel_release.publishing.pruner import cleanup_old_releases
    result = cleanup_old_releases(token, keep_count=3, context=context)
    if not result.ok:
        print(result.error)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kernel_release.context import CI_TAG_PREFIX, ExecutionContext
from kernel_release.publishing.github_client import GitHubReleasesClient
from kernel_release.utils.logger import get_logger
from kernel_release.utils.validators import validate_keep_count

logger = get_logger("kernel_release.pruner")

# Una sola página; no se pagina más allá.
LIST_PAGE_SIZE = 100


@dataclass
class CleanupResult:
    """
    Resultado de una limpieza.

    Campos:
        deleted: Tags cuyos releases se borraron (en orden). Si falla el
            borrado del tag, el tag igual figura acá y el fallo va en error
        kept: Tags de releases automáticos que se conservan
        error: Descripción del fallo que abortó la limpieza, o None
    """
    deleted: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True si la limpieza terminó sin errores."""
        return self.error is None


def select_ci_releases(releases: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Filtra los releases automáticos y los ordena del más nuevo al más viejo.

    Si algún candidato no trae created_at, se conserva el orden original.
    """
    ci_releases = [
        r for r in releases
        if str(r.get("tag_name", "")).startswith(CI_TAG_PREFIX)
    ]
    if ci_releases and all(r.get("created_at") for r in ci_releases):
        # ISO-8601 UTC ordena bien como texto
        ci_releases = sorted(ci_releases, key=lambda r: r["created_at"], reverse=True)
    return ci_releases


def cleanup_old_releases(
    token: str,
    keep_count: int,
    context: ExecutionContext,
    client: GitHubReleasesClient | None = None,
) -> CleanupResult:
    """
    Borra los releases last-ci-* más viejos, conservando keep_count.

    Por cada release sobrante: borra el release y luego su tag.
    El primer error aborta el resto de borrados y queda en el resultado.

    Args:
        token: Token de acceso a la API.
        keep_count: Cuántos releases automáticos conservar.
        context: Contexto del run (owner/repo, api_url).
        client: Cliente de la API. Si es None se crea con el token.

    Returns:
        CleanupResult con lo borrado, lo conservado y el error (si hubo).
        Un keep_count inválido también se reporta ahí, sin llamar a la API.
    """
    result = CleanupResult()

    valido, error = validate_keep_count(keep_count)
    if not valido:
        result.error = error
        logger.warning(f"Failed to cleanup old releases: {error}")
        return result

    try:
        if client is None:
            client = GitHubReleasesClient(
                token, context.owner, context.repo, api_url=context.api_url
            )

        releases = client.list_releases(per_page=LIST_PAGE_SIZE)
        ci_releases = select_ci_releases(releases)

        result.kept = [r["tag_name"] for r in ci_releases[:keep_count]]
        to_delete = ci_releases[keep_count:]

        for release in to_delete:
            tag_name = release["tag_name"]
            client.delete_release(release["id"])
            # El release ya no existe aunque falle el borrado del tag
            result.deleted.append(tag_name)
            client.delete_ref(f"tags/{tag_name}")
            logger.info(f"Deleted old release: {tag_name}")

    except Exception as e:
        result.error = str(e) or type(e).__name__
        logger.warning(f"Failed to cleanup old releases: {result.error}")

    return result
