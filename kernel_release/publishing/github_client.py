"""
github_client.py — Cliente mínimo de la REST API de Releases de GitHub.

Solo implementa las cinco operaciones que necesita el pipeline:
    - crear release
    - subir asset a un release
    - listar releases (una sola página)
    - borrar release
    - borrar referencia git (el tag del release)

¿Por qué requests directo y no PyGithub?
    - Son cinco endpoints, no vale la pena otra dependencia
    - Los tests mockean requests.request y listo
    - El upload de assets va a uploads.github.com con el body crudo,
      que es más claro escrito a mano

Autenticación: el token del workflow (secrets.GITHUB_TOKEN) o un PAT
con permiso contents: write.

Uso:
    from kernel_release.publishing.github_client import GitHubReleasesClient
    client = GitHubReleasesClient(token, "owner", "repo")
    release = client.create_release("last-ci-abc", "Last CI build kernel", body)
    client.upload_release_asset(release, "Image.gz", data)
"""

from __future__ import annotations

from typing import Any

import requests

from kernel_release.context import DEFAULT_API_URL

UPLOADS_BASE = "https://uploads.github.com"
API_VERSION = "2022-11-28"

# Los assets de kernel pueden pesar decenas de MB
DEFAULT_TIMEOUT = 30
UPLOAD_TIMEOUT = 300


class GitHubAPIError(RuntimeError):
    """
    Falla de una llamada a la API de GitHub.

    Campos:
        status_code: Código HTTP (None si falló el transporte)
        api_message: Campo "message" del JSON de error, si vino
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        api_message: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.api_message = api_message


class GitHubReleasesClient:
    """
    Operaciones de releases sobre un repositorio concreto.

    Args:
        token: Token de acceso (Bearer)
        owner: Dueño del repositorio
        repo: Nombre del repositorio
        api_url: URL base de la API (cambia en GitHub Enterprise)
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = DEFAULT_API_URL,
    ):
        self._token = token
        self._owner = owner
        self._repo = repo
        self._api_url = api_url.rstrip("/")

    @property
    def repo_url(self) -> str:
        """URL base de la API para este repositorio."""
        return f"{self._api_url}/repos/{self._owner}/{self._repo}"

    # ============================================================
    # Operaciones de releases
    # ============================================================

    def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        make_latest: bool = True,
    ) -> dict[str, Any]:
        """
        Crea un release (y su tag, si no existe) en el repositorio.

        Returns:
            JSON del release creado (id, html_url, upload_url, ...).
        """
        payload = {
            "tag_name": tag_name,
            "name": name,
            "body": body,
            "make_latest": "true" if make_latest else "false",
        }
        response = self._request("POST", f"{self.repo_url}/releases", json=payload)
        return response.json()

    def upload_release_asset(
        self,
        release: dict[str, Any],
        name: str,
        data: bytes,
    ) -> dict[str, Any]:
        """
        Sube un archivo como asset de un release.

        GitHub devuelve upload_url como plantilla RFC 6570
        (".../assets{?name,label}"); se corta en "{" y se agrega ?name=.

        Args:
            release: JSON del release (necesita "id"; usa "upload_url" si está)
            name: Nombre del asset
            data: Contenido binario completo

        Returns:
            JSON del asset creado.
        """
        upload_url = release.get("upload_url") or (
            f"{UPLOADS_BASE}/repos/{self._owner}/{self._repo}"
            f"/releases/{release['id']}/assets"
        )
        url = upload_url.split("{")[0]

        response = self._request(
            "POST",
            url,
            params={"name": name},
            data=data,
            headers={"Content-Type": "application/octet-stream"},
            timeout=UPLOAD_TIMEOUT,
        )
        return response.json()

    def list_releases(self, per_page: int = 100) -> list[dict[str, Any]]:
        """Lista una sola página de releases (la API los da más nuevos primero)."""
        response = self._request(
            "GET",
            f"{self.repo_url}/releases",
            params={"per_page": per_page},
        )
        return response.json()

    def delete_release(self, release_id: int) -> None:
        """Borra un release. El tag queda vivo; ver delete_ref()."""
        self._request("DELETE", f"{self.repo_url}/releases/{release_id}")

    def delete_ref(self, ref: str) -> None:
        """
        Borra una referencia git.

        Args:
            ref: Referencia sin "refs/" (ej: "tags/last-ci-abc123")
        """
        self._request("DELETE", f"{self.repo_url}/git/refs/{ref}")

    # ============================================================
    # Transporte
    # ============================================================

    def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        **kwargs: Any,
    ) -> requests.Response:
        """
        Ejecuta un request autenticado y valida el status.

        Raises:
            GitHubAPIError: Si falla el transporte o el status es >= 400.
        """
        all_headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if headers:
            all_headers.update(headers)

        try:
            response = requests.request(
                method,
                url,
                headers=all_headers,
                timeout=timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise GitHubAPIError(f"{method} {url} falló: {e}") from e

        if response.status_code >= 400:
            api_message = _extract_message(response)
            raise GitHubAPIError(
                f"{method} {url} → HTTP {response.status_code}: {api_message}",
                status_code=response.status_code,
                api_message=api_message,
            )

        return response


def _extract_message(response: requests.Response) -> str:
    """Saca el campo "message" del error JSON, o el texto crudo recortado."""
    try:
        data = response.json()
    except ValueError:
        return (response.text or "")[:200]
    if isinstance(data, dict):
        return str(data.get("message", ""))
    return str(data)[:200]
