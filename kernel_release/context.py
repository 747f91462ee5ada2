"""
context.py — Contexto de ejecución del workflow de CI.

GitHub Actions expone el commit, el repo y el run como variables de
entorno (GITHUB_SHA, GITHUB_REPOSITORY, ...). En vez de leerlas desde
cada función, se capturan una vez en un ExecutionContext inmutable
que se pasa explícitamente al publisher y al pruner. Así los tests
construyen el contexto a mano sin tocar os.environ.

Uso:
    from kernel_release.context import ExecutionContext
    context = ExecutionContext.from_env()
    print(context.tag_name)  # "last-ci-<sha>"
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

# Prefijo de los tags creados por el pipeline. El pruner solo toca
# releases cuyo tag empieza con esto.
CI_TAG_PREFIX = "last-ci-"

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class ExecutionContext:
    """
    Valores ambientales del run de CI.

    Campos:
        sha: Commit que disparó el workflow
        owner: Dueño del repositorio
        repo: Nombre del repositorio
        workflow: Nombre del workflow ("" si no se conoce)
        run_id: ID del run ("" si no se conoce)
        api_url: URL base de la REST API (GHES la cambia)
    """
    sha: str
    owner: str
    repo: str
    workflow: str = ""
    run_id: str = ""
    api_url: str = DEFAULT_API_URL

    @property
    def tag_name(self) -> str:
        """Tag del release automático para este commit."""
        return f"{CI_TAG_PREFIX}{self.sha}"

    @property
    def repository(self) -> str:
        """Slug owner/repo."""
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExecutionContext":
        """
        Construye el contexto desde las variables GITHUB_* del runner.

        Las variables que falten quedan como cadena vacía; validar
        que estén es trabajo del comando que las necesita.

        Args:
            environ: Mapping a usar en vez de os.environ.
        """
        env = os.environ if environ is None else environ

        owner, _, repo = env.get("GITHUB_REPOSITORY", "").partition("/")

        return cls(
            sha=env.get("GITHUB_SHA", ""),
            owner=owner,
            repo=repo,
            workflow=env.get("GITHUB_WORKFLOW", ""),
            run_id=env.get("GITHUB_RUN_ID", ""),
            api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
        )
