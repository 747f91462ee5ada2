"""
release_body.py — Genera la descripción markdown del release.

El body es determinista dado el instante `now`: mismas entradas,
mismo texto. Los tests fijan `now`; en producción se usa la hora UTC
del momento de generación.
"""

from __future__ import annotations

from datetime import datetime, timezone

from kernel_release.config import ReleaseConfig
from kernel_release.context import ExecutionContext

UNKNOWN = "Unknown"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 en UTC con milisegundos y sufijo Z (2026-01-31T12:00:00.000Z)."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _flag(value: bool) -> str:
    return "true" if value else "false"


def generate_release_body(
    config: ReleaseConfig,
    context: ExecutionContext,
    now: datetime | None = None,
) -> str:
    """
    Genera el body del release en formato markdown.

    Estructura:
    - Build Information: defconfig, rama, fuente, arquitectura
    - Features: los cinco toggles como true/false
    - Build Details: timestamp, workflow, run id y commit
      ("Unknown" cuando el contexto no los trae)

    Args:
        config: Configuración del build.
        context: Contexto del run de CI.
        now: Instante a reportar. Si es None, la hora actual UTC.

    Returns:
        Markdown para el body del release.
    """
    now = now or datetime.now(timezone.utc)
    features = config.features

    return f"""## Build Information
- Config: {config.config}
- Branch: {config.kernel_branch}
- Source: {config.kernel_url}
- Architecture: {config.arch}

## Features
- KernelSU: {_flag(features.ksu)}
- NetHunter: {_flag(features.nethunter)}
- LXC: {_flag(features.lxc)}
- KVM: {_flag(features.kvm)}
- Rekernel: {_flag(features.rekernel)}

## Build Details
- Timestamp: {format_timestamp(now)}
- Workflow: {context.workflow or UNKNOWN}
- Run ID: {context.run_id or UNKNOWN}
- Commit: {context.sha or UNKNOWN}
"""
