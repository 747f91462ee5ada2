"""
cli.py — Punto de entrada de kernel-release.

Comandos disponibles:
    python -m kernel_release publish                  → Crea el release y sube el build
    python -m kernel_release publish --cleanup -k 3   → ...y después poda los viejos
    python -m kernel_release cleanup --keep 3         → Solo poda releases last-ci-*
    python -m kernel_release config --show            → Muestra configuración
    python -m kernel_release config --validate        → Valida configuración
    python -m kernel_release health                   → Verifica el entorno de CI

Las opciones del CLI pisan lo que diga release.yaml. El token sale de
--token o de GITHUB_TOKEN / ACCESS_TOKEN.

Uso desde código (testing):
    from click.testing import CliRunner
    from kernel_release.cli import main
    CliRunner().invoke(main, ["cleanup", "--keep", "2"])
"""

from __future__ import annotations

import sys

import click
from click.core import ParameterSource
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from kernel_release import __version__
from kernel_release.config import load_config
from kernel_release.context import ExecutionContext
from kernel_release.publishing.publisher import collect_candidate_files, create_release
from kernel_release.publishing.pruner import CleanupResult, cleanup_old_releases
from kernel_release.utils.logger import get_logger, console as rich_console
from kernel_release.utils.validators import (
    validate_arch,
    validate_keep_count,
    validate_repository,
    validate_token,
)

logger = get_logger("kernel_release.cli")


@click.group()
@click.version_option(version=__version__, prog_name="kernel-release")
def main():
    """Publica builds de kernel como GitHub Releases desde CI."""
    pass


@main.command()
@click.option("--build-dir", "-d", default=None, help="Directorio con los artefactos")
@click.option("--kernel-url", default=None, help="URL del repo fuente del kernel")
@click.option("--kernel-branch", default=None, help="Rama del kernel compilada")
@click.option("--defconfig", default=None, help="Nombre del defconfig (ej: gki_defconfig)")
@click.option("--arch", default=None, help="Arquitectura destino (ej: arm64)")
@click.option("--ksu/--no-ksu", default=None, help="Build con KernelSU")
@click.option("--nethunter/--no-nethunter", default=None, help="Build con NetHunter")
@click.option("--lxc/--no-lxc", default=None, help="Build con soporte LXC")
@click.option("--kvm/--no-kvm", default=None, help="Build con soporte KVM")
@click.option("--rekernel/--no-rekernel", default=None, help="Build con Re-Kernel")
@click.option("--token", default=None, help="Token de GitHub (default: GITHUB_TOKEN)")
@click.option(
    "--cleanup/--no-cleanup",
    default=None,
    help="Poda releases last-ci-* viejos después de publicar",
)
@click.option("--keep", "-k", type=int, default=None, help="Releases automáticos a conservar")
def publish(
    build_dir: str | None,
    kernel_url: str | None,
    kernel_branch: str | None,
    defconfig: str | None,
    arch: str | None,
    ksu: bool | None,
    nethunter: bool | None,
    lxc: bool | None,
    kvm: bool | None,
    rekernel: bool | None,
    token: str | None,
    cleanup: bool | None,
    keep: int | None,
):
    """Crea el release last-ci-<sha> y sube los archivos del build."""
    try:
        cfg = load_config()
        release_config = cfg.to_release_config(
            token=token,
            build_dir=build_dir,
            kernel_url=kernel_url,
            kernel_branch=kernel_branch,
            config=defconfig,
            arch=arch,
            ksu=_from_cli("ksu", ksu),
            nethunter=_from_cli("nethunter", nethunter),
            lxc=_from_cli("lxc", lxc),
            kvm=_from_cli("kvm", kvm),
            rekernel=_from_cli("rekernel", rekernel),
        )
        context = ExecutionContext.from_env()

        valido, error = validate_repository(context.repository if context.owner else "")
        if not valido:
            raise ValueError(error)

        create_release(release_config, context)

        cleanup = _from_cli("cleanup", cleanup)
        do_cleanup = cfg.cleanup.enabled if cleanup is None else cleanup
        if do_cleanup:
            keep_count = cfg.cleanup.keep_count if keep is None else keep
            result = cleanup_old_releases(release_config.token, keep_count, context)
            _show_cleanup_summary(result)

    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error inesperado: {e}")
        sys.exit(1)


@main.command()
@click.option("--keep", "-k", type=int, default=None, help="Releases automáticos a conservar")
@click.option("--token", default=None, help="Token de GitHub (default: GITHUB_TOKEN)")
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Sale con código 1 si la limpieza falla",
)
def cleanup(keep: int | None, token: str | None, strict: bool):
    """Borra los releases last-ci-* más viejos."""
    cfg = load_config()
    keep_count = cfg.cleanup.keep_count if keep is None else keep
    context = ExecutionContext.from_env()

    result = cleanup_old_releases(token or cfg.github_token, keep_count, context)
    _show_cleanup_summary(result)

    if strict and not result.ok:
        sys.exit(1)


@main.command()
@click.option("--show", is_flag=True, help="Muestra la configuración actual")
@click.option("--validate", is_flag=True, help="Valida la configuración")
def config(show: bool, validate: bool):
    """Gestiona la configuración de kernel-release."""
    cfg = load_config()

    if show:
        tabla = Table(title="Configuración de kernel-release")
        tabla.add_column("Parámetro", style="cyan")
        tabla.add_column("Valor", style="green")

        tabla.add_row("Build dir", cfg.build.build_dir)
        tabla.add_row("Kernel URL", cfg.build.kernel_url or "(no configurado)")
        tabla.add_row("Kernel branch", cfg.build.kernel_branch or "(no configurado)")
        tabla.add_row("Defconfig", cfg.build.config or "(no configurado)")
        tabla.add_row("Arch", cfg.build.arch)
        for name, value in vars(cfg.features).items():
            tabla.add_row(f"Feature {name}", "true" if value else "false")
        tabla.add_row("Cleanup", "Activo" if cfg.cleanup.enabled else "Inactivo")
        tabla.add_row("Keep count", str(cfg.cleanup.keep_count))
        tabla.add_row("Token", "Configurado" if cfg.github_token else "Falta")

        rich_console.print(tabla)

    if validate:
        _validate_config(cfg)


@main.command()
def health():
    """Verifica que el entorno de CI tenga lo necesario para publicar."""
    cfg = load_config()
    context = ExecutionContext.from_env()
    errores = []

    # 1. Token
    valido, error = validate_token(cfg.github_token)
    if valido:
        logger.success("Token de GitHub: configurado")
    else:
        errores.append(error)
        logger.error(error)

    # 2. Repositorio
    valido, error = validate_repository(context.repository if context.owner else "")
    if valido:
        logger.success(f"Repositorio: {context.repository}")
    else:
        errores.append(error)
        logger.error(error)

    # 3. Commit
    if context.sha:
        logger.success(f"Commit: {context.sha} → tag {context.tag_name}")
    else:
        errores.append("GITHUB_SHA no configurado")
        logger.error("GITHUB_SHA no configurado")

    # 4. Directorio de build
    archivos = collect_candidate_files(cfg.build.build_dir)
    if archivos:
        logger.success(f"Build dir: {cfg.build.build_dir} ({len(archivos)} archivos)")
    else:
        logger.warning(f"Build dir sin archivos: {cfg.build.build_dir}")

    if errores:
        rich_console.print(
            Panel(
                escape("\n".join(f"- {e}" for e in errores)),
                title="Problemas encontrados",
                border_style="red",
            )
        )
        sys.exit(1)

    rich_console.print(
        Panel("Todo listo para publicar", title="Estado de salud", border_style="green")
    )


# ============================================================
# Funciones auxiliares (privadas)
# ============================================================

def _from_cli(name: str, value):
    """None si la opción no vino de la línea de comandos (ni de envvar)."""
    source = click.get_current_context().get_parameter_source(name)
    if source in (ParameterSource.DEFAULT, ParameterSource.DEFAULT_MAP, None):
        return None
    return value


def _show_cleanup_summary(result: CleanupResult) -> None:
    """Muestra lo que se borró y lo que se conservó."""
    tabla = Table(title="Limpieza de releases last-ci-*")
    tabla.add_column("Tag", style="cyan")
    tabla.add_column("Estado")

    for tag in result.kept:
        tabla.add_row(tag, "[green]conservado[/green]")
    for tag in result.deleted:
        tabla.add_row(tag, "[yellow]borrado[/yellow]")

    rich_console.print(tabla)
    if not result.ok:
        rich_console.print(
            Panel(escape(result.error or ""), title="Limpieza incompleta", border_style="yellow")
        )


def _validate_config(cfg) -> None:
    """Valida la configuración y muestra resultado."""
    problemas = []

    for valido, error in (
        validate_token(cfg.github_token),
        validate_arch(cfg.build.arch),
        validate_keep_count(cfg.cleanup.keep_count),
    ):
        if not valido:
            problemas.append(error)

    if not cfg.build.config:
        problemas.append("build.config (defconfig) no configurado en release.yaml")

    if problemas:
        for p in problemas:
            logger.error(p)
        sys.exit(1)

    logger.success("Configuración válida")


if __name__ == "__main__":
    main()
