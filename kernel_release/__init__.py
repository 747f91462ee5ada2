"""
kernel-release — Publica builds de kernel como GitHub Releases desde CI.

Este paquete contiene:
- publishing/ → Cliente de la API de Releases, publisher y pruner
- utils/      → Logger y validadores compartidos
- config.py   → release.yaml + .env
- context.py  → Valores GITHUB_* del run de CI

Uso:
    python -m kernel_release publish --build-dir out/release
    python -m kernel_release cleanup --keep 3
    python -m kernel_release health
"""

__version__ = "1.0.0"
