"""
__main__.py — Permite ejecutar kernel-release como módulo.

    python -m kernel_release publish --build-dir out/release
"""

from kernel_release.cli import main

if __name__ == "__main__":
    main()
