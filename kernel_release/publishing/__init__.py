"""
publishing/ — Todo lo relacionado con publicar el build en GitHub.

Módulos:
- github_client.py → Cliente REST de Releases (requests)
- release_body.py  → Genera el markdown del release
- publisher.py     → Crea el release y sube los assets
- pruner.py        → Borra releases last-ci-* viejos
"""
