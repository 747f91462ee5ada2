"""
test_release_body.py — Tests para el body markdown del release.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from kernel_release.config import FeatureFlags, ReleaseConfig
from kernel_release.context import ExecutionContext
from kernel_release.publishing.release_body import format_timestamp, generate_release_body


NOW = datetime(2026, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return ReleaseConfig(
        token="t",
        build_dir="out",
        kernel_url="https://github.com/example/kernel",
        kernel_branch="android14-6.1",
        config="gki_defconfig",
        arch="arm64",
        features=FeatureFlags(ksu=True, kvm=True),
    )


class TestGenerateReleaseBody:
    def test_build_information(self, config):
        body = generate_release_body(config, ExecutionContext("abc", "o", "r"), now=NOW)
        assert "- Config: gki_defconfig" in body
        assert "- Branch: android14-6.1" in body
        assert "- Source: https://github.com/example/kernel" in body
        assert "- Architecture: arm64" in body

    def test_features_como_true_false(self, config):
        body = generate_release_body(config, ExecutionContext("abc", "o", "r"), now=NOW)
        assert "KernelSU: true" in body
        assert "NetHunter: false" in body
        assert "LXC: false" in body
        assert "KVM: true" in body
        assert "Rekernel: false" in body

    def test_build_details_del_contexto(self, config):
        ctx = ExecutionContext("abc123", "o", "r", workflow="Build", run_id="55")
        body = generate_release_body(config, ctx, now=NOW)
        assert "- Timestamp: 2026-01-31T12:00:00.000Z" in body
        assert "- Workflow: Build" in body
        assert "- Run ID: 55" in body
        assert "- Commit: abc123" in body

    def test_unknown_cuando_faltan_datos(self, config):
        body = generate_release_body(config, ExecutionContext("", "", ""), now=NOW)
        assert "- Workflow: Unknown" in body
        assert "- Run ID: Unknown" in body
        assert "- Commit: Unknown" in body

    def test_determinista(self, config):
        ctx = ExecutionContext("abc", "o", "r", workflow="W", run_id="1")
        assert generate_release_body(config, ctx, now=NOW) == generate_release_body(
            config, ctx, now=NOW
        )

    def test_secciones(self, config):
        body = generate_release_body(config, ExecutionContext("a", "o", "r"), now=NOW)
        assert body.startswith("## Build Information\n")
        assert "\n## Features\n" in body
        assert "\n## Build Details\n" in body


class TestFormatTimestamp:
    def test_convierte_a_utc(self):
        local = datetime(2026, 1, 31, 6, 0, 0, tzinfo=timezone(timedelta(hours=-6)))
        assert format_timestamp(local) == "2026-01-31T12:00:00.000Z"

    def test_milisegundos(self):
        moment = datetime(2026, 1, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2026-01-01T00:00:00.123Z"
