# tests/core/traceability/test_manifest_create.py
"""
Testes de criação do Manifest de síntese.

Os testes asseguram que:
- o Manifest nasce com metadados da execução e hash da config
- hashes de asset e documento iniciam como None
- steps e events iniciam vazios (nenhum evento implícito)

Decisões arquiteturais:
    - UTC é o timezone canônico; timestamps naive são tratados como UTC
"""

from datetime import datetime, timedelta, timezone

import pytest

try:
    from stratus_stack.core.traceability.manifest import SynthManifest, create_manifest
except Exception as e:  # noqa: BLE001
    create_manifest = None
    SynthManifest = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar core.traceability.manifest: {_IMPORT_ERR}")


def test_create_manifest_minimal_structure():
    _require_imports()

    m = create_manifest(
        run_id="run-001",
        started_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        version="0.1.0",
        stack="ideal-adventure",
        config_hash="c" * 64,
        workspace="ideal-adventure",
    )

    assert isinstance(m, SynthManifest)
    assert m.run == {
        "run_id": "run-001",
        "started_at": "2026-01-01T00:00:00+00:00",
        "version": "0.1.0",
        "stack": "ideal-adventure",
        "workspace": "ideal-adventure",
    }
    assert m.hashes == {"config_hash": "c" * 64, "asset_hash": None, "document_hash": None}
    assert m.steps == {}
    assert m.events == []


def test_started_at_is_normalized_to_utc():
    """Timestamps com offset e naive são persistidos em UTC."""
    _require_imports()

    tz = timezone(timedelta(hours=-3))
    aware = create_manifest(
        run_id="r",
        started_at=datetime(2026, 1, 1, 9, 0, tzinfo=tz),
        version="0.1.0",
        stack="s",
        config_hash="h",
    )
    naive = create_manifest(
        run_id="r",
        started_at=datetime(2026, 1, 1, 12, 0),
        version="0.1.0",
        stack="s",
        config_hash="h",
    )

    assert aware.run["started_at"] == "2026-01-01T12:00:00+00:00"
    assert naive.run["started_at"] == "2026-01-01T12:00:00+00:00"
    assert aware.run["workspace"] is None
