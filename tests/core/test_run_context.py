# tests/core/test_run_context.py
"""
Testes do SynthContext.

Os testes asseguram que:
- cada contexto criado possui run_id próprio e cópia da configuração
- eventos de log carregam run_id, step_id, level e campos extras
- warnings são agrupados por etapa e também aparecem no log
- artefatos ausentes levantam KeyError
"""

import pytest

try:
    from stratus_stack.core.run_context import SynthContext
except Exception as e:  # noqa: BLE001
    SynthContext = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar core.run_context: {_IMPORT_ERR}")


def test_create_isolates_runs(stack_config):
    _require_imports()

    a = SynthContext.create(stack_config)
    b = SynthContext.create(stack_config)

    assert a.run_id != b.run_id
    assert a.config == stack_config
    assert a.config is not stack_config


def test_log_records_structured_event(synth_ctx):
    _require_imports()

    synth_ctx.log(step_id="graph.build", level="INFO", message="stack declared", nodes=12)

    ev = synth_ctx.events[0]
    assert ev["run_id"] == "test-run"
    assert ev["step_id"] == "graph.build"
    assert ev["level"] == "INFO"
    assert ev["message"] == "stack declared"
    assert ev["nodes"] == 12
    assert ev["timestamp"].endswith("+00:00")


def test_warnings_grouped_by_step(synth_ctx):
    _require_imports()

    synth_ctx.add_warning(step_id="asset.package", message="skipped fifo")
    synth_ctx.add_warning(step_id="asset.package", message="skipped socket")

    assert synth_ctx.warnings == {"asset.package": ["skipped fifo", "skipped socket"]}
    assert [e["level"] for e in synth_ctx.events] == ["WARNING", "WARNING"]


def test_artifact_store(synth_ctx):
    _require_imports()

    synth_ctx.set_artifact("manifest", {"run": {}})
    assert synth_ctx.get_artifact("manifest") == {"run": {}}

    with pytest.raises(KeyError):
        synth_ctx.get_artifact("missing")
