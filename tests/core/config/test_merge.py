# tests/core/config/test_merge.py
"""
Testes do deep-merge de configuração do stack.

Os testes asseguram que:
- dicts são mesclados recursivamente
- listas são sobrescritas por completo
- None no override remove explicitamente o valor da base
- conflitos de tipo interrompem o merge
- nenhum input é mutado

Decisões arquiteturais:
    - O merge é puro e determinístico
    - A variante mínima depende de `None` para remover limites de instâncias
"""

import copy

import pytest

try:
    from stratus_stack.core.config.merge import deep_merge
    from stratus_stack.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar core.config.merge: {_IMPORT_ERR}")


def test_merge_nested_dicts_recursively():
    """Chaves aninhadas do override substituem apenas o que declaram."""
    _require_imports()

    base = {"project": {"id": "ideal-adventure", "region": "us-central1"}}
    override = {"project": {"region": "europe-west1"}}

    assert deep_merge(base, override) == {
        "project": {"id": "ideal-adventure", "region": "europe-west1"}
    }


def test_merge_lists_are_replaced():
    _require_imports()

    out = deep_merge({"tags": ["a", "b"]}, {"tags": ["c"]})
    assert out == {"tags": ["c"]}


def test_merge_none_override_clears_value():
    """
    `None` no override remove o valor da base.

    É assim que `stack.minimal.yaml` desliga os limites de instâncias
    declarados nos defaults.
    """
    _require_imports()

    base = {"function": {"min_instance_count": 0, "max_instance_count": 1, "runtime": "go119"}}
    override = {"function": {"min_instance_count": None, "max_instance_count": None}}

    out = deep_merge(base, override)
    assert out["function"] == {
        "min_instance_count": None,
        "max_instance_count": None,
        "runtime": "go119",
    }


def test_merge_type_conflict_raises():
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"function": {"runtime": "go119"}}, {"function": "go119"})


def test_merge_does_not_mutate_inputs():
    _require_imports()

    base = {"backend": {"organization": "org", "workspace": "ws"}}
    override = {"backend": {"workspace": "other"}}
    base_before = copy.deepcopy(base)
    override_before = copy.deepcopy(override)

    deep_merge(base, override)

    assert base == base_before
    assert override == override_before


def test_merge_requires_dict_roots():
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["not", "a", "dict"])  # type: ignore[arg-type]
