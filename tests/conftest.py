# tests/conftest.py
"""
Fixtures compartilhados para testes do Stratus Stack.

Este módulo define fixtures reutilizáveis que fornecem:
- configuração efetiva mínima e determinística do stack
- conteúdo YAML de defaults e overrides locais
- uma árvore de fonte da função (`function/main.go`) em diretório temporário
- um AssetDescriptor fixo, sem I/O, para testes do grafo
- contexto de síntese controlado (SynthContext)

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Apenas fixtures de fonte tocam o filesystem (sempre via tmp_path)
    - Imports do core são realizados de forma lazy

Invariantes:
    - Nenhuma fixture realiza chamadas de rede
    - Dados retornados são determinísticos e isolados
"""

from pathlib import Path

import pytest


MAIN_GO = (
    "package helloworld\n"
    "\n"
    "func init() {\n"
    "\tfunctions.CloudEvent(\"imageUploaded\", imageUploaded)\n"
    "}\n"
)

FAKE_HASH = "0" * 56 + "deadbeef"


@pytest.fixture
def stack_config() -> dict:
    """
    Configuração efetiva mínima do stack (variante completa).

    Returns:
        dict: Configuração já resolvida, como produzida por `load_config`.
    """
    return {
        "stack": {"name": "ideal-adventure"},
        "project": {"id": "ideal-adventure", "region": "us-central1"},
        "pipeline": {"variant": "full"},
        "function": {
            "name": "function",
            "source_dir": "function",
            "entry_point": "imageUploaded",
            "runtime": "go119",
            "endpoint_id": "7212484016908271616",
            "min_instance_count": 0,
            "max_instance_count": 1,
        },
        "backend": {
            "hostname": "app.terraform.io",
            "organization": "hsmtkkdefault",
            "workspace": "ideal-adventure",
        },
    }


@pytest.fixture
def stack_defaults_yaml() -> str:
    """YAML de defaults semelhante a `config/stack.defaults.yaml`."""
    return """
stack:
  name: ideal-adventure
project:
  id: ideal-adventure
  region: us-central1
pipeline:
  variant: full
function:
  entry_point: imageUploaded
  runtime: go119
  endpoint_id: "7212484016908271616"
  min_instance_count: 0
  max_instance_count: 1
"""


@pytest.fixture
def stack_local_yaml() -> str:
    """Override local que seleciona a variante mínima."""
    return """
pipeline:
  variant: minimal
function:
  min_instance_count: null
  max_instance_count: null
"""


@pytest.fixture
def function_source(tmp_path: Path) -> Path:
    """Diretório `function/` com um único `main.go` de conteúdo fixo."""
    src = tmp_path / "function"
    src.mkdir()
    (src / "main.go").write_text(MAIN_GO, encoding="utf-8")
    return src


@pytest.fixture
def fake_asset():
    """AssetDescriptor fixo, para declarar o grafo sem empacotar nada."""
    from stratus_stack.core.assets.packager import AssetDescriptor

    return AssetDescriptor(
        source_path="/src/function",
        content_hash=FAKE_HASH,
        archive_path=f"/stage/asset.{FAKE_HASH}.zip",
        file_count=1,
    )


@pytest.fixture
def synth_ctx():
    """Contexto de síntese determinístico e isolado."""
    from stratus_stack.core.run_context import SynthContext

    return SynthContext(
        run_id="test-run",
        created_at="2026-01-01T00:00:00+00:00",
        config={},
    )


@pytest.fixture
def graph():
    """ResourceGraph vazio para o projeto de testes."""
    from stratus_stack.core.graph.builder import ResourceGraph

    return ResourceGraph(project="ideal-adventure", region="us-central1", name="test-stack")
