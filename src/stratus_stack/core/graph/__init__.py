# src/stratus_stack/core/graph/__init__.py
"""
# Resource Graph — Stratus Stack

Este pacote define o DAG de recursos declarados e as ferramentas para
construí-lo de forma pura e testável.

## Componentes

- **kinds**: `ResourceKind`, `EdgeRole`, tipos do provisioning engine e outputs
- **refs**: `Reference` e `Template` (resolução adiada)
- **attributes**: atributos fechados por tipo de recurso
- **node**: `ResourceNode`, `Edge`, `Handle`
- **naming**: `NameResolver` (nomes finais e nomes por hash)
- **builder**: `ResourceGraph` (declarações e arestas derivadas)
- **planner**: ordem topológica estável e detecção de ciclos

## Invariantes

- Toda referência resolve para exatamente um nó
- Nomes finais são únicos por namespace
- O grafo não é mutado após o início da emissão
"""

from .builder import OBJECT_FINALIZED, ResourceGraph
from .kinds import EdgeRole, ResourceKind
from .naming import NameResolver
from .node import Edge, Handle, ResourceNode
from .planner import find_cycle, plan_emission
from .refs import Reference, Template, interpolate

__all__ = [
    "OBJECT_FINALIZED",
    "ResourceGraph",
    "EdgeRole",
    "ResourceKind",
    "NameResolver",
    "Edge",
    "Handle",
    "ResourceNode",
    "find_cycle",
    "plan_emission",
    "Reference",
    "Template",
    "interpolate",
]
