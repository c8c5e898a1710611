# src/stratus_stack/core/graph/node.py
"""
Nós, arestas e handles do resource graph.

`ResourceNode` é imutável após criado: seus atributos podem conter
referências ainda não resolvidas a outputs de outros nós, resolvidas
apenas pelo synthesizer. `Handle` é o valor devolvido ao autor do stack
por cada declaração e é a única forma de obter uma `Reference`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple

from stratus_stack.core.exceptions import InvalidDeclarationError

from .kinds import OUTPUTS, EdgeRole, ResourceKind
from .refs import Reference, iter_references


@dataclass(frozen=True)
class ResourceNode:
    """
    Nó declarado do resource graph.

    Campos:
        - id: identificador local e estável no grafo
        - kind: classificação semântica (`ResourceKind`)
        - type: tipo de recurso entendido pelo provisioning engine
        - attributes: dataclass fechado do tipo
        - outputs: outputs estáticos, conhecidos na declaração
        - name: nome final atribuído pelo NameResolver (quando aplicável)
        - lookup: nó somente-leitura de recurso externo (nunca criado)
        - index: ordem de declaração (critério de desempate na emissão)
    """

    id: str
    kind: ResourceKind
    type: str
    attributes: Any
    outputs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    name: Optional[str] = None
    lookup: bool = False
    index: int = 0

    def references(self) -> List[Tuple[Reference, EdgeRole]]:
        return list(iter_references(self.attributes))


@dataclass(frozen=True)
class Edge:
    """Aresta "source deve ser resolvido antes de target"."""

    source: str
    target: str
    role: EdgeRole


@dataclass(frozen=True)
class Handle:
    """Handle de um nó, usado para referenciar seus outputs em declarações."""

    node_id: str
    kind: ResourceKind
    type: str
    lookup: bool = False

    def ref(self, output: str) -> Reference:
        allowed = OUTPUTS.get(self.type, frozenset())
        if output not in allowed:
            raise InvalidDeclarationError(
                message=f"Resource '{self.node_id}' ({self.type}) has no output '{output}'",
                details={"node_id": self.node_id, "output": output, "allowed": sorted(allowed)},
            )
        return Reference(owner_id=self.node_id, output=output)
