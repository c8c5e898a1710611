# src/stratus_stack/core/synth/synthesizer.py
"""
GraphSynthesizer — emissão do documento do resource graph.

Este módulo transforma um ResourceGraph congelado no documento serializado
consumido pelo provisioning engine.

Política de resolução de referências (v1):
    - output estático do dono (ex.: nome final do bucket) → valor final
    - output computado do dono (ex.: e-mail da service account) →
      placeholder ``${<type>.<id>.<output>}``
    - output de nó lookup → placeholder ``${data.<type>.<id>.<output>}``
    - dono inexistente → UnresolvedReferenceError (erro fatal do chamador)

Formato do documento (v1):
    - `resources`: um registro por nó próprio, em ordem topológica estável
    - `data`: nós lookup (somente leitura; nunca criados pelo engine)
    - `provider` e `backend`: globais do stack e workspace remoto

Invariantes:
    - Sintetizar o mesmo grafo duas vezes produz bytes idênticos
    - A síntese é total: ou o documento completo é produzido, ou nada

Limites explícitos:
    - Não executa chamadas de rede nem transporta o documento ao backend
    - Não compara com estado remoto
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from stratus_stack.core.config.hashing import compute_document_hash
from stratus_stack.core.config.settings import BackendSettings
from stratus_stack.core.exceptions import UnresolvedReferenceError
from stratus_stack.core.graph.builder import ResourceGraph
from stratus_stack.core.graph.kinds import EdgeRole
from stratus_stack.core.graph.node import ResourceNode
from stratus_stack.core.graph.planner import plan_emission
from stratus_stack.core.graph.refs import Reference, Template
from stratus_stack.core.run_context import SynthContext


FORMAT_VERSION = 1
PROVIDER_NAME = "google"


class GraphSynthesizer:
    """Sintetizador puro e repetível de resource graphs."""

    def __init__(self, ctx: Optional[SynthContext] = None):
        self.ctx = ctx

    def synthesize(
        self,
        graph: ResourceGraph,
        *,
        backend: Optional[Union[BackendSettings, Mapping[str, str]]] = None,
    ) -> Dict[str, Any]:
        """
        Congela `graph` e emite o documento.

        Raises:
            UnresolvedReferenceError: Se uma referência não puder ser resolvida.
            CyclicDependencyError: Se o grafo contiver ciclo.
        """
        if not graph.frozen:
            graph.freeze()

        nodes = graph.nodes()
        by_id = {n.id: n for n in nodes}
        edges = graph.edges()
        ordered = plan_emission(nodes, edges)

        deps: Dict[str, List[str]] = {n.id: [] for n in nodes}
        reads: Dict[str, List[str]] = {n.id: [] for n in nodes}
        for e in edges:
            bucket = reads if e.role is EdgeRole.LOOKUP else deps
            if e.source not in bucket[e.target]:
                bucket[e.target].append(e.source)

        data: List[Dict[str, Any]] = []
        resources: List[Dict[str, Any]] = []
        for node in ordered:
            resolver = _Resolver(by_id, node.id)
            attributes = resolver.attributes(node.attributes)
            if node.lookup:
                data.append(
                    {
                        "id": node.id,
                        "kind": node.kind.value,
                        "type": node.type,
                        "attributes": attributes,
                    }
                )
                continue

            record: Dict[str, Any] = {
                "id": node.id,
                "kind": node.kind.value,
                "type": node.type,
                "attributes": attributes,
                "depends_on": sorted(deps[node.id], key=lambda d: by_id[d].index),
            }
            if node.name is not None:
                record["name"] = node.name
            if reads[node.id]:
                record["reads"] = sorted(reads[node.id], key=lambda d: by_id[d].index)
            resources.append(record)

        if isinstance(backend, BackendSettings):
            backend_doc: Optional[Dict[str, str]] = backend.to_dict()
        elif backend is not None:
            backend_doc = dict(backend)
        else:
            backend_doc = None

        document = {
            "format_version": FORMAT_VERSION,
            "stack": graph.name,
            "provider": {
                "name": PROVIDER_NAME,
                "project": graph.project,
                "region": graph.region,
            },
            "backend": backend_doc,
            "data": data,
            "resources": resources,
        }

        if self.ctx is not None:
            self.ctx.log(
                step_id="graph.synthesize",
                level="INFO",
                message="resource graph synthesized",
                resources=len(resources),
                lookups=len(data),
                document_hash=compute_document_hash(document),
            )

        return document


def to_json(document: Dict[str, Any]) -> str:
    """Serialização estável do documento (chaves ordenadas, newline final)."""
    return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def placeholder(node: ResourceNode, output: str) -> str:
    if node.lookup:
        return "${data.%s.%s.%s}" % (node.type, node.id, output)
    return "${%s.%s.%s}" % (node.type, node.id, output)


class _Resolver:
    """Substitui referências dos atributos de um nó por valores finais."""

    def __init__(self, by_id: Dict[str, ResourceNode], node_id: str):
        self.by_id = by_id
        self.node_id = node_id

    def attributes(self, attrs: Any) -> Dict[str, Any]:
        out = self.value(attrs)
        if not isinstance(out, dict):
            raise TypeError(f"Attributes of '{self.node_id}' must be a dataclass")
        return out

    def value(self, v: Any, _depth: int = 0) -> Any:
        if isinstance(v, Reference):
            return self.reference(v, _depth)
        if isinstance(v, Template):
            return "".join(str(self.value(p, _depth)) for p in v.parts)
        if is_dataclass(v) and not isinstance(v, type):
            out: Dict[str, Any] = {}
            for f in fields(v):
                raw = getattr(v, f.name)
                if raw is None:
                    continue
                key = f.metadata.get("key", f.name)
                if f.metadata.get("mapping"):
                    out[key] = {str(name): self.value(item, _depth) for name, item in raw}
                else:
                    out[key] = self.value(raw, _depth)
            return out
        if isinstance(v, (tuple, list)):
            return [self.value(item, _depth) for item in v]
        return v

    def reference(self, ref: Reference, depth: int) -> Any:
        owner = self.by_id.get(ref.owner_id)
        if owner is None or depth > len(self.by_id):
            raise UnresolvedReferenceError(
                message=f"Resource '{self.node_id}' has a dangling reference to "
                f"'{ref.owner_id}.{ref.output}'",
                details={"node": self.node_id, "owner": ref.owner_id, "output": ref.output},
            )
        if not owner.lookup and ref.output in owner.outputs:
            return self.value(owner.outputs[ref.output], depth + 1)
        return placeholder(owner, ref.output)
