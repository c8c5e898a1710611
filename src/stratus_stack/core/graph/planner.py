# src/stratus_stack/core/graph/planner.py
"""
Planejador de emissão do resource graph (DAG).

Este módulo produz a ordem topológica determinística dos nós declarados,
a partir das arestas derivadas de referências.

Decisões arquiteturais:
    - Utiliza ordenação topológica determinística (Kahn)
    - Empates são resolvidos pela ordem de declaração (`node.index`)
    - Ciclos são falhas fatais, reportadas com o caminho completo

Invariantes:
    - Nenhum nó aparece antes de suas dependências
    - Todos os nós aparecem exatamente uma vez
    - O mesmo grafo produz sempre a mesma ordem

Limites explícitos:
    - Não resolve referências (ver synthesizer)
    - Não valida nomes (ver NameResolver)
"""

from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from stratus_stack.core.exceptions import CyclicDependencyError, UnresolvedReferenceError

from .node import Edge, ResourceNode


def find_cycle(deps: Dict[str, List[str]], order: Dict[str, int]) -> Optional[List[str]]:
    """
    Retorna um ciclo de `deps` como caminho fechado (ex.: ``["a", "b", "a"]``).

    A busca parte dos nós em ordem de declaração, de forma que o ciclo
    reportado é determinístico.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    color: Dict[str, int] = {nid: WHITE for nid in deps}

    for start in sorted(deps, key=order.__getitem__):
        if color[start] != WHITE:
            continue
        path: List[str] = [start]
        stack: List[Tuple[str, Iterable[str]]] = [
            (start, iter(sorted(deps[start], key=order.__getitem__)))
        ]
        color[start] = GREY
        while stack:
            nid, children = stack[-1]
            advanced = False
            for child in children:
                if color[child] == GREY:
                    return path[path.index(child):] + [child]
                if color[child] == WHITE:
                    color[child] = GREY
                    path.append(child)
                    stack.append((child, iter(sorted(deps[child], key=order.__getitem__))))
                    advanced = True
                    break
            if not advanced:
                color[nid] = BLACK
                path.pop()
                stack.pop()
    return None


def plan_emission(nodes: Sequence[ResourceNode], edges: Iterable[Edge]) -> List[ResourceNode]:
    """
    Valida e produz a ordem topológica estável de emissão.

    Args:
        nodes: Nós na ordem de declaração.
        edges: Arestas `source -> target` (source antes de target).

    Returns:
        List[ResourceNode]: Nós em ordem topológica; empates por declaração.

    Raises:
        UnresolvedReferenceError: Se uma aresta apontar para nó inexistente.
        CyclicDependencyError: Se houver ciclo no grafo.
    """
    by_id: Dict[str, ResourceNode] = {n.id: n for n in nodes}
    order: Dict[str, int] = {n.id: n.index for n in nodes}

    deps: Dict[str, List[str]] = {nid: [] for nid in by_id}
    outgoing: Dict[str, Set[str]] = {nid: set() for nid in by_id}
    for e in edges:
        if e.source not in by_id:
            raise UnresolvedReferenceError(
                message=f"Resource '{e.target}' references unknown resource '{e.source}'",
                details={"node": e.target, "owner": e.source},
            )
        if e.source not in deps[e.target]:
            deps[e.target].append(e.source)
            outgoing[e.source].add(e.target)

    incoming: Dict[str, int] = {nid: len(d) for nid, d in deps.items()}
    ready: List[Tuple[int, str]] = [(order[nid], nid) for nid, c in incoming.items() if c == 0]
    heapq.heapify(ready)

    emitted: List[str] = []
    while ready:
        _, nid = heapq.heappop(ready)
        emitted.append(nid)
        for child in outgoing[nid]:
            incoming[child] -= 1
            if incoming[child] == 0:
                heapq.heappush(ready, (order[child], child))

    if len(emitted) != len(by_id):
        remaining = {nid: [d for d in deps[nid] if d not in emitted] for nid in by_id if nid not in emitted}
        cycle = find_cycle(remaining, order) or sorted(remaining, key=order.__getitem__)
        raise CyclicDependencyError(
            message="Cycle detected in resource graph: " + " -> ".join(cycle),
            details={"cycle": cycle},
            hint="Remova a referência circular entre os recursos listados",
        )

    return [by_id[nid] for nid in emitted]
