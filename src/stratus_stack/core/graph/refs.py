# src/stratus_stack/core/graph/refs.py
"""
Referências adiadas entre nós do resource graph.

Uma `Reference` é um placeholder tipado `(owner_id, output)`: aponta para
um output de outro nó cujo valor pode ainda não ser conhecido pelo autor
do stack. A substituição ocorre apenas na síntese, nunca na declaração.

Um `Template` concatena literais e referências (ex.:
``serviceAccount:<email da identidade>``).

Decisões arquiteturais:
    - Referências são valores imutáveis, não células mutáveis
    - Arestas do grafo são derivadas das referências encontradas nos
      atributos; o autor nunca declara arestas explicitamente
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Iterator, Tuple, Union

from .kinds import EdgeRole


@dataclass(frozen=True)
class Reference:
    """Output `output` do nó `owner_id`, resolvido somente na síntese."""

    owner_id: str
    output: str

    def __str__(self) -> str:
        return f"<ref {self.owner_id}.{self.output}>"


@dataclass(frozen=True)
class Template:
    """Interpolação ordenada de literais e referências."""

    parts: Tuple[Union[str, Reference], ...]

    @property
    def references(self) -> Tuple[Reference, ...]:
        return tuple(p for p in self.parts if isinstance(p, Reference))


Value = Union[str, int, bool, None, Reference, Template]


def interpolate(fmt: str, *refs: Reference) -> Template:
    """
    Constrói um Template substituindo cada `{}` de `fmt` pela próxima referência.

    Exemplo:
        interpolate("serviceAccount:{}", account.ref("email"))
    """
    chunks = fmt.split("{}")
    if len(chunks) - 1 != len(refs):
        raise ValueError(
            f"Template '{fmt}' expects {len(chunks) - 1} references, got {len(refs)}"
        )
    parts = []
    for i, chunk in enumerate(chunks):
        if chunk:
            parts.append(chunk)
        if i < len(refs):
            parts.append(refs[i])
    return Template(parts=tuple(parts))


def iter_references(value: Any, role: EdgeRole = EdgeRole.CREATION) -> Iterator[Tuple[Reference, EdgeRole]]:
    """
    Percorre um valor de atributo e produz `(Reference, papel)`.

    O papel de uma aresta vem do metadata `edge` do campo do dataclass que
    contém a referência; campos sem metadata herdam o papel do contêiner.
    """
    if isinstance(value, Reference):
        yield value, role
    elif isinstance(value, Template):
        for ref in value.references:
            yield ref, role
    elif is_dataclass(value) and not isinstance(value, type):
        for f in fields(value):
            sub_role = EdgeRole(f.metadata.get("edge", role))
            yield from iter_references(getattr(value, f.name), sub_role)
    elif isinstance(value, (tuple, list)):
        for item in value:
            yield from iter_references(item, role)
