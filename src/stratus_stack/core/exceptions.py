"""
Stratus Stack — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Stratus Stack.

Objetivo:
- Permitir que packager, builder, resolver e synthesizer levantem exceções
  semânticas tipadas
- Facilitar o mapeamento determinístico para StackErrorPayload
- Carregar contexto suficiente (ids de nós, caminho do ciclo) para corrigir
  a declaração

Regras:
- Todas as exceções são fatais: nenhuma é recuperável por retry.
- Exceções devem carregar apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class StackException(Exception):
    """Base class para exceções internas do Stratus Stack.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Packaging
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PackagingError(StackException):
    """Fonte do artefato ausente, ilegível ou vazia."""


# ---------------------------------------------------------------------------
# Declaração do grafo
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InvalidDeclarationError(StackException):
    """Declaração malformada (output desconhecido, handle de tipo errado...)."""


@dataclass(frozen=True)
class DuplicateNodeIdError(StackException):
    """Dois nós declarados com o mesmo identificador no grafo."""


@dataclass(frozen=True)
class NameCollisionError(StackException):
    """Dois nós distintos resolvem para o mesmo nome final no mesmo namespace."""


@dataclass(frozen=True)
class CyclicDependencyError(StackException):
    """O grafo de referências contém um ciclo.

    `details["cycle"]` carrega o caminho completo, com o primeiro nó repetido
    no final (ex.: ``["a", "b", "a"]``).
    """

    @property
    def cycle(self) -> List[str]:
        return list(self.details.get("cycle", []))


# ---------------------------------------------------------------------------
# Síntese
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnresolvedReferenceError(StackException):
    """Referência pendurada: o nó dono não existe no grafo sintetizado."""
