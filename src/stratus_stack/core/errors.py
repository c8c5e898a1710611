"""
Stratus Stack — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Stratus Stack.
Erros de síntese devem ser serializáveis (gravados no Manifest) e
acionáveis (com `hint` de onde corrigir a declaração ou a configuração).

Nenhuma recuperação silenciosa é permitida: o payload apenas descreve a
falha que já foi propagada ao chamador.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import (
    CyclicDependencyError,
    DuplicateNodeIdError,
    InvalidDeclarationError,
    NameCollisionError,
    PackagingError,
    StackException,
    UnresolvedReferenceError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StackErrorPayload:
    """
    Payload canônico de erro do Stratus Stack.

    Campos:
    - type: código do catálogo abaixo
    - message: texto curto para o autor do stack
    - details: dados estruturados (ids de nós, caminho do ciclo, path)
    - hint: ação sugerida ao autor do stack (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

PACKAGING_ERROR = "PACKAGING_ERROR"
INVALID_DECLARATION = "INVALID_DECLARATION"
DUPLICATE_NODE_ID = "DUPLICATE_NODE_ID"
NAME_COLLISION = "NAME_COLLISION"
CYCLIC_DEPENDENCY = "CYCLIC_DEPENDENCY"
UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
SYNTHESIS_ERROR = "SYNTHESIS_ERROR"

_CODES = {
    PackagingError: PACKAGING_ERROR,
    InvalidDeclarationError: INVALID_DECLARATION,
    DuplicateNodeIdError: DUPLICATE_NODE_ID,
    NameCollisionError: NAME_COLLISION,
    CyclicDependencyError: CYCLIC_DEPENDENCY,
    UnresolvedReferenceError: UNRESOLVED_REFERENCE,
}


def exception_to_error(exc: BaseException) -> StackErrorPayload:
    """Converte exceções em StackErrorPayload (serializável, acionável).

    Regras:
    - StackException: já vem com message/details/hint; o código vem do catálogo.
    - Outras exceções: encapsuladas como SYNTHESIS_ERROR sem stack trace.
    """
    if isinstance(exc, StackException):
        return StackErrorPayload(
            type=_CODES.get(type(exc), SYNTHESIS_ERROR),
            message=exc.message or "Erro de síntese",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return StackErrorPayload(
        type=SYNTHESIS_ERROR,
        message=str(exc) or "Erro inesperado durante a síntese",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique a configuração e o diretório de fonte do artefato",
    )
