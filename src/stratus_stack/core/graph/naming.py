# src/stratus_stack/core/graph/naming.py
"""
NameResolver — nomes finais determinísticos e livres de colisão.

Responsabilidades:
    - Atribuir o nome final de um nó a partir do nome base escolhido pelo
      autor (prefixo opcional do stack + nome base)
    - Validar o nome contra a regra de nomenclatura do namespace
    - Detectar colisões entre nós distintos no mesmo namespace
    - Nomear objetos de artefato a partir do hash de conteúdo

Namespaces independentes (v1): identities, locations, artifacts, functions.

Decisões arquiteturais:
    - Colisões de nomes escolhidos pelo autor são erro de declaração
    - Nomes derivados de hash nunca colidem consigo mesmos: o mesmo
      conteúdo re-resolve sempre para o mesmo nome (redeploy idempotente)
    - Nomes derivados de hash não recebem prefixo

Limites explícitos:
    - Não consulta nomes já existentes no provedor
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional

from stratus_stack.core.exceptions import InvalidDeclarationError, NameCollisionError

from .kinds import NAMESPACES, ResourceKind


_RULES: Dict[str, "re.Pattern[str]"] = {
    "identities": re.compile(r"^[a-z][a-z0-9-]{4,28}[a-z0-9]$"),
    "locations": re.compile(r"^[a-z0-9][a-z0-9._-]{1,61}[a-z0-9]$"),
    "artifacts": re.compile(r"^[^/\s][^\s]{0,1023}$"),
    "functions": re.compile(r"^[a-z](?:[a-z0-9-]{0,61}[a-z0-9])?$"),
}

_HASH = re.compile(r"^[0-9a-f]{8,128}$")


@dataclass(frozen=True)
class _Claim:
    node_id: str
    derived: bool


class NameResolver:
    """Registro de nomes finais por namespace para uma única síntese."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix or ""
        self._claims: Dict[str, Dict[str, _Claim]] = {ns: {} for ns in _RULES}

    @staticmethod
    def namespace_for(kind: ResourceKind) -> Optional[str]:
        return NAMESPACES.get(kind)

    def resolve(self, kind: ResourceKind, base_name: str) -> str:
        """Calcula (sem registrar) o nome final de `base_name` para `kind`."""
        namespace = self._require_namespace(kind)
        if not isinstance(base_name, str) or not base_name.strip():
            raise InvalidDeclarationError(
                message="Resource base name must be a non-empty string",
                details={"kind": kind.value},
            )
        final = f"{self.prefix}{base_name.strip()}"
        if not _RULES[namespace].match(final):
            raise InvalidDeclarationError(
                message=f"Invalid name '{final}' for namespace '{namespace}'",
                details={"kind": kind.value, "name": final, "namespace": namespace},
            )
        return final

    def claim(self, kind: ResourceKind, base_name: str, node_id: str) -> str:
        """
        Registra o nome final de `node_id`.

        Raises:
            NameCollisionError: Se outro nó já possuir o mesmo nome final no
                namespace do tipo.
        """
        final = self.resolve(kind, base_name)
        self._register(self._require_namespace(kind), final, node_id, derived=False)
        return final

    def name_artifact(self, content_hash: str, extension: str) -> str:
        """Nome do objeto de artefato: `<hash>.<extensão>`."""
        if not isinstance(content_hash, str) or not _HASH.match(content_hash):
            raise InvalidDeclarationError(
                message="Artifact hash must be a lowercase hexadecimal digest",
                details={"hash": content_hash},
            )
        ext = (extension or "").lstrip(".")
        if not ext:
            raise InvalidDeclarationError(
                message="Artifact extension must be non-empty",
                details={"hash": content_hash},
            )
        return f"{content_hash}.{ext}"

    def claim_artifact(self, content_hash: str, extension: str, node_id: str) -> str:
        final = self.name_artifact(content_hash, extension)
        self._register("artifacts", final, node_id, derived=True)
        return final

    def owner_of(self, kind: ResourceKind, final_name: str) -> Optional[str]:
        namespace = self._require_namespace(kind)
        claim = self._claims[namespace].get(final_name)
        return claim.node_id if claim else None

    def _require_namespace(self, kind: ResourceKind) -> str:
        namespace = NAMESPACES.get(kind)
        if namespace is None:
            raise InvalidDeclarationError(
                message=f"Resources of kind {kind.value} have no name namespace",
                details={"kind": kind.value},
            )
        return namespace

    def _register(self, namespace: str, final: str, node_id: str, *, derived: bool) -> None:
        claims = self._claims[namespace]
        existing = claims.get(final)
        if existing is None or existing.node_id == node_id:
            claims[final] = _Claim(node_id=node_id, derived=derived)
            return
        if derived and existing.derived:
            # mesmo conteúdo, mesmo nome: permitido
            return
        raise NameCollisionError(
            message=f"Name '{final}' already claimed in namespace '{namespace}'",
            details={
                "namespace": namespace,
                "name": final,
                "existing_node": existing.node_id,
                "node": node_id,
            },
            hint="Escolha nomes base distintos para os recursos",
        )
