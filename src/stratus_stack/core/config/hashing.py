# src/stratus_stack/core/config/hashing.py
"""
Hashing canônico de documentos JSON do Stratus Stack.

O mesmo serializador canônico é usado para:
    - o hash da configuração efetiva (registrado no Manifest)
    - o hash do documento sintetizado (identidade do resource graph)

Política de hashing (v1):
    - JSON canônico (sort_keys, separadores compactos, UTF-8)
    - SHA-256 hexadecimal (64 caracteres)

Invariantes:
    - Estruturas equivalentes produzem o mesmo hash
    - Nenhuma informação de runtime participa do hash
"""

import hashlib
import json
from typing import Any, Dict


def canonical_json_bytes(obj: Any) -> bytes:
    """Serializa `obj` em JSON canônico (bytes UTF-8)."""
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva do stack.

    Args:
        config (Dict[str, Any]): Configuração efetiva (defaults + local).

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )
    return hashlib.sha256(canonical_json_bytes(config)).hexdigest()


def compute_document_hash(document: Dict[str, Any]) -> str:
    """Computa SHA-256 do documento sintetizado em formato canônico."""
    return hashlib.sha256(canonical_json_bytes(document)).hexdigest()
