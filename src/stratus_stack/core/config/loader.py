# src/stratus_stack/core/config/loader.py
"""
Leitura da configuração estática do stack.

A configuração efetiva é `defaults` (versionado em `config/`) sobreposto
por um arquivo local opcional, como `stack.minimal.yaml`, que seleciona a
variante mínima do pipeline.

Formatos aceitos (v1): YAML (`.yaml`, `.yml`) e JSON (`.json`).

Invariantes:
    - A raiz de cada arquivo é um mapeamento; arquivo vazio equivale a `{}`
    - Overrides locais ausentes no disco não alteram o resultado

Limites explícitos:
    - Valores do stack são validados apenas em `settings.StackSettings`
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO, Union

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


PathLike = Union[str, Path]

_PARSERS: Dict[str, Callable[[TextIO], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def read_config_file(path: PathLike) -> Dict[str, Any]:
    """
    Lê um único arquivo de configuração como dict.

    Raises:
        DefaultsNotFoundError: Arquivo inexistente.
        UnsupportedConfigFormatError: Extensão fora de `_PARSERS`.
        InvalidConfigRootTypeError: Raiz diferente de mapeamento.
    """
    p = Path(path)
    if not p.is_file():
        raise DefaultsNotFoundError(f"Arquivo de configuração do stack não encontrado: {p}")

    parse = _PARSERS.get(p.suffix.lower())
    if parse is None:
        raise UnsupportedConfigFormatError(
            f"Extensão '{p.suffix}' não suportada; use uma de {sorted(_PARSERS)}"
        )

    with p.open("r", encoding="utf-8") as fh:
        loaded = parse(fh)

    loaded = {} if loaded is None else loaded
    if not isinstance(loaded, dict):
        raise InvalidConfigRootTypeError(
            f"Raiz de {p.name} deve ser um mapeamento, recebido: {type(loaded).__name__}"
        )
    return loaded


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva do stack (defaults + override local).

    Args:
        defaults_path: Arquivo base, obrigatório.
        local_path: Override opcional; ignorado quando não existe no disco.

    Raises:
        DefaultsNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError
    """
    effective = read_config_file(defaults_path)
    if local_path is None or not Path(local_path).exists():
        return effective
    return deep_merge(effective, read_config_file(local_path))
