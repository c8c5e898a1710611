# src/stratus_stack/core/config/merge.py
"""
Sobreposição de overrides locais sobre os defaults do stack.

Regras por chave (v1):
    - mapeamento sobre mapeamento: recursão
    - `None` no override: o valor passa a ser `None` (desliga o default,
      como os limites de instâncias da variante mínima)
    - chave nova ou valor base `None`: o override entra como está
    - lista: substitui a lista base inteira
    - demais escalares: substituem, desde que o tipo coincida

Nenhum dos dois argumentos é alterado.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _merge_value(key: str, base: Any, override: Any) -> Any:
    if override is None or base is None:
        return deepcopy(override)
    if isinstance(base, dict) and isinstance(override, dict):
        return deep_merge(base, override)
    if isinstance(override, list) or type(base) is type(override):
        return deepcopy(override)
    raise ConfigTypeConflictError(
        f"Override de '{key}' troca {type(base).__name__} por {type(override).__name__}"
    )


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Retorna um novo dict com `override` aplicado sobre `base`.

    Raises:
        ConfigTypeConflictError: Raiz não-dict ou troca de tipo em uma chave.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            "Merge de configuração exige mapeamentos na raiz "
            f"({type(base).__name__} / {type(override).__name__})"
        )

    merged = deepcopy(base)
    for key, value in override.items():
        merged[key] = _merge_value(key, merged.get(key), value)
    return merged
