# src/stratus_stack/core/config/__init__.py

"""
Camada de configuração do Stratus Stack.

Este pacote carrega, mescla, identifica e tipa os valores estáticos que o
chamador fornece ao stack (projeto, região, endpoint, limites de
instâncias, workspace remoto).

Responsabilidades do pacote:
    - Carregamento de arquivos (defaults + overrides locais)
    - Resolução via deep-merge determinístico
    - Hash canônico para rastreabilidade no Manifest
    - Conversão para `StackSettings` imutáveis

Limites explícitos:
    - Não declara recursos
    - Não sintetiza documentos
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingsError,
    UnsupportedConfigFormatError,
)
from .hashing import canonical_json_bytes, compute_config_hash, compute_document_hash
from .loader import load_config, read_config_file
from .merge import deep_merge
from .settings import (
    VARIANT_FULL,
    VARIANT_MINIMAL,
    BackendSettings,
    FunctionSettings,
    StackSettings,
)

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingsError",
    "UnsupportedConfigFormatError",
    "canonical_json_bytes",
    "compute_config_hash",
    "compute_document_hash",
    "load_config",
    "read_config_file",
    "deep_merge",
    "VARIANT_FULL",
    "VARIANT_MINIMAL",
    "BackendSettings",
    "FunctionSettings",
    "StackSettings",
]
