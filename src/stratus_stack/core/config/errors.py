# src/stratus_stack/core/config/errors.py
"""
Erros da camada de configuração do stack.

Todos herdam de `ConfigError` e são fatais: a síntese não começa com
uma configuração que não pode ser lida ou que não descreve um stack
válido. Nenhum deles representa erro de declaração do grafo (ver
`core.exceptions`).
"""


class ConfigError(Exception):
    """Base dos erros de carregamento, merge e validação de settings."""


class DefaultsNotFoundError(ConfigError):
    """O arquivo de configuração pedido não existe no disco."""


class UnsupportedConfigFormatError(ConfigError):
    """Extensão de arquivo diferente de `.yaml`, `.yml` ou `.json`."""


class InvalidConfigRootTypeError(ConfigError):
    """O arquivo foi lido, mas sua raiz não é um mapeamento."""


class ConfigTypeConflictError(ConfigError):
    """
    O override troca o tipo de um valor dos defaults.

    Exemplo: `function` é um mapeamento nos defaults e uma string no
    override local. O merge é abortado sem resultado parcial.
    """


class InvalidSettingsError(ConfigError):
    """
    A configuração resolvida não descreve um stack válido.

    Exemplos:
        - `project.id` ausente
        - `pipeline.variant` fora de {"full", "minimal"}
        - `min_instance_count` maior que `max_instance_count`
    """
