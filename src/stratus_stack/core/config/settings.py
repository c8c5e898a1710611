# src/stratus_stack/core/config/settings.py
"""
Settings tipados do Stratus Stack.

Este módulo converte a configuração efetiva (dict resolvido pelo loader)
em estruturas imutáveis e fechadas, consumidas pela composição do stack.

Valores estáticos suportados (v1):
    - stack.name / stack.name_prefix
    - project.id / project.region
    - pipeline.variant ("full" | "minimal")
    - function.* (nome, fonte, entry point, runtime, endpoint, limites)
    - backend.* (hostname, organização e workspace remoto — opcional)

Decisões arquiteturais:
    - Valores obrigatórios ausentes são erro fatal (sem defaults implícitos)
    - Limites de instâncias são opcionais, mas coerentes quando presentes
    - O workspace remoto é apenas identificado; o transporte não é feito aqui

Limites explícitos:
    - Não carrega arquivos (ver `loader.load_config`)
    - Não declara recursos
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import InvalidSettingsError


VARIANT_FULL = "full"
VARIANT_MINIMAL = "minimal"
VARIANTS = (VARIANT_FULL, VARIANT_MINIMAL)


def _section(config: Dict[str, Any], key: str, *, required: bool = True) -> Dict[str, Any]:
    value = config.get(key)
    if value is None and not required:
        return {}
    if not isinstance(value, dict):
        raise InvalidSettingsError(f"Seção '{key}' ausente ou inválida na configuração")
    return value


def _str(section: Dict[str, Any], path: str, key: str, *, default: Optional[str] = None) -> str:
    value = section.get(key, default)
    # YAML converte ids numéricos (ex.: endpoint) em int
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidSettingsError(f"'{path}.{key}' deve ser string não vazia")
    return value.strip()


def _opt_count(section: Dict[str, Any], path: str, key: str) -> Optional[int]:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidSettingsError(f"'{path}.{key}' deve ser inteiro >= 0")
    return value


@dataclass(frozen=True)
class FunctionSettings:
    """Valores estáticos da função serverless disparada por upload."""

    name: str
    source_dir: str
    entry_point: str
    runtime: str
    endpoint_id: str
    min_instance_count: Optional[int] = None
    max_instance_count: Optional[int] = None


@dataclass(frozen=True)
class BackendSettings:
    """Identificação do workspace remoto associado ao documento."""

    hostname: str
    organization: str
    workspace: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "hostname": self.hostname,
            "organization": self.organization,
            "workspace": self.workspace,
        }


@dataclass(frozen=True)
class StackSettings:
    """
    Settings efetivos de um stack.

    Invariantes:
        - `variant` é sempre um valor de `VARIANTS`
        - min_instance_count <= max_instance_count quando ambos existem
    """

    name: str
    project_id: str
    region: str
    variant: str
    function: FunctionSettings
    name_prefix: str = ""
    backend: Optional[BackendSettings] = None

    @property
    def workspace(self) -> Optional[str]:
        return self.backend.workspace if self.backend else None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "StackSettings":
        """
        Constrói settings a partir da configuração efetiva.

        Raises:
            InvalidSettingsError: Se valores obrigatórios estiverem ausentes
                ou inválidos.
        """
        if not isinstance(config, dict):
            raise InvalidSettingsError(
                f"Config deve ser dict, recebido: {type(config).__name__}"
            )

        stack = _section(config, "stack")
        project = _section(config, "project")
        pipeline = _section(config, "pipeline", required=False)
        fn = _section(config, "function")
        backend = _section(config, "backend", required=False)

        variant = pipeline.get("variant", VARIANT_FULL)
        if variant not in VARIANTS:
            raise InvalidSettingsError(
                f"'pipeline.variant' deve ser um de {list(VARIANTS)}, recebido: {variant!r}"
            )

        prefix = stack.get("name_prefix") or ""
        if not isinstance(prefix, str):
            raise InvalidSettingsError("'stack.name_prefix' deve ser string")

        function = FunctionSettings(
            name=_str(fn, "function", "name", default="function"),
            source_dir=_str(fn, "function", "source_dir", default="function"),
            entry_point=_str(fn, "function", "entry_point"),
            runtime=_str(fn, "function", "runtime"),
            endpoint_id=_str(fn, "function", "endpoint_id"),
            min_instance_count=_opt_count(fn, "function", "min_instance_count"),
            max_instance_count=_opt_count(fn, "function", "max_instance_count"),
        )
        lo, hi = function.min_instance_count, function.max_instance_count
        if lo is not None and hi is not None and lo > hi:
            raise InvalidSettingsError(
                f"'function.min_instance_count' ({lo}) maior que "
                f"'function.max_instance_count' ({hi})"
            )

        backend_settings = None
        if backend:
            backend_settings = BackendSettings(
                hostname=_str(backend, "backend", "hostname", default="app.terraform.io"),
                organization=_str(backend, "backend", "organization"),
                workspace=_str(backend, "backend", "workspace"),
            )

        return cls(
            name=_str(stack, "stack", "name"),
            project_id=_str(project, "project", "id"),
            region=_str(project, "project", "region"),
            variant=variant,
            function=function,
            name_prefix=prefix.strip(),
            backend=backend_settings,
        )
