# src/stratus_stack/core/graph/attributes.py
"""
Atributos fechados por tipo de recurso.

Cada tipo de nó possui um dataclass imutável com campos enumerados, em vez
de mapas chave/valor abertos: uma declaração malformada falha na
construção do objeto, não na síntese.

Convenções de metadata dos campos:
    - `key`: nome do campo no documento sintetizado (default: nome Python)
    - `edge`: papel das arestas derivadas de referências no campo
    - `mapping`: tupla de pares (chave, valor) emitida como objeto JSON

Campos com valor `None` são omitidos do documento.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .kinds import EdgeRole
from .refs import Reference, Template, Value


@dataclass(frozen=True)
class IdentityAttributes:
    account_id: str
    display_name: Optional[str] = None
    project: Optional[str] = None


@dataclass(frozen=True)
class StorageServiceIdentityAttributes:
    """Lookup da identidade gerenciada pela plataforma de storage."""

    project: Optional[str] = None


@dataclass(frozen=True)
class BindingAttributes:
    """Binding autoritativo: a lista de membros é a lista completa do role."""

    project: str
    role: str
    members: Tuple[Value, ...]


@dataclass(frozen=True)
class MemberBindingAttributes:
    """Binding aditivo de um único membro."""

    project: str
    role: str
    member: Value


@dataclass(frozen=True)
class LocationAttributes:
    name: str
    location: str
    storage_class: Optional[str] = None
    uniform_bucket_level_access: Optional[bool] = None
    force_destroy: Optional[bool] = None


@dataclass(frozen=True)
class ArtifactAttributes:
    path: str
    hash: str
    archive_type: str = field(default="archive", metadata={"key": "type"})


@dataclass(frozen=True)
class ArtifactObjectAttributes:
    bucket: Value
    name: str
    source: Value


@dataclass(frozen=True)
class BuildConfig:
    entry_point: str
    runtime: str
    source_bucket: Value
    source_object: Value


@dataclass(frozen=True)
class EventFilter:
    attribute: str
    value: Value
    operator: Optional[str] = None


@dataclass(frozen=True)
class EventTrigger:
    event_type: str
    event_filters: Tuple[EventFilter, ...] = ()
    retry_policy: Optional[str] = None


@dataclass(frozen=True)
class ServiceConfig:
    service_account_email: Value
    environment_variables: Tuple[Tuple[str, Value], ...] = field(
        default=(), metadata={"edge": EdgeRole.WIRING.value, "mapping": True}
    )
    min_instance_count: Optional[int] = None
    max_instance_count: Optional[int] = None
    available_memory: Optional[str] = None
    timeout_seconds: Optional[int] = None


@dataclass(frozen=True)
class FunctionAttributes:
    name: str
    location: str
    build_config: BuildConfig
    event_trigger: EventTrigger
    service_config: ServiceConfig
    description: Optional[str] = None


def is_string_value(v: object) -> bool:
    """Valores de variáveis de ambiente: texto literal ou referência a output."""
    return isinstance(v, (str, Reference, Template))
