# src/stratus_stack/core/run_context.py
"""
SynthContext — estado explícito de uma única síntese.

Cada chamada de `synth_app` recebe (ou cria) o seu próprio SynthContext;
não há contexto global. Ele carrega:
    - o log estruturado da execução (`events`), no lugar de um logger
    - warnings não fatais agrupados por etapa
    - artefatos intermediários por chave (ex.: o Manifest em memória)

Cada evento de log é um dict plano com run_id, step_id, level, message,
timestamp UTC e quaisquer campos extras passados pelo chamador.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SynthContext:
    run_id: str
    created_at: str
    config: Dict[str, Any] = field(default_factory=dict)
    warnings: Dict[str, List[str]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    _artifacts: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def create(cls, config: Optional[Dict[str, Any]] = None) -> "SynthContext":
        """Novo contexto com run_id aleatório e cópia rasa da configuração."""
        return cls(run_id=uuid.uuid4().hex, created_at=_utc_now(), config=dict(config or {}))

    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def get_artifact(self, key: str) -> Any:
        """Raises KeyError quando nenhuma etapa registrou `key`."""
        return self._artifacts[key]

    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        self.events.append(
            dict(
                run_id=self.run_id,
                step_id=step_id,
                level=level,
                message=message,
                timestamp=_utc_now(),
                **extra,
            )
        )

    def add_warning(self, *, step_id: str, message: str) -> None:
        self.warnings.setdefault(step_id, []).append(message)
        self.log(step_id=step_id, level="WARNING", message=message)
