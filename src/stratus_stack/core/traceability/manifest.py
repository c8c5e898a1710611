# src/stratus_stack/core/traceability/manifest.py
"""
Manifest de síntese (v1).

Escrito ao lado de `stack.json`, o Manifest registra de onde o documento
veio e como a síntese transcorreu:

    run     → run_id, início, versão, nome do stack, workspace remoto
    hashes  → config_hash, asset_hash, document_hash
    steps   → estado por etapa (asset.package, graph.build, ...)
    events  → Event Log na ordem exata das chamadas

Timestamps são sempre persistidos em UTC (ISO 8601); datetimes sem
timezone são interpretados como UTC.

Limites explícitos:
    - Eventos só existem quando registrados explicitamente
    - Não valida o documento sintetizado
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


def _utc(ts: datetime) -> datetime:
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)


def _stamp(ts: datetime) -> str:
    return _utc(ts).isoformat()


@dataclass
class SynthManifest:
    """Registro serializável de uma síntese; `steps` é indexado por step_id."""

    run: Dict[str, Any]
    hashes: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def step(self, step_id: str) -> Dict[str, Any]:
        return self.steps.setdefault(step_id, {"step_id": step_id})

    def to_dict(self) -> Dict[str, Any]:
        return json.loads(json.dumps(
            {"run": self.run, "hashes": self.hashes, "steps": self.steps, "events": self.events}
        ))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SynthManifest":
        steps = data.get("steps") or {}
        return cls(
            run=dict(data.get("run") or {}),
            hashes=dict(data.get("hashes") or {}),
            steps={sid: dict(s) for sid, s in steps.items()},
            events=[dict(ev) for ev in data.get("events") or []],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    stack: str,
    config_hash: str,
    workspace: Optional[str] = None,
) -> SynthManifest:
    """Manifest inicial: sem etapas, sem eventos, hashes de saída pendentes."""
    return SynthManifest(
        run={
            "run_id": run_id,
            "started_at": _stamp(started_at),
            "version": version,
            "stack": stack,
            "workspace": workspace,
        },
        hashes={"config_hash": config_hash, "asset_hash": None, "document_hash": None},
    )


def add_event(
    manifest: SynthManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    event: Dict[str, Any] = {"event_type": event_type, "timestamp": _stamp(ts)}
    if step_id is not None:
        event["step_id"] = step_id
    if payload is not None:
        event["payload"] = payload
    manifest.events.append(event)


def step_started(manifest: SynthManifest, *, step_id: str, ts: datetime) -> None:
    manifest.step(step_id).update(status=STATUS_RUNNING, started_at=_stamp(ts))
    add_event(manifest, event_type="step_started", ts=ts, step_id=step_id)


def step_finished(
    manifest: SynthManifest,
    *,
    step_id: str,
    ts: datetime,
    summary: Optional[Dict[str, Any]] = None,
) -> None:
    """Marca a etapa como concluída; a duração parte de `started_at` (ou zero)."""
    record = manifest.step(step_id)
    started = record.get("started_at")
    elapsed = (_utc(ts) - datetime.fromisoformat(started)).total_seconds() if started else 0.0
    duration_ms = max(0, int(elapsed * 1000))

    record.update(
        status=STATUS_SUCCESS,
        finished_at=_stamp(ts),
        duration_ms=duration_ms,
        summary=dict(summary or {}),
    )
    add_event(
        manifest,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": STATUS_SUCCESS, "duration_ms": duration_ms},
    )


def step_failed(
    manifest: SynthManifest,
    *,
    step_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """Registra a falha com o payload canônico do erro (ver `core.errors`)."""
    manifest.step(step_id).update(status=STATUS_FAILED, finished_at=_stamp(ts), error=dict(error))
    add_event(manifest, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": dict(error)})


def manifest_to_json(manifest: SynthManifest) -> str:
    return json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def load_manifest(path: Path) -> SynthManifest:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Manifest deve ser um objeto JSON: {path}")
    return SynthManifest.from_dict(data)
