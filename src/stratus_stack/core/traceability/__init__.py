"""
Rastreabilidade do Stratus Stack.

Este pacote contém o Manifest de síntese: metadados da execução, hashes
de config/asset/documento, estado das etapas e Event Log ordenado.
"""

from .manifest import (
    SynthManifest,
    add_event,
    create_manifest,
    load_manifest,
    manifest_to_json,
    step_failed,
    step_finished,
    step_started,
)

__all__ = [
    "SynthManifest",
    "add_event",
    "create_manifest",
    "load_manifest",
    "manifest_to_json",
    "step_failed",
    "step_finished",
    "step_started",
]
