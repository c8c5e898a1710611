# src/stratus_stack/app.py
"""
Execução de uma síntese completa do stack.

Fluxo (v1):
    1. asset.package    → AssetPackager empacota a fonte da função
    2. graph.build      → composição do stack em um ResourceGraph
    3. graph.synthesize → GraphSynthesizer emite o documento
    4. output.write     → `stack.json` e `manifest.json` escritos atomicamente

O documento fica associado ao workspace remoto configurado; o transporte
até o backend é responsabilidade do provisioning engine.

Invariantes:
    - Em caso de erro nenhum documento é escrito e a exceção é propagada
    - Fonte e configuração inalteradas produzem `stack.json` byte-idêntico,
      inclusive em outro diretório de saída (o artefato é referenciado por
      caminho relativo ao documento)
    - `manifest.json` é substituído por último: um manifest presente sempre
      descreve um `stack.json` já no lugar
"""

from __future__ import annotations

import copy
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from stratus_stack import __version__
from stratus_stack.core.assets.packager import AssetDescriptor, AssetPackager
from stratus_stack.core.config.hashing import compute_config_hash, compute_document_hash
from stratus_stack.core.config.settings import StackSettings
from stratus_stack.core.errors import exception_to_error
from stratus_stack.core.run_context import SynthContext
from stratus_stack.core.synth.synthesizer import GraphSynthesizer, to_json
from stratus_stack.core.traceability.manifest import (
    SynthManifest,
    create_manifest,
    manifest_to_json,
    step_failed,
    step_finished,
    step_started,
)
from stratus_stack.stacks.image_pipeline import build_image_pipeline


DOCUMENT_FILE = "stack.json"
MANIFEST_FILE = "manifest.json"
ASSETS_DIR = "assets"


@dataclass(frozen=True)
class SynthResult:
    """Resultado de uma síntese bem-sucedida."""

    document: Dict[str, Any]
    document_hash: str
    asset: AssetDescriptor
    manifest: SynthManifest
    document_path: Path
    manifest_path: Path
    workspace: Optional[str] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _write_atomic(files: List[Tuple[Path, str]]) -> None:
    """
    Escreve os arquivos via tmp + os.replace, na ordem recebida.

    Todos os temporários são escritos antes da primeira substituição; uma
    falha nessa fase não altera nenhum destino.
    """
    staged = []
    try:
        for dst, text in files:
            dst.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=str(dst.parent))
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            staged.append((Path(tmp), dst))
        for tmp_path, dst in staged:
            os.replace(str(tmp_path), str(dst))
    finally:
        for tmp_path, _ in staged:
            tmp_path.unlink(missing_ok=True)


def synth_app(
    config: Dict[str, Any],
    *,
    out_dir: Union[str, Path],
    source_dir: Optional[Union[str, Path]] = None,
    base_dir: Optional[Union[str, Path]] = None,
    ctx: Optional[SynthContext] = None,
) -> SynthResult:
    """
    Empacota, declara e sintetiza o stack descrito por `config`.

    Args:
        config: Configuração efetiva (ver `core.config.load_config`).
        out_dir: Diretório de saída (documento, manifest e assets).
        source_dir: Fonte da função; default `function.source_dir` da config.
        base_dir: Base para caminhos relativos da config (default: cwd).
        ctx: Contexto de síntese; criado quando omitido.

    Raises:
        InvalidSettingsError, PackagingError, NameCollisionError,
        CyclicDependencyError, UnresolvedReferenceError: sempre fatais.
    """
    ctx = ctx or SynthContext.create(config)
    settings = StackSettings.from_config(config)
    out = Path(out_dir)

    manifest = create_manifest(
        run_id=ctx.run_id,
        started_at=_now(),
        version=__version__,
        stack=settings.name,
        config_hash=compute_config_hash(config),
        workspace=settings.workspace,
    )

    source = Path(source_dir) if source_dir is not None else Path(settings.function.source_dir)
    if not source.is_absolute():
        source = Path(base_dir or Path.cwd()) / source

    step_id = "asset.package"
    try:
        step_started(manifest, step_id=step_id, ts=_now())
        asset = AssetPackager(out / ASSETS_DIR).package(source, ctx=ctx)
        manifest.hashes["asset_hash"] = asset.content_hash
        step_finished(manifest, step_id=step_id, ts=_now(), summary={"file_count": asset.file_count})

        step_id = "graph.build"
        step_started(manifest, step_id=step_id, ts=_now())
        pipeline = build_image_pipeline(settings, asset.relative_to(out))
        ctx.log(
            step_id=step_id,
            level="INFO",
            message="stack declared",
            variant=settings.variant,
            nodes=len(pipeline.graph),
        )
        step_finished(manifest, step_id=step_id, ts=_now(), summary={"nodes": len(pipeline.graph)})

        step_id = "graph.synthesize"
        step_started(manifest, step_id=step_id, ts=_now())
        document = GraphSynthesizer(ctx).synthesize(pipeline.graph, backend=settings.backend)
        document_hash = compute_document_hash(document)
        manifest.hashes["document_hash"] = document_hash
        step_finished(
            manifest,
            step_id=step_id,
            ts=_now(),
            summary={"resources": len(document["resources"]), "lookups": len(document["data"])},
        )

        step_id = "output.write"
        step_started(manifest, step_id=step_id, ts=_now())
        document_path = out / DOCUMENT_FILE
        manifest_path = out / MANIFEST_FILE
        # o manifest gravado já descreve a escrita concluída; o manifest em
        # memória só a registra depois que os arquivos estão no lugar
        written = copy.deepcopy(manifest)
        step_finished(written, step_id=step_id, ts=_now())
        _write_atomic(
            [
                (document_path, to_json(document)),
                (manifest_path, manifest_to_json(written)),
            ]
        )
        manifest = written
    except Exception as e:
        error = exception_to_error(e)
        step_failed(manifest, step_id=step_id, ts=_now(), error=error.to_dict())
        ctx.log(step_id=step_id, level="ERROR", message=error.message, error=error.to_dict())
        ctx.set_artifact("manifest", manifest)
        raise

    ctx.set_artifact("manifest", manifest)
    ctx.log(
        step_id="output.write",
        level="INFO",
        message="stack written",
        document_path=str(document_path),
        workspace=settings.workspace,
    )

    return SynthResult(
        document=document,
        document_hash=document_hash,
        asset=asset,
        manifest=manifest,
        document_path=document_path,
        manifest_path=manifest_path,
        workspace=settings.workspace,
    )
