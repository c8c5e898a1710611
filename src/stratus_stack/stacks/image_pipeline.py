# src/stratus_stack/stacks/image_pipeline.py
"""
Stack do pipeline de processamento de imagens.

Um upload no bucket *source* dispara a função, que lê do bucket *dataset*,
chama o endpoint de predição e grava no bucket *destination*, executando
sob uma service account isolada com permissões de escopo de projeto.

Variantes (v1), escolhidas por `pipeline.variant`:
    - full: bindings `aiplatform.user` e `storage.objectAdmin`, bucket de
      dataset e limites de instâncias
    - minimal: sem esses bindings, sem bucket de dataset e sem limites

Ambas declaram o binding `pubsub.publisher` sobre a identidade gerenciada
do storage, exigido para triggers de eventos do storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from stratus_stack.core.assets.packager import AssetDescriptor
from stratus_stack.core.config.settings import VARIANT_FULL, StackSettings
from stratus_stack.core.graph.builder import ResourceGraph
from stratus_stack.core.graph.naming import NameResolver
from stratus_stack.core.graph.node import Handle


ROLE_AI_USER = "roles/aiplatform.user"
ROLE_OBJECT_ADMIN = "roles/storage.objectAdmin"
ROLE_PUBSUB_PUBLISHER = "roles/pubsub.publisher"

ENV_DESTINATION_BUCKET = "DESTINATION_BUCKET"
ENV_PROJECT_ID = "PROJECT_ID"
ENV_ENDPOINT_ID = "ENDPOINT_ID"


@dataclass(frozen=True)
class ImagePipeline:
    """Handles dos nós principais do stack declarado."""

    graph: ResourceGraph
    identity: Handle
    locations: Dict[str, Handle]
    artifact: Handle
    artifact_object: Handle
    function: Handle
    storage_identity: Handle
    publisher_binding: Handle


def build_image_pipeline(
    settings: StackSettings,
    asset: AssetDescriptor,
    *,
    resolver: Optional[NameResolver] = None,
) -> ImagePipeline:
    """Declara o pipeline completo em um novo ResourceGraph."""
    project = settings.project_id
    full = settings.variant == VARIANT_FULL

    graph = ResourceGraph(
        project=project,
        region=settings.region,
        name=settings.name,
        resolver=resolver or NameResolver(prefix=settings.name_prefix),
    )

    identity = graph.declare_identity("function-account", account_id="function-account")

    if full:
        graph.declare_binding("function-account-ai", subject=identity, role=ROLE_AI_USER)
        graph.declare_binding("function-account-storage", subject=identity, role=ROLE_OBJECT_ADMIN)

    locations: Dict[str, Handle] = {}
    if full:
        locations["dataset"] = graph.declare_location("dataset", name=f"dataset-{project}")
    locations["asset"] = graph.declare_location("asset-bucket", name=f"asset-{project}")
    locations["source"] = graph.declare_location("source-bucket", name=f"source-{project}")
    locations["destination"] = graph.declare_location(
        "destination-bucket", name=f"destination-{project}"
    )

    artifact = graph.declare_artifact("asset", asset=asset)
    artifact_object = graph.declare_artifact_object(
        "asset-object", bucket=locations["asset"], artifact=artifact
    )

    fn = settings.function
    function = graph.declare_function(
        "function",
        name=fn.name,
        source_object=artifact_object,
        event_source=locations["source"],
        identity=identity,
        entry_point=fn.entry_point,
        runtime=fn.runtime,
        environment={
            ENV_DESTINATION_BUCKET: locations["destination"].ref("name"),
            ENV_PROJECT_ID: project,
            ENV_ENDPOINT_ID: fn.endpoint_id,
        },
        min_instance_count=fn.min_instance_count if full else None,
        max_instance_count=fn.max_instance_count if full else None,
    )

    storage_identity = graph.lookup_storage_service_identity("storage-account")
    publisher = graph.declare_binding(
        "storage-account-pubsub",
        subject=storage_identity,
        role=ROLE_PUBSUB_PUBLISHER,
        authoritative=False,
    )

    return ImagePipeline(
        graph=graph,
        identity=identity,
        locations=locations,
        artifact=artifact,
        artifact_object=artifact_object,
        function=function,
        storage_identity=storage_identity,
        publisher_binding=publisher,
    )
