# tests/core/synth/test_synthesizer.py
"""
Testes do GraphSynthesizer.

Este módulo valida a emissão do documento a partir do pipeline de imagens
declarado sobre um AssetDescriptor fixo (sem I/O).

Os testes asseguram que:
- recursos são emitidos em ordem topológica estável
- outputs estáticos viram valores finais e outputs computados viram
  placeholders `${type.id.output}`
- nós lookup aparecem apenas em `data`, referenciados via `reads`
- a síntese é repetível byte a byte
- referências penduradas abortam a síntese

Limites explícitos:
    - Não valida escrita em disco (ver tests/app)
"""

import json

import pytest

try:
    from stratus_stack.core.config.hashing import compute_document_hash
    from stratus_stack.core.config.settings import StackSettings
    from stratus_stack.core.exceptions import UnresolvedReferenceError
    from stratus_stack.core.graph.attributes import ArtifactObjectAttributes
    from stratus_stack.core.graph.kinds import TYPE_BUCKET_OBJECT, ResourceKind
    from stratus_stack.core.graph.node import ResourceNode
    from stratus_stack.core.graph.refs import Reference
    from stratus_stack.core.synth.synthesizer import FORMAT_VERSION, GraphSynthesizer, to_json
    from stratus_stack.stacks.image_pipeline import build_image_pipeline
except Exception as e:  # noqa: BLE001
    GraphSynthesizer = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


FULL_ORDER = [
    "function-account",
    "function-account-ai",
    "function-account-storage",
    "dataset",
    "asset-bucket",
    "source-bucket",
    "destination-bucket",
    "asset",
    "asset-object",
    "function",
    "storage-account-pubsub",
]


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar core.synth.synthesizer: {_IMPORT_ERR}")


def _document(stack_config, fake_asset, ctx=None):
    settings = StackSettings.from_config(stack_config)
    pipeline = build_image_pipeline(settings, fake_asset)
    return GraphSynthesizer(ctx).synthesize(pipeline.graph, backend=settings.backend)


def _by_id(document):
    return {r["id"]: r for r in document["resources"]}


def test_document_header(stack_config, fake_asset):
    _require_imports()

    doc = _document(stack_config, fake_asset)

    assert doc["format_version"] == FORMAT_VERSION
    assert doc["stack"] == "ideal-adventure"
    assert doc["provider"] == {"name": "google", "project": "ideal-adventure", "region": "us-central1"}
    assert doc["backend"] == {
        "hostname": "app.terraform.io",
        "organization": "hsmtkkdefault",
        "workspace": "ideal-adventure",
    }


def test_full_pipeline_emission_order(stack_config, fake_asset):
    """
    Identidade antes dos bindings, buckets antes da função e artefato
    antes do objeto; empates seguem a ordem de declaração.
    """
    _require_imports()

    doc = _document(stack_config, fake_asset)
    ids = [r["id"] for r in doc["resources"]]

    assert ids == FULL_ORDER


def test_document_order_is_topological(stack_config, fake_asset):
    _require_imports()

    doc = _document(stack_config, fake_asset)
    seen = set()
    data_ids = {d["id"] for d in doc["data"]}

    for r in doc["resources"]:
        assert set(r["depends_on"]) <= seen, r["id"]
        assert set(r.get("reads", [])) <= data_ids, r["id"]
        seen.add(r["id"])


def test_static_outputs_resolve_and_computed_become_placeholders(stack_config, fake_asset):
    _require_imports()

    doc = _by_id(_document(stack_config, fake_asset))
    h = fake_asset.content_hash
    fn = doc["function"]

    assert fn["name"] == "function"
    assert fn["depends_on"] == ["function-account", "source-bucket", "destination-bucket", "asset-object"]
    assert fn["attributes"]["build_config"] == {
        "entry_point": "imageUploaded",
        "runtime": "go119",
        "source_bucket": "asset-ideal-adventure",
        "source_object": f"{h}.zip",
    }
    assert fn["attributes"]["event_trigger"] == {
        "event_type": "google.cloud.storage.object.v1.finalized",
        "event_filters": [{"attribute": "bucket", "value": "source-ideal-adventure"}],
    }
    assert fn["attributes"]["service_config"] == {
        "service_account_email": "${google_service_account.function-account.email}",
        "environment_variables": {
            "DESTINATION_BUCKET": "destination-ideal-adventure",
            "PROJECT_ID": "ideal-adventure",
            "ENDPOINT_ID": "7212484016908271616",
        },
        "min_instance_count": 0,
        "max_instance_count": 1,
    }

    obj = doc["asset-object"]
    assert obj["attributes"] == {
        "bucket": "asset-ideal-adventure",
        "name": f"{h}.zip",
        "source": fake_asset.archive_path,
    }
    assert doc["asset"]["attributes"] == {
        "path": fake_asset.archive_path,
        "hash": h,
        "type": "archive",
    }
    assert doc["function-account-ai"]["attributes"]["members"] == [
        "serviceAccount:${google_service_account.function-account.email}"
    ]


def test_lookup_is_data_only(stack_config, fake_asset):
    """O lookup da identidade do storage nunca é um recurso gerenciado."""
    _require_imports()

    doc = _document(stack_config, fake_asset)
    resources = _by_id(doc)

    assert "storage-account" not in resources
    assert doc["data"] == [
        {
            "id": "storage-account",
            "kind": "NetworkIdentity",
            "type": "google_storage_project_service_account",
            "attributes": {"project": "ideal-adventure"},
        }
    ]

    pubsub = resources["storage-account-pubsub"]
    assert pubsub["depends_on"] == []
    assert pubsub["reads"] == ["storage-account"]
    assert pubsub["attributes"]["member"] == (
        "serviceAccount:${data.google_storage_project_service_account.storage-account.email_address}"
    )
    assert "name" not in pubsub


def test_synthesis_is_repeatable(stack_config, fake_asset):
    _require_imports()

    first = to_json(_document(stack_config, fake_asset))
    second = to_json(_document(stack_config, fake_asset))

    assert first == second
    assert first.endswith("\n")
    assert json.loads(first)["resources"][0]["id"] == "function-account"


def test_backend_may_be_mapping_or_absent(graph):
    _require_imports()

    graph.declare_location("bucket", name="images")

    assert GraphSynthesizer().synthesize(graph)["backend"] is None
    doc = GraphSynthesizer().synthesize(graph, backend={"workspace": "ws"})
    assert doc["backend"] == {"workspace": "ws"}


def test_dangling_reference_aborts_synthesis(graph):
    _require_imports()

    graph.add(
        ResourceNode(
            id="orphan",
            kind=ResourceKind.ARTIFACT_OBJECT,
            type=TYPE_BUCKET_OBJECT,
            attributes=ArtifactObjectAttributes(
                bucket=Reference("ghost-bucket", "name"),
                name="orphan.zip",
                source="/tmp/orphan.zip",
            ),
        )
    )

    with pytest.raises(UnresolvedReferenceError) as ei:
        GraphSynthesizer().synthesize(graph)

    assert ei.value.details["owner"] == "ghost-bucket"


def test_synthesis_logs_document_hash(stack_config, fake_asset, synth_ctx):
    _require_imports()

    doc = _document(stack_config, fake_asset, ctx=synth_ctx)

    events = [e for e in synth_ctx.events if e["step_id"] == "graph.synthesize"]
    assert len(events) == 1
    assert events[0]["level"] == "INFO"
    assert events[0]["document_hash"] == compute_document_hash(doc)
    assert events[0]["resources"] == len(FULL_ORDER)
    assert events[0]["lookups"] == 1
