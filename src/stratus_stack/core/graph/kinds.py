# src/stratus_stack/core/graph/kinds.py
"""
Tipos canônicos de recursos do resource graph.

Este módulo define a classificação fechada dos nós que um stack pode
declarar, os tipos de recurso entendidos pelo provisioning engine e os
outputs que cada tipo expõe para referência por outros nós.

Outputs são divididos em:
    - estáticos: valor fixado na declaração (ex.: nome final de um bucket)
    - computados: valor conhecido apenas pelo provisioning engine após o
      apply (ex.: e-mail de uma service account); emitidos como placeholder

Invariantes:
    - Os valores textuais dos enums são estáveis (persistidos no documento)
    - Todo output referenciável está listado em `OUTPUTS`
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class ResourceKind(str, Enum):
    """
    Classificação semântica de um nó do resource graph.

    Tipos definidos:
        - NETWORK_IDENTITY: service account (própria ou lookup externo)
        - STORAGE_LOCATION: bucket de storage
        - PERMISSION_BINDING: tripla (identidade, role, escopo)
        - DEPLOYABLE_ARTIFACT: artefato local endereçado por conteúdo
        - ARTIFACT_OBJECT: objeto do artefato dentro de um bucket
        - SERVERLESS_FUNCTION: função disparada por evento
    """
    NETWORK_IDENTITY = "NetworkIdentity"
    STORAGE_LOCATION = "StorageLocation"
    PERMISSION_BINDING = "PermissionBinding"
    DEPLOYABLE_ARTIFACT = "DeployableArtifact"
    ARTIFACT_OBJECT = "ArtifactObject"
    SERVERLESS_FUNCTION = "ServerlessFunction"


class EdgeRole(str, Enum):
    """
    Papel de uma aresta derivada de referência.

        - CREATION: dependência estrutural (o recurso não existe sem o outro)
        - WIRING: valor repassado (ex.: variável de ambiente); ainda ordena
        - LOOKUP: leitura de identidade externa, não criada pelo grafo
    """
    CREATION = "creation"
    WIRING = "wiring"
    LOOKUP = "lookup"


# Tipos de recurso do provisioning engine
TYPE_SERVICE_ACCOUNT = "google_service_account"
TYPE_STORAGE_SERVICE_ACCOUNT = "google_storage_project_service_account"
TYPE_BUCKET = "google_storage_bucket"
TYPE_IAM_BINDING = "google_project_iam_binding"
TYPE_IAM_MEMBER = "google_project_iam_member"
TYPE_ASSET = "stratus_asset"
TYPE_BUCKET_OBJECT = "google_storage_bucket_object"
TYPE_FUNCTION = "google_cloudfunctions2_function"


OUTPUTS: Dict[str, FrozenSet[str]] = {
    TYPE_SERVICE_ACCOUNT: frozenset({"account_id", "email", "member", "name", "unique_id"}),
    TYPE_STORAGE_SERVICE_ACCOUNT: frozenset({"email_address", "member"}),
    TYPE_BUCKET: frozenset({"name", "url", "self_link"}),
    TYPE_IAM_BINDING: frozenset({"etag"}),
    TYPE_IAM_MEMBER: frozenset({"etag"}),
    TYPE_ASSET: frozenset({"hash", "path", "file_name"}),
    TYPE_BUCKET_OBJECT: frozenset({"name", "bucket", "md5hash", "media_link", "self_link"}),
    TYPE_FUNCTION: frozenset({"name", "url", "state"}),
}


# Namespaces independentes de nomes finais
NAMESPACES: Dict[ResourceKind, str] = {
    ResourceKind.NETWORK_IDENTITY: "identities",
    ResourceKind.STORAGE_LOCATION: "locations",
    ResourceKind.ARTIFACT_OBJECT: "artifacts",
    ResourceKind.SERVERLESS_FUNCTION: "functions",
}
