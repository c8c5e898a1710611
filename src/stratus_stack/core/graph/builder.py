# src/stratus_stack/core/graph/builder.py
"""
ResourceGraph — builder explícito do resource graph.

Este módulo define o objeto que o autor do stack cria, alimenta com
declarações e entrega ao synthesizer. Não existe registro global nem
"stack corrente": cada síntese possui seu próprio builder.

Cada operação `declare_*` devolve um `Handle` cujos outputs podem ser
usados em declarações posteriores; as arestas de dependência são
derivadas automaticamente das referências contidas nos atributos.

Regras de composição (v1):
    - identidade: sem dependências
    - binding: depende de exatamente uma identidade (o sujeito), com role
      e escopo de projeto
    - bucket: sem dependências (apenas globais de projeto/região)
    - artefato: nomeado a partir do hash produzido pelo AssetPackager
    - objeto do artefato: depende do bucket e do artefato
    - função: depende do objeto do artefato, do bucket de origem do evento,
      da identidade de execução e dos buckets injetados no ambiente
    - lookup de identidade externa: somente leitura, nunca nomeado

Invariantes:
    - Ids de nós são únicos
    - Um nó não referencia a si mesmo
    - Após `freeze()` nenhuma declaração é aceita

Limites explícitos:
    - Não ordena nós (ver planner) nem resolve referências (ver synthesizer)
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from stratus_stack.core.assets.packager import ARCHIVE_EXTENSION, AssetDescriptor
from stratus_stack.core.exceptions import (
    CyclicDependencyError,
    DuplicateNodeIdError,
    InvalidDeclarationError,
    UnresolvedReferenceError,
)

from . import kinds as k
from .attributes import (
    ArtifactAttributes,
    ArtifactObjectAttributes,
    BindingAttributes,
    BuildConfig,
    EventFilter,
    EventTrigger,
    FunctionAttributes,
    IdentityAttributes,
    LocationAttributes,
    MemberBindingAttributes,
    ServiceConfig,
    StorageServiceIdentityAttributes,
    is_string_value,
)
from .kinds import EdgeRole, ResourceKind
from .naming import NameResolver
from .node import Edge, Handle, ResourceNode
from .planner import plan_emission
from .refs import Value, interpolate


OBJECT_FINALIZED = "google.cloud.storage.object.v1.finalized"

_LOOKUP_MEMBER_OUTPUT = "email_address"
_IDENTITY_MEMBER_OUTPUT = "email"


class ResourceGraph:
    """Builder de um resource graph para uma única síntese."""

    def __init__(
        self,
        *,
        project: str,
        region: str,
        name: str = "stack",
        resolver: Optional[NameResolver] = None,
    ):
        self.name = name
        self.project = project
        self.region = region
        self.resolver = resolver or NameResolver()
        self._nodes: Dict[str, ResourceNode] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Acesso
    # ------------------------------------------------------------------
    @property
    def frozen(self) -> bool:
        return self._frozen

    def nodes(self) -> List[ResourceNode]:
        return list(self._nodes.values())

    def get(self, node_id: str) -> ResourceNode:
        return self._nodes[node_id]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def edges(self) -> List[Edge]:
        out: List[Edge] = []
        for node in self._nodes.values():
            seen = set()
            for ref, role in node.references():
                owner = self._nodes.get(ref.owner_id)
                if owner is not None and owner.lookup:
                    role = EdgeRole.LOOKUP
                key = (ref.owner_id, role)
                if key in seen:
                    continue
                seen.add(key)
                out.append(Edge(source=ref.owner_id, target=node.id, role=role))
        return out

    def dependencies(self, node_id: str) -> List[str]:
        deps: List[str] = []
        for e in self.edges():
            if e.target == node_id and e.source not in deps:
                deps.append(e.source)
        return deps

    def handle(self, node_id: str, kind: ResourceKind, type_: str) -> Handle:
        """Handle adiantado para um nó ainda não declarado."""
        node = self._nodes.get(node_id)
        if node is not None:
            return Handle(node_id=node.id, kind=node.kind, type=node.type, lookup=node.lookup)
        return Handle(node_id=node_id, kind=kind, type=type_)

    # ------------------------------------------------------------------
    # Registro
    # ------------------------------------------------------------------
    def add(self, node: ResourceNode) -> Handle:
        """
        Registra um nó já construído.

        Raises:
            InvalidDeclarationError: Se o grafo estiver congelado ou uma
                referência apontar para output inexistente.
            DuplicateNodeIdError: Se o id já estiver declarado.
            CyclicDependencyError: Se o nó referenciar a si mesmo.
        """
        self._check_open(node.id)
        for ref, _ in node.references():
            if ref.owner_id == node.id:
                raise CyclicDependencyError(
                    message=f"Resource '{node.id}' references its own output '{ref.output}'",
                    details={"cycle": [node.id, node.id]},
                )
            owner = self._nodes.get(ref.owner_id)
            if owner is not None:
                self._check_output(owner, ref.output, referenced_by=node.id)

        node = ResourceNode(
            id=node.id,
            kind=node.kind,
            type=node.type,
            attributes=node.attributes,
            outputs=MappingProxyType(dict(node.outputs)),
            name=node.name,
            lookup=node.lookup,
            index=len(self._nodes),
        )
        self._nodes[node.id] = node
        return Handle(node_id=node.id, kind=node.kind, type=node.type, lookup=node.lookup)

    def freeze(self) -> "ResourceGraph":
        """
        Valida completude do grafo e impede novas declarações.

        Raises:
            UnresolvedReferenceError: Referência a nó nunca declarado.
            InvalidDeclarationError: Referência a output inexistente.
            CyclicDependencyError: Ciclo, com o caminho completo.
        """
        for node in self._nodes.values():
            for ref, _ in node.references():
                owner = self._nodes.get(ref.owner_id)
                if owner is None:
                    raise UnresolvedReferenceError(
                        message=f"Resource '{node.id}' references undeclared resource '{ref.owner_id}'",
                        details={"node": node.id, "owner": ref.owner_id, "output": ref.output},
                    )
                self._check_output(owner, ref.output, referenced_by=node.id)
        plan_emission(self.nodes(), self.edges())
        self._frozen = True
        return self

    # ------------------------------------------------------------------
    # Declarações
    # ------------------------------------------------------------------
    def declare_identity(
        self,
        node_id: str,
        *,
        account_id: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> Handle:
        self._check_open(node_id)
        final = self.resolver.claim(ResourceKind.NETWORK_IDENTITY, account_id or node_id, node_id)
        return self.add(
            ResourceNode(
                id=node_id,
                kind=ResourceKind.NETWORK_IDENTITY,
                type=k.TYPE_SERVICE_ACCOUNT,
                attributes=IdentityAttributes(account_id=final, display_name=display_name),
                outputs={"account_id": final},
                name=final,
            )
        )

    def lookup_storage_service_identity(self, node_id: str) -> Handle:
        """Referência somente-leitura à identidade gerenciada do storage."""
        return self.add(
            ResourceNode(
                id=node_id,
                kind=ResourceKind.NETWORK_IDENTITY,
                type=k.TYPE_STORAGE_SERVICE_ACCOUNT,
                attributes=StorageServiceIdentityAttributes(project=self.project),
                lookup=True,
            )
        )

    def declare_binding(
        self,
        node_id: str,
        *,
        subject: Handle,
        role: str,
        project: Optional[str] = None,
        authoritative: bool = True,
    ) -> Handle:
        """
        Declara a tripla (identidade, role, projeto).

        `authoritative=True` emite um binding com a lista completa de
        membros do role; `False` emite um membro aditivo. Bindings do mesmo
        sujeito nunca são mesclados.
        """
        self._expect(subject, ResourceKind.NETWORK_IDENTITY, "subject")
        if not isinstance(role, str) or not role.strip():
            raise InvalidDeclarationError(
                message="Binding role must be a non-empty string",
                details={"node_id": node_id},
            )
        output = _LOOKUP_MEMBER_OUTPUT if subject.lookup else _IDENTITY_MEMBER_OUTPUT
        member = interpolate("serviceAccount:{}", subject.ref(output))
        scope = project or self.project

        if authoritative:
            attrs: Any = BindingAttributes(project=scope, role=role, members=(member,))
            type_ = k.TYPE_IAM_BINDING
        else:
            attrs = MemberBindingAttributes(project=scope, role=role, member=member)
            type_ = k.TYPE_IAM_MEMBER

        return self.add(
            ResourceNode(
                id=node_id,
                kind=ResourceKind.PERMISSION_BINDING,
                type=type_,
                attributes=attrs,
            )
        )

    def declare_location(
        self,
        node_id: str,
        *,
        name: str,
        location: Optional[str] = None,
        storage_class: Optional[str] = None,
        uniform_bucket_level_access: Optional[bool] = None,
        force_destroy: Optional[bool] = None,
    ) -> Handle:
        self._check_open(node_id)
        final = self.resolver.claim(ResourceKind.STORAGE_LOCATION, name, node_id)
        return self.add(
            ResourceNode(
                id=node_id,
                kind=ResourceKind.STORAGE_LOCATION,
                type=k.TYPE_BUCKET,
                attributes=LocationAttributes(
                    name=final,
                    location=location or self.region,
                    storage_class=storage_class,
                    uniform_bucket_level_access=uniform_bucket_level_access,
                    force_destroy=force_destroy,
                ),
                outputs={"name": final},
                name=final,
            )
        )

    def declare_artifact(
        self,
        node_id: str,
        *,
        asset: AssetDescriptor,
        extension: str = ARCHIVE_EXTENSION,
    ) -> Handle:
        """Declara o artefato local; seus outputs são fixados pelo hash."""
        self._check_open(node_id)
        if asset.archive_path is None:
            raise InvalidDeclarationError(
                message="Asset descriptor has no archive path",
                details={"node_id": node_id, "source_path": asset.source_path},
            )
        file_name = self.resolver.name_artifact(asset.content_hash, extension)
        return self.add(
            ResourceNode(
                id=node_id,
                kind=ResourceKind.DEPLOYABLE_ARTIFACT,
                type=k.TYPE_ASSET,
                attributes=ArtifactAttributes(
                    path=asset.archive_path,
                    hash=asset.content_hash,
                    archive_type=asset.archive_type,
                ),
                outputs={
                    "hash": asset.content_hash,
                    "path": asset.archive_path,
                    "file_name": file_name,
                },
            )
        )

    def declare_artifact_object(self, node_id: str, *, bucket: Handle, artifact: Handle) -> Handle:
        """Declara o objeto `<hash>.<ext>` dentro de `bucket`."""
        self._check_open(node_id)
        self._expect(bucket, ResourceKind.STORAGE_LOCATION, "bucket")
        self._expect(artifact, ResourceKind.DEPLOYABLE_ARTIFACT, "artifact")
        artifact_node = self._nodes.get(artifact.node_id)
        if artifact_node is None:
            raise InvalidDeclarationError(
                message="Artifact must be declared before its object",
                details={"node_id": node_id, "artifact": artifact.node_id},
            )
        content_hash = artifact_node.outputs["hash"]
        extension = artifact_node.outputs["file_name"].rsplit(".", 1)[-1]
        final = self.resolver.claim_artifact(content_hash, extension, node_id)
        bucket_name = bucket.ref("name")
        return self.add(
            ResourceNode(
                id=node_id,
                kind=ResourceKind.ARTIFACT_OBJECT,
                type=k.TYPE_BUCKET_OBJECT,
                attributes=ArtifactObjectAttributes(
                    bucket=bucket_name,
                    name=final,
                    source=artifact.ref("path"),
                ),
                outputs={"name": final, "bucket": bucket_name},
                name=final,
            )
        )

    def declare_function(
        self,
        node_id: str,
        *,
        name: str,
        source_object: Handle,
        event_source: Handle,
        identity: Handle,
        entry_point: str,
        runtime: str,
        event_type: str = OBJECT_FINALIZED,
        environment: Optional[Mapping[str, Value]] = None,
        min_instance_count: Optional[int] = None,
        max_instance_count: Optional[int] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Handle:
        """
        Declara a função disparada por eventos do bucket `event_source`.

        O filtro de evento é uma igualdade exata sobre o nome do bucket. Os
        valores de `environment` são repassados sem interpretação; buckets
        referenciados ali continuam sendo resolvidos antes da função.
        """
        self._check_open(node_id)
        self._expect(source_object, ResourceKind.ARTIFACT_OBJECT, "source_object")
        self._expect(event_source, ResourceKind.STORAGE_LOCATION, "event_source")
        self._expect(identity, ResourceKind.NETWORK_IDENTITY, "identity")
        if identity.lookup:
            raise InvalidDeclarationError(
                message="Function identity must be owned by the graph, not a lookup",
                details={"node_id": node_id, "identity": identity.node_id},
            )

        env = []
        for key, value in (environment or {}).items():
            if not isinstance(key, str) or not is_string_value(value):
                raise InvalidDeclarationError(
                    message=f"Environment variable '{key}' must be a string or an output reference",
                    details={"node_id": node_id, "variable": str(key), "type": type(value).__name__},
                )
            env.append((key, value))

        final = self.resolver.claim(ResourceKind.SERVERLESS_FUNCTION, name, node_id)
        attrs = FunctionAttributes(
            name=final,
            location=location or self.region,
            description=description,
            build_config=BuildConfig(
                entry_point=entry_point,
                runtime=runtime,
                source_bucket=source_object.ref("bucket"),
                source_object=source_object.ref("name"),
            ),
            event_trigger=EventTrigger(
                event_type=event_type,
                event_filters=(EventFilter(attribute="bucket", value=event_source.ref("name")),),
            ),
            service_config=ServiceConfig(
                service_account_email=identity.ref("email"),
                environment_variables=tuple(env),
                min_instance_count=min_instance_count,
                max_instance_count=max_instance_count,
            ),
        )
        return self.add(
            ResourceNode(
                id=node_id,
                kind=ResourceKind.SERVERLESS_FUNCTION,
                type=k.TYPE_FUNCTION,
                attributes=attrs,
                outputs={"name": final},
                name=final,
            )
        )

    # ------------------------------------------------------------------
    # Validações internas
    # ------------------------------------------------------------------
    def _check_open(self, node_id: str) -> None:
        if self._frozen:
            raise InvalidDeclarationError(
                message="Resource graph is frozen; no further declarations are accepted",
                details={"node_id": node_id},
            )
        if not isinstance(node_id, str) or not node_id.strip():
            raise InvalidDeclarationError(message="Resource id must be a non-empty string")
        if node_id in self._nodes:
            raise DuplicateNodeIdError(
                message=f"Duplicate resource id: {node_id}",
                details={"node_id": node_id},
            )

    @staticmethod
    def _expect(handle: Handle, kind: ResourceKind, param: str) -> None:
        if not isinstance(handle, Handle) or handle.kind is not kind:
            got = handle.kind.value if isinstance(handle, Handle) else type(handle).__name__
            raise InvalidDeclarationError(
                message=f"'{param}' must be a {kind.value} handle, got {got}",
                details={"param": param, "expected": kind.value, "received": got},
            )

    @staticmethod
    def _check_output(owner: ResourceNode, output: str, *, referenced_by: str) -> None:
        if output not in k.OUTPUTS.get(owner.type, frozenset()):
            raise InvalidDeclarationError(
                message=f"Resource '{referenced_by}' references unknown output "
                f"'{owner.id}.{output}'",
                details={"node": referenced_by, "owner": owner.id, "output": output},
            )
