# src/stratus_stack/core/assets/packager.py
"""
AssetPackager — empacotamento endereçado por conteúdo.

Este módulo transforma um diretório local de código implantável em:
    - um hash de conteúdo estável (identidade do artefato)
    - um arquivo ZIP reprodutível (mesmo hash ⇒ mesmos bytes)

O hash é usado pelo NameResolver para nomear o objeto do artefato no
bucket, de forma que reimplantar uma fonte inalterada nunca force um novo
upload nem um novo deploy da função, e qualquer alteração de conteúdo
produza um nome novo.

Política de hashing (v1):
    - Arquivos ordenados pelo caminho relativo POSIX
    - Para cada arquivo: caminho relativo, flag de executável e SHA-256 dos bytes
    - Algoritmo final SHA-256 (64 caracteres hexadecimais)

Normalização de metadados:
    - mtime, atime, dono e grupo nunca participam do hash nem do ZIP
    - Permissões são reduzidas a 0o644 / 0o755 (apenas o bit de execução importa)
    - Timestamp de todas as entradas ZIP fixado em 1980-01-01 00:00:00

Invariantes:
    - A mesma árvore sempre produz o mesmo hash, independente da ordem
      de iteração do filesystem
    - O arquivo final é escrito atomicamente (tmp + os.replace)
    - Nenhum arquivo parcial permanece em caso de erro
    - Cada arquivo é lido uma única vez: os bytes do ZIP são os bytes do hash
    - Diretórios ilegíveis são erro fatal, nunca omitidos em silêncio

Limites explícitos:
    - Não faz upload do artefato
    - Não suporta diretórios via symlink nem symlinks para fora da árvore
    - Empacotamento não é retomável: conclui ou falha por inteiro
    - A fonte inteira é mantida em memória durante o empacotamento
"""

from __future__ import annotations

import hashlib
import os
import stat
import tempfile
import zipfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Tuple, Union

from stratus_stack.core.exceptions import PackagingError
from stratus_stack.core.run_context import SynthContext


ARCHIVE_TYPE = "archive"
ARCHIVE_EXTENSION = "zip"

_HASH_HEADER = b"stratus-asset-v1\n"
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_MODE_FILE = 0o100644
_MODE_EXEC = 0o100755


@dataclass(frozen=True)
class AssetDescriptor:
    """
    Descritor imutável de um artefato empacotado.

    Campos:
        - source_path: diretório de origem (absoluto)
        - content_hash: SHA-256 do conteúdo normalizado
        - archive_type: tipo do artefato (sempre "archive" em v1)
        - archive_path: caminho do ZIP reprodutível no staging
        - file_count: número de arquivos incluídos
    """

    source_path: str
    content_hash: str
    archive_type: str = ARCHIVE_TYPE
    archive_path: Optional[str] = None
    file_count: int = 0

    def relative_to(self, base: Union[str, Path]) -> "AssetDescriptor":
        """
        Retorna uma cópia com `archive_path` relativo a `base`, em POSIX.

        O documento sintetizado referencia o artefato por este caminho, de
        modo que o mesmo conteúdo gera o mesmo documento em qualquer
        diretório de saída.
        """
        if self.archive_path is None:
            return self
        rel = Path(self.archive_path).resolve().relative_to(Path(base).resolve())
        return replace(self, archive_path=rel.as_posix())


@dataclass(frozen=True)
class _Entry:
    rel: str
    executable: bool
    data: bytes = field(repr=False, default=b"")


def _raise_walk_error(err: OSError) -> None:
    raise err


def _collect(root: Path, skipped: List[str]) -> List[_Entry]:
    """
    Lista arquivos regulares da árvore em ordem determinística.

    Os bytes de cada arquivo são lidos uma única vez aqui; hash e ZIP
    consomem a mesma leitura. Qualquer diretório ilegível interrompe a
    varredura com OSError.
    """
    entries: List[_Entry] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error, followlinks=False):
        here = Path(dirpath)
        for d in dirnames:
            if (here / d).is_symlink():
                raise PackagingError(
                    message="Symlinked directories are not supported in asset sources",
                    details={"path": str(here / d)},
                    hint="Substitua o link por uma cópia do diretório",
                )
        for name in filenames:
            p = here / name
            target = p
            if p.is_symlink():
                target = p.resolve()
                if root not in target.parents:
                    raise PackagingError(
                        message="Symlink points outside the asset source",
                        details={"path": str(p), "target": str(target)},
                    )
            st = target.stat()
            if not stat.S_ISREG(st.st_mode):
                skipped.append(p.relative_to(root).as_posix())
                continue
            rel = p.relative_to(root).as_posix()
            entries.append(
                _Entry(rel=rel, executable=bool(st.st_mode & 0o111), data=target.read_bytes())
            )

    entries.sort(key=lambda e: e.rel)
    return entries


def _digest_tree(entries: List[_Entry]) -> str:
    h = hashlib.sha256(_HASH_HEADER)
    for e in entries:
        h.update(e.rel.encode("utf-8"))
        h.update(b"\0x\0" if e.executable else b"\0-\0")
        h.update(hashlib.sha256(e.data).hexdigest().encode("ascii"))
        h.update(b"\n")
    return h.hexdigest()


def _scan(
    source_path: Union[str, Path], skipped: Optional[List[str]] = None
) -> Tuple[Path, List[_Entry]]:
    root = Path(source_path)
    if not root.exists():
        raise PackagingError(
            message=f"Asset source not found: {root}",
            details={"source_path": str(root)},
            hint="Verifique `function.source_dir` na configuração",
        )
    if not root.is_dir():
        raise PackagingError(
            message=f"Asset source is not a directory: {root}",
            details={"source_path": str(root)},
        )
    root = root.resolve()

    try:
        entries = _collect(root, skipped if skipped is not None else [])
        if not entries:
            raise PackagingError(
                message=f"Asset source contains no files: {root}",
                details={"source_path": str(root)},
            )
        return root, entries
    except PackagingError:
        raise
    except OSError as e:
        raise PackagingError(
            message=f"Asset source is not readable: {e.filename or root}",
            details={"source_path": str(root), "os_error": e.strerror},
        ) from e


def compute_asset_hash(source_path: Union[str, Path]) -> str:
    """Calcula o hash de conteúdo de uma árvore sem escrever o arquivo."""
    _, entries = _scan(source_path)
    return _digest_tree(entries)


def _write_archive(entries: List[_Entry], dst: Path) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=".asset.", suffix=".tmp", dir=str(dst.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(raw, "w") as zf:
            for e in entries:
                info = zipfile.ZipInfo(e.rel, date_time=_ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.create_system = 3
                info.external_attr = (_MODE_EXEC if e.executable else _MODE_FILE) << 16
                zf.writestr(info, e.data)
        os.replace(str(tmp_path), str(dst))
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class AssetPackager:
    """
    Empacotador determinístico de fontes implantáveis.

    O diretório de staging é fornecido pelo chamador; o ZIP é nomeado
    `asset.<hash>.zip`, de modo que um artefato já presente com o mesmo
    hash é reutilizado sem reescrita.
    """

    def __init__(self, staging_dir: Union[str, Path]):
        self.staging_dir = Path(staging_dir)

    def archive_path_for(self, content_hash: str) -> Path:
        return self.staging_dir / f"asset.{content_hash}.{ARCHIVE_EXTENSION}"

    def package(
        self,
        source_path: Union[str, Path],
        *,
        ctx: Optional[SynthContext] = None,
    ) -> AssetDescriptor:
        """
        Empacota `source_path` e retorna seu AssetDescriptor.

        Raises:
            PackagingError: Se a fonte não existir, não for um diretório,
                estiver vazia ou não puder ser lida.
        """
        skipped: List[str] = []
        root, entries = _scan(source_path, skipped)

        content_hash = _digest_tree(entries)
        try:
            dst = self.archive_path_for(content_hash)
            reused = dst.exists()
            if not reused:
                self.staging_dir.mkdir(parents=True, exist_ok=True)
                _write_archive(entries, dst)
        except OSError as e:
            raise PackagingError(
                message=f"Failed to package asset source: {e.filename or root}",
                details={"source_path": str(root), "os_error": e.strerror},
            ) from e

        if ctx is not None:
            for rel in skipped:
                ctx.add_warning(step_id="asset.package", message=f"non-regular file skipped: {rel}")
            ctx.log(
                step_id="asset.package",
                level="INFO",
                message="asset reused" if reused else "asset packaged",
                content_hash=content_hash,
                file_count=len(entries),
                archive_path=str(dst),
            )

        return AssetDescriptor(
            source_path=str(root),
            content_hash=content_hash,
            archive_type=ARCHIVE_TYPE,
            archive_path=str(dst),
            file_count=len(entries),
        )
