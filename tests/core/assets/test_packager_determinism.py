# tests/core/assets/test_packager_determinism.py
"""
Testes de determinismo do AssetPackager.

Este módulo valida que o hash de conteúdo é a identidade do artefato:
reempacotar uma fonte inalterada reutiliza o mesmo nome e os mesmos bytes,
e qualquer alteração de conteúdo produz um nome novo.

Os testes asseguram que:
- a mesma árvore produz sempre o mesmo hash
- mtime e ordem de criação dos arquivos não participam do hash
- alterar um único byte ou o bit de execução altera o hash
- o ZIP é byte-idêntico entre execuções e tem metadados normalizados
- o ZIP contém exatamente os bytes que entraram no hash

Invariantes:
    - O nome do arquivo é `asset.<hash>.zip`
    - O hash possui 64 caracteres hexadecimais
"""

import os
import stat
import zipfile

import pytest

try:
    from stratus_stack.core.assets import packager as packager_mod
    from stratus_stack.core.assets.packager import (
        AssetPackager,
        compute_asset_hash,
    )
except Exception as e:  # noqa: BLE001
    AssetPackager = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar core.assets.packager: {_IMPORT_ERR}")


def _tree(root, files):
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(content)
    return root


def test_repackaging_unchanged_source_yields_same_hash(tmp_path, function_source):
    _require_imports()

    packager = AssetPackager(tmp_path / "stage")
    first = packager.package(function_source)
    second = packager.package(function_source)

    assert first.content_hash == second.content_hash
    assert len(first.content_hash) == 64
    assert first.archive_path == second.archive_path
    assert first.archive_path.endswith(f"asset.{first.content_hash}.zip")
    assert first.file_count == 1


def test_mtime_does_not_affect_hash(function_source):
    """Tocar o arquivo sem alterar conteúdo não força novo deploy."""
    _require_imports()

    h1 = compute_asset_hash(function_source)
    os.utime(function_source / "main.go", (1_000_000, 1_000_000))
    h2 = compute_asset_hash(function_source)

    assert h1 == h2


def test_single_byte_change_changes_hash(function_source):
    _require_imports()

    h1 = compute_asset_hash(function_source)
    with (function_source / "main.go").open("ab") as f:
        f.write(b"\n")
    h2 = compute_asset_hash(function_source)

    assert h1 != h2


def test_executable_bit_changes_hash(function_source):
    _require_imports()

    main = function_source / "main.go"
    os.chmod(main, 0o644)
    h1 = compute_asset_hash(main.parent)
    os.chmod(main, 0o755)
    h2 = compute_asset_hash(main.parent)

    assert h1 != h2


def test_creation_order_does_not_affect_hash(tmp_path):
    _require_imports()

    a = _tree(tmp_path / "a", {"go.mod": b"module x\n", "pkg/util.go": b"package pkg\n"})
    b = _tree(tmp_path / "b", {"pkg/util.go": b"package pkg\n", "go.mod": b"module x\n"})

    assert compute_asset_hash(a) == compute_asset_hash(b)


def test_archive_bytes_are_identical_across_stagings(tmp_path, function_source):
    """
    Dois stagings distintos produzem arquivos byte-idênticos: o ZIP não
    carrega mtime, dono nem permissões além do bit de execução.
    """
    _require_imports()

    one = AssetPackager(tmp_path / "stage-1").package(function_source)
    os.utime(function_source / "main.go", (2_000_000, 2_000_000))
    two = AssetPackager(tmp_path / "stage-2").package(function_source)

    with open(one.archive_path, "rb") as f1, open(two.archive_path, "rb") as f2:
        assert f1.read() == f2.read()

    with zipfile.ZipFile(one.archive_path) as zf:
        infos = zf.infolist()
        assert [i.filename for i in infos] == ["main.go"]
        assert infos[0].date_time == (1980, 1, 1, 0, 0, 0)
        assert stat.S_IMODE(infos[0].external_attr >> 16) in (0o644, 0o755)


def test_archive_entries_sorted_by_relative_path(tmp_path):
    _require_imports()

    src = _tree(
        tmp_path / "src",
        {"z.go": b"z", "a/b.go": b"b", "a.go": b"a"},
    )
    desc = AssetPackager(tmp_path / "stage").package(src)

    with zipfile.ZipFile(desc.archive_path) as zf:
        assert zf.namelist() == ["a.go", "a/b.go", "z.go"]
    assert desc.file_count == 3


def test_existing_archive_is_reused(tmp_path, function_source, synth_ctx):
    _require_imports()

    packager = AssetPackager(tmp_path / "stage")
    first = packager.package(function_source, ctx=synth_ctx)
    mtime = os.stat(first.archive_path).st_mtime_ns
    packager.package(function_source, ctx=synth_ctx)

    assert os.stat(first.archive_path).st_mtime_ns == mtime
    assert [e["message"] for e in synth_ctx.events] == ["asset packaged", "asset reused"]
    assert synth_ctx.events[0]["content_hash"] == first.content_hash


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs indisponíveis")
def test_non_regular_files_are_skipped_with_warning(tmp_path, function_source, synth_ctx):
    _require_imports()

    h1 = compute_asset_hash(function_source)
    os.mkfifo(function_source / "pipe")
    desc = AssetPackager(tmp_path / "stage").package(function_source, ctx=synth_ctx)

    assert desc.content_hash == h1
    assert desc.file_count == 1
    assert synth_ctx.warnings == {"asset.package": ["non-regular file skipped: pipe"]}


def test_archive_holds_the_hashed_bytes_when_source_changes_midway(
    tmp_path, function_source, monkeypatch
):
    """
    Uma edição da fonte entre o hash e a escrita do ZIP não pode produzir
    um arquivo cujo conteúdo diverge do hash do seu nome.
    """
    _require_imports()

    original_bytes = (function_source / "main.go").read_bytes()
    expected_hash = compute_asset_hash(function_source)
    write_archive = packager_mod._write_archive

    def _edit_then_write(entries, dst):
        (function_source / "main.go").write_bytes(b"package helloworld\n// edited\n")
        write_archive(entries, dst)

    monkeypatch.setattr(packager_mod, "_write_archive", _edit_then_write)
    desc = AssetPackager(tmp_path / "stage").package(function_source)

    assert desc.content_hash == expected_hash
    with zipfile.ZipFile(desc.archive_path) as zf:
        assert zf.read("main.go") == original_bytes


def test_relative_to_rebases_archive_path(tmp_path, function_source):
    _require_imports()

    out = tmp_path / "out"
    desc = AssetPackager(out / "assets").package(function_source)
    rel = desc.relative_to(out)

    assert rel.archive_path == f"assets/asset.{desc.content_hash}.zip"
    assert rel.content_hash == desc.content_hash
    assert desc.archive_path.startswith(str(out))
