"""Empacotamento endereçado por conteúdo do código implantável."""

from .packager import (
    ARCHIVE_EXTENSION,
    ARCHIVE_TYPE,
    AssetDescriptor,
    AssetPackager,
    compute_asset_hash,
)

__all__ = [
    "ARCHIVE_EXTENSION",
    "ARCHIVE_TYPE",
    "AssetDescriptor",
    "AssetPackager",
    "compute_asset_hash",
]
