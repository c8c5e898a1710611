"""Stacks concretos declarados sobre o core do Stratus Stack."""

from .image_pipeline import ImagePipeline, build_image_pipeline

__all__ = ["ImagePipeline", "build_image_pipeline"]
