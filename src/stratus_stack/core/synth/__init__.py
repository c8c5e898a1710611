"""Síntese do resource graph em documento para o provisioning engine."""

from .synthesizer import FORMAT_VERSION, GraphSynthesizer, placeholder, to_json

__all__ = ["FORMAT_VERSION", "GraphSynthesizer", "placeholder", "to_json"]
