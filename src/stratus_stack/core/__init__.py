# src/stratus_stack/core/__init__.py
"""
Core do Stratus Stack.

Componentes principais:
    - assets       → AssetPackager (hash de conteúdo + ZIP reprodutível)
    - graph        → ResourceGraph, NameResolver e planner topológico
    - synth        → GraphSynthesizer
    - config       → configuração estática do stack
    - traceability → Manifest de síntese

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo erro é tipado e propagado
    - Declaração é pura; resolução de referências ocorre só na síntese
    - Execução single-threaded e síncrona

Limites explícitos:
    - Não aplica recursos em provedores de nuvem
    - Não persiste estado aplicado
"""
