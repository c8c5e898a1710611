# src/stratus_stack/__init__.py
"""
Stratus Stack — declaração de resource graphs e artefatos endereçados por conteúdo.

Este pacote raiz define o namespace público do Stratus Stack, uma biblioteca
que declara o pipeline de processamento de imagens disparado por eventos
(bucket de origem → função serverless → endpoint de predição → bucket de
destino) e o entrega, como documento serializado, a um provisioning engine.

Princípios centrais:
    - O stack é um DAG explícito de recursos; arestas vêm das referências
    - A síntese é pura e reprodutível (mesma entrada ⇒ mesmos bytes)
    - Artefatos são nomeados pelo hash do próprio conteúdo
    - Nenhum estado global: o builder é passado explicitamente

Arquitetura em alto nível:
    - core.assets       → empacotamento determinístico e hash de conteúdo
    - core.graph        → builder, nomes finais, planejamento topológico
    - core.synth        → emissão do documento para o provisioning engine
    - core.config       → carregamento, merge, hashing e settings tipados
    - core.traceability → Manifest e Event Log da síntese
    - stacks            → composição concreta do pipeline de imagens

Limites explícitos:
    - Não faz chamadas de rede nem aplica o documento
    - Não reconcilia estado remoto nem faz retry de operações do provedor
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
