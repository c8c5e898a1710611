# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do Stratus Stack.

Garantem apenas que o ambiente de testes está funcional e que o pacote
pode ser importado. Não testam comportamento de domínio.
"""


def test_smoke():
    """Sentinela mínima: o pacote importa e expõe sua versão."""
    import stratus_stack

    assert isinstance(stratus_stack.__version__, str)
