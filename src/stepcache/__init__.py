# src/stepcache/__init__.py
"""
stepcache — registro local e cache de step libraries versionadas.

Este pacote raiz define o namespace público do stepcache, responsável por
localizar, materializar e fixar versões específicas de Steps publicados em
uma step library remota (ex.: um remote git), sem re-download a cada uso.

Princípios centrais:
    - Cada step library é ligada a um alias local por uma rota persistente
    - A especificação compilada (spec.json) é derivada, nunca fonte de verdade
    - O cache de um Step (id + versão) é confiável uma vez materializado
    - Configuração é explícita e passada por referência (sem estado global)

Arquitetura em alto nível:
    - core.config     → resolução de configuração (defaults, arquivo, ambiente)
    - core.routing    → tabela de rotas URI → alias
    - core.paths      → layout canônico de diretórios
    - core.models     → Step, StepGroup e StepCollection
    - core.collection → compilação e persistência da spec
    - core.fetch      → transportes e download de Steps
    - library         → fachada de alto nível (setup, update, delete, download)

Limites explícitos:
    - Não executa Steps
    - Não resolve dependências entre Steps
    - Não faz cache de outputs de Steps
    - Não define CLI
"""
# src/stepcache/__init__.py
from .library import StepLibManager

__version__ = "0.1.0"

__all__ = ["StepLibManager", "__version__"]
