# src/stepcache/core/__init__.py
"""
Core do stepcache.

Este pacote contém a implementação canônica do motor de resolução e cache
de step libraries, reunindo as responsabilidades que permitem afirmar com
segurança: "este id + versão está disponível localmente e é o que a
biblioteca pretendia publicar".

Componentes principais:
    - config     → resolução de configuração (defaults, arquivo, ambiente, args)
    - routing    → tabela persistente de rotas (URI → alias de pasta)
    - paths      → derivação pura de caminhos a partir de uma rota
    - models     → Step, StepGroup, StepCollection e DownloadLocation
    - collection → compilação da spec agregada e sua persistência
    - fetch      → primitivas de transporte e download idempotente de Steps

Princípios fundamentais:
    - Nenhum estado global mutável: a configuração é explícita
    - Falhas estruturais abortam a operação inteira (sem coleções parciais)
    - Falhas de transporte por localização são recuperadas localmente

Limites explícitos:
    - Não contém CLI nem parsing de flags
    - Não executa Steps
    - Não implementa locking entre processos
"""
