# src/stepcache/core/routing/__init__.py
"""
Pacote de rotas do stepcache.

API pública exposta:
    - Route                  → ligação URI → alias de pasta
    - RouteTable             → leitura e mutação do arquivo de rotas
    - generate_folder_alias  → geração de alias único
"""

from .route_table import Route, RouteTable, generate_folder_alias

__all__ = ["Route", "RouteTable", "generate_folder_alias"]
