# src/stepcache/core/config/__init__.py

"""
Camada de configuração do stepcache.

A configuração é construída uma única vez pelo ponto de entrada e passada
explicitamente a cada componente, substituindo estado global de
inicialização (home, caminhos derivados, flag de debug).

Responsabilidades do pacote:
    - Defaults embutidos do home e de nomes de arquivos
    - Carregamento do arquivo de configuração opcional (YAML/JSON)
    - Deep-merge determinístico entre defaults e arquivo
    - Fallback de ambiente para a step library ativa e para debug

Limites explícitos:
    - Não faz parsing de CLI
    - Não interage com rotas, coleções ou transportes
"""

from .errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .loader import StepCacheConfig, ensure_home_dirs, resolve_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigTypeConflictError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "StepCacheConfig",
    "ensure_home_dirs",
    "resolve_config",
    "deep_merge",
]
