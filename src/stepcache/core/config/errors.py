# src/stepcache/core/config/errors.py
"""
Exceções canônicas da camada de configuração do stepcache.

Este módulo define a hierarquia de exceções levantadas durante o
carregamento do arquivo de configuração opcional, o deep-merge com os
defaults embutidos e a resolução final do `StepCacheConfig`.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção aqui representa falha de rota, walk ou download

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de routing, collection ou fetch
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do stepcache.

    Permite captura genérica de falhas de configuração, distinguindo-as
    de falhas do motor (rotas, coleções, transportes).
    """


class ConfigFileNotFoundError(ConfigError):
    """
    Arquivo de configuração explicitamente informado não existe.

    O arquivo implícito (`<home>/config.yml`) é opcional; apenas um caminho
    passado explicitamente é obrigatório.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Conteúdo raiz do arquivo de configuração não é um mapa (`dict`).

    Listas ou valores escalares na raiz são rejeitados sem tentativa
    de normalização.
    """


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - defaults: {"download": {"timeout_seconds": 300}}
        - arquivo:  {"download": "fast"}

    Nenhum merge parcial é produzido em caso de conflito.
    """
