"""
stepcache — Exceções canônicas (v1)

Este módulo define a hierarquia oficial de exceções do motor de resolução
e cache de step libraries.

As exceções aqui definidas representam falhas explícitas e tipadas, e não
erros genéricos de execução. Chamadores devem exibir a exceção final como
recebida: não existe relatório de sucesso parcial.

Taxonomia:
    - StepLibIOError            → falhas de leitura/escrita/walk no filesystem
    - StepParseError            → definição de Step ilegível ou malformada
    - StepValidationError       → definição de Step inválida (modo estrito)
    - DefaultFillError          → falha ao preencher defaults de um Step
    - VersionCompareError       → versões não comparáveis semanticamente
    - SpecParseError            → spec.json ou steplib.yml inválidos
    - RouteNotFoundError        → nenhuma rota para a URI informada
    - StepNotFoundError         → id/versão ausente na coleção
    - NotInitializedError       → raiz da coleção ainda não clonada
    - UnsupportedTransportError → tipo de download location desconhecido (fatal)
    - DownloadFailedError       → todas as localizações candidatas falharam
    - TransportError            → falha de uma primitiva de transporte

Política de propagação:
    - Erros estruturais durante o walk abortam o build inteiro
    - Falhas de transporte por localização são registradas em log e a
      próxima localização é tentada
    - Tipo de transporte não suportado aborta o download imediatamente
    - Não existem retries automáticos
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple


class StepCacheError(Exception):
    """Erro base do stepcache."""


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------

class StepLibIOError(StepCacheError):
    """Falha de I/O ao ler, escrever ou percorrer arquivos locais."""


# ---------------------------------------------------------------------------
# Conteúdo de Steps / Spec
# ---------------------------------------------------------------------------

class StepParseError(StepCacheError):
    """Definição de Step (step.yml) não pôde ser parseada ou normalizada."""


class StepValidationError(StepCacheError):
    """Definição de Step não é estruturalmente válida."""


class DefaultFillError(StepCacheError):
    """Falha ao preencher valores default de uma definição de Step."""


class VersionCompareError(StepCacheError):
    """Duas versões de um Step não puderam ser comparadas semanticamente."""


class SpecParseError(StepCacheError):
    """spec.json ou steplib.yml não puderam ser desserializados."""


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

class NotFoundError(StepCacheError):
    """Entidade requerida não encontrada."""


class RouteNotFoundError(NotFoundError):
    """Nenhuma rota registrada para a URI da step library."""


class StepNotFoundError(NotFoundError):
    """Coleção não contém o Step (id + versão) ou não há localização de download."""


class NotInitializedError(StepCacheError):
    """Operação exige uma raiz de coleção que ainda não foi clonada."""


class StepLibURIMissingError(StepCacheError):
    """Nenhuma URI de step library foi informada nem configurada."""


# ---------------------------------------------------------------------------
# Transporte / Download
# ---------------------------------------------------------------------------

class TransportError(StepCacheError):
    """Falha de uma primitiva de transporte (zip, git)."""


class CommitHashMismatchError(TransportError):
    """Commit clonado difere do commit esperado para a versão do Step."""


class UnsupportedTransportError(StepCacheError):
    """Tipo de download location desconhecido. Aborta o download inteiro."""


class DownloadFailedError(StepCacheError):
    """
    Nenhuma localização candidata conseguiu materializar o Step.

    A mensagem é genérica; as falhas individuais ficam preservadas em
    `attempts` como pares (localização, erro) na ordem em que foram tentadas.
    """

    def __init__(
        self,
        message: str = "Failed to download step",
        *,
        attempts: Optional[List[Tuple[Any, BaseException]]] = None,
    ) -> None:
        super().__init__(message)
        self.attempts: List[Tuple[Any, BaseException]] = list(attempts or [])
