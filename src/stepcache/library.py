# src/stepcache/library.py
"""
Fachada de alto nível sobre o motor do stepcache.

O `StepLibManager` sequencia as operações do core na forma consumida por
uma CLI externa: registrar (setup), atualizar, remover e listar step
libraries, ler a coleção compilada e baixar um Step.

Decisões arquiteturais:
    - Recebe um `StepCacheConfig` já resolvido (sem estado global)
    - Cria o home e configura o logging (`config.debug`) na construção
    - `setup` não registra a mesma URI duas vezes
    - Falha durante `setup` remove a subárvore e a rota recém-criadas

Limites explícitos:
    - Não faz parsing de flags nem imprime saída
    - Não executa Steps
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from stepcache.core.collection import read_collection_spec, regenerate_collection_spec
from stepcache.core.config import StepCacheConfig, ensure_home_dirs
from stepcache.core.exceptions import (
    NotInitializedError,
    RouteNotFoundError,
    StepCacheError,
    StepLibURIMissingError,
    StepNotFoundError,
)
from stepcache.core.fetch import StepFetcher, Transports
from stepcache.core.logging import configure_logging
from stepcache.core.models import StepCollection
from stepcache.core.paths import PathLayout
from stepcache.core.routing import Route, RouteTable, generate_folder_alias

logger = logging.getLogger(__name__)


class StepLibManager:
    """Operações de ciclo de vida de step libraries locais."""

    def __init__(self, config: StepCacheConfig, *, transports: Optional[Any] = None):
        self.config = config
        configure_logging(config.debug)
        ensure_home_dirs(config)
        self.route_table = RouteTable(config.routing_file)
        self.layout = PathLayout(config.collections_dir)
        self.transports = transports if transports is not None else Transports(timeout=config.download_timeout)
        self.fetcher = StepFetcher(self.route_table, self.layout, self.transports)

    def _uri(self, uri: Optional[str]) -> str:
        resolved = uri or self.config.steplib_uri
        if not resolved:
            raise StepLibURIMissingError("No step collection specified")
        return resolved

    def _require_route(self, uri: str) -> Route:
        route, found = self.route_table.get_route(uri)
        if not found:
            raise RouteNotFoundError(f"No route found for lib: {uri}")
        return route

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------
    def setup(self, uri: Optional[str] = None) -> Route:
        """Clona a step library, registra a rota e gera a spec."""
        uri = self._uri(uri)
        route, found = self.route_table.get_route(uri)
        if found:
            logger.info("steplib already set up uri=%r alias=%r", uri, route.folder_alias)
            return route

        route = Route(steplib_uri=uri, folder_alias=generate_folder_alias())
        logger.info("setting up steplib uri=%r alias=%r", uri, route.folder_alias)

        try:
            self.transports.clone(uri, self.layout.collection_base_dir(route))
            self.route_table.add_route(route)
            regenerate_collection_spec(route, self.layout)
        except Exception:
            logger.error("steplib setup failed, cleaning up uri=%r", uri)
            try:
                self.route_table.cleanup_route(route, self.layout)
            except StepCacheError as cleanup_err:
                logger.error("steplib cleanup failed uri=%r alias=%r err=%s", uri, route.folder_alias, cleanup_err)
            raise
        return route

    def update(self, uri: Optional[str] = None) -> StepCollection:
        """Atualiza o clone local (`git pull`) e regenera a spec."""
        uri = self._uri(uri)
        route = self._require_route(uri)
        root = self.layout.collection_base_dir(route)
        if not root.exists():
            raise NotInitializedError(f"collection not initialized: {root}")

        logger.info("updating steplib uri=%r", uri)
        self.transports.pull(root)
        return regenerate_collection_spec(route, self.layout)

    def delete(self, uri: Optional[str] = None) -> None:
        uri = self._uri(uri)
        route = self._require_route(uri)
        self.route_table.cleanup_route(route, self.layout)

    def list_libraries(self) -> List[str]:
        return self.route_table.list_sources()

    # ------------------------------------------------------------------
    # Consulta / download
    # ------------------------------------------------------------------
    def collection(self, uri: Optional[str] = None) -> StepCollection:
        return read_collection_spec(self._uri(uri), self.route_table, self.layout)

    def download(self, step_id: str, version: Optional[str] = None, *, uri: Optional[str] = None) -> Path:
        """
        Baixa um Step para o cache. Sem versão, usa a maior versão conhecida.

        O commit esperado é o `source.commit` declarado pela versão do Step.
        """
        collection = self.collection(uri)
        group = collection.steps.get(step_id)
        if group is None:
            raise StepNotFoundError(f"Collection doesn't contain step (id:{step_id})")

        version = version or group.latest_version_number
        step, found = collection.get_step(step_id, version)
        if not found or step is None:
            raise StepNotFoundError(f"Collection doesn't contain step (id:{step_id}) (version:{version})")

        commit = step.source.commit if step.source is not None else None
        return self.fetcher.download_step(collection, step_id, version, commit or "")
