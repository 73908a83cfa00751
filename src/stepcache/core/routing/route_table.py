# src/stepcache/core/routing/route_table.py
"""
Tabela persistente de rotas do stepcache.

Uma rota liga a URI de uma step library a um alias de pasta local, a
partir do qual todos os demais caminhos (coleção clonada, spec compilada,
cache de Steps) são derivados.

Formato persistido:
    - um único arquivo JSON com um objeto plano `{uri: alias}`
    - a ordem das rotas não é preservada entre leituras

Decisões arquiteturais:
    - Toda mutação é read-modify-write do arquivo completo
    - `add_route` não deduplica por URI (responsabilidade do chamador)
    - A ausência de uma rota não é erro nesta camada (`get_route`)
    - Falhas de leitura/escrita propagam como `StepLibIOError`

Invariantes:
    - O arquivo reflete exatamente o conjunto de rotas após cada mutação
    - `cleanup_route` só remove a rota se o diretório foi removido

Limites explícitos:
    - Não implementa locking entre processos
    - Não clona nem atualiza step libraries
"""

from __future__ import annotations

import json
import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Tuple, Union

from stepcache.core.exceptions import RouteNotFoundError, StepLibIOError

if TYPE_CHECKING:
    from stepcache.core.paths import PathLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    """Ligação local entre a URI de uma step library e seu alias de pasta."""

    steplib_uri: str
    folder_alias: str


def generate_folder_alias() -> str:
    """Gera um alias de pasta único e seguro para o filesystem."""
    return uuid.uuid4().hex


class RouteTable:
    """Acesso ao arquivo de rotas (`routing.json`)."""

    def __init__(self, routing_file: Union[str, Path]):
        self.routing_file = Path(routing_file)

    # ------------------------------------------------------------------
    # Persistência
    # ------------------------------------------------------------------
    def read_routes(self) -> List[Route]:
        """Carrega todas as rotas. Arquivo ausente equivale a tabela vazia."""
        if not self.routing_file.exists():
            return []

        try:
            route_map = json.loads(self.routing_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StepLibIOError(f"failed to read routing file {self.routing_file}: {e}") from e

        if not isinstance(route_map, dict):
            raise StepLibIOError(f"routing file root must be an object: {self.routing_file}")

        return [Route(steplib_uri=str(k), folder_alias=str(v)) for k, v in route_map.items()]

    def _write_routes(self, routes: List[Route]) -> None:
        route_map: Dict[str, str] = {r.steplib_uri: r.folder_alias for r in routes}
        try:
            self.routing_file.parent.mkdir(parents=True, exist_ok=True)
            self.routing_file.write_text(
                json.dumps(route_map, ensure_ascii=False, indent=2, sort_keys=True),
                encoding="utf-8",
            )
        except OSError as e:
            raise StepLibIOError(f"failed to write routing file {self.routing_file}: {e}") from e

    # ------------------------------------------------------------------
    # Operações
    # ------------------------------------------------------------------
    def add_route(self, route: Route) -> None:
        routes = self.read_routes()
        routes.append(route)
        self._write_routes(routes)
        logger.debug("route added uri=%r alias=%r", route.steplib_uri, route.folder_alias)

    def remove_route(self, route: Route) -> None:
        routes = [r for r in self.read_routes() if r.steplib_uri != route.steplib_uri]
        self._write_routes(routes)
        logger.debug("route removed uri=%r", route.steplib_uri)

    def get_route(self, uri: str) -> Tuple[Route, bool]:
        """Retorna a primeira rota cuja URI coincide e um flag de encontrado."""
        for route in self.read_routes():
            if route.steplib_uri == uri:
                return route, True
        return Route(steplib_uri="", folder_alias=""), False

    def root_exists(self, uri: str) -> bool:
        _, found = self.get_route(uri)
        return found

    def get_alias(self, uri: str) -> str:
        route, found = self.get_route(uri)
        if not found:
            raise RouteNotFoundError(f"No routes exist for uri: {uri}")
        return route.folder_alias

    def list_sources(self) -> List[str]:
        return [r.steplib_uri for r in self.read_routes()]

    def cleanup_route(self, route: Route, layout: "PathLayout") -> None:
        """
        Remove a subárvore local da rota e, em seguida, a própria rota.

        Se a remoção do diretório falhar, a rota é mantida e o erro propaga,
        preservando a consistência entre tabela e filesystem.
        """
        route_dir = layout.route_dir(route)
        if route_dir.exists():
            try:
                shutil.rmtree(route_dir)
            except OSError as e:
                raise StepLibIOError(f"failed to remove {route_dir}: {e}") from e
        self.remove_route(route)
        logger.info("route cleaned up uri=%r dir=%s", route.steplib_uri, route_dir)
