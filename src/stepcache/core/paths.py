# src/stepcache/core/paths.py
"""
Layout canônico de diretórios do stepcache.

Funções puras de derivação de caminhos a partir de uma rota e,
opcionalmente, de um Step (id + versão). Este é o único lugar que conhece
o layout em disco; mudar o layout deve tocar apenas este módulo.

Layout (v1):
    <collections>/<alias>/collection/                     → step library clonada
    <collections>/<alias>/collection/steplib.yml          → descritor template
    <collections>/<alias>/collection/steps/<id>/<versão>/ → definição do Step
    <collections>/<alias>/spec/spec.json                  → spec compilada
    <collections>/<alias>/cache/<id>/<versão>/            → código do Step

Limites explícitos:
    - Não realiza I/O
    - Não consulta a tabela de rotas
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from stepcache.core.routing import Route

COLLECTION_DIRNAME = "collection"
SPEC_DIRNAME = "spec"
SPEC_FILENAME = "spec.json"
CACHE_DIRNAME = "cache"
STEPS_DIRNAME = "steps"
STEPLIB_DESCRIPTOR = "steplib.yml"
STEP_DEFINITION_FILENAME = "step.yml"


@dataclass(frozen=True)
class PathLayout:
    """Derivações de caminho relativas ao diretório de coleções."""

    collections_dir: Path

    def route_dir(self, route: Route) -> Path:
        return Path(self.collections_dir) / route.folder_alias

    def collection_base_dir(self, route: Route) -> Path:
        return self.route_dir(route) / COLLECTION_DIRNAME

    def steplib_descriptor_path(self, route: Route) -> Path:
        return self.collection_base_dir(route) / STEPLIB_DESCRIPTOR

    def spec_path(self, route: Route) -> Path:
        return self.route_dir(route) / SPEC_DIRNAME / SPEC_FILENAME

    def cache_base_dir(self, route: Route) -> Path:
        return self.route_dir(route) / CACHE_DIRNAME

    def step_cache_dir(self, route: Route, step_id: str, version: str) -> Path:
        """Diretório onde vive o código baixado do Step."""
        return self.cache_base_dir(route) / step_id / version

    def step_collection_dir(self, route: Route, step_id: str, version: str) -> Path:
        """Diretório onde vive a definição (step.yml) do Step na coleção."""
        return self.collection_base_dir(route) / STEPS_DIRNAME / step_id / version
