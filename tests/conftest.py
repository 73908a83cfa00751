# tests/conftest.py
"""
Fixtures compartilhados para testes do stepcache.

Este módulo define fixtures reutilizáveis que fornecem:
- um home isolado por teste (tmp_path) e a configuração resolvida
- layout de caminhos e tabela de rotas ligados a esse home
- uma fábrica de step libraries "clonadas" diretamente em disco

Decisões arquiteturais:
    - Nenhuma fixture acessa rede ou o home real do usuário
    - O ambiente é injetado explicitamente (`environ={}`)
    - Transportes são substituídos por dublês (ver `tests/_helpers.py`)

Invariantes:
    - Cada teste recebe um home vazio e independente

Limites explícitos:
    - Não substitui testes das primitivas reais de transporte
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import pytest

from stepcache.core.config import resolve_config
from stepcache.core.paths import PathLayout
from stepcache.core.routing import Route, RouteTable
from tests._helpers import STEPLIB_URI, STEPLIB_YML, write_step


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Isola handlers e nível do logger `stepcache` entre testes."""
    logger = logging.getLogger("stepcache")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    return tmp_path / "stepman_home"


@pytest.fixture
def config(home_dir: Path):
    cfg = resolve_config(home_dir=home_dir, environ={})
    cfg.collections_dir.mkdir(parents=True, exist_ok=True)
    return cfg


@pytest.fixture
def layout(config) -> PathLayout:
    return PathLayout(config.collections_dir)


@pytest.fixture
def route_table(config) -> RouteTable:
    return RouteTable(config.routing_file)


@pytest.fixture
def route() -> Route:
    return Route(steplib_uri=STEPLIB_URI, folder_alias="alias-test")


@pytest.fixture
def make_steplib(layout: PathLayout):
    """
    Fábrica que materializa uma step library "clonada" para uma rota.

    Recebe um mapa `{(id, versão): conteúdo do step.yml}` e grava também
    o template steplib.yml na raiz da coleção.

    Returns:
        Callable[[Route, Dict[tuple, str]], Path]: raiz da coleção criada.
    """

    def _make(route: Route, steps: Dict[tuple, str], *, descriptor: str = STEPLIB_YML) -> Path:
        root = layout.collection_base_dir(route)
        root.mkdir(parents=True, exist_ok=True)
        (root / "steplib.yml").write_text(descriptor, encoding="utf-8")
        for (step_id, version), content in steps.items():
            write_step(root, step_id, version, content)
        return root

    return _make
