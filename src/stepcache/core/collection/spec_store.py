# src/stepcache/core/collection/spec_store.py
"""
Persistência canônica da spec compilada (spec.json).

Protocolo (v1):
    - write: remove a spec anterior (ou cria diretórios), compila a coleção
      e grava JSON indentado com chaves ordenadas
    - read: resolve a rota pela URI e desserializa a spec
    - regenerate: exige a raiz clonada, lê o template `steplib.yml` e
      delega ao write

Decisões:
    - A spec é regenerada por inteiro, nunca atualizada incrementalmente
    - Não há rename atômico: uma falha no meio da escrita pode deixar a
      rota sem spec (estado recuperável via regenerate)

Limites explícitos:
    - Não clona nem atualiza a step library
    - Não baixa Steps
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

import yaml

from stepcache.core.exceptions import (
    NotInitializedError,
    RouteNotFoundError,
    SpecParseError,
    StepCacheError,
    StepLibIOError,
)
from stepcache.core.models import StepCollection
from stepcache.core.paths import PathLayout
from stepcache.core.routing import Route, RouteTable

from .builder import build_collection

logger = logging.getLogger(__name__)


def parse_step_collection(path: Union[str, Path]) -> StepCollection:
    """
    Lê o descritor template de uma step library (steplib.yml).

    Raises:
        StepLibIOError: Se o arquivo não puder ser lido.
        SpecParseError: Se o YAML for inválido ou mal estruturado.
    """
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SpecParseError(f"steplib descriptor is not valid UTF-8: {p}: {e}") from e
    except OSError as e:
        raise StepLibIOError(f"failed to read steplib descriptor {p}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise SpecParseError(f"invalid YAML in {p}: {e}") from e

    return StepCollection.from_dict(data or {})


def write_collection_spec(route: Route, template: StepCollection, layout: PathLayout) -> StepCollection:
    """Compila e grava a spec da rota; retorna a coleção gravada."""
    path = layout.spec_path(route)

    try:
        if path.exists():
            path.unlink()
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StepLibIOError(f"failed to prepare spec path {path}: {e}") from e

    collection = build_collection(route, template, layout)

    try:
        path.write_text(
            json.dumps(collection.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
            encoding="utf-8",
        )
    except OSError as e:
        raise StepLibIOError(f"failed to write spec {path}: {e}") from e

    logger.info(
        "collection spec written uri=%r steps=%d path=%s",
        route.steplib_uri,
        len(collection.steps),
        path,
    )
    return collection


def read_collection_spec(uri: str, route_table: RouteTable, layout: PathLayout) -> StepCollection:
    """
    Lê a spec compilada da step library identificada por `uri`.

    Raises:
        RouteNotFoundError: Se não houver rota para a URI.
        StepLibIOError: Se a spec não puder ser lida.
        SpecParseError: Se a spec não for JSON válido no formato v1.
    """
    logger.debug("reading collection spec uri=%r", uri)
    route, found = route_table.get_route(uri)
    if not found:
        raise RouteNotFoundError(f"No route found for lib: {uri}")

    path = layout.spec_path(route)
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SpecParseError(f"spec is not valid UTF-8: {path}: {e}") from e
    except OSError as e:
        raise StepLibIOError(f"failed to read spec {path}: {e}") from e

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise SpecParseError(f"invalid JSON in {path}: {e}") from e

    try:
        return StepCollection.from_dict(data)
    except SpecParseError:
        raise
    except StepCacheError as e:
        raise SpecParseError(f"invalid spec {path}: {e}") from e


def regenerate_collection_spec(route: Route, layout: PathLayout) -> StepCollection:
    """
    Regenera a spec a partir da árvore clonada e de seu `steplib.yml`.

    Raises:
        NotInitializedError: Se a raiz da coleção ainda não existir.
    """
    root = layout.collection_base_dir(route)
    if not root.exists():
        raise NotInitializedError(f"collection not initialized: {root}")

    template = parse_step_collection(layout.steplib_descriptor_path(route))
    return write_collection_spec(route, template, layout)
