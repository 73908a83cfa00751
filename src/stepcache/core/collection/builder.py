# src/stepcache/core/collection/builder.py
"""
Builder da spec agregada de uma step library.

Este módulo percorre a árvore clonada de uma step library e compila todas
as definições de Steps em uma única `StepCollection` indexada por id e
versão.

Regras do walk:
    - Apenas arquivos chamados `step.yml` são candidatos
    - O caminho relativo à raiz da coleção deve ter exatamente quatro
      componentes: `steps/<id>/<versão>/step.yml`
    - Outras contagens de componentes são registradas em log e ignoradas

Política de falha:
    - Erros de leitura, parse, validação, defaults ou comparação de
      versões abortam o build inteiro
    - Nenhuma coleção parcial é retornada

Invariantes:
    - `latest_version_number` de cada grupo é a maior versão semântica
    - A mesma árvore sempre produz os mesmos Steps (walk ordenado)

Limites explícitos:
    - Não persiste a coleção (ver `spec_store`)
    - Não clona nem atualiza a step library
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from packaging.version import InvalidVersion, Version

from stepcache.core.exceptions import NotInitializedError, StepLibIOError, VersionCompareError
from stepcache.core.models import StepCollection, StepGroup, StepModel, load_step_definition
from stepcache.core.paths import STEP_DEFINITION_FILENAME, PathLayout
from stepcache.core.routing import Route

logger = logging.getLogger(__name__)

_EXPECTED_COMPONENTS = 4


def compare_versions(a: str, b: str) -> int:
    """
    Compara duas versões semânticas.

    Returns:
        int: -1 se a < b, 0 se iguais, 1 se a > b.

    Raises:
        VersionCompareError: Se alguma versão não for parseável.
    """
    try:
        va, vb = Version(a), Version(b)
    except InvalidVersion as e:
        raise VersionCompareError(f"cannot compare versions {a!r} and {b!r}: {e}") from e
    if va < vb:
        return -1
    if va > vb:
        return 1
    return 0


def add_step_version_to_group(step: StepModel, version: str, group: StepGroup) -> StepGroup:
    """
    Incorpora uma versão de Step a um grupo, retornando um novo grupo.

    A maior versão só avança; uma entrada existente para a mesma versão é
    sobrescrita.
    """
    latest = group.latest_version_number
    if not latest or compare_versions(latest, version) < 0:
        latest = version

    versions = dict(group.versions)
    versions[version] = step
    return replace(group, latest_version_number=latest, versions=versions)


def _walk_step_definitions(root: Path) -> Iterator[Tuple[str, str, Path]]:
    """Gera (id, versão, caminho) para cada definição aceita, em ordem estável."""

    def _on_error(err: OSError) -> None:
        raise StepLibIOError(f"failed to walk {root}: {err}") from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename != STEP_DEFINITION_FILENAME:
                continue
            path = Path(dirpath) / filename
            components = path.relative_to(root).parts
            if len(components) != _EXPECTED_COMPONENTS:
                logger.debug("skipping step definition path=%s components=%d", "/".join(components), len(components))
                continue
            yield components[1], components[2], path


def build_collection(
    route: Route,
    template: StepCollection,
    layout: PathLayout,
    *,
    now: Optional[float] = None,
) -> StepCollection:
    """
    Compila a coleção de uma rota a partir das definições clonadas.

    Args:
        route: Rota da step library.
        template: Coleção template (steplib.yml) com metadados.
        layout: Layout de caminhos.
        now: Timestamp de geração (default: relógio atual).

    Returns:
        StepCollection: Coleção completa.

    Raises:
        NotInitializedError: Se a raiz da coleção não existir.
        StepLibIOError, StepParseError, StepValidationError,
        DefaultFillError, VersionCompareError: Abortam o build.
    """
    root = layout.collection_base_dir(route)
    if not root.is_dir():
        raise NotInitializedError(f"collection root not initialized: {root}")

    logger.debug("building collection uri=%r root=%s", route.steplib_uri, root)

    groups: Dict[str, StepGroup] = {}
    try:
        for step_id, version, path in _walk_step_definitions(root):
            logger.debug("parsing step id=%s version=%s", step_id, version)
            step = load_step_definition(path, strict=True)
            groups[step_id] = add_step_version_to_group(step, version, groups.get(step_id, StepGroup()))
    except Exception as e:
        logger.error("failed to build collection uri=%r: %s", route.steplib_uri, e)
        raise

    return StepCollection(
        format_version=template.format_version,
        generated_at_timestamp=int(time.time() if now is None else now),
        steplib_source=route.steplib_uri,
        download_locations=list(template.download_locations),
        steps=groups,
    )
