# src/stepcache/core/fetch/fetcher.py
"""
Download idempotente de Steps a partir de uma coleção compilada.

Fluxo de `download_step`:
    1. resolve as localizações candidatas (coleção + overrides do Step)
    2. resolve a rota da step library de origem
    3. se o diretório de cache do Step já existe, retorna imediatamente
    4. tenta cada localização na ordem declarada até a primeira sucesso

Política de falha:
    - falha de uma localização zip/git → log WARNING, limpeza do destino
      parcial e próxima localização
    - tipo desconhecido → `UnsupportedTransportError`, aborta o download
    - todas falharam → `DownloadFailedError` com a lista de tentativas

Invariantes:
    - Nenhum transporte é invocado quando o cache já existe
    - Nenhuma localização é tentada após o primeiro sucesso
    - Um diretório de cache existente é sempre resultado de um sucesso

Limites explícitos:
    - Não verifica o conteúdo de um cache existente
    - Não faz retry além de tentar a próxima localização declarada
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, List, Optional, Tuple

from stepcache.core.exceptions import (
    DownloadFailedError,
    RouteNotFoundError,
    StepLibIOError,
    TransportError,
    UnsupportedTransportError,
)
from stepcache.core.models import DownloadLocation, StepCollection
from stepcache.core.models.collection import GIT, ZIP
from stepcache.core.paths import PathLayout
from stepcache.core.routing import RouteTable

from .transports import Transports

logger = logging.getLogger(__name__)


class StepFetcher:
    """Materializa o código de um Step (id + versão) no cache local."""

    def __init__(
        self,
        route_table: RouteTable,
        layout: PathLayout,
        transports: Optional[Any] = None,
    ):
        self.route_table = route_table
        self.layout = layout
        self.transports = transports if transports is not None else Transports()

    def _discard_partial(self, step_dir: Path) -> None:
        if step_dir.exists():
            try:
                shutil.rmtree(step_dir)
            except OSError as e:
                raise StepLibIOError(f"failed to remove partial download {step_dir}: {e}") from e

    def download_step(
        self,
        collection: StepCollection,
        step_id: str,
        version: str,
        commit_hash: str,
    ) -> Path:
        """
        Garante que o Step esteja no cache e retorna seu diretório.

        Raises:
            StepNotFoundError: Step/versão ausente ou sem localização.
            RouteNotFoundError: Sem rota para `collection.steplib_source`.
            UnsupportedTransportError: Tipo de localização desconhecido.
            DownloadFailedError: Nenhuma localização funcionou.
        """
        logger.debug("download step id=%r version=%r", step_id, version)
        locations = collection.get_download_locations(step_id, version)

        route, found = self.route_table.get_route(collection.steplib_source)
        if not found:
            raise RouteNotFoundError(f"No routing found for lib: {collection.steplib_source}")

        step_dir = self.layout.step_cache_dir(route, step_id, version)
        if step_dir.exists():
            logger.debug("step already downloaded id=%r version=%r dir=%s", step_id, version, step_dir)
            return step_dir

        attempts: List[Tuple[DownloadLocation, BaseException]] = []
        for location in locations:
            try:
                if location.type == ZIP:
                    logger.debug("downloading step zip src=%r", location.src)
                    self.transports.download_and_extract_zip(location.src, step_dir)
                elif location.type == GIT:
                    logger.debug("cloning step git src=%r ref=%r", location.src, version)
                    self.transports.clone_tag_or_branch_and_validate_commit(
                        location.src, step_dir, version, commit_hash
                    )
                else:
                    raise UnsupportedTransportError(
                        f"Invalid download location ({location.type!r}, {location.src!r}) "
                        f"for step {step_id!r} ({version!r})"
                    )
            except (TransportError, OSError) as e:
                logger.warning(
                    "step download attempt failed id=%r version=%r type=%s src=%r err=%s",
                    step_id,
                    version,
                    location.type,
                    location.src,
                    e,
                )
                attempts.append((location, e))
                self._discard_partial(step_dir)
                continue

            logger.info("step downloaded id=%r version=%r type=%s dir=%s", step_id, version, location.type, step_dir)
            return step_dir

        raise DownloadFailedError("Failed to download step", attempts=attempts)
