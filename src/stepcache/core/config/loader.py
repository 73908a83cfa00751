# src/stepcache/core/config/loader.py
"""
Loader canônico de configuração do stepcache.

Este módulo resolve o `StepCacheConfig`, o único objeto de configuração
consumido pelos componentes do motor (rotas, layout, fetcher, manager).
Ele substitui qualquer estado global de inicialização: o ponto de entrada
constrói a configuração uma vez e a repassa explicitamente.

A configuração é resolvida a partir de (menor precedência primeiro):
    - defaults embutidos
    - arquivo de configuração (YAML ou JSON), explícito ou `<home>/config.yml`
    - variáveis de ambiente (`STEPMAN_HOME`, `STEPMAN_COLLECTION`, `STEPMAN_DEBUG`)
    - argumentos explícitos (valores diferentes de None)

Responsabilidades do módulo:
    - Carregar e validar estruturalmente o arquivo de configuração
    - Resolver a configuração final via deep-merge determinístico
    - Derivar caminhos do home (arquivo de rotas, diretório de coleções)
    - Criar os diretórios do home quando solicitado

Invariantes:
    - O resultado é sempre um `StepCacheConfig` imutável
    - Um arquivo explícito ausente é erro; o arquivo implícito é opcional
    - Nenhuma variável de módulo é mutada

Limites explícitos:
    - Não faz parsing de flags de CLI
    - Não lê nem escreve rotas
    - Não configura logging (ver `stepcache.core.logging`)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml  # PyYAML

from .errors import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


STEPMAN_DIRNAME = ".stepman"
CONFIG_FILENAME = "config.yml"

ENV_HOME = "STEPMAN_HOME"
ENV_COLLECTION = "STEPMAN_COLLECTION"
ENV_DEBUG = "STEPMAN_DEBUG"

_TRUTHY = {"1", "true", "yes", "on"}

_DEFAULTS: Dict[str, Any] = {
    "routing_filename": "routing.json",
    "collections_dirname": "step_collections",
    "debug": False,
    "steplib_uri": None,
    "download": {
        "timeout_seconds": 300,
    },
}


@dataclass(frozen=True)
class StepCacheConfig:
    """
    Configuração efetiva do stepcache.

    Campos:
        - home_dir: diretório raiz do stepcache (persistente entre execuções)
        - routing_file: arquivo JSON com o mapa URI → alias
        - collections_dir: raiz das árvores por rota (collection, spec, cache)
        - debug: verbosidade de diagnóstico
        - steplib_uri: step library ativa (pode ser None)
        - download_timeout: timeout, em segundos, de downloads HTTP
    """

    home_dir: Path
    routing_file: Path
    collections_dir: Path
    debug: bool = False
    steplib_uri: Optional[str] = None
    download_timeout: float = 300


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Args:
        path (Path): Caminho do arquivo (.yml, .yaml ou .json).

    Returns:
        Dict[str, Any]: Conteúdo do arquivo. Arquivos vazios viram `{}`.

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    if not path.exists():
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def _env_flag(value: Optional[str]) -> Optional[bool]:
    if value is None or not value.strip():
        return None
    return value.strip().lower() in _TRUTHY


def resolve_config(
    *,
    home_dir: Optional[Union[str, Path]] = None,
    steplib_uri: Optional[str] = None,
    debug: Optional[bool] = None,
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StepCacheConfig:
    """
    Resolve a configuração efetiva do stepcache.

    Política de resolução:
        - home: argumento > `STEPMAN_HOME` > `~/.stepman`
        - arquivo: `config_path` (obrigatório se informado) ou
          `<home>/config.yml` (opcional)
        - `steplib_uri`: argumento > `STEPMAN_COLLECTION` > arquivo > None
        - `debug`: argumento > `STEPMAN_DEBUG` > arquivo > False

    Args:
        home_dir: Diretório home explícito.
        steplib_uri: URI da step library ativa.
        debug: Flag de verbosidade.
        config_path: Arquivo de configuração explícito.
        environ: Ambiente a consultar (default: `os.environ`).

    Returns:
        StepCacheConfig: Configuração final, imutável.

    Raises:
        ConfigError: Em qualquer falha estrutural de carregamento ou merge.
    """
    env = os.environ if environ is None else environ

    if home_dir is not None:
        home = Path(home_dir).expanduser()
    elif env.get(ENV_HOME):
        home = Path(env[ENV_HOME]).expanduser()
    else:
        home = Path.home() / STEPMAN_DIRNAME

    effective = dict(_DEFAULTS)
    if config_path is not None:
        effective = deep_merge(_DEFAULTS, _load_file(Path(config_path)))
    else:
        implicit = home / CONFIG_FILENAME
        if implicit.exists():
            effective = deep_merge(_DEFAULTS, _load_file(implicit))

    env_uri = env.get(ENV_COLLECTION)
    if env_uri:
        effective["steplib_uri"] = env_uri
    env_debug = _env_flag(env.get(ENV_DEBUG))
    if env_debug is not None:
        effective["debug"] = env_debug

    if steplib_uri:
        effective["steplib_uri"] = steplib_uri
    if debug is not None:
        effective["debug"] = bool(debug)

    download = effective.get("download") or {}

    return StepCacheConfig(
        home_dir=home,
        routing_file=home / str(effective["routing_filename"]),
        collections_dir=home / str(effective["collections_dirname"]),
        debug=bool(effective["debug"]),
        steplib_uri=effective.get("steplib_uri") or None,
        download_timeout=float(download.get("timeout_seconds", 300)),
    )


def ensure_home_dirs(config: StepCacheConfig) -> None:
    """Cria o home e o diretório de coleções, se ainda não existirem."""
    config.home_dir.mkdir(parents=True, exist_ok=True)
    config.collections_dir.mkdir(parents=True, exist_ok=True)
