# src/stepcache/core/models/step.py
"""
Modelo canônico de uma definição de Step (step.yml).

Este módulo implementa o contrato de três fases consumido pelo builder
da coleção, aplicado em ordem a cada definição lida do disco:

    1. normalize()             → normalização estrutural (tipos JSON puros)
    2. validate(strict=True)   → validação estrutural
    3. fill_missing_defaults() → preenchimento de defaults

Cada fase retorna uma nova instância; um `StepModel` é imutável depois
de parseado. A primeira falha interrompe o processamento com uma exceção
tipada (`StepParseError`, `StepValidationError`, `DefaultFillError`).

Formato de inputs/outputs:
    Cada item é um mapa com exatamente uma chave de ambiente (→ valor) e,
    opcionalmente, um mapa `opts`:

        inputs:
          - project_path: $PROJECT_PATH
            opts:
              title: Project path
              is_required: true

Limites explícitos:
    - Não executa Steps
    - Não resolve dependências declaradas
    - Não interpreta `run_if`
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from stepcache.core.exceptions import (
    DefaultFillError,
    StepLibIOError,
    StepParseError,
    StepValidationError,
)

OPTS_KEY = "opts"

_STR_FIELDS = (
    "title",
    "summary",
    "description",
    "website",
    "source_code_url",
    "support_url",
    "published_at",
    "run_if",
)
_TAG_FIELDS = ("host_os_tags", "project_type_tags", "type_tags")
_BOOL_FIELDS = ("is_requires_admin_user", "is_always_run", "is_skippable")
_ENV_FIELDS = ("inputs", "outputs")

_ENV_OPTS_DEFAULTS: Dict[str, Any] = {
    "title": "",
    "description": "",
    "summary": "",
    "value_options": [],
    "is_required": False,
    "is_expand": True,
    "is_dont_change_value": False,
}


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise StepValidationError(msg)


def _normalize_value(value: Any, where: str) -> Any:
    """Converte valores vindos do YAML para tipos JSON puros."""
    if isinstance(value, float) and not math.isfinite(value):
        raise StepParseError(f"{where}: non-finite number {value!r} is not representable in JSON")
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (_dt.datetime, _dt.date)):
        return value.isoformat()
    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for k, v in value.items():
            if isinstance(k, bool) or not isinstance(k, (str, int, float)):
                raise StepParseError(f"{where}: unsupported mapping key {k!r}")
            out[str(k)] = _normalize_value(v, f"{where}.{k}")
        return out
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v, f"{where}[{i}]") for i, v in enumerate(value)]
    if isinstance(value, (set, frozenset)):
        items = [_normalize_value(v, where) for v in value]
        try:
            return sorted(items)
        except TypeError as e:
            raise StepParseError(f"{where}: set members are not mutually comparable: {e}") from e
    raise StepParseError(f"{where}: unsupported value type {type(value).__name__}")


def _env_key(item: Dict[str, Any]) -> List[str]:
    return [k for k in item if k != OPTS_KEY]


@dataclass(frozen=True)
class StepSource:
    """Origem do código do Step (repositório git e commit fixado)."""

    git: Optional[str] = None
    commit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.git is not None:
            data["git"] = self.git
        if self.commit is not None:
            data["commit"] = self.commit
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "StepSource":
        if not isinstance(data, dict):
            raise StepParseError(f"source must be a mapping, got {type(data).__name__}")
        return cls(git=data.get("git"), commit=data.get("commit"))


@dataclass(frozen=True)
class StepModel:
    """Definição de um Step em uma versão concreta."""

    title: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    source_code_url: Optional[str] = None
    support_url: Optional[str] = None
    published_at: Optional[str] = None
    source: Optional[StepSource] = None
    host_os_tags: Optional[List[str]] = None
    project_type_tags: Optional[List[str]] = None
    type_tags: Optional[List[str]] = None
    dependencies: Optional[List[Dict[str, Any]]] = None
    is_requires_admin_user: Optional[bool] = None
    is_always_run: Optional[bool] = None
    is_skippable: Optional[bool] = None
    run_if: Optional[str] = None
    inputs: Optional[List[Dict[str, Any]]] = None
    outputs: Optional[List[Dict[str, Any]]] = None

    # ------------------------------------------------------------------
    # Serialização
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Representação JSON; campos ausentes (None) são omitidos."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, StepSource):
                data[f.name] = value.to_dict()
            elif isinstance(value, list):
                data[f.name] = [dict(v) if isinstance(v, dict) else v for v in value]
            else:
                data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "StepModel":
        """
        Materializa um StepModel a partir de um mapa.

        Chaves desconhecidas são ignoradas. Tipos dos valores não são
        verificados aqui (ver `validate`).

        Raises:
            StepParseError: Se `data` não for um mapa.
        """
        if not isinstance(data, dict):
            raise StepParseError(f"step definition must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if kwargs.get("source") is not None:
            kwargs["source"] = StepSource.from_dict(kwargs["source"])
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Fase 1: normalização
    # ------------------------------------------------------------------
    def normalize(self) -> "StepModel":
        """Retorna uma cópia cujos valores são tipos JSON puros."""
        changes: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or isinstance(value, StepSource):
                continue
            changes[f.name] = _normalize_value(value, f.name)
        if self.source is not None:
            changes["source"] = StepSource(
                git=_normalize_value(self.source.git, "source.git"),
                commit=_normalize_value(self.source.commit, "source.commit"),
            )
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Fase 2: validação
    # ------------------------------------------------------------------
    def validate(self, strict: bool = True) -> "StepModel":
        """
        Valida a estrutura do Step.

        Campos obrigatórios: `title`, `summary`, `website`. Em modo estrito,
        `source.git` e `source.commit` também são obrigatórios.

        Raises:
            StepValidationError: Na primeira violação encontrada.
        """
        _expect(_is_non_empty_str(self.title), "Invalid step: missing or empty required 'title' property")
        _expect(_is_non_empty_str(self.summary), "Invalid step: missing or empty required 'summary' property")
        _expect(_is_non_empty_str(self.website), "Invalid step: missing or empty required 'website' property")

        if strict:
            _expect(self.source is not None, "Invalid step: missing required 'source' property")
            _expect(_is_non_empty_str(self.source.git), "Invalid step: missing or empty required 'source.git' property")
            _expect(
                _is_non_empty_str(self.source.commit),
                "Invalid step: missing or empty required 'source.commit' property",
            )

        for name in _STR_FIELDS:
            value = getattr(self, name)
            _expect(value is None or isinstance(value, str), f"Invalid step: '{name}' must be a string")

        for name in _TAG_FIELDS:
            value = getattr(self, name)
            if value is not None:
                _expect(
                    isinstance(value, list) and all(isinstance(t, str) for t in value),
                    f"Invalid step: '{name}' must be a list of strings",
                )

        for name in _BOOL_FIELDS:
            value = getattr(self, name)
            _expect(value is None or isinstance(value, bool), f"Invalid step: '{name}' must be a boolean")

        if self.dependencies is not None:
            _expect(isinstance(self.dependencies, list), "Invalid step: 'dependencies' must be a list")
            for i, dep in enumerate(self.dependencies):
                _expect(isinstance(dep, dict), f"Invalid step: dependencies[{i}] must be a mapping")

        for name in _ENV_FIELDS:
            envs = getattr(self, name)
            if envs is None:
                continue
            _expect(isinstance(envs, list), f"Invalid step: '{name}' must be a list")
            for i, item in enumerate(envs):
                where = f"{name}[{i}]"
                _expect(isinstance(item, dict), f"Invalid env: {where} must be a mapping")
                keys = _env_key(item)
                _expect(len(keys) == 1, f"Invalid env: {where} must define exactly one key, got {keys}")
                _expect(_is_non_empty_str(keys[0]), f"Invalid env: {where} has an empty key")
                opts = item.get(OPTS_KEY)
                _expect(opts is None or isinstance(opts, dict), f"Invalid env: {where}.opts must be a mapping")

        return self

    # ------------------------------------------------------------------
    # Fase 3: defaults
    # ------------------------------------------------------------------
    def fill_missing_defaults(self) -> "StepModel":
        """Retorna uma cópia com defaults explícitos para campos ausentes."""
        changes: Dict[str, Any] = {}
        for name in ("description", "source_code_url", "support_url", "run_if"):
            if getattr(self, name) is None:
                changes[name] = ""
        for name in _BOOL_FIELDS:
            if getattr(self, name) is None:
                changes[name] = False

        for name in _ENV_FIELDS:
            envs = getattr(self, name)
            if envs is None:
                continue
            filled: List[Dict[str, Any]] = []
            for i, item in enumerate(envs):
                if not isinstance(item, dict) or len(_env_key(item)) != 1:
                    raise DefaultFillError(f"{name}[{i}]: cannot fill defaults of a malformed env item")
                opts = item.get(OPTS_KEY) or {}
                if not isinstance(opts, dict):
                    raise DefaultFillError(f"{name}[{i}].opts must be a mapping")
                merged = dict(_ENV_OPTS_DEFAULTS)
                merged["value_options"] = []
                merged.update(opts)
                new_item = dict(item)
                new_item[OPTS_KEY] = merged
                filled.append(new_item)
            changes[name] = filled

        return replace(self, **changes)


def parse_step_yml(path: Union[str, Path]) -> StepModel:
    """
    Lê e parseia um step.yml, sem normalizar nem validar.

    Raises:
        StepLibIOError: Se o arquivo não puder ser lido.
        StepParseError: Se o arquivo não for UTF-8, o YAML for inválido ou a
            raiz não for um mapa.
    """
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise StepParseError(f"step definition is not valid UTF-8: {p}: {e}") from e
    except OSError as e:
        raise StepLibIOError(f"failed to read step definition {p}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise StepParseError(f"invalid YAML in {p}: {e}") from e

    if data is None:
        raise StepParseError(f"step definition is empty: {p}")

    return StepModel.from_dict(data)


def load_step_definition(path: Union[str, Path], *, strict: bool = True) -> StepModel:
    """Parse → normalize → validate → fill_missing_defaults."""
    return parse_step_yml(path).normalize().validate(strict=strict).fill_missing_defaults()
