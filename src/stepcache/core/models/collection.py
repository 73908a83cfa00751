# src/stepcache/core/models/collection.py
"""
Modelos da coleção compilada de uma step library.

A `StepCollection` é o único artefato persistido em (e lido de) spec.json:
a visão consultável de "quais versões de Steps existem e como obter seu
código". Ela é derivada do filesystem (walk da coleção clonada) e nunca é
fonte de verdade sobre existência, apenas um cache do resultado do walk.

Estruturas:
    - DownloadLocation → uma estratégia de transporte (zip | git)
    - StepGroup        → versões de um Step + maior versão conhecida
    - StepCollection   → metadados da biblioteca + Steps indexados por id

Invariantes:
    - `StepGroup.latest_version_number` é a maior chave de `versions`
      segundo comparação semântica de versões
    - `to_dict` / `from_dict` fazem round-trip sem perda

Limites explícitos:
    - Não percorre o filesystem (ver `collection.builder`)
    - Não persiste (ver `collection.spec_store`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from stepcache.core.exceptions import SpecParseError, StepNotFoundError

from .step import StepModel

ZIP = "zip"
GIT = "git"
STEP_ZIP_FILENAME = "step.zip"


def _get_or_default(data: Dict[str, Any], key: str, default: Any) -> Any:
    """Somente chave ausente ou `null` assume o default; valores falsy mantêm o tipo."""
    value = data.get(key)
    return default if value is None else value


@dataclass(frozen=True)
class DownloadLocation:
    """Uma estratégia de transporte para obter o código de um Step."""

    type: str
    src: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "src": self.src}

    @classmethod
    def from_dict(cls, data: Any) -> "DownloadLocation":
        if not isinstance(data, dict):
            raise SpecParseError(f"download location must be a mapping, got {type(data).__name__}")
        loc_type = data.get("type")
        src = data.get("src")
        if not isinstance(loc_type, str) or not isinstance(src, str):
            raise SpecParseError(f"download location requires string 'type' and 'src': {data!r}")
        return cls(type=loc_type, src=src)


@dataclass
class StepGroup:
    """Todas as versões conhecidas de um Step."""

    latest_version_number: str = ""
    versions: Dict[str, StepModel] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latest_version_number": self.latest_version_number,
            "versions": {v: step.to_dict() for v, step in self.versions.items()},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "StepGroup":
        if not isinstance(data, dict):
            raise SpecParseError(f"step group must be a mapping, got {type(data).__name__}")
        versions = _get_or_default(data, "versions", {})
        if not isinstance(versions, dict):
            raise SpecParseError("step group 'versions' must be a mapping")
        return cls(
            latest_version_number=str(data.get("latest_version_number") or ""),
            versions={str(v): StepModel.from_dict(s) for v, s in versions.items()},
        )


@dataclass
class StepCollection:
    """Especificação agregada e indexada por versão de uma step library."""

    format_version: str = ""
    generated_at_timestamp: int = 0
    steplib_source: str = ""
    download_locations: List[DownloadLocation] = field(default_factory=list)
    steps: Dict[str, StepGroup] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Serialização
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "format_version": self.format_version,
            "generated_at_timestamp": self.generated_at_timestamp,
            "steplib_source": self.steplib_source,
            "download_locations": [loc.to_dict() for loc in self.download_locations],
            "steps": {sid: group.to_dict() for sid, group in self.steps.items()},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "StepCollection":
        """
        Reconstrói uma coleção a partir de sua forma serializada.

        Campos ausentes assumem valores vazios; `steps` ausente resulta em
        uma coleção sem Steps (caso do template `steplib.yml`).

        Raises:
            SpecParseError: Se a estrutura não corresponder ao formato v1.
        """
        if not isinstance(data, dict):
            raise SpecParseError(f"collection must be a mapping, got {type(data).__name__}")

        locations = _get_or_default(data, "download_locations", [])
        if not isinstance(locations, list):
            raise SpecParseError("'download_locations' must be a list")
        steps = _get_or_default(data, "steps", {})
        if not isinstance(steps, dict):
            raise SpecParseError("'steps' must be a mapping")

        timestamp = _get_or_default(data, "generated_at_timestamp", 0)
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise SpecParseError("'generated_at_timestamp' must be an integer")

        format_version = data.get("format_version")
        return cls(
            format_version="" if format_version is None else str(format_version),
            generated_at_timestamp=timestamp,
            steplib_source=str(data.get("steplib_source") or ""),
            download_locations=[DownloadLocation.from_dict(loc) for loc in locations],
            steps={str(sid): StepGroup.from_dict(g) for sid, g in steps.items()},
        )

    # ------------------------------------------------------------------
    # Consulta
    # ------------------------------------------------------------------
    def get_step(self, step_id: str, version: str) -> Tuple[Optional[StepModel], bool]:
        group = self.steps.get(step_id)
        if group is None:
            return None, False
        step = group.versions.get(version)
        return step, step is not None

    def get_download_locations(self, step_id: str, version: str) -> List[DownloadLocation]:
        """
        Resolve as localizações candidatas de download de um Step, na ordem
        declarada pela coleção.

        Regras:
            - zip → `<src><id>/<versão>/step.zip`
            - git → `source.git` do próprio Step (override por Step)
            - outros tipos → repassados sem alteração; o fetcher decide

        Raises:
            StepNotFoundError: Se o Step/versão não existir ou nenhuma
                localização puder ser resolvida.
        """
        step, found = self.get_step(step_id, version)
        if not found or step is None:
            raise StepNotFoundError(
                f"Collection doesn't contain step (id:{step_id}) (version:{version})"
            )

        locations: List[DownloadLocation] = []
        for loc in self.download_locations:
            if loc.type == ZIP:
                url = f"{loc.src}{step_id}/{version}/{STEP_ZIP_FILENAME}"
                locations.append(DownloadLocation(type=ZIP, src=url))
            elif loc.type == GIT:
                git_src = step.source.git if step.source is not None else None
                if git_src:
                    locations.append(DownloadLocation(type=GIT, src=git_src))
            else:
                locations.append(loc)

        if not locations:
            raise StepNotFoundError(
                f"No download location found for step (id:{step_id}) (version:{version})"
            )
        return locations
