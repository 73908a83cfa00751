# src/stepcache/core/models/__init__.py
"""
Modelos canônicos do stepcache.

API pública exposta:
    - StepModel, StepSource       → definição de um Step em uma versão
    - parse_step_yml              → leitura crua de um step.yml
    - load_step_definition        → leitura + contrato de três fases
    - DownloadLocation            → estratégia de transporte
    - StepGroup, StepCollection   → coleção compilada
"""

from .collection import DownloadLocation, StepCollection, StepGroup
from .step import StepModel, StepSource, load_step_definition, parse_step_yml

__all__ = [
    "DownloadLocation",
    "StepCollection",
    "StepGroup",
    "StepModel",
    "StepSource",
    "load_step_definition",
    "parse_step_yml",
]
