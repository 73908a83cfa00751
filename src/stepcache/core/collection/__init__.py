# src/stepcache/core/collection/__init__.py
"""
Compilação e persistência da spec de uma step library.

API pública exposta:
    - build_collection            → walk + contrato de Step → StepCollection
    - add_step_version_to_group   → fold de uma versão em um StepGroup
    - compare_versions            → comparação semântica de versões
    - parse_step_collection       → leitura do template steplib.yml
    - write_collection_spec       → compila e grava spec.json
    - read_collection_spec        → lê spec.json de uma URI
    - regenerate_collection_spec  → template + write
"""

from .builder import add_step_version_to_group, build_collection, compare_versions
from .spec_store import (
    parse_step_collection,
    read_collection_spec,
    regenerate_collection_spec,
    write_collection_spec,
)

__all__ = [
    "add_step_version_to_group",
    "build_collection",
    "compare_versions",
    "parse_step_collection",
    "read_collection_spec",
    "regenerate_collection_spec",
    "write_collection_spec",
]
