# src/stepcache/core/fetch/__init__.py
"""
Transporte e download de Steps.

API pública exposta:
    - Transports   → primitivas zip/git padrão
    - StepFetcher  → download idempotente com fallback ordenado
"""

from .fetcher import StepFetcher
from .transports import Transports

__all__ = ["StepFetcher", "Transports"]
