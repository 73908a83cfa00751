# src/stepcache/core/logging.py
"""
Configuração de logging do stepcache.

Cada módulo do pacote registra eventos via `logging.getLogger(__name__)`;
este módulo apenas conecta um handler ao logger raiz do pacote e ajusta o
nível conforme a flag de debug resolvida em `StepCacheConfig`.

Limites explícitos:
    - Não altera o logger raiz do processo
    - Não persiste logs em arquivo
"""

from __future__ import annotations

import logging
from typing import Optional, TextIO

PACKAGE_LOGGER = "stepcache"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_HANDLER_MARKER = "_stepcache_handler"


def configure_logging(debug: bool = False, *, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configura o logger do pacote (idempotente).

    Args:
        debug: Quando verdadeiro, nível DEBUG; caso contrário INFO.
        stream: Stream de saída do handler (default: stderr).

    Returns:
        logging.Logger: O logger `stepcache` configurado.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in logger.handlers:
        if getattr(handler, _HANDLER_MARKER, False):
            handler.setLevel(logger.level)
            return logger

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(logger.level)
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    return logger
