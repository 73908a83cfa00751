# src/stepcache/core/config/merge.py
"""
Deep-merge determinístico entre os defaults embutidos e o arquivo de
configuração do usuário.

Política de merge (v1):
    - dict + dict → merge recursivo por chave
    - list        → sobrescrita total
    - escalar     → sobrescrita direta pelo override
    - override None → chave mantida da base (valor "não informado")
    - conflito de tipos → `ConfigTypeConflictError`

Limites explícitos:
    - Não carrega arquivos
    - Não aplica variáveis de ambiente nem argumentos explícitos
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _compatible(base_value: Any, override_value: Any) -> bool:
    # base None aceita qualquer tipo (ex.: steplib_uri sem default)
    if base_value is None:
        return True
    # bool não é número: só aceita outro bool
    if isinstance(base_value, bool) or isinstance(override_value, bool):
        return type(base_value) is type(override_value)
    # int e float são intercambiáveis em timeouts
    numeric = (int, float)
    if isinstance(base_value, numeric) and isinstance(override_value, numeric):
        return True
    return type(base_value) is type(override_value)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `base` com `override` sem mutar nenhum dos inputs.

    Args:
        base (Dict[str, Any]): Configuração base (defaults embutidos).
        override (Dict[str, Any]): Valores do arquivo de configuração.

    Returns:
        Dict[str, Any]: Novo dicionário resultante do merge.

    Raises:
        ConfigTypeConflictError: Se uma mesma chave possuir tipos incompatíveis.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if override_value is None:
            result.setdefault(key, None)
            continue

        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        if isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        if not _compatible(base_value, override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
