# src/manifest_resolver/core/config/loader.py
"""
Loader canônico dos settings do Manifest Resolver.

Os settings controlam o comportamento do resolver (não o conteúdo do
manifest) e são resolvidos a partir de:
    - `DEFAULT_SETTINGS` embutido (sempre presente)
    - um arquivo de defaults (opcional; se informado, deve existir)
    - um arquivo local de overrides (opcional; ignorado se ausente)

Chaves reconhecidas (v1):
    - engine.fail_fast: interrompe no primeiro estágio com falha
    - engine.max_workers: limite do pool de threads (None = núcleos disponíveis)
    - hydration.environment_names: nomes de ambiente reconhecidos em mapas
      inline por ambiente, além dos declarados no manifest
    - governance.expiry_warning_days: janela de aviso de supressões a expirar
    - synthesis.region / synthesis.account: usados pelo synthesizer dry-run

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # PyYAML

from .errors import (
    InvalidSettingsRootTypeError,
    SettingsNotFoundError,
    UnsupportedSettingsFormatError,
)
from .merge import deep_merge


DEFAULT_SETTINGS: Dict[str, Any] = {
    "engine": {
        "fail_fast": True,
        "max_workers": None,
    },
    "hydration": {
        "environment_names": ["dev", "test", "qa", "staging", "prod"],
    },
    "governance": {
        "expiry_warning_days": 30,
    },
    "synthesis": {
        "region": "us-east-1",
        "account": "000000000000",
    },
}


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de settings e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        SettingsNotFoundError: Se o arquivo não existir.
        UnsupportedSettingsFormatError: Se o formato não for suportado.
        InvalidSettingsRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise SettingsNotFoundError(f"Arquivo de settings não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedSettingsFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidSettingsRootTypeError(
            f"Settings root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_settings(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve os settings efetivos do resolver.

    Política de resolução (precedência crescente):
        1. `DEFAULT_SETTINGS`
        2. arquivo de defaults (se informado)
        3. arquivo local (se informado e existente)
        4. `overrides` em memória (se informados)

    Args:
        defaults_path (Optional[str]): Arquivo de defaults do projeto.
        local_path (Optional[str]): Arquivo local de overrides.
        overrides (Optional[Dict[str, Any]]): Overrides explícitos do chamador.

    Returns:
        Dict[str, Any]: Settings resolvidos.

    Raises:
        SettingsNotFoundError: Se `defaults_path` for informado e não existir.
        UnsupportedSettingsFormatError: Se o formato não for suportado.
        InvalidSettingsRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """

    effective = deep_merge({}, DEFAULT_SETTINGS)

    if defaults_path is not None:
        effective = deep_merge(effective, _load_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    if overrides:
        effective = deep_merge(effective, overrides)

    return effective
