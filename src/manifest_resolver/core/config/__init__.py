# src/manifest_resolver/core/config/__init__.py

"""
Camada de configuração do Manifest Resolver.

Este pacote reúne duas resoluções de configuração que compartilham a mesma
política de deep-merge:

    - settings do próprio resolver (defaults embutidos + arquivos locais)
    - configuração final de cada componente (ConfigBuilder, cinco camadas)

Princípios fundamentais:
    - Configuração não contém lógica de domínio
    - Nenhuma heurística implícita durante merge
    - A mesma entrada sempre produz a mesma configuração final

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - O hash canônico identifica a configuração de forma estável
"""

from .builder import BuildContext, ConfigBuilder, ConfigLayers, ResolvedConfig, merge_layers
from .hashing import compute_config_hash
from .loader import DEFAULT_SETTINGS, load_settings
from .merge import deep_merge

__all__ = [
    "BuildContext",
    "ConfigBuilder",
    "ConfigLayers",
    "ResolvedConfig",
    "merge_layers",
    "compute_config_hash",
    "DEFAULT_SETTINGS",
    "load_settings",
    "deep_merge",
]
