# src/manifest_resolver/core/config/errors.py
"""
Exceções canônicas da camada de settings do Manifest Resolver.

As exceções aqui definidas representam falhas ao carregar ou mesclar os
settings do próprio resolver (não do manifest). São erros de operação da
plataforma e nunca viram `ValidationIssue` do usuário.

Invariantes:
    - Todas as exceções de settings herdam de `SettingsError`
    - Nenhuma exceção representa erro do manifest
"""


class SettingsError(Exception):
    """
    Exceção base para erros relacionados aos settings do resolver.

    Limites explícitos:
        - Não representa erro do manifest
        - Não representa erro de execução de um estágio
    """


class SettingsNotFoundError(SettingsError):
    """
    Arquivo de settings informado explicitamente não existe.

    Decisões arquiteturais:
        - Um arquivo de defaults passado pelo chamador é obrigatório
        - O override local é opcional e pode não existir
    """


class UnsupportedSettingsFormatError(SettingsError):
    """
    Formato do arquivo de settings não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidSettingsRootTypeError(SettingsError):
    """Conteúdo raiz do arquivo de settings não é um mapa chave-valor."""


class ConfigTypeConflictError(SettingsError):
    """
    Conflito de tipos durante o deep-merge estrito.

    Exemplo de conflito:
        - base:     {"engine": {"fail_fast": true}}
        - override: {"engine": "fast"}

    Usado apenas no merge estrito (settings). O merge de camadas do
    ConfigBuilder substitui valores de tipos diferentes.
    """
