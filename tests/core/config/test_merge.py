# tests/core/config/test_merge.py
"""
Testes da política de deep-merge.

Este módulo valida `deep_merge`, compartilhado pelo loader de settings
(modo estrito) e pelo ConfigBuilder (modo não estrito).

Os testes asseguram que:
- escalares são sobrescritos
- dicionários são mesclados recursivamente
- listas são substituídas integralmente
- conflitos de tipo são erro apenas no modo estrito
- nenhum input é mutado

Limites explícitos:
    - Não valida carregamento de arquivos
    - Não valida procedência das camadas (ver test_builder.py)
"""

import pytest

try:
    from manifest_resolver.core.config.errors import ConfigTypeConflictError
    from manifest_resolver.core.config.merge import deep_merge
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config merge modules. Implement:\n"
            "- src/manifest_resolver/core/config/merge.py (deep_merge)\n"
            "- src/manifest_resolver/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override():
    """
    Verifica o override de escalares sem efeitos colaterais.

    Invariantes:
        - o valor sobrescrito reflete o override
        - chaves não sobrescritas permanecem
        - `base` e `override` não sofrem mutação
    """
    _require_imports()
    base = {"memorySize": 256, "timeout": 30}
    override = {"timeout": 60}
    out = deep_merge(base, override)
    assert out == {"memorySize": 256, "timeout": 60}
    assert base == {"memorySize": 256, "timeout": 30}
    assert override == {"timeout": 60}


def test_merge_nested_dict():
    _require_imports()
    base = {"vpc": {"enabled": False, "subnetType": "private"}}
    override = {"vpc": {"enabled": True}}
    assert deep_merge(base, override) == {"vpc": {"enabled": True, "subnetType": "private"}}


def test_merge_list_override_total():
    """
    Verifica que listas não são mescladas elemento a elemento.

    Uma lista de CIDRs do componente substitui a do fallback por completo;
    nada da lista base sobrevive implicitamente.
    """
    _require_imports()
    base = {"allowedCidrs": ["10.0.0.0/16", "10.1.0.0/16"]}
    override = {"allowedCidrs": ["10.2.0.0/16"]}
    assert deep_merge(base, override) == {"allowedCidrs": ["10.2.0.0/16"]}


def test_merge_type_conflict_raises_in_strict_mode():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"engine": {"fail_fast": True}}, {"engine": {"fail_fast": "yes"}})


def test_merge_non_strict_lets_upper_layer_win():
    """
    No modo não estrito (camadas do ConfigBuilder) a camada superior vence,
    mesmo trocando o tipo do valor.
    """
    _require_imports()
    out = deep_merge({"instanceClass": {"dev": "db.t3.micro"}}, {"instanceClass": "db.t3.small"}, strict=False)
    assert out == {"instanceClass": "db.t3.small"}


def test_merge_rejects_non_dict_root():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["not", "a", "dict"])  # type: ignore[arg-type]
