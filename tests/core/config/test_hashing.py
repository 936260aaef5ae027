# tests/core/config/test_hashing.py
"""
Testes do hashing canônico de configuração.

Este módulo valida `compute_config_hash`, usado como `configHash` de cada
componente no plano resolvido e no diff entre execuções.

Política esperada (v1):
    - JSON canônico (chaves ordenadas, separadores compactos, UTF-8)
    - SHA-256 em hexadecimal

Limites explícitos:
    - Não valida o conteúdo das camadas (ver test_builder.py)
"""

import hashlib
import json

import pytest

try:
    from manifest_resolver.core.config.hashing import canonical_json, compute_config_hash
except Exception as e:  # noqa: BLE001
    compute_config_hash = None
    canonical_json = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing hashing module. Implement:\n"
            "- src/manifest_resolver/core/config/hashing.py (compute_config_hash, canonical_json)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_hash_is_deterministic_and_key_order_independent():
    """
    Configurações semanticamente idênticas produzem o mesmo hash.

    Invariantes:
        - a ordem de inserção das chaves não importa
        - o hash é hexadecimal com 64 caracteres
    """
    _require_imports()
    h1 = compute_config_hash({"timeout": 30, "handler": "app.handler"})
    h2 = compute_config_hash({"handler": "app.handler", "timeout": 30})
    assert h1 == h2
    assert isinstance(h1, str)
    assert len(h1) == 64


def test_hash_matches_sha256_of_canonical_json():
    _require_imports()
    cfg = {"vpc": {"enabled": True}, "memorySize": 512, "name": "fila-ação"}
    expected = hashlib.sha256(
        json.dumps(cfg, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    ).hexdigest()
    assert compute_config_hash(cfg) == expected
    assert canonical_json(cfg).startswith('{"memorySize":512')


def test_hash_changes_on_any_value_change():
    _require_imports()
    assert compute_config_hash({"memorySize": 512}) != compute_config_hash({"memorySize": 1024})


def test_hash_rejects_non_dict():
    _require_imports()
    with pytest.raises(TypeError):
        compute_config_hash(["not", "a", "dict"])  # type: ignore[arg-type]
