# src/manifest_resolver/core/manifest/loader.py
"""
Parser canônico do manifest.

`parse_manifest` transforma texto (YAML; JSON é aceito como subconjunto) em
um documento `dict`. É puro: não toca o filesystem.

`load_manifest_file` é a única porta de I/O: lê o arquivo e resolve um
`environments: {$ref: <arquivo>}` relativo ao diretório do manifest.

Regras do parser:
    - erro de sintaxe → `ParseError` com linha/coluna (base 1)
    - documento vazio ou raiz que não é mapa → `ParseError`
    - chave duplicada em um mesmo mapa → `ParseError` na chave repetida
    - datas ISO permanecem strings (o resolver de timestamp do YAML é removido)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from manifest_resolver.core.exceptions import ManifestFileError, ParseError


SUPPORTED_SUFFIXES = {".yml", ".yaml", ".json"}

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_MERGE_TAG = "tag:yaml.org,2002:merge"


class ManifestYamlLoader(yaml.SafeLoader):
    """SafeLoader sem conversão de timestamps e com rejeição de chaves duplicadas."""


ManifestYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_mapping(loader: ManifestYamlLoader, node: yaml.MappingNode, deep: bool = False) -> Dict[Any, Any]:
    seen = set()
    for key_node, _ in node.value:
        if key_node.tag == _MERGE_TAG:
            continue
        key = loader.construct_object(key_node, deep=deep)
        try:
            duplicate = key in seen
        except TypeError:
            # chave não-hashable: construct_mapping reporta o erro
            continue
        if duplicate:
            raise yaml.constructor.ConstructorError(
                "while constructing a mapping",
                node.start_mark,
                f"found duplicate key {key!r}",
                key_node.start_mark,
            )
        seen.add(key)
    return loader.construct_mapping(node, deep=deep)


ManifestYamlLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _mark_position(exc: yaml.YAMLError) -> tuple[Optional[int], Optional[int]]:
    mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
    if mark is None:
        return None, None
    return mark.line + 1, mark.column + 1


def _load_yaml(text: str) -> Any:
    try:
        return yaml.load(text, Loader=ManifestYamlLoader)  # noqa: S506 - SafeLoader subclass
    except yaml.YAMLError as e:
        line, column = _mark_position(e)
        problem = getattr(e, "problem", None) or str(e)
        where = f" (line {line}, column {column})" if line is not None else ""
        raise ParseError(
            f"Malformed manifest: {problem}{where}",
            details={"line": line, "column": column},
            hint="Check indentation, quoting and duplicate keys near the reported location",
            line=line,
            column=column,
        ) from e


def parse_manifest(text: str) -> Dict[str, Any]:
    """
    Converte o texto do manifest em documento.

    Raises:
        ParseError: Se o texto não for YAML/JSON válido, estiver vazio ou a
            raiz não for um mapa.
    """
    if not isinstance(text, str):
        raise ParseError(f"Manifest text must be str, got {type(text).__name__}")

    data = _load_yaml(text)

    if data is None:
        raise ParseError("Manifest is empty", line=1, column=1)

    if not isinstance(data, dict):
        raise ParseError(
            f"Manifest root must be a mapping, got {type(data).__name__}",
            line=1,
            column=1,
        )

    return data


def _resolve_environments_ref(doc: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    envs = doc.get("environments")
    if not (isinstance(envs, dict) and set(envs) == {"$ref"}):
        return doc

    ref = envs["$ref"]
    path = "$.environments.$ref"
    if not isinstance(ref, str) or not ref.strip():
        raise ManifestFileError("environments.$ref must be a non-empty string", path=path)

    root = base_dir.resolve()
    target = (root / ref).resolve()
    if root != target and root not in target.parents:
        raise ManifestFileError(
            f"environments.$ref escapes the manifest directory: {ref}",
            path=path,
            details={"ref": ref},
        )
    if target.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ManifestFileError(
            f"Unsupported environments file format: {target.suffix}",
            path=path,
            details={"ref": ref},
        )
    if not target.is_file():
        raise ManifestFileError(
            f"Environments file not found: {ref}",
            path=path,
            details={"ref": ref},
        )

    environments = parse_manifest(target.read_text(encoding="utf-8"))
    resolved = dict(doc)
    resolved["environments"] = environments
    return resolved


def load_manifest_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Lê um manifest do disco e resolve `environments.$ref`.

    Raises:
        ManifestFileError: Arquivo ausente, formato não suportado ou `$ref` inválido.
        ParseError: Conteúdo malformado.
    """
    p = Path(path)
    if p.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ManifestFileError(f"Unsupported manifest format: {p.suffix}", details={"path": str(p)})
    if not p.is_file():
        raise ManifestFileError(f"Manifest file not found: {p}", details={"path": str(p)})

    doc = parse_manifest(p.read_text(encoding="utf-8"))
    return _resolve_environments_ref(doc, p.parent)
