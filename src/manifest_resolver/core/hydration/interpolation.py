# src/manifest_resolver/core/hydration/interpolation.py
"""
Scanner recursivo (recursive descent) de tokens de interpolação.

Gramática (v1):

    text    := ( escape | token | literal )*
    escape  := "$${"                       → literal "${"
    token   := "${" kind ":" text "}"      → kind ∈ {env, envIs, ref}
    literal := qualquer outro caractere

Regras:
    - tokens aninhados são resolvidos de dentro para fora
      (`${env:${env:key}}`)
    - o resolver recebe todo token, inclusive `${ref:...}`; o hidratador
      devolve a referência literal (validada depois) com os tokens internos
      já resolvidos
    - uma string que é exatamente um token preserva o tipo do valor
    - tokens embutidos em texto são convertidos para string
      (booleanos viram `true`/`false`)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

from manifest_resolver.core.exceptions import HydrationError


TOKEN_OPEN = "${"
ESCAPED_OPEN = "$${"
REF_KIND = "ref"

# (kind, key) -> valor
TokenResolver = Callable[[str, str], Any]


@dataclass(frozen=True)
class _Literal:
    text: str


@dataclass(frozen=True)
class _Value:
    value: Any
    raw: str


Segment = Union[_Literal, _Value]


def stringify(value: Any, *, path: str, token: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise HydrationError(
        f"Token {token} resolves to a {type(value).__name__} and cannot be embedded in text",
        path=path,
        token=token,
    )


class _Scanner:
    def __init__(self, text: str, resolve: TokenResolver, path: str):
        self.text = text
        self.pos = 0
        self.resolve = resolve
        self.path = path

    def error(self, message: str, token: Optional[str] = None) -> HydrationError:
        return HydrationError(message, path=self.path, token=token, details={"value": self.text})

    def parse(self, nested: bool = False) -> List[Segment]:
        segments: List[Segment] = []
        buf: List[str] = []

        def flush() -> None:
            if buf:
                segments.append(_Literal("".join(buf)))
                buf.clear()

        while self.pos < len(self.text):
            if self.text.startswith(ESCAPED_OPEN, self.pos):
                buf.append(TOKEN_OPEN)
                self.pos += len(ESCAPED_OPEN)
                continue
            if self.text.startswith(TOKEN_OPEN, self.pos):
                flush()
                segments.append(self.token())
                continue
            if nested and self.text[self.pos] == "}":
                break
            buf.append(self.text[self.pos])
            self.pos += 1

        flush()
        return segments

    def token(self) -> _Value:
        start = self.pos
        self.pos += len(TOKEN_OPEN)

        colon = self.text.find(":", self.pos)
        close = self.text.find("}", self.pos)
        if colon == -1 or (close != -1 and close < colon):
            raise self.error(f"Malformed token at offset {start}: expected '${{kind:key}}'")

        kind = self.text[self.pos:colon]
        if not kind.isalpha():
            raise self.error(f"Malformed token kind {kind!r} at offset {start}")
        self.pos = colon + 1

        body_segments = self.parse(nested=True)
        if self.pos >= len(self.text):
            raise self.error(f"Unterminated token starting at offset {start}")
        self.pos += 1  # '}'

        raw = self.text[start:self.pos]
        body = "".join(_segment_text(s, path=self.path) for s in body_segments)

        if not body:
            raise self.error(f"Empty key in token {raw}", token=raw)

        return _Value(value=self.resolve(kind, body), raw=raw)


def _segment_text(segment: Segment, *, path: str) -> str:
    if isinstance(segment, _Literal):
        return segment.text
    return stringify(segment.value, path=path, token=segment.raw)


def interpolate(text: str, resolve: TokenResolver, *, path: str = "$") -> Any:
    """
    Resolve os tokens de `text`.

    Returns:
        O valor tipado quando `text` é exatamente um token; caso contrário a
        string resultante.

    Raises:
        HydrationError: token malformado, não terminado ou não resolvido.
    """
    if TOKEN_OPEN not in text:
        return text

    segments = _Scanner(text, resolve, path).parse()

    if len(segments) == 1 and isinstance(segments[0], _Value):
        return segments[0].value

    return "".join(_segment_text(s, path=path) for s in segments)

