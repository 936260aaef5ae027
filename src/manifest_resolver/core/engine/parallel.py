"""
Fan-out com barreira sobre um ThreadPoolExecutor.

Os resultados voltam na ordem das entradas, qualquer que seja a ordem de
término. Uma exceção em qualquer tarefa é re-levantada depois que o pool
termina (o `with` é a barreira).
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def default_workers() -> int:
    return os.cpu_count() or 1


def fan_out(fn: Callable[[T], R], items: Iterable[T], *, max_workers: Optional[int] = None) -> List[R]:
    work = list(items)
    workers = min(len(work), max_workers or default_workers())
    if workers <= 1:
        return [fn(item) for item in work]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(fn, item) for item in work]
    return [f.result() for f in futures]
