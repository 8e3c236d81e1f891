"""
Разбиение текстовых форматов (OBJ, MTL) на логические строки и поля.

* строки обрезаются, пустые и начинающиеся с `#` пропускаются;
* строка, оканчивающаяся на `\\`, склеивается со следующей непустой;
* ключевое слово – всё до первого пробела, без учёта регистра.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Tuple

from crystal3d.importers.errors import FileFormatError, at_line


def logical_lines(reader: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Выдаёт (номер первой физической строки, логическая строка); нумерация с 1."""
    lines = iter(reader)
    line_no = 0
    for raw in lines:
        line_no += 1
        start = line_no
        line = raw.strip()

        while line.endswith("\\"):
            continuation = ""
            for nxt in lines:
                line_no += 1
                if nxt.strip():
                    continuation = nxt.rstrip()
                    break
            line = line.rstrip("\\") + continuation
            if not continuation:
                break     # конец потока посреди продолжения

        if not line or line.startswith("#"):
            continue
        yield start, line


def split_line(line: str) -> Tuple[str, str]:
    """Ключевое слово (в нижнем регистре) и строка аргументов."""
    parts = line.split(None, 1)
    keyword = parts[0].lower()
    arguments = parts[1].strip() if len(parts) > 1 else ""
    return keyword, arguments


# Только ASCII‑запись без «_» и юникодных цифр, которые float()/int() тоже принимают
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INT_RE = re.compile(r"[+-]?[0-9]+")


def parse_float(token: str, line_no: int = None) -> float:
    if not _FLOAT_RE.fullmatch(token):
        raise FileFormatError(f"Invalid number ({token}){at_line(line_no)}.", line_no)
    return float(token)


def parse_int(token: str, line_no: int = None) -> int:
    if not _INT_RE.fullmatch(token):
        raise FileFormatError(f"Invalid integer ({token}){at_line(line_no)}.", line_no)
    return int(token)


def parse_floats(arguments: str, line_no: int = None, count: int = 0) -> List[float]:
    """
    Все поля строки как float.  Ошибка разбора – всегда фатальна
    (испорченные числовые данные не «пропускаются»).
    `count` – минимальное число полей.
    """
    values = [parse_float(token, line_no) for token in arguments.split()]
    if len(values) < count:
        raise FileFormatError(
            f"Expected {count} values, got {len(values)}{at_line(line_no)}.", line_no)
    return values
