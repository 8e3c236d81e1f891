"""
Базовый класс читателей моделей.

Чтение идёт в две фазы: сначала файл разбирается в обычные
структуры (списки, словари), затем всё, что создаёт объекты для
отображения, выполняется через `dispatch` – на потоке рендера.
"""

from __future__ import annotations

import io
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager

from crystal3d.assets.material import default_material as make_default_material


@contextmanager
def open_text(stream, encoding: str = "utf-8-sig"):
    """Текстовый вид потока; бинарный поток оборачивается и затем отсоединяется."""
    if isinstance(stream, io.TextIOBase):
        yield stream
        return
    wrapper = io.TextIOWrapper(stream, encoding=encoding, errors="replace")
    try:
        yield wrapper
    finally:
        wrapper.detach()


class ModelReader(ABC):
    """Общее для всех форматов: диспетчер, материал по‑умолчанию, путь к текстурам."""

    def __init__(self, dispatcher=None, default_material=None):
        self.dispatcher = dispatcher
        self.default_material = default_material or make_default_material()
        self.texture_path: str | None = None

    # -----------------------------------------------------------------
    def dispatch(self, fn, *args, **kwargs):
        """Выполнить fn на потоке рендера (или сразу, если диспетчер не задан)."""
        if self.dispatcher is None:
            return fn(*args, **kwargs)
        return self.dispatcher.invoke(fn, *args, **kwargs)

    def read(self, path):
        """Прочитать модель из файла; каталог файла становится путём к текстурам."""
        if self.texture_path is None:
            self.texture_path = os.path.dirname(os.path.abspath(path))
        with open(path, "rb") as s:
            return self.read_stream(s)

    @abstractmethod
    def read_stream(self, stream):
        """Прочитать модель из потока, вернуть Model."""
