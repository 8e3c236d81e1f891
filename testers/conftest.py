# -*- coding: utf-8 -*-
"""
conftest.py – общие фикстуры: OBJ/MTL‑текст в памяти, диспетчер,
записывающий вызовы, и маленькие PNG‑текстуры на диске.
"""

import io
import textwrap

import pytest
from PIL import Image

from crystal3d.multithread.dispatcher import Dispatcher


def text_stream(text: str) -> io.StringIO:
    """Поток с текстом без общего отступа (удобно для многострочных литералов)."""
    return io.StringIO(textwrap.dedent(text).lstrip("\n"))


# ----------------------------------------------------------------------
# RecordingDispatcher – выполняет всё сразу, но запоминает, что вызывалось
# ----------------------------------------------------------------------
class RecordingDispatcher:
    def __init__(self):
        self.calls = []

    def invoke(self, fn, *args, **kwargs):
        self.calls.append(getattr(fn, "__name__", repr(fn)))
        return fn(*args, **kwargs)


@pytest.fixture
def recording_dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def render_dispatcher():
    dispatcher = Dispatcher(name="test-render")
    yield dispatcher
    dispatcher.shutdown()


@pytest.fixture
def make_texture(tmp_path):
    """Создать PNG размером w×h в tmp_path и вернуть путь."""
    def _make(name="tex.png", size=(2, 3), color=(255, 0, 0)):
        path = tmp_path / name
        Image.new("RGB", size, color).save(path)
        return path
    return _make
