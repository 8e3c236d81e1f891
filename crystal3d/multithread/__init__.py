"""Диспетчер потока рендера и пул задач."""
from crystal3d.multithread.dispatcher import Dispatcher, TaskPool

__all__ = ["Dispatcher", "TaskPool"]
