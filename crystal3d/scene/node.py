# -*- coding: utf-8 -*-
"""Базовый узел графа сцены."""


class Node:
    """Все элементы сцены наследуются от Node."""
    def __init__(self, name="Node"):
        self.name = name
        self.children = []
        self.parent = None

    # ----------------- иерархия -----------------
    def add_child(self, node):
        node.parent = self
        self.children.append(node)

    def remove_child(self, node):
        if node in self.children:
            node.parent = None
            self.children.remove(node)

    def traverse(self):
        """Генератор DFS."""
        yield self
        for child in self.children:
            yield from child.traverse()

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"
