# crystal3d/assets/__init__.py
"""Пакет с материалами и менеджером текстур."""
from crystal3d.assets.material import Material, default_material
from crystal3d.assets.texture_manager import TextureManager

__all__ = ["Material", "default_material", "TextureManager"]
