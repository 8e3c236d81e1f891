# setup.py
from setuptools import setup, find_packages

setup(
    name="crystal3d",
    version="1.0.0",
    description="Crystal3D model importers (Wavefront OBJ/MTL, STL, OFF)",
    packages=find_packages(include=["crystal3d", "crystal3d.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "Pillow>=9.0.0",
        "mapbox-earcut>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
