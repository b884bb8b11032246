"""Gradient fields for 3D scalar volumes."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("volgrad")
except PackageNotFoundError:
    __version__ = "uninstalled"
