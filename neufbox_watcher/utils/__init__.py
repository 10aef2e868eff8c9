"""Utility submodule – file helpers."""

from neufbox_watcher.utils.files import save_file

__all__ = ["save_file"]
