"""Gravity settling of brick snapshots."""

from .level_index import LevelIndex
from .settling import SettledStack, SettlingEngine, settle

__all__ = ["LevelIndex", "SettledStack", "SettlingEngine", "settle"]
