"""Utility helpers for tokenline."""
from .events import EventEmitter
from .json import safe_parse_json

__all__ = ["EventEmitter", "safe_parse_json"]
