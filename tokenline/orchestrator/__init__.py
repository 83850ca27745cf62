"""Orchestrator package - public client and upload workflow."""
from .core import ApiClient
from .upload import UploadOrchestrator

__all__ = ["ApiClient", "UploadOrchestrator"]
