"""Services for tokenline."""
from .auth import AuthCoordinator
from .executor import RequestExecutor, build_query_string
from .loading import LoadingCoordinator
from .resource import Resource, ResourceCache
from .transport import HTTPXTransport

__all__ = [
    "AuthCoordinator",
    "RequestExecutor",
    "build_query_string",
    "LoadingCoordinator",
    "Resource",
    "ResourceCache",
    "HTTPXTransport",
]
