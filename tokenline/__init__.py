"""
tokenline - Authenticated HTTP client layer with shared token and spinner state.

Coordinates three concerns around a host-provided transport:
- Bearer tokens: cached per client, at most one login exchange in flight
- Loading indicator: reference counted, debounced
- Uploads: sequential multi-file upload on the same token path

Usage:
    from tokenline import ApiClient, ClientConfig, ErrorPolicy

    config = ClientConfig(remote_root="https://api.example.com")
    async with ApiClient(config, login_code_provider=provider) as client:
        items = await client.get("/items", query={"page": "2"})

        # Quiet call, errors still raised
        await client.delete("/items/1", error_policy=ErrorPolicy.SILENT)

        # Pick files and upload them one by one
        responses = await client.upload_image("/upload")
"""
from .errors import (
    ApiError,
    AuthError,
    ConfigurationError,
    HttpError,
    TransportError,
    UserCancelled,
)
from .models import (
    ClientConfig,
    ErrorPolicy,
    HttpMethod,
    RequestDescriptor,
    Session,
    TransportResponse,
)
from .orchestrator import ApiClient, UploadOrchestrator
from .services import (
    AuthCoordinator,
    HTTPXTransport,
    LoadingCoordinator,
    RequestExecutor,
    Resource,
)

__version__ = "0.1.0"
__all__ = [
    # Main
    "ApiClient",
    "UploadOrchestrator",
    # Models
    "ClientConfig",
    "ErrorPolicy",
    "HttpMethod",
    "RequestDescriptor",
    "Session",
    "TransportResponse",
    # Errors
    "ApiError",
    "AuthError",
    "ConfigurationError",
    "HttpError",
    "TransportError",
    "UserCancelled",
    # Services
    "AuthCoordinator",
    "HTTPXTransport",
    "LoadingCoordinator",
    "RequestExecutor",
    "Resource",
]
