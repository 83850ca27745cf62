"""Core client - wires the coordinators over one shared context."""
from typing import Any, List, Mapping, Optional

from ..context import ClientContext
from ..models import ClientConfig, ErrorPolicy, HttpMethod, RequestDescriptor
from ..protocols import IFilePicker, ILoginCodeProvider, IPresenter, ITransport, NullPresenter
from ..services.auth import AuthCoordinator
from ..services.executor import RequestExecutor
from ..services.loading import LoadingCoordinator
from ..services.resource import Resource, ResourceCache
from ..services.transport import HTTPXTransport
from .upload import UploadOrchestrator


class ApiClient:
    """
    Authenticated API client using injected collaborators.

    Usage:
        # Default httpx transport, opened by the context manager
        async with ApiClient(config, login_code_provider=provider) as client:
            items = await client.get("/items", query={"page": "2"})

        # Host-provided transport and presenter
        client = ApiClient(config, transport=my_transport, presenter=my_ui,
                           login_code_provider=provider)
        user = await client.post("/profile", body={"name": "x"})
    """

    def __init__(
        self,
        config: ClientConfig,
        login_code_provider: ILoginCodeProvider,
        transport: Optional[ITransport] = None,
        presenter: Optional[IPresenter] = None,
        file_picker: Optional[IFilePicker] = None,
    ):
        """
        Initialize client with dependencies.

        Args:
            config: Client configuration (remote root, texts, delays)
            login_code_provider: Source of one-shot login codes
            transport: Network primitive; an HTTPXTransport is opened on
                ``async with`` when omitted
            presenter: Dialog/toast presenter; logs only when omitted
            file_picker: File chooser used by upload_image
        """
        self._context = ClientContext(config=config)
        self._owned_transport: Optional[HTTPXTransport] = None
        if transport is None:
            self._owned_transport = HTTPXTransport(
                timeout=config.timeout_seconds,
                not_found_message=config.not_found_message,
            )
            transport = self._owned_transport

        self._presenter = presenter or NullPresenter()
        self._loading = LoadingCoordinator(self._context, self._presenter)
        self._executor = RequestExecutor(self._context, transport, self._loading, self._presenter)
        self._auth = AuthCoordinator(self._context, self._executor, login_code_provider)
        self._executor.bind_auth(self._auth)
        self._uploads = UploadOrchestrator(
            self._context,
            self._auth,
            transport,
            self._presenter,
            file_picker,
        )
        self._resources = ResourceCache(lambda path: self.get(path, error_policy=ErrorPolicy.SILENT))

    async def __aenter__(self):
        if self._owned_transport:
            await self._owned_transport.__aenter__()
        return self

    async def __aexit__(self, *args):
        if self._owned_transport:
            await self._owned_transport.__aexit__(*args)

    @property
    def context(self) -> ClientContext:
        return self._context

    @property
    def loading(self) -> LoadingCoordinator:
        return self._loading

    def set_remote_root(self, root: str) -> None:
        self._context.set_remote_root(root)

    async def request(
        self,
        path: str = "",
        query: Optional[Mapping[str, str]] = None,
        body: Any = None,
        method: HttpMethod = HttpMethod.GET,
        spinner: bool = True,
        spinner_instant: bool = False,
        error_policy: ErrorPolicy = ErrorPolicy.SHOW_AND_RAISE,
    ) -> Any:
        """Generic authenticated request; returns the response body."""
        descriptor = RequestDescriptor(
            path=path,
            query=dict(query or {}),
            body=body,
            method=method,
            wants_spinner=spinner,
            spinner_instant=spinner_instant,
            error_policy=error_policy,
        )
        return await self._executor.execute(descriptor)

    async def get(self, path: str, query: Optional[Mapping[str, str]] = None, **options) -> Any:
        return await self.request(path, query=query, method=HttpMethod.GET, **options)

    async def post(self, path: str, body: Any = None, **options) -> Any:
        return await self.request(path, body=body, method=HttpMethod.POST, **options)

    async def put(self, path: str, body: Any = None, **options) -> Any:
        return await self.request(path, body=body, method=HttpMethod.PUT, **options)

    async def delete(self, path: str, query: Optional[Mapping[str, str]] = None, **options) -> Any:
        return await self.request(path, query=query, method=HttpMethod.DELETE, **options)

    async def get_token(self) -> str:
        return await self._auth.get_token()

    async def login(self) -> str:
        return await self._auth.login()

    def logout(self) -> None:
        self._auth.logout()
        self._resources.clear()

    def get_user_info(self) -> Any:
        return self._auth.get_user_info()

    def get_upload_url(self, endpoint: str) -> str:
        return self._uploads.get_upload_url(endpoint)

    async def upload_file(self, endpoint: str, file_path: str) -> Any:
        return await self._uploads.upload_file(endpoint, file_path)

    async def upload_image(self, endpoint: str) -> List[Any]:
        return await self._uploads.upload_image(endpoint)

    def resource(self, path: str) -> Resource:
        """Cached, subscribable view of GET ``path`` for UI code."""
        return self._resources.get(path)
