"""
Request Executor - Single Responsibility: run one API call end to end.

Builds the URL and headers, brackets the loading indicator, delegates to the
transport, classifies the status code and funnels every failure through one
error channel governed by the call's ErrorPolicy.
"""
import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from ..context import ClientContext
from ..errors import ApiError, TransportError, error_message, http_error_for
from ..models import ErrorPolicy, RequestDescriptor, TransportResponse
from ..protocols import IPresenter, ITransport
from .loading import LoadingCoordinator

if TYPE_CHECKING:
    from .auth import AuthCoordinator

logger = logging.getLogger(__name__)


def build_query_string(query: Optional[Mapping[str, str]]) -> str:
    """Serialize a mapping as ``?k1=v1&k2=v2`` in insertion order."""
    if not query:
        return ""
    return "?" + "&".join(f"{key}={value}" for key, value in query.items())


class RequestExecutor:
    """
    Executes RequestDescriptors against the transport.

    The auth coordinator is bound after construction because the login
    exchange itself goes through this executor.
    """

    def __init__(
        self,
        context: ClientContext,
        transport: ITransport,
        loading: LoadingCoordinator,
        presenter: IPresenter,
    ):
        self._context = context
        self._transport = transport
        self._loading = loading
        self._presenter = presenter
        self._auth: Optional["AuthCoordinator"] = None

    def bind_auth(self, auth: "AuthCoordinator") -> None:
        self._auth = auth

    def requires_token(self, path: str) -> bool:
        return not any(prefix in path for prefix in self._context.config.no_token_prefixes)

    def build_url(self, path: str, query: Optional[Mapping[str, str]] = None) -> str:
        return f"{self._context.remote_root}{path}{build_query_string(query)}"

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """Run the call and return the response body (None when swallowed)."""
        try:
            headers = await self._build_headers(descriptor.path)
            url = self.build_url(descriptor.path, descriptor.query)

            if descriptor.wants_spinner:
                self._loading.push(descriptor.spinner_instant)
            try:
                response = await self._dispatch(url, descriptor, headers)
            finally:
                if descriptor.wants_spinner:
                    self._loading.pop()

            return self.classify(response)
        except ApiError as exc:
            logger.warning(
                "%s %s failed: %s",
                descriptor.method.value,
                descriptor.path,
                error_message(exc) or type(exc).__name__,
            )
            self._report(exc, descriptor.error_policy)
            if descriptor.error_policy is ErrorPolicy.SHOW_AND_SWALLOW:
                return None
            raise

    def classify(self, response: TransportResponse) -> Any:
        if response.ok:
            return response.body
        raise http_error_for(
            response.status_code,
            response.body,
            self._context.config.not_found_message,
        )

    async def _build_headers(self, path: str) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.requires_token(path):
            if self._auth is None:
                raise RuntimeError("RequestExecutor has no auth coordinator bound")
            token = await self._auth.get_token()
            headers["Authorization"] = f"bearer {token}"
        return headers

    async def _dispatch(
        self,
        url: str,
        descriptor: RequestDescriptor,
        headers: Dict[str, str],
    ) -> TransportResponse:
        logger.debug("%s %s", descriptor.method.value, url)
        try:
            return await self._transport.request_once(
                url,
                descriptor.method.value,
                headers,
                descriptor.body,
            )
        except ApiError:
            raise
        except Exception as exc:
            raise TransportError(error_message(exc) or "") from exc

    def _report(self, exc: ApiError, policy: ErrorPolicy) -> None:
        if policy is ErrorPolicy.SILENT:
            return
        config = self._context.config
        self._presenter.show(
            title=config.error_title,
            content=error_message(exc) or config.network_error_message,
            dismiss_only=True,
        )
