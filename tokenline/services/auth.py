"""
Auth Coordinator - bearer token acquisition with at most one login in flight.

Flow:
1. Cached token in the session → use it
2. No token, no login running → exchange a host login code for a token
3. No token, login running → wait for that login and share its outcome
"""
import asyncio
import logging
from typing import Any

from ..context import ClientContext
from ..errors import ApiError, AuthError
from ..models import ErrorPolicy, HttpMethod, RequestDescriptor
from ..protocols import ILoginCodeProvider
from .executor import RequestExecutor

logger = logging.getLogger(__name__)


class AuthCoordinator:
    """
    Token cache plus login deduplication.

    Waiters subscribe to a one-shot future that the running login resolves
    with the token or rejects with its error; a failed login always clears
    the flight so the next caller can try again.
    """

    def __init__(
        self,
        context: ClientContext,
        executor: RequestExecutor,
        login_code_provider: ILoginCodeProvider,
    ):
        self._context = context
        self._executor = executor
        self._login_code_provider = login_code_provider

    async def get_token(self) -> str:
        """
        Return the cached token, logging in first when there is none.

        Raises AuthError when no token can be obtained. A login rejected by
        the server surfaces as the HttpError of the login call itself, so
        callers see the server's message (for example a 401 on /login).
        """
        token = self._context.session.token
        if token:
            return token
        token = await self.login()
        if not token:
            raise AuthError("Unable to get token")
        return token

    def get_user_info(self) -> Any:
        return self._context.session.user

    def logout(self) -> None:
        self._context.session.clear()

    async def login(self) -> str:
        context = self._context
        if context.login_in_flight:
            if context.session.token:
                return context.session.token
            logger.debug("Login already in flight, waiting for it")
            return await asyncio.shield(context.login_flight)

        # Check and set happen without a suspension point in between.
        flight = asyncio.get_running_loop().create_future()
        context.login_flight = flight
        try:
            token = await self._exchange()
        except Exception as exc:
            flight.set_exception(exc)
            # Mark retrieved: a login nobody waited on must not log a warning.
            flight.exception()
            raise
        else:
            flight.set_result(token)
            return token
        finally:
            if not flight.done():
                flight.cancel()
            if context.login_flight is flight:
                context.login_flight = None

    async def _exchange(self) -> str:
        try:
            code = await self._login_code_provider.get_login_code()
        except ApiError:
            raise
        except Exception as exc:
            raise AuthError(f"Unable to obtain login code: {exc}") from exc

        data = await self._executor.execute(
            RequestDescriptor(
                path=self._context.config.login_path,
                method=HttpMethod.POST,
                body={"code": code},
                error_policy=ErrorPolicy.SILENT,
            )
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Login error, missing `token` in response")

        self._context.session.store(str(token), data.get("user"))
        logger.info("Login succeeded")
        return str(token)
