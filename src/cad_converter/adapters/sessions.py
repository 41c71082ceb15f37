"""Remote session adapter implementing the ``RemoteSession`` port."""

from __future__ import annotations

import logging

import httpx

from cad_converter.errors import SessionInitError
from cad_converter.infrastructure.backend import GeometryBackendClient
from cad_converter.schemas import Session

logger = logging.getLogger(__name__)


class BackendRemoteSession:
    """Open sessions through the geometry backend client."""

    def __init__(self, client: GeometryBackendClient) -> None:
        self._client = client

    async def open(self, endpoint_url: str, access_ticket: str) -> Session:
        """Open a session for the model behind ``access_ticket``.

        Parameters
        ----------
        endpoint_url : str
            Model view URL of the remote service.
        access_ticket : str
            Backend ticket identifying the converter model.

        Returns
        -------
        Session
            Session id plus the declared parameters and outputs.

        Raises
        ------
        SessionInitError
            If the request fails or the payload is not a session.
        """
        try:
            payload = await self._client.open_session(endpoint_url, access_ticket)
            session = Session.model_validate(payload)
        except httpx.HTTPStatusError as exc:
            raise SessionInitError(
                f"Session init rejected with HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise SessionInitError(f"Session init failed: {exc}") from exc
        logger.debug(
            "session %s declares %d parameters and %d outputs",
            session.session_id,
            len(session.parameters),
            len(session.outputs),
        )
        return session.model_copy(update={"endpoint_url": endpoint_url})
