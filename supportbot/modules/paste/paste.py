import logging
from typing import Optional

import httpx

logger = logging.getLogger("supportbot.paste")


class PasteError(Exception):
    """Raised when a paste could not be created."""


class PasteModule:
    def __init__(
        self,
        paste_url: Optional[str],
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize paste module.

        Args:
            paste_url: Endpoint accepting paste uploads (None disables uploads)
            api_key: Optional key sent as X-Api-Key
            timeout: Request timeout in seconds
            client: Optional pre-built HTTP client (used by tests)
        """
        self.paste_url = paste_url
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def create_paste(self, name: str, content: str, token: str) -> str:
        """
        Upload content as a private paste.

        Args:
            name: Paste title
            content: Paste body
            token: Access key that makes the paste URL unguessable

        Returns:
            Public URL of the paste

        Raises:
            PasteError: If uploads are disabled or the service rejected the paste
            httpx.HTTPError: On transport failures
        """
        if not self.paste_url:
            raise PasteError("Paste service is not configured")

        headers = {"X-Api-Key": self.api_key} if self.api_key else {}
        resp = await self._client.post(
            self.paste_url,
            json={"name": name, "content": content, "key": token},
            headers=headers,
        )
        resp.raise_for_status()

        url = resp.json().get("url")
        if not url:
            raise PasteError(f"Paste service returned no URL for '{name}'")

        logger.debug(f"Created paste {url}")
        return url

    async def close(self) -> None:
        await self._client.aclose()
