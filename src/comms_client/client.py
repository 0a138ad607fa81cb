"""
Client facades.

CommsClient wires the sync dispatcher to the product clients; AsyncCommsClient
does the same over httpx.AsyncClient, where every product method returns an
awaitable.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import httpx

from .account.client import AccountClient
from .auth.credentials import CredentialSet
from .config import ClientConfig
from .conversations.client import ConversationsClient
from .core.dispatcher import AsyncEndpointDispatcher, EndpointDispatcher
from .settings import load_credentials, load_settings
from .voice.client import VoiceClient

logger = logging.getLogger(__name__)


class CommsClient:
    """
    Synchronous client.

    Example:
        with CommsClient(load_credentials()) as client:
            balance = client.account.get_balance()
    """

    def __init__(
        self,
        credentials: CredentialSet,
        config: Optional[ClientConfig] = None,
        httpx_client: Optional[httpx.Client] = None,
    ):
        self._dispatcher = EndpointDispatcher(credentials, config, httpx_client)
        self.conversations = ConversationsClient(self._dispatcher)
        self.voice = VoiceClient(self._dispatcher)
        self.account = AccountClient(self._dispatcher)

    @property
    def dispatcher(self) -> EndpointDispatcher:
        return self._dispatcher

    def close(self) -> None:
        self._dispatcher.close()

    def __enter__(self) -> "CommsClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class AsyncCommsClient:
    """
    Asynchronous client.

    Example:
        async with AsyncCommsClient(load_credentials()) as client:
            call = await client.voice.get_call(uuid)
    """

    def __init__(
        self,
        credentials: CredentialSet,
        config: Optional[ClientConfig] = None,
        httpx_client: Optional[httpx.AsyncClient] = None,
    ):
        self._dispatcher = AsyncEndpointDispatcher(credentials, config, httpx_client)
        self.conversations = ConversationsClient(self._dispatcher)
        self.voice = VoiceClient(self._dispatcher)
        self.account = AccountClient(self._dispatcher)

    @property
    def dispatcher(self) -> AsyncEndpointDispatcher:
        return self._dispatcher

    async def close(self) -> None:
        await self._dispatcher.close()

    async def __aenter__(self) -> "AsyncCommsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_client_from_settings(
    config_dir: Union[str, Path],
    env_file: Optional[Union[str, Path]] = None,
    app_env: Optional[str] = None,
) -> CommsClient:
    """Build a CommsClient from a YAML config directory and the environment."""
    settings = load_settings(config_dir, app_env)
    credentials = load_credentials(env_file)
    logger.debug(f"create_client_from_settings: api={settings.api_base_uri}, rest={settings.rest_base_uri}")
    return CommsClient(credentials, settings.to_client_config())
