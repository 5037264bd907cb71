"""Construction of the Question Answering authoring client.

The client authenticates with an API key when one is supplied; otherwise the
current Azure identity is resolved through DefaultAzureCredential (environment,
managed identity, Azure CLI login, ...), the same fallback order the Azure SDKs
use everywhere else.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
from typing import Optional
from urllib.parse import urlparse

from azure.ai.language.questionanswering.authoring.aio import AuthoringClient
from azure.core.credentials import AzureKeyCredential
from azure.identity.aio import DefaultAzureCredential
from loguru import logger

from qna_cleanup.errors import ConfigurationError


def validate_endpoint(endpoint: Optional[str]) -> str:
    """
    Validate the Question Answering endpoint.

    Parameters
    ----------
    endpoint : Optional[str]
        Value of --endpoint or QUESTIONANSWERING_ENDPOINT

    Returns
    -------
    str
        The endpoint, unchanged

    Raises
    ------
    ConfigurationError
        If the endpoint is missing or not an absolute http(s) URL
    """
    if not endpoint:
        raise ConfigurationError(
            "Missing endpoint: pass --endpoint or set the QUESTIONANSWERING_ENDPOINT environment variable."
        )

    parsed = urlparse(endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Endpoint must be an absolute http(s) URL, got {endpoint!r}")
    return endpoint


@asynccontextmanager
async def authoring_client(
    endpoint: str,
    key: Optional[str] = None,
    logging_enable: bool = False,
) -> AsyncIterator[AuthoringClient]:
    """
    Open an async AuthoringClient and close it (and its credential) on exit.

    Args:
        endpoint: Question Answering endpoint
        key: API key; when empty the current Azure identity is used
        logging_enable: Log full HTTP requests and responses through the "azure" loggers

    Yields:
        The authoring client
    """
    if key:
        logger.debug("Authenticating with API key", endpoint=endpoint)
        async with AuthoringClient(endpoint, AzureKeyCredential(key), logging_enable=logging_enable) as client:
            yield client
        return

    logger.debug("No API key given, authenticating with DefaultAzureCredential", endpoint=endpoint)
    async with DefaultAzureCredential() as credential:
        async with AuthoringClient(endpoint, credential, logging_enable=logging_enable) as client:
            yield client
