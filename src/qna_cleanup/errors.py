"""Error types for the cleanup run and translation of Azure SDK exceptions."""

from azure.core.exceptions import AzureError
from azure.core.exceptions import ClientAuthenticationError
from azure.core.exceptions import HttpResponseError
from azure.core.exceptions import ResourceNotFoundError
from azure.core.exceptions import ServiceRequestError
from azure.core.exceptions import ServiceResponseError

# Explicit exports
__all__ = [
    "CleanupError",
    "ConfigurationError",
    "DeletionError",
    "OperationCancelledError",
    "SourceError",
    "describe_azure_error",
]


class CleanupError(Exception):
    """Base class for every error raised by the cleanup tool."""


class ConfigurationError(CleanupError):
    """Invalid pattern, endpoint or worker count. Raised before any remote call is made."""


class SourceError(CleanupError):
    """The paginated project listing failed mid-stream."""

    def __init__(self, message: str):
        super().__init__(message)
        # Summary of the drained run, attached by the dispatcher before raising
        self.result = None


class DeletionError(CleanupError):
    """A single project could not be deleted."""

    def __init__(self, project_name: str, detail: str):
        super().__init__(f"Failed to delete {project_name}: {detail}")
        self.project_name = project_name
        self.detail = detail


class OperationCancelledError(CleanupError):
    """An operation was abandoned because the run was cancelled."""


def describe_azure_error(error: BaseException) -> str:
    """
    Turn an Azure SDK exception into a short, human readable reason.

    Maps azure-core exceptions to messages:
    - ClientAuthenticationError -> credentials rejected
    - ResourceNotFoundError -> project already gone
    - HttpResponseError -> status code and service message
    - ServiceRequestError / ServiceResponseError -> connection problem

    Parameters
    ----------
    error : BaseException
        Exception raised by the authoring client

    Returns
    -------
    str
        Message suitable for a single log line
    """
    error_message = str(error)

    if isinstance(error, ClientAuthenticationError):
        return "Authentication failed. Please verify the key or the current Azure identity."
    if isinstance(error, ResourceNotFoundError):
        return "The project was not found (it may already have been deleted)."
    if isinstance(error, HttpResponseError):
        status_code = error.status_code
        reason = error.message or error_message
        if status_code == 429:
            return f"Throttled by the service (HTTP 429): {reason}"
        if status_code is not None:
            return f"HTTP {status_code}: {reason}"
        return reason
    if isinstance(error, (ServiceRequestError, ServiceResponseError)):
        lowered = error_message.lower()
        if "timeout" in lowered or "timed out" in lowered:
            return "Connection to the Question Answering endpoint timed out."
        if "name or service not known" in lowered or "nodename nor servname" in lowered:
            return "Unable to resolve the Question Answering endpoint. Please verify the URL is correct."
        return f"Unable to connect to the Question Answering endpoint: {error_message}"
    if isinstance(error, AzureError):
        return f"{type(error).__name__}: {error_message}"
    return f"{type(error).__name__}: {error_message}" if error_message else type(error).__name__
