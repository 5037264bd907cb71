"""Module for listing and deleting Question Answering projects."""

import asyncio
from typing import Any
from typing import AsyncIterator
from typing import Mapping
from typing import Optional

from azure.ai.language.questionanswering.authoring.aio import AuthoringClient
from azure.core.exceptions import ResourceNotFoundError
from loguru import logger

from qna_cleanup.errors import DeletionError
from qna_cleanup.errors import OperationCancelledError
from qna_cleanup.errors import describe_azure_error
from qna_cleanup.purge.cancellation import CancellationToken
from qna_cleanup.purge.models import ProjectDescriptor

PROJECT_NAME_KEY = "projectname"


def get_project_name(project_json: Mapping[str, Any]) -> Optional[str]:
    """
    Read the project name from a listing entry.

    Property names are matched case-insensitively, so "projectName",
    "ProjectName" and "projectname" are all accepted.

    Args:
        project_json: One JSON object from the project listing

    Returns:
        The project name, or None if the entry has none
    """
    for key, value in project_json.items():
        if key.lower() == PROJECT_NAME_KEY and value:
            return str(value)
    return None


async def iter_projects(client: AuthoringClient) -> AsyncIterator[ProjectDescriptor]:
    """
    Lazily yield every project visible to the client.

    Pages are fetched on demand by the SDK's async pager, so the listing is never
    buffered in memory. Errors from the service propagate to the caller unchanged.

    Args:
        client: Async Question Answering authoring client

    Yields:
        ProjectDescriptor for each listed project
    """
    async for project_json in client.list_projects():
        name = get_project_name(project_json)
        if name is None:
            logger.warning("Skipping listing entry without a project name", keys=sorted(project_json))
            continue
        yield ProjectDescriptor(name=name)


class ProjectDeleter:
    """
    Deletes projects through the long-running delete operation.

    Both starting the operation and waiting for it to complete are raced
    against the run's cancellation token, so an interrupt abandons the
    in-progress HTTP call instead of waiting for it.
    """

    def __init__(self, client: AuthoringClient):
        self.client = client

    async def delete(self, name: str, token: CancellationToken) -> None:
        """
        Delete project ``name`` and wait until the service reports it gone.

        Raises:
            OperationCancelledError: If the run was cancelled first
            DeletionError: If the service rejected or failed the deletion
        """
        try:
            poller = await token.guard(self.client.begin_delete_project(name))
            await token.guard(poller.result())
        except (OperationCancelledError, asyncio.CancelledError):
            raise
        except ResourceNotFoundError:
            # Deleted by someone else between listing and deletion
            logger.info(f"Project {name} was already deleted")
        except Exception as exc:
            raise DeletionError(name, describe_azure_error(exc)) from exc
