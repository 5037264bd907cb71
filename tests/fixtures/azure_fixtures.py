"""Fixtures for Azure Question Answering authoring client mocks."""

from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from unittest.mock import AsyncMock
from unittest.mock import MagicMock

import pytest


class FakeAsyncPager:
    """Stand-in for the SDK's AsyncItemPaged: yields listing JSON, optionally failing part way."""

    def __init__(self, items: List[Dict[str, Any]], error: Optional[Exception] = None):
        self.items = items
        self.error = error

    def __aiter__(self):
        return self._generate()

    async def _generate(self):
        for item in self.items:
            yield item
        if self.error is not None:
            raise self.error


@pytest.fixture
def mock_project_json():
    """Create listing entries the way the authoring API returns them."""

    def _create_project(name: str = "TestProject1", language: str = "en") -> Dict[str, Any]:
        return {
            "projectName": name,
            "description": f"{name} description",
            "language": language,
            "multilingualResource": False,
            "createdDateTime": "2026-01-01T00:00:00Z",
            "lastModifiedDateTime": "2026-01-02T00:00:00Z",
        }

    return _create_project


@pytest.fixture
def mock_authoring_client(mock_project_json):
    """Mock async AuthoringClient listing three projects, with every delete succeeding."""
    mock_client = MagicMock()

    mock_client.list_projects.return_value = FakeAsyncPager(
        [
            mock_project_json(name="TestProject1"),
            mock_project_json(name="Keep"),
            mock_project_json(name="TestProject2"),
        ]
    )

    mock_poller = MagicMock()
    mock_poller.result = AsyncMock(return_value=None)
    mock_client.begin_delete_project = AsyncMock(return_value=mock_poller)
    mock_client.poller = mock_poller

    return mock_client
