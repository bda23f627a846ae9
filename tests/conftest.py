"""Shared fixtures: a fake review store served in-process and clients bound to it."""

from collections.abc import AsyncIterator

import httpx
import pytest

from import_review.controllers.review_controller import ImportReviewController
from import_review.core.models import Workspace
from import_review.core.settings import Settings
from import_review.services.review_client import ReviewStoreClient
from tests.review_store_app import VIEWER_ROLE, FakeReviewStore, create_app

BASE_URL = "http://testserver"


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment, with a small page size."""
    return Settings(_env_file=None, api_base_url=BASE_URL, page_size=10, workspace_key=None)


@pytest.fixture
def server() -> FakeReviewStore:
    """Server-side state of the fake review store."""
    return FakeReviewStore()


@pytest.fixture
def editor_workspace(server: FakeReviewStore) -> Workspace:
    """A workspace where the user is an Editor."""
    return Workspace.model_validate(server.add_workspace("Household"))


@pytest.fixture
def viewer_workspace(server: FakeReviewStore) -> Workspace:
    """A workspace where the user is only a Viewer."""
    return Workspace.model_validate(server.add_workspace("Shared", role=VIEWER_ROLE))


@pytest.fixture
async def http_client(server: FakeReviewStore) -> AsyncIterator[httpx.AsyncClient]:
    """An ``httpx.AsyncClient`` routed to the fake API in-process."""
    transport = httpx.ASGITransport(app=create_app(server))
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def store(settings: Settings, http_client: httpx.AsyncClient) -> ReviewStoreClient:
    """Review store client talking to the fake API."""
    return ReviewStoreClient(settings, http_client=http_client)


@pytest.fixture
def navigations() -> list[str]:
    """Views the controller navigated to."""
    return []


@pytest.fixture
def controller(
    store: ReviewStoreClient,
    settings: Settings,
    editor_workspace: Workspace,
    navigations: list[str],
) -> ImportReviewController:
    """Controller bound to the Editor workspace."""
    return ImportReviewController(store, settings, workspace=editor_workspace, on_navigate=navigations.append)
