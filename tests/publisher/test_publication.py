import httpx
import pytest

from services.publisher.app.config import GitHubSettings, PublisherSettings
from services.publisher.app.domain.errors import RemoteStoreError
from services.publisher.app.domain.github_client import GitHubClient
from services.publisher.app.domain.publication import PublicationActivator, ReachabilityProbe
from services.publisher.app.domain.types import ProjectRef, Task, project_name

REF = ProjectRef(owner="octo", name="counter-abc")


def test_project_name_is_lowercase_and_safe():
    assert project_name("My Task/42", "N0nce_X") == "my-task-42-n0nce-x"
    assert project_name("My Task/42", "N0nce_X") == project_name("My Task/42", "N0nce_X")


def test_project_ref_urls_follow_pages_convention():
    task = Task(brief="b", email="e", task="Quiz", round=2, nonce="Zz9", evaluation_url="https://x")

    ref = ProjectRef.for_task("octo", task)

    assert ref.name == "quiz-zz9"
    assert ref.pages_url == "https://octo.github.io/quiz-zz9/"
    assert ref.repo_url == "https://github.com/octo/quiz-zz9"


@pytest.mark.asyncio
async def test_activate_uses_configured_branch_and_path(fake_github):
    settings = PublisherSettings(github=GitHubSettings(owner="octo", pages_branch="gh-pages", pages_path="/docs"))

    url = await PublicationActivator(fake_github, settings).activate(REF)

    assert url == "https://octo.github.io/counter-abc/"
    assert fake_github.pages_calls == [("counter-abc", "gh-pages", "/docs")]


@pytest.mark.asyncio
async def test_activate_swallows_store_faults(settings, fake_github):
    fake_github.fail_pages = RemoteStoreError("already enabled", status_code=409)

    url = await PublicationActivator(fake_github, settings).activate(REF)

    assert url == REF.pages_url


@pytest.mark.asyncio
async def test_reachability_probe_checks_for_200():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/ready/":
            return httpx.Response(200, text="ok")
        return httpx.Response(404)

    probe = ReachabilityProbe(transport=httpx.MockTransport(handler))

    assert await probe("https://octo.github.io/ready/") is True
    assert await probe("https://octo.github.io/missing/") is False


@pytest.mark.asyncio
async def test_activate_returns_pages_url_when_store_answers_without_json(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/octo/counter-abc/pages"
        return httpx.Response(201, text="created")

    client = GitHubClient(settings, transport=httpx.MockTransport(handler))

    url = await PublicationActivator(client, settings).activate(REF)

    assert url == REF.pages_url
