import json

import httpx
import pytest

from services.note_link.ShareLinkResolver import ShareLinkResolver

SHARE_LINKS_PATH = "/api/documents/42/share_links/"
CREATE_PATH = "/api/share_links/"


@pytest.fixture
def resolver(helper_config, dms_client):
    return ShareLinkResolver(helper_config=helper_config, dms_client=dms_client)


@pytest.mark.asyncio
async def test_existing_permanent_link_is_reused_without_creation(resolver, fake_paperless):
    fake_paperless.add_document(42)
    fake_paperless.add_share_link(42, "expiring", expiration="2030-01-01T00:00:00Z")
    fake_paperless.add_share_link(42, "forever")
    fake_paperless.add_share_link(42, "forever-too")

    link = await resolver.resolve_share_link("42")

    assert link is not None
    assert link.slug == "forever"
    assert link.url == "https://dms.example.com/share/forever"
    assert fake_paperless.count("POST", CREATE_PATH) == 0
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 1


@pytest.mark.asyncio
async def test_only_expiring_links_trigger_creation(resolver, fake_paperless):
    fake_paperless.add_document(42)
    fake_paperless.add_share_link(42, "expiring", expiration="2030-01-01T00:00:00Z")

    link = await resolver.resolve_share_link("42")

    assert link is not None
    assert link.slug != "expiring"
    assert link.expiration is None
    assert fake_paperless.count("POST", CREATE_PATH) == 1


@pytest.mark.asyncio
async def test_link_found_on_third_recheck(resolver, fake_paperless):
    fake_paperless.add_document(42)
    fake_paperless.visible_after = 3

    link = await resolver.resolve_share_link("42")

    assert link is not None
    assert link.url.startswith("https://dms.example.com/share/")
    assert fake_paperless.count("POST", CREATE_PATH) == 1
    # one lookup before creation, three after it
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 4


@pytest.mark.asyncio
async def test_creation_payload_requests_original_file(resolver, fake_paperless):
    fake_paperless.add_document(42)

    await resolver.resolve_share_link("42")

    create_request = next(r for r in fake_paperless.requests if r.method == "POST")
    assert json.loads(create_request.content) == {"document": 42, "file_version": "original"}


@pytest.mark.asyncio
async def test_failing_creation_exhausts_retries_and_returns_none(resolver, fake_paperless):
    fake_paperless.add_document(42)
    fake_paperless.create_status = 500

    link = await resolver.resolve_share_link("42")

    assert link is None
    assert fake_paperless.count("POST", CREATE_PATH) == 1
    # one lookup before creation, then 1 + 5 re-checks
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 7


@pytest.mark.asyncio
async def test_listing_errors_count_as_not_found_yet(resolver, fake_paperless):
    fake_paperless.add_document(42)
    fake_paperless.share_links_status = 503

    link = await resolver.resolve_share_link("42")

    assert link is None
    assert fake_paperless.count("POST", CREATE_PATH) == 1
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 7


@pytest.mark.asyncio
async def test_network_fault_on_creation_still_rechecks(resolver, fake_paperless):
    fake_paperless.add_document(42)
    fake_paperless.create_error = httpx.ConnectError

    link = await resolver.resolve_share_link("42")

    assert link is None
    assert fake_paperless.count("POST", CREATE_PATH) == 1
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 7


@pytest.mark.asyncio
async def test_network_faults_during_checks_count_as_not_found_yet(resolver, fake_paperless):
    fake_paperless.add_document(42)
    # the lookup before creation and the first two re-checks time out
    fake_paperless.share_links_faults = 3

    link = await resolver.resolve_share_link("42")

    assert link is not None
    assert fake_paperless.count("POST", CREATE_PATH) == 1
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 4


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["<html>login</html>", '[{"id": 7, "expiration": null}]'])
async def test_unreadable_listing_counts_as_not_found_yet(resolver, fake_paperless, body):
    fake_paperless.add_document(42)
    fake_paperless.share_links_body = body

    link = await resolver.resolve_share_link("42")

    assert link is None
    assert fake_paperless.count("POST", CREATE_PATH) == 1
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 7


@pytest.mark.asyncio
async def test_retry_count_is_configurable(helper_config, dms_client, fake_paperless):
    fake_paperless.add_document(42)
    fake_paperless.create_status = 500
    resolver = ShareLinkResolver(helper_config=helper_config, dms_client=dms_client, max_retries=2)

    assert await resolver.resolve_share_link("42") is None
    assert fake_paperless.count("GET", SHARE_LINKS_PATH) == 4


@pytest.mark.asyncio
async def test_negative_retry_count_is_rejected(helper_config, dms_client):
    with pytest.raises(ValueError):
        ShareLinkResolver(helper_config=helper_config, dms_client=dms_client, max_retries=-1)
