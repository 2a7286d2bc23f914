import pytest

from services.note_link.NoteLinkService import NoteLinkService
from shared.clients.dms.paperless.DMSClientPaperless import DMSClientPaperless
from shared.helper.HelperConfig import HelperConfig
from shared.host.BufferTextSurface import BufferTextSurface
from shared.host.TextSurfaceInterface import EditorPosition
from shared.models.settings import LinkerSettings, MissingArtifactPolicy

URL = "https://dms.example.com/api/documents/42/preview"


def _service(helper_config, dms_client, file_store, notifier, **settings):
    return NoteLinkService(
        helper_config=helper_config,
        settings=LinkerSettings(storage_path="Paperless", **settings),
        dms_client=dms_client,
        file_store=file_store,
        notifier=notifier,
    )


@pytest.fixture
def service(helper_config, dms_client, file_store, notifier):
    return _service(helper_config, dms_client, file_store, notifier)


@pytest.mark.asyncio
async def test_replace_url_end_to_end(service, fake_paperless, tmp_path):
    fake_paperless.add_document(42, content=b"%PDF-42")
    fake_paperless.visible_after = 3
    surface = BufferTextSurface(f"See {URL} for details", cursor=EditorPosition(line=0, ch=10))

    changed = await service.replace_url_with_document(surface)

    assert changed is True
    assert surface.get_text() == "See ![[paperless-42.pdf]] for details"
    assert (tmp_path / "Paperless" / "paperless-42.pdf").read_bytes() == b"%PDF-42"
    assert fake_paperless.count("POST", "/api/share_links/") == 1


@pytest.mark.asyncio
async def test_replace_url_twice_fetches_once(service, fake_paperless):
    fake_paperless.add_document(42)
    await service.replace_url_with_document(BufferTextSurface(URL, cursor=EditorPosition(line=0, ch=0)))
    requests_after_first = len(fake_paperless.requests)

    surface = BufferTextSurface(URL, cursor=EditorPosition(line=0, ch=0))
    assert await service.replace_url_with_document(surface) is True

    assert surface.get_text() == "![[paperless-42.pdf]]"
    assert len(fake_paperless.requests) == requests_after_first


@pytest.mark.asyncio
async def test_no_url_at_cursor_leaves_note_unchanged(service, fake_paperless, notifier):
    surface = BufferTextSurface("nothing to see", cursor=EditorPosition(line=0, ch=3))

    assert await service.replace_url_with_document(surface) is False

    assert surface.get_text() == "nothing to see"
    assert fake_paperless.requests == []
    assert notifier.messages[-1][0] == "warning"


@pytest.mark.asyncio
async def test_unresolvable_link_with_skip_policy_inserts_nothing(service, fake_paperless, notifier, tmp_path):
    fake_paperless.add_document(42)
    fake_paperless.create_status = 500
    surface = BufferTextSurface(URL, cursor=EditorPosition(line=0, ch=5))

    assert await service.replace_url_with_document(surface) is False

    assert surface.get_text() == URL
    assert not (tmp_path / "Paperless" / "paperless-42.pdf").exists()
    assert notifier.messages[-1] == ("error", "Could not obtain a share link for document 42.")


@pytest.mark.asyncio
async def test_login_page_instead_of_share_links_leaves_note_unchanged(service, fake_paperless, notifier, tmp_path):
    fake_paperless.add_document(42)
    fake_paperless.share_links_body = "<html>login</html>"
    surface = BufferTextSurface(URL, cursor=EditorPosition(line=0, ch=5))

    assert await service.replace_url_with_document(surface) is False

    assert surface.get_text() == URL
    assert not (tmp_path / "Paperless" / "paperless-42.pdf").exists()
    assert notifier.messages[-1] == ("error", "Could not obtain a share link for document 42.")


@pytest.mark.asyncio
async def test_unresolvable_link_with_link_policy_inserts_details_link(helper_config, dms_client, file_store, notifier, fake_paperless):
    service = _service(helper_config, dms_client, file_store, notifier, missing_artifact_policy=MissingArtifactPolicy.LINK)
    fake_paperless.create_status = 500
    surface = BufferTextSurface("")

    assert await service.insert_document(surface, "42") is True
    assert surface.get_text() == "[paperless-42](https://dms.example.com/documents/42/details)"


@pytest.mark.asyncio
async def test_unresolvable_link_with_embed_policy_inserts_embed(helper_config, dms_client, file_store, notifier, fake_paperless):
    service = _service(helper_config, dms_client, file_store, notifier, missing_artifact_policy=MissingArtifactPolicy.EMBED)
    fake_paperless.create_status = 500
    surface = BufferTextSurface("")

    assert await service.insert_document(surface, "42") is True
    assert surface.get_text() == "![[paperless-42.pdf]]"


@pytest.mark.asyncio
async def test_custom_link_template(helper_config, dms_client, file_store, notifier, fake_paperless):
    service = _service(helper_config, dms_client, file_store, notifier, link_template="[{document_id}]({share_url}) ![[{path}]]")
    fake_paperless.add_document(42)
    fake_paperless.add_share_link(42, "abc")
    surface = BufferTextSurface("")

    await service.insert_document(surface, "42")

    assert surface.get_text() == "[42](https://dms.example.com/share/abc) ![[Paperless/paperless-42.pdf]]"


@pytest.mark.asyncio
async def test_malformed_base_url_aborts_before_any_request(logger, monkeypatch, fake_paperless, file_store, notifier):
    monkeypatch.setenv("DMS_PAPERLESS_BASE_URL", "dms.example.com")
    monkeypatch.setenv("DMS_PAPERLESS_API_KEY", "secret-token")
    client = DMSClientPaperless(helper_config=HelperConfig(logger=logger))
    await client.boot(transport=fake_paperless.transport())
    service = _service(HelperConfig(logger=logger), client, file_store, notifier)
    surface = BufferTextSurface("dms.example.com/api/documents/42/preview")
    try:
        assert await service.replace_url_with_document(surface) is False
        assert await service.refresh_cache() is False
        assert await service.get_share_link("42") is None
    finally:
        await client.close()

    assert fake_paperless.requests == []
    assert all(level == "error" for level, _ in notifier.messages)
    assert "not a valid http(s) URL" in notifier.messages[0][1]


@pytest.mark.asyncio
async def test_refresh_cache_failure_is_reported(service, fake_paperless, notifier):
    fake_paperless.failing_paths.add("/api/documents/")

    assert await service.refresh_cache(silent=False) is False
    assert notifier.messages[0] == ("info", "Refreshing paperless cache.")
    assert notifier.messages[-1][0] == "error"


@pytest.mark.asyncio
async def test_unreadable_document_listing_keeps_cache_empty(service, fake_paperless, notifier):
    fake_paperless.documents_body = "<html>login</html>"

    assert await service.refresh_cache() is False
    assert not service.listing_cache.is_filled()
    assert notifier.messages[-1][0] == "error"


@pytest.mark.asyncio
async def test_connection_test_reports_result(service, fake_paperless, notifier):
    assert await service.test_connection() is True
    assert notifier.messages[-1] == ("info", "Connection successful")


@pytest.mark.asyncio
async def test_browse_page_fills_tiles_concurrently(service, fake_paperless):
    fake_paperless.add_tag(1, "Invoice", color="#ff0000")
    for document_id in range(1, 21):
        fake_paperless.add_document(document_id, tags=[1] if document_id % 2 else [])

    first = await service.get_browse_page(page=0)
    second = await service.get_browse_page(page=1)

    assert [t.document_id for t in first] == [str(i) for i in range(20, 4, -1)]
    assert [t.document_id for t in second] == ["4", "3", "2", "1"]
    assert first[1].tags[0].name == "Invoice"
    assert first[0].tags == []
    assert first[0].thumbnail == b"thumb-20"


@pytest.mark.asyncio
async def test_browse_tile_failure_is_isolated(service, fake_paperless):
    for document_id in (1, 2):
        fake_paperless.add_document(document_id)
    fake_paperless.failing_paths.add("/api/documents/2/thumb/")

    tiles = await service.get_browse_page(page=0, page_size=5)

    assert tiles[0].document_id == "2" and tiles[0].thumbnail is None
    assert tiles[1].thumbnail == b"thumb-1"
