"""Tests for the backend clients and their shared envelope handling."""

from __future__ import annotations

import json

import pytest

from conftest import FakeResponse, envelope, network_down
from mediadesk.models import FilePayload
from mediadesk.services.api_client import (
    KIND_API,
    KIND_NETWORK,
    KIND_UNAUTHENTICATED,
    ApiError,
)
from mediadesk.services.auth_service import AuthService
from mediadesk.services.media_service import MediaService
from mediadesk.services.options_service import OptionsService
from mediadesk.services.tag_service import TagService
from mediadesk.services.user_service import ProfileUpdate, UserService
from mediadesk.utils.session import SessionContext

SIGNED_IN = SessionContext(access_token="tok-123", user={"id": 7})

MEDIA_ROW = {
    "id": 11,
    "user_id": 7,
    "file_path": "media/7/cat.jpg",
    "file_name": "cat-1714557600.jpg",
    "file_type": "image",
    "file_extension": "jpg",
    "number_of_views": "4",
    "file_size": "2048",
    "original_name": "cat.jpg",
    "created_at": "2024-05-01T10:00:00.000Z",
    "updated_at": "2024-05-01T10:00:00.000Z",
}


def test_user_media_without_token_fails_before_any_request(backend, app_config):
    media = MediaService(SessionContext(), config=app_config, http=backend)

    result = media.get_user_media(7)

    assert result.ok is False
    assert result.error.kind == KIND_UNAUTHENTICATED
    assert result.error.status == 401
    assert result.error.path == "/api/users/media"
    assert backend.calls == []


def test_bearer_token_is_forwarded(backend, app_config):
    backend.reply("GET", "/tags", envelope([{"id": 3, "name": "Holiday"}]))
    tags = TagService(SIGNED_IN, config=app_config, http=backend)

    result = tags.get_tags()

    assert result.ok
    assert result.data[0].name == "Holiday"
    assert backend.calls[0]["headers"]["Authorization"] == "Bearer tok-123"


def test_error_envelope_becomes_api_failure(backend, app_config):
    backend.reply(
        "GET",
        "/users/7/media",
        envelope(status=403, success=False, message="Forbidden resource", path="/api/users/7/media"),
    )
    media = MediaService(SIGNED_IN, config=app_config, http=backend)

    result = media.get_user_media(7)

    assert result.error.kind == KIND_API
    assert result.error.status == 403
    assert result.error.message == "Forbidden resource"
    assert result.error.path == "/api/users/7/media"


def test_success_false_on_2xx_is_still_a_failure(backend, app_config):
    backend.reply("GET", "/media", envelope(status=200, success=False, message="Quota exceeded"))
    media = MediaService(SIGNED_IN, config=app_config, http=backend)

    result = media.list_media()

    assert result.ok is False
    assert result.error.message == "Quota exceeded"
    assert result.error.path == "/api/media"


def test_network_failure_is_collapsed_to_generic_error(backend, app_config):
    backend.reply("GET", "/tags", network_down())
    tags = TagService(SIGNED_IN, config=app_config, http=backend)

    result = tags.get_tags()

    assert result.error.kind == KIND_NETWORK
    assert result.error.status == 500
    assert result.error.message == "Network error"
    assert result.error.path == "/api/tags"


def test_unparseable_body_is_a_network_error(backend, app_config):
    backend.reply("DELETE", "/media/11", FakeResponse(502, "<html>bad gateway</html>"))
    media = MediaService(SIGNED_IN, config=app_config, http=backend)

    result = media.delete_media(11)

    assert result.error.kind == KIND_NETWORK
    assert result.error.path == "/api/media"


def test_unwrap_raises_typed_error(backend, app_config):
    media = MediaService(SessionContext(), config=app_config, http=backend)

    with pytest.raises(ApiError) as excinfo:
        media.list_media().unwrap()

    assert excinfo.value.status == 401
    assert excinfo.value.path == "/api/media"
    assert excinfo.value.message == "Not authenticated"


def test_register_needs_no_token(backend, app_config):
    backend.reply("POST", "/auth/register", envelope({"access_token": "new-tok", "user": {"id": 9}}, status=201))
    auth = AuthService(SessionContext(), config=app_config, http=backend)

    result = auth.register("new@example.com", "s3cret-pass")

    assert result.data == {"access_token": "new-tok", "user": {"id": 9}}
    call = backend.calls[0]
    assert "Authorization" not in call["headers"]
    assert call["json"] == {"email": "new@example.com", "password": "s3cret-pass"}


def test_upload_sends_whole_batch_in_one_request(backend, app_config):
    backend.reply("POST", "/media", envelope([MEDIA_ROW], status=201))
    media = MediaService(SIGNED_IN, config=app_config, http=backend)
    files = [
        FilePayload("cat.jpg", "image/jpeg", b"\xff\xd8jpeg"),
        FilePayload("notes.pdf", "application/pdf", b"%PDF-1.4"),
    ]

    result = media.upload_media(files, tag_id=3)

    assert result.data[0].original_name == "cat.jpg"
    assert result.data[0].byte_size == 2048
    assert len(backend.calls) == 1
    call = backend.calls[0]
    assert [name for name, _ in call["files"]] == ["files", "files"]
    assert call["data"] == {"tagId": "3"}


def test_profile_update_is_multipart_with_json_skills(backend, app_config):
    backend.reply("PATCH", "/users/7", envelope({"id": 7, "fullName": "Ada"}))
    users = UserService(SIGNED_IN, config=app_config, http=backend)
    update = ProfileUpdate(
        full_name="Ada",
        date_of_birth="1990-12-10",
        resume_summary="Engines and more",
        preferred_location_id=2,
        programming_skills=[1, 3],
    )

    result = users.update_user_profile(7, update)

    assert result.data["fullName"] == "Ada"
    call = backend.calls[0]
    assert call["data"]["preferredLocationId"] == "2"
    assert json.loads(call["data"]["programmingSkills"]) == [1, 3]
    assert call["files"] is None


def test_profile_options_report_each_source(backend, app_config):
    backend.reply("GET", "/preferred-locations", envelope([{"id": 2, "locationName": "London"}]))
    backend.reply("GET", "/programming-skills", network_down())
    options = OptionsService(SIGNED_IN, config=app_config, http=backend)

    fetched = options.fetch_profile_options()

    assert fetched.locations.ok
    assert fetched.locations.data[0].name == "London"
    assert fetched.skills.ok is False
    assert fetched.complete is False


def test_malformed_tag_items_are_skipped(backend, app_config):
    backend.reply("GET", "/tags", envelope([{"id": 3, "name": "Holiday"}, 5, "work"]))
    tags = TagService(SIGNED_IN, config=app_config, http=backend)

    result = tags.get_tags()

    assert result.ok
    assert [tag.id for tag in result.data] == [3]


@pytest.mark.parametrize("payload", [None, "Holiday", 5])
def test_non_list_payloads_decode_to_empty_lists(backend, app_config, payload):
    backend.reply("GET", "/tags", envelope(payload))
    backend.reply("GET", "/users/7/media", envelope(payload))
    backend.reply("GET", "/preferred-locations", envelope(payload))

    assert TagService(SIGNED_IN, config=app_config, http=backend).get_tags().data == []
    assert MediaService(SIGNED_IN, config=app_config, http=backend).get_user_media(7).data == []
    assert OptionsService(SIGNED_IN, config=app_config, http=backend).get_preferred_locations().data == []


def test_register_with_unexpected_payload_carries_no_session(backend, app_config):
    backend.reply("POST", "/auth/register", envelope(["new-tok"], status=201))
    auth = AuthService(SessionContext(), config=app_config, http=backend)

    result = auth.register("ada@analytical.io", "correct-horse")

    assert result.ok
    assert result.data == {"access_token": None, "user": None}
