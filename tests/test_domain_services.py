"""
Tests for posts, journeys, owner and user services.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import BASE_URL, REQUEST_TARGET, make_response, user_dict
from getway_client.domains.errors import GenericApiError, HttpStatusError
from getway_client.domains.models import UserRecord
from getway_client.infrastructure.api.api_client import ApiClient
from getway_client.infrastructure.storage.token_store import TokenStore
from getway_client.services.journey_service import JourneyService
from getway_client.services.owner_service import OwnerService
from getway_client.services.posts_service import PostsService
from getway_client.services.user_service import UserService

POST = {"id": "p1", "title": "Bus 12 is late", "category": "route-updates", "likes": 0}


def _ok(data: dict) -> dict:
    return {"status": "success", "message": "ok", "data": data}


# --- posts ---

def test_get_posts_is_public_and_joins_keywords(api: ApiClient, tokens: TokenStore) -> None:
    tokens.set_token("abc")
    data = {"posts": [POST], "pagination": {"page": 1, "limit": 10, "total": 1, "pages": 1}}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok(data))) as mock_request:
        out = PostsService(api).get_posts(page=1, keywords=["bus", "delay"], sort_by="createdAt")

    assert out["posts"][0]["id"] == "p1"
    kwargs = mock_request.call_args.kwargs
    assert "Authorization" not in kwargs["headers"]
    assert kwargs["params"]["keywords"] == "bus,delay"
    assert kwargs["params"]["sortBy"] == "createdAt"
    assert kwargs["params"]["category"] is None


def test_create_post_with_image(api: ApiClient, tokens: TokenStore, tmp_path: Path) -> None:
    tokens.set_token("abc")
    image = tmp_path / "stop.png"
    image.write_bytes(b"\x89PNG fake")
    with patch(REQUEST_TARGET, return_value=make_response(201, _ok({"post": POST}))) as mock_request:
        out = PostsService(api).create_post(
            "Bus 12 is late", "Again.", "route-updates", keywords=["bus", "late"], image_path=image,
        )

    assert out == POST
    args, kwargs = mock_request.call_args
    assert args == ("POST", f"{BASE_URL}/posts")
    parts = kwargs["files"]
    names = [name for name, _ in parts]
    assert names == ["title", "content", "category", "keywords[]", "keywords[]", "image"]
    filename, _, content_type = parts[-1][1]
    assert filename == "stop.png"
    assert content_type == "image/png"
    assert "Content-Type" not in kwargs["headers"]


def test_create_post_without_image_is_still_multipart(api: ApiClient) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(201, _ok({"post": POST}))) as mock_request:
        PostsService(api).create_post("t", "c", "community")
    assert mock_request.call_args.kwargs["files"][0] == ("title", (None, "t"))


def test_create_post_rejects_unknown_category(api: ApiClient) -> None:
    with patch(REQUEST_TARGET) as mock_request:
        with pytest.raises(ValueError, match="category"):
            PostsService(api).create_post("t", "c", "gossip")
    mock_request.assert_not_called()


def test_toggle_like_and_comment(api: ApiClient) -> None:
    svc = PostsService(api)
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"isLiked": True, "likeCount": 4}))):
        assert svc.toggle_like("p1") == {"isLiked": True, "likeCount": 4}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"commentCount": 2}))) as mock_request:
        assert svc.add_comment("p1", "Same here")["commentCount"] == 2
    assert mock_request.call_args.kwargs["json"] == {"content": "Same here"}


def test_missing_data_raises(api: ApiClient) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, {"status": "success", "message": ""})):
        with pytest.raises(GenericApiError, match="Failed to load trending posts"):
            PostsService(api).get_trending_posts(limit=5)


# --- journeys ---

@pytest.mark.parametrize(
    "body",
    [
        {"success": True, "data": {"journeys": [{"tripId": "t1"}], "total": 1}},
        {"journeys": [{"tripId": "t1"}], "total": 1},
        {"data": {"journeys": [{"tripId": "t1"}], "total": 1}},
    ],
)
def test_get_user_journeys_accepts_known_shapes(api: ApiClient, body: dict) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, body)):
        out = JourneyService(api).get_user_journeys(page=1, limit=10)
    assert out["journeys"][0]["tripId"] == "t1"
    assert out["total"] == 1


def test_get_user_journeys_invalid_shape(api: ApiClient) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, {"success": True, "items": []})):
        with pytest.raises(GenericApiError, match="Invalid response format"):
            JourneyService(api).get_user_journeys()


def test_scientist_data_failure_flag(api: ApiClient) -> None:
    body = {"success": False, "message": "Database unavailable"}
    with patch(REQUEST_TARGET, return_value=make_response(200, body)) as mock_request:
        with pytest.raises(GenericApiError, match="Database unavailable"):
            JourneyService(api).get_scientist_data()
    assert "Authorization" not in mock_request.call_args.kwargs["headers"]


def test_scientist_data_returns_whole_body(api: ApiClient) -> None:
    body = {"success": True, "data": [{"tripId": "t1"}], "metadata": {"total": 1}}
    with patch(REQUEST_TARGET, return_value=make_response(200, body)):
        assert JourneyService(api).get_scientist_data() == body


def test_create_and_delete_journey(api: ApiClient) -> None:
    svc = JourneyService(api)
    created = {"success": True, "message": "Journey recorded successfully", "data": {"tripId": "t9"}}
    with patch(REQUEST_TARGET, return_value=make_response(201, created)):
        assert svc.create_journey({"tripId": "t9"})["tripId"] == "t9"
    deleted = {"success": True, "message": "Journey deleted successfully"}
    with patch(REQUEST_TARGET, return_value=make_response(200, deleted)) as mock_request:
        assert svc.delete_journey("t9") == {"message": "Journey deleted successfully"}
    assert mock_request.call_args.args == ("DELETE", f"{BASE_URL}/journeys/t9")


# --- owner / users ---

def test_pending_scientists(api: ApiClient) -> None:
    data = {"scientists": [{"id": "s1", "name": "Dr. K"}], "count": 1}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok(data))) as mock_request:
        out = OwnerService(api).get_pending_scientists()
    assert out == [{"id": "s1", "name": "Dr. K"}]
    assert mock_request.call_args.args[1] == f"{BASE_URL}/owner/pending-scientists"


def test_approve_scientist_forbidden(api: ApiClient) -> None:
    body = {"status": "error", "message": "User role customer is not authorized to access this route"}
    with patch(REQUEST_TARGET, return_value=make_response(403, body)):
        with pytest.raises(HttpStatusError) as info:
            OwnerService(api).approve_scientist("s1")
    assert info.value.status_code == 403


def test_update_me_refreshes_cached_user(api: ApiClient, tokens: TokenStore) -> None:
    updated = user_dict(name="Asha R.")
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"user": updated}))) as mock_request:
        out = UserService(api, tokens).update_me({"name": "Asha R."})
    assert out["name"] == "Asha R."
    assert tokens.get_user().name == "Asha R."
    assert mock_request.call_args.args[0] == "PUT"


# --- remaining operations ---

def test_get_post_sends_token(api: ApiClient, tokens: TokenStore) -> None:
    tokens.set_token("abc")
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"post": POST}))) as mock_request:
        assert PostsService(api).get_post("p1") == POST
    args, kwargs = mock_request.call_args
    assert args == ("GET", f"{BASE_URL}/posts/p1")
    assert kwargs["headers"]["Authorization"] == "Bearer abc"


def test_update_post(api: ApiClient) -> None:
    updated = dict(POST, title="Bus 12 back on time")
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"post": updated}))) as mock_request:
        out = PostsService(api).update_post("p1", {"title": "Bus 12 back on time", "category": "route-updates"})
    assert out["title"] == "Bus 12 back on time"
    args, kwargs = mock_request.call_args
    assert args == ("PUT", f"{BASE_URL}/posts/p1")
    assert kwargs["json"]["category"] == "route-updates"


def test_update_post_rejects_unknown_category(api: ApiClient) -> None:
    with patch(REQUEST_TARGET) as mock_request:
        with pytest.raises(ValueError):
            PostsService(api).update_post("p1", {"category": "gossip"})
    mock_request.assert_not_called()


def test_delete_post(api: ApiClient) -> None:
    body = {"status": "success", "message": "Post deleted successfully"}
    with patch(REQUEST_TARGET, return_value=make_response(200, body)) as mock_request:
        assert PostsService(api).delete_post("p1") is None
    assert mock_request.call_args.args == ("DELETE", f"{BASE_URL}/posts/p1")


def test_delete_post_not_owner(api: ApiClient) -> None:
    body = {"status": "error", "message": "Not authorized to delete this post"}
    with patch(REQUEST_TARGET, return_value=make_response(403, body)):
        with pytest.raises(HttpStatusError, match="Not authorized"):
            PostsService(api).delete_post("p1")


def test_get_my_posts(api: ApiClient, tokens: TokenStore) -> None:
    tokens.set_token("abc")
    data = {"posts": [POST], "pagination": {"page": 2, "limit": 5, "total": 6, "pages": 2}}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok(data))) as mock_request:
        out = PostsService(api).get_my_posts(page=2, limit=5)
    assert out["pagination"]["page"] == 2
    kwargs = mock_request.call_args.kwargs
    assert mock_request.call_args.args[1] == f"{BASE_URL}/posts/user/my-posts"
    assert kwargs["params"]["page"] == 2
    assert kwargs["headers"]["Authorization"] == "Bearer abc"


@pytest.mark.parametrize(
    "call, field",
    [
        (lambda api: PostsService(api).get_trending_posts(), "posts"),
        (lambda api: PostsService(api).get_post("p1"), "post"),
        (lambda api: PostsService(api).update_post("p1", {"title": "t"}), "post"),
        (lambda api: PostsService(api).create_post("t", "c", "community"), "post"),
        (lambda api: OwnerService(api).approve_scientist("s1"), "scientist"),
        (lambda api: OwnerService(api).disapprove_scientist("s1"), "scientist"),
        (lambda api: OwnerService(api).get_pending_scientists(), "scientists"),
    ],
)
def test_success_without_expected_field_is_generic_error(api: ApiClient, call, field: str) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"unexpected": True}))):
        with pytest.raises(GenericApiError, match=repr(field)):
            call(api)


def test_get_analytics_passes_filters(api: ApiClient) -> None:
    body = {"success": True, "data": {"summary": {"totalTrips": 12}}}
    with patch(REQUEST_TARGET, return_value=make_response(200, body)) as mock_request:
        out = JourneyService(api).get_analytics(start_date="2024-01-01", end_date="2024-01-31", user_id="u1")
    assert out == body
    kwargs = mock_request.call_args.kwargs
    assert mock_request.call_args.args[1] == f"{BASE_URL}/journeys/analytics"
    assert kwargs["params"] == {"startDate": "2024-01-01", "endDate": "2024-01-31", "userId": "u1"}


def test_get_analytics_failure_flag(api: ApiClient) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, {"success": False, "message": "No data"})):
        with pytest.raises(GenericApiError, match="No data"):
            JourneyService(api).get_analytics()


@pytest.mark.parametrize(
    "body",
    [
        {"success": False, "message": "Database unavailable", "journeys": []},
        {"success": False, "message": "Database unavailable", "data": {"journeys": []}},
        {"status": "error", "message": "Database unavailable", "data": {"journeys": []}},
    ],
)
def test_get_user_journeys_failure_flag_wins_over_shape(api: ApiClient, body: dict) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, body)):
        with pytest.raises(GenericApiError, match="Database unavailable"):
            JourneyService(api).get_user_journeys()


def test_get_user_journeys_failure_without_message(api: ApiClient) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, {"success": False, "journeys": []})):
        with pytest.raises(GenericApiError, match="Failed to load journeys"):
            JourneyService(api).get_user_journeys()


def test_disapprove_scientist(api: ApiClient) -> None:
    scientist = {"id": "s1", "isApproved": False}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"scientist": scientist}))) as mock_request:
        assert OwnerService(api).disapprove_scientist("s1") == scientist
    assert mock_request.call_args.args == ("POST", f"{BASE_URL}/owner/disapprove-scientist/s1")


def test_get_scientists(api: ApiClient) -> None:
    data = {"scientists": [], "counts": {"approved": 2, "pending": 1, "active": 2}}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok(data))) as mock_request:
        assert OwnerService(api).get_scientists()["counts"]["pending"] == 1
    assert mock_request.call_args.args[1] == f"{BASE_URL}/owner/scientists"


def test_get_organization_scientists(api: ApiClient) -> None:
    data = {"scientists": [{"id": "s1"}], "count": 1}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok(data))) as mock_request:
        assert OwnerService(api).get_organization_scientists() == data
    assert mock_request.call_args.args[1] == f"{BASE_URL}/users/organization-scientists"


def test_get_stats(api: ApiClient) -> None:
    data = {"totalUsers": 10, "customers": 7, "scientists": 2, "owners": 1}
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok(data))) as mock_request:
        assert OwnerService(api).get_stats() == data
    assert mock_request.call_args.args[1] == f"{BASE_URL}/users/stats"


def test_get_stats_failure_envelope(api: ApiClient) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, {"status": "error", "message": "Stats offline"})):
        with pytest.raises(GenericApiError, match="Stats offline"):
            OwnerService(api).get_stats()


def test_get_me(api: ApiClient, tokens: TokenStore) -> None:
    tokens.set_token("abc")
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"user": user_dict()}))) as mock_request:
        assert UserService(api, tokens).get_me()["email"] == "a@b.com"
    assert mock_request.call_args.args == ("GET", f"{BASE_URL}/users/me")
    assert mock_request.call_args.kwargs["headers"]["Authorization"] == "Bearer abc"


def test_get_me_without_user_is_generic_error(api: ApiClient, tokens: TokenStore) -> None:
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({}))):
        with pytest.raises(GenericApiError, match="'user'"):
            UserService(api, tokens).get_me()


def test_update_me_without_user_keeps_cache(api: ApiClient, tokens: TokenStore) -> None:
    tokens.set_user(UserRecord.from_dict(user_dict()))
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"updated": True}))):
        out = UserService(api, tokens).update_me({"phone": "555"})
    assert out == {"updated": True}
    assert tokens.get_user().name == "Asha Rao"


def test_update_me_malformed_user_is_generic_error(api: ApiClient, tokens: TokenStore) -> None:
    tokens.set_user(UserRecord.from_dict(user_dict()))
    with patch(REQUEST_TARGET, return_value=make_response(200, _ok({"user": user_dict(role="admin")}))):
        with pytest.raises(GenericApiError, match="Unexpected response"):
            UserService(api, tokens).update_me({"name": "X"})
    assert tokens.get_user().name == "Asha Rao"
