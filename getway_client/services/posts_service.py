"""Community posts: listing, creation with optional image, likes and comments."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any

from getway_client.domains.models import POST_CATEGORIES
from getway_client.infrastructure.api.api_client import ApiClient
from getway_client.utils.logger import get_logger

logger = get_logger()


def _check_category(category: str) -> None:
    if category not in POST_CATEGORIES:
        raise ValueError(f"Unknown post category {category!r}; expected one of {', '.join(POST_CATEGORIES)}")


class PostsService:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def get_posts(
        self,
        page: int | None = None,
        limit: int | None = None,
        category: str | None = None,
        keywords: list[str] | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
        author: str | None = None,
    ) -> dict[str, Any]:
        """
        List posts. Public endpoint, sent without a token.

        Returns:
            Dict with "posts" and "pagination".
        """
        params = {
            "page": page,
            "limit": limit,
            "category": category,
            "keywords": ",".join(keywords) if keywords else None,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "author": author,
        }
        response = self._api.get("/posts", params=params, include_auth=False)
        return response.require_data("Failed to load posts")

    def get_post(self, post_id: str) -> dict[str, Any]:
        # Authenticated so the server can report isLikedByUser.
        response = self._api.get(f"/posts/{post_id}")
        return response.require_field("post", "Failed to load post")

    def create_post(
        self,
        title: str,
        content: str,
        category: str,
        keywords: list[str] | None = None,
        image_path: Path | str | None = None,
    ) -> dict[str, Any]:
        """
        Publish a post as multipart form data, attaching an image file if given.

        Raises:
            ValueError: Unknown category.
            OSError: The image file cannot be read.
        """
        _check_category(category)
        # (None, value) parts are plain form fields inside the multipart body.
        parts: list[tuple[str, Any]] = [
            ("title", (None, title)),
            ("content", (None, content)),
            ("category", (None, category)),
        ]
        for kw in keywords or []:
            parts.append(("keywords[]", (None, kw)))

        if not image_path:
            response = self._api.post("/posts", files=parts)
            return response.require_field("post", "Failed to create post")

        path = Path(image_path)
        content_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
        with open(path, "rb") as fh:
            parts.append(("image", (path.name, fh, content_type)))
            response = self._api.post("/posts", files=parts)
        logger.info("Created post with image %s", path.name)
        return response.require_field("post", "Failed to create post")

    def update_post(self, post_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        if "category" in updates:
            _check_category(updates["category"])
        response = self._api.put(f"/posts/{post_id}", updates)
        return response.require_field("post", "Failed to update post")

    def delete_post(self, post_id: str) -> None:
        self._api.delete(f"/posts/{post_id}")

    def toggle_like(self, post_id: str) -> dict[str, Any]:
        """Returns {"isLiked": bool, "likeCount": int}."""
        response = self._api.post(f"/posts/{post_id}/like")
        return response.require_data("Failed to update like")

    def add_comment(self, post_id: str, content: str) -> dict[str, Any]:
        response = self._api.post(f"/posts/{post_id}/comment", {"content": content})
        return response.require_data("Failed to add comment")

    def get_trending_posts(self, limit: int | None = None) -> list[dict[str, Any]]:
        response = self._api.get("/posts/trending", params={"limit": limit}, include_auth=False)
        return response.require_field("posts", "Failed to load trending posts")

    def get_my_posts(
        self,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> dict[str, Any]:
        params = {"page": page, "limit": limit, "sortBy": sort_by, "sortOrder": sort_order}
        response = self._api.get("/posts/user/my-posts", params=params)
        return response.require_data("Failed to load your posts")
