from __future__ import annotations

from dataclasses import asdict
from typing import Any, ClassVar

from content_cache.exceptions import PostTypeMismatchError
from content_cache.models import Post

REVISION_POST_TYPE = "revision"


class PostDecorator:
    """Base class for objects that decorate a post of one expected type.

    Subclasses set ``post_type`` and add their own accessors. The wrapped post
    is only reachable through ``post``; no attribute lookups are forwarded.
    Revisions of the expected type are accepted too.

    Raises:
        PostTypeMismatchError: If the post is neither of ``post_type`` nor a revision.
    """

    post_type: ClassVar[str] = "post"

    def __init__(self, post: Post) -> None:
        if post.post_type not in (self.post_type, REVISION_POST_TYPE):
            raise PostTypeMismatchError(self.post_type, post.post_type)
        self._post = post

    @property
    def post(self) -> Post:
        return self._post

    @property
    def id(self) -> int:
        return int(self._post.id)

    @property
    def title(self) -> str:
        return self._post.title

    def to_dict(self) -> dict[str, Any]:
        return asdict(self._post)
