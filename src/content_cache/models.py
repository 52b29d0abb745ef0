from dataclasses import dataclass, field

from content_cache.exceptions import InvalidKeyError


@dataclass(frozen=True)
class Post:
    id: int
    post_type: str = "post"
    title: str = ""


@dataclass(frozen=True)
class MenuTerm:
    term_id: int
    name: str
    slug: str


@dataclass(frozen=True)
class MenuItem:
    id: int
    title: str
    url: str
    menu_order: int = 0
    menu_item_parent: int = 0
    classes: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MenuLookup:
    """A menu resolved from a theme location or id, along with its items."""

    menu: MenuTerm
    items: tuple[MenuItem, ...] = ()


def post_id_from(post: object) -> int:
    """Return the id of a ``Post``, an int id or a numeric string.

    Raises:
        InvalidKeyError: For anything else (including bools).
    """
    if isinstance(post, Post):
        return int(post.id)
    if isinstance(post, bool):
        raise InvalidKeyError(f"Not a post or post id: {post!r}")
    if isinstance(post, int):
        return post
    if isinstance(post, str):
        try:
            return int(post.strip())
        except ValueError:
            raise InvalidKeyError(f"Not a numeric post id: {post!r}") from None
    raise InvalidKeyError(f"Not a post or post id: {post!r}")
