"""Cached navigation menus.

All menu data lives in one namespace under these keys:

* ``ids``: index of every menu id, maintained incrementally
* ``locations``: theme location -> menu id
* ``menu-<id>``: the menu term
* ``items-<id>``: the menu's items

Menu creation, update and deletion events keep the keys in step; saving any
piece of content drops every menu's cached object and items.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from content_cache.cache.serialization import DataclassListSerializer, DataclassSerializer
from content_cache.cache.wrapper import (
    DEFAULT_TTL_SECONDS,
    CacheIndex,
    ReadThroughCache,
    always_cacheable,
    is_cacheable_result,
)
from content_cache.hooks import LifecycleEvent
from content_cache.models import MenuItem, MenuLookup, MenuTerm

if TYPE_CHECKING:
    from collections.abc import Callable

    from content_cache.cache.protocol import CacheStore
    from content_cache.hooks import LifecycleHooks

logger = logging.getLogger(__name__)

KEY_MENU_IDS = "ids"
KEY_LOCATIONS = "locations"
KEY_MENU_OBJECTS = "menu-"
KEY_MENU_ITEMS = "items-"

MENU_CONTENT_TYPE = "nav_menu"


class MenuSource(Protocol):
    """Host framework access to navigation menus."""

    def list_menu_ids(self) -> list[int]: ...

    def get_menu_locations(self) -> dict[str, int]: ...

    def get_menu(self, menu_id: int) -> MenuTerm | None: ...

    def get_menu_items(self, menu_id: int, **args: object) -> list[MenuItem]: ...


def _is_dict(value: object) -> bool:
    return isinstance(value, dict)


def _is_list(value: object) -> bool:
    return isinstance(value, list)


def _is_menu_term(value: object) -> bool:
    return isinstance(value, MenuTerm)


def _is_not_none(value: object) -> bool:
    return value is not None


class CachedMenu:
    """Menu lookups cached per namespace.

    Args:
        store: Backing cache store.
        source: Host framework menu access.
        namespace: Unique cache group, e.g. ``"mytheme.menus"``.
        ttl_seconds: TTL for every entry (default 24h).
    """

    def __init__(
        self,
        store: CacheStore,
        source: MenuSource,
        namespace: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._source = source
        self._ids: CacheIndex[int] = CacheIndex(
            store, namespace, KEY_MENU_IDS, self._scan_menu_ids, ttl_seconds=ttl_seconds
        )
        self._locations: ReadThroughCache[dict[str, int]] = ReadThroughCache(
            store,
            namespace,
            ttl_seconds=ttl_seconds,
            is_cacheable=always_cacheable,
            is_hit=_is_dict,
        )
        self._menus: ReadThroughCache[MenuTerm | None] = ReadThroughCache(
            store,
            namespace,
            ttl_seconds=ttl_seconds,
            serializer=DataclassSerializer(MenuTerm),
            is_cacheable=_is_not_none,
            is_hit=_is_menu_term,
        )
        self._items: ReadThroughCache[list[MenuItem]] = ReadThroughCache(
            store,
            namespace,
            ttl_seconds=ttl_seconds,
            serializer=DataclassListSerializer(MenuItem, tuple_fields=("classes",)),
            is_cacheable=is_cacheable_result,
            is_hit=_is_list,
        )

    @property
    def namespace(self) -> str:
        return self._locations.namespace

    def _scan_menu_ids(self) -> list[int]:
        menu_ids = [int(menu_id) for menu_id in self._source.list_menu_ids()]
        logger.debug("Scanned %d menus for %s", len(menu_ids), self.namespace)
        return menu_ids

    # -- Reads -----------------------------------------------------------------

    def get_menu_ids(self) -> list[int]:
        """Every menu id, scanning the host only when the index is absent."""
        return self._ids.members()

    def get_menu_locations(self) -> dict[str, int]:
        return self._locations.get(KEY_LOCATIONS, lambda _key: self._source.get_menu_locations())

    def get_menu_by_id(self, menu_id: int) -> MenuTerm | None:
        menu_id = int(menu_id)
        return self._menus.get(f"{KEY_MENU_OBJECTS}{menu_id}", lambda _key: self._source.get_menu(menu_id))

    def get_menu_object(self, theme_location: str) -> MenuTerm | None:
        """The menu assigned to ``theme_location``, or ``None`` if nothing is assigned."""
        locations = self.get_menu_locations()
        if theme_location not in locations:
            return None
        return self.get_menu_by_id(locations[theme_location])

    def get_menu_items(self, menu_id: int, **args: object) -> list[MenuItem]:
        """A menu's items. A cached empty list is a hit; an empty fetch is never cached."""
        menu_id = int(menu_id)
        return self._items.get(
            f"{KEY_MENU_ITEMS}{menu_id}",
            lambda _key: self._source.get_menu_items(menu_id, **args),
        )

    def resolve_menu[R](
        self,
        theme_location: str = "",
        fallback: Callable[[str], R] | None = None,
        *,
        menu_id: int | None = None,
    ) -> MenuLookup | R | None:
        """Resolve a menu and its items, falling back when there is nothing to show.

        The menu is looked up by ``menu_id`` when given, otherwise by
        ``theme_location``. ``fallback(theme_location)`` is returned when no
        menu resolves, or when the menu has no items and no theme location
        was requested. A theme-located menu with no items resolves to a
        ``MenuLookup`` with empty ``items``.
        """
        if menu_id is not None:
            menu = self.get_menu_by_id(menu_id)
        else:
            menu = self.get_menu_object(theme_location)

        items: list[MenuItem] | None = None
        if menu is not None:
            items = self.get_menu_items(menu.term_id, update_post_term_cache=False)

        wants_fallback = menu is None or (items is not None and not items and not theme_location)
        if wants_fallback and fallback is not None:
            logger.debug("Menu fallback for location %r in %s", theme_location, self.namespace)
            return fallback(theme_location)
        if menu is None:
            return None

        ordered = sorted(items or [], key=lambda item: item.menu_order)
        return MenuLookup(menu=menu, items=tuple(ordered))

    # -- Lifecycle -------------------------------------------------------------

    def add_menu(self, menu_id: int) -> None:
        """A menu was created: add its id to the cached index."""
        self._ids.add(int(menu_id))

    def delete_menu_cache(self, menu_id: int) -> None:
        """A menu was updated: drop its object, its items and the location index."""
        menu_id = int(menu_id)
        self._menus.invalidate(f"{KEY_MENU_OBJECTS}{menu_id}")
        self._items.invalidate(f"{KEY_MENU_ITEMS}{menu_id}")
        self._locations.invalidate(KEY_LOCATIONS)

    def delete_menu(self, menu_id: int) -> None:
        """A menu was deleted: remove it from the index and drop its entries."""
        menu_id = int(menu_id)
        self._ids.remove(menu_id)
        self.delete_menu_cache(menu_id)

    def delete_all_menus_caches(self, _post_id: int | None = None) -> None:
        """Content was saved: drop every indexed menu's entries."""
        for menu_id in self.get_menu_ids():
            self.delete_menu_cache(menu_id)

    def register(self, hooks: LifecycleHooks) -> None:
        hooks.subscribe(LifecycleEvent.CONTENT_CREATED, self.add_menu, content_type=MENU_CONTENT_TYPE)
        hooks.subscribe(LifecycleEvent.CONTENT_UPDATED, self.delete_menu_cache, content_type=MENU_CONTENT_TYPE)
        hooks.subscribe(LifecycleEvent.CONTENT_DELETED, self.delete_menu, content_type=MENU_CONTENT_TYPE)
        hooks.subscribe(LifecycleEvent.CONTENT_SAVED, self.delete_all_menus_caches)
