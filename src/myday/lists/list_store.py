# src/myday/lists/list_store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from enum import StrEnum

from ..core.events import ChangeNotifier
from .list_models import ListTheme, SystemList, SystemListId, UserList, color, default_system_lists
from .themes import DEFAULT_USER_LIST_COLOR, text_color_for

logger = logging.getLogger(__name__)

_SYSTEM_IDS = frozenset(s.value for s in SystemListId)


class DuplicateListNameError(ValueError):
    """A user list with this exact name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"List name already exists: {name!r}")
        self.name = name


class MovePosition(StrEnum):
    BEFORE = "before"
    AFTER = "after"


class ListStore:
    """
    System (smart) lists and user lists.

    This is plain storage: counts are written from outside (count synchronizer)
    and never derived here. Structural changes are published to subscribers;
    count writes are not, since they are derived state.
    """

    def __init__(self) -> None:
        self._system: list[SystemList] = default_system_lists()
        self._user: list[UserList] = []
        self._changes = ChangeNotifier("ListStore")

    # ---- low-level helpers ----

    def _find_system(self, list_id: str) -> SystemList | None:
        for lst in self._system:
            if lst.id == list_id:
                return lst
        return None

    def _find_user(self, list_id: str) -> UserList | None:
        for lst in self._user:
            if lst.id == list_id:
                return lst
        return None

    def _renumber(self) -> None:
        for index, lst in enumerate(self._user):
            lst.order = index

    def _changed(self) -> None:
        self._changes.publish()

    # ---- reads ----

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        return self._changes.subscribe(listener)

    @property
    def system_lists(self) -> list[SystemList]:
        return list(self._system)

    @property
    def user_lists(self) -> list[UserList]:
        return list(self._user)

    def get_system_list(self, list_id: str) -> SystemList | None:
        return self._find_system(list_id)

    def get_user_list(self, list_id: str) -> UserList | None:
        return self._find_user(list_id)

    def is_name_duplicate(self, name: str, exclude_id: str | None = None) -> bool:
        return any(lst.name == name and lst.id != exclude_id for lst in self._user)

    def text_color(self, list_id: str) -> str | None:
        """Title colour that reads on the list's theme; None for an unknown list."""
        lst: SystemList | UserList | None = self._find_system(list_id) or self._find_user(list_id)
        if lst is None:
            return None
        return text_color_for(lst.theme)

    # ---- system lists ----

    def toggle_system_list_hidden(self, list_id: str) -> None:
        lst = self._find_system(list_id)
        if lst is None:
            return
        lst.is_hidden = not lst.is_hidden
        self._changed()

    def update_system_list_count(self, list_id: str, count: int | None) -> None:
        lst = self._find_system(list_id)
        if lst is not None:
            lst.count = count

    def reset_system_counts(self) -> None:
        """Mark every system count as unknown until the next recomputation."""
        for lst in self._system:
            lst.count = None

    # ---- user lists ----

    def add_list(self, name: str, icon: str = "ListTodo", theme: ListTheme | None = None) -> UserList:
        if self.is_name_duplicate(name):
            raise DuplicateListNameError(name)

        max_order = max((lst.order for lst in self._user), default=-1)
        new_list = UserList(
            id=f"list-{uuid.uuid4().hex[:12]}",
            name=name,
            order=max_order + 1,
            icon=icon,
            theme=theme or color(DEFAULT_USER_LIST_COLOR),
        )
        self._user.append(new_list)
        logger.debug("List added id=%s name=%r", new_list.id, name)
        self._changed()
        return new_list

    def delete_list(self, list_id: str) -> None:
        # Tasks pointing at the list are left alone (dangling list_id).
        lst = self._find_user(list_id)
        if lst is None:
            return
        self._user.remove(lst)
        self._renumber()
        logger.debug("List deleted id=%s", list_id)
        self._changed()

    def rename_list(self, list_id: str, new_name: str) -> None:
        if self.is_name_duplicate(new_name, exclude_id=list_id):
            raise DuplicateListNameError(new_name)
        lst = self._find_user(list_id)
        if lst is None:
            return
        lst.name = new_name
        self._changed()

    def move_list(self, source_id: str, target_id: str, position: MovePosition | str) -> None:
        source = self._find_user(source_id)
        target = self._find_user(target_id)
        if source is None or target is None or source is target:
            logger.debug("Move ignored: source=%s target=%s", source_id, target_id)
            return

        self._user.remove(source)
        target_index = self._user.index(target)
        if str(position) == MovePosition.AFTER:
            target_index += 1
        self._user.insert(target_index, source)
        self._renumber()
        self._changed()

    def set_icon(self, list_id: str, icon: str) -> None:
        lst = self._find_user(list_id)
        if lst is None:
            return
        lst.icon = icon
        self._changed()

    def set_theme(self, list_id: str, theme: ListTheme) -> None:
        lst: SystemList | UserList | None = self._find_system(list_id) or self._find_user(list_id)
        if lst is None:
            return
        lst.theme = theme
        self._changed()

    def update_user_list_count(self, list_id: str, count: int) -> None:
        lst = self._find_user(list_id)
        if lst is not None:
            lst.count = count

    # ---- snapshot ----

    def restore(
        self,
        *,
        system_settings: dict[str, tuple[bool, ListTheme | None]],
        user_lists: Iterable[UserList],
    ) -> None:
        """
        Apply persisted state.

        System lists keep their fixed identities; only hidden flag and theme
        are taken from storage, and counts go back to unknown. User lists are
        re-sorted by stored order, de-duplicated by name and renumbered.
        """
        for lst in self._system:
            if lst.id in system_settings:
                is_hidden, theme = system_settings[lst.id]
                lst.is_hidden = is_hidden
                if theme is not None:
                    lst.theme = theme
        self.reset_system_counts()

        seen: set[str] = set()
        restored: list[UserList] = []
        for lst in sorted(user_lists, key=lambda x: x.order):
            if lst.name in seen or lst.id in _SYSTEM_IDS:
                logger.warning("Dropping conflicting stored list id=%s name=%r", lst.id, lst.name)
                continue
            seen.add(lst.name)
            restored.append(lst)
        self._user = restored
        self._renumber()
        logger.info("ListStore loaded user_lists=%d", len(self._user))
        self._changed()
