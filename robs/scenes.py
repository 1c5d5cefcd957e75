"""Scenes and the ordered collection of scene items they hold."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterator

DEFAULT_OUTPUT_SIZE = (1920, 1080)


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Scale:
    x: float = 1.0
    y: float = 1.0


@dataclass
class Crop:
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0


@dataclass
class SceneItem:
    """A source placed in a scene, with its transform and visibility."""

    source_id: Any
    name: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    visible: bool = True
    position: Position = field(default_factory=Position)
    scale: Scale = field(default_factory=Scale)
    rotation: float = 0.0
    crop: Crop = field(default_factory=Crop)


@dataclass
class Scene:
    """A named scene; items are kept in list order, first item first."""

    name: str
    output_size: tuple[int, int] = DEFAULT_OUTPUT_SIZE
    items: list[SceneItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[SceneItem]:
        return iter(self.items)

    def _index(self, item_id: uuid.UUID) -> int | None:
        return next(
            (pos for pos, item in enumerate(self.items) if item.id == item_id), None
        )

    def add_source(self, source_id: Any, name: str) -> SceneItem:
        """Append a new visible item for a source and return it."""
        item = SceneItem(source_id=source_id, name=name)
        self.items.append(item)
        return item

    def item(self, item_id: uuid.UUID) -> SceneItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def remove_item(self, item_id: uuid.UUID) -> SceneItem | None:
        """Remove an item and return it; unknown ids give None."""
        pos = self._index(item_id)
        if pos is None:
            return None
        return self.items.pop(pos)

    def move_item_up(self, item_id: uuid.UUID) -> bool:
        """Move an item one place towards the front; False if it cannot move."""
        pos = self._index(item_id)
        if pos is None or pos == 0:
            return False
        self.items[pos - 1], self.items[pos] = self.items[pos], self.items[pos - 1]
        return True

    def move_item_down(self, item_id: uuid.UUID) -> bool:
        """Move an item one place towards the back; False if it cannot move."""
        pos = self._index(item_id)
        if pos is None or pos == len(self.items) - 1:
            return False
        self.items[pos + 1], self.items[pos] = self.items[pos], self.items[pos + 1]
        return True

    def set_item_visible(self, item_id: uuid.UUID, visible: bool) -> bool:
        """Show or hide an item; False if the id is unknown."""
        item = self.item(item_id)
        if item is None:
            return False
        item.visible = visible
        return True


class SceneCollection:
    """Scenes by name, in creation order, with one optionally current."""

    def __init__(self) -> None:
        self._scenes: dict[str, Scene] = {}
        self._current: str | None = None

    def __len__(self) -> int:
        return len(self._scenes)

    def __contains__(self, name: object) -> bool:
        return name in self._scenes

    def create_scene(self, name: str) -> Scene:
        """Create a scene, or return the existing one of that name."""
        scene = self._scenes.get(name)
        if scene is None:
            scene = Scene(name)
            self._scenes[name] = scene
        return scene

    def remove(self, name: str) -> Scene | None:
        """Remove a scene; removing the current one leaves none current."""
        scene = self._scenes.pop(name, None)
        if scene is not None and self._current == name:
            self._current = None
        return scene

    def get(self, name: str) -> Scene | None:
        return self._scenes.get(name)

    def set_current_scene(self, name: str) -> None:
        if name not in self._scenes:
            raise KeyError(f"no scene named {name!r}")
        self._current = name

    @property
    def current_scene_name(self) -> str | None:
        return self._current

    def current_scene(self) -> Scene | None:
        if self._current is None:
            return None
        return self._scenes.get(self._current)

    def list(self) -> list[str]:
        """Scene names in creation order."""
        return list(self._scenes)