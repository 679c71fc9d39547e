"""
Lightbox navigation over the loaded gallery list.

Navigation is circular over whatever the pagination controller has loaded
so far. When that list is replaced the lightbox follows the selected item
to its new position, or closes if it is gone. Only open() counts a view;
stepping with the arrow keys or the slideshow does not.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..models.gallery_model import GalleryItem
from .listing import ListState
from .views import ViewCountEmitter

logger = logging.getLogger(__name__)

DEFAULT_SLIDESHOW_INTERVAL = 3.0

KEY_NEXT = "ArrowRight"
KEY_PREVIOUS = "ArrowLeft"
KEY_CLOSE = "Escape"


class SlideshowTimer:
    """Holds at most one pending tick.

    arm() replaces any pending tick rather than adding a second one, so
    the callback fires at most once per interval.
    """

    def __init__(
        self,
        interval: float,
        on_tick: Callable[[], None],
        call_later: Optional[Callable] = None,
    ):
        self.interval = interval
        self.on_tick = on_tick
        self._call_later = call_later
        self._handle = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        self.cancel()
        call_later = self._call_later or asyncio.get_running_loop().call_later
        self._handle = call_later(self.interval, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.on_tick()


@dataclass
class LightboxState:
    selected_item: Optional[GalleryItem] = None
    active_index: int = 0
    is_playing: bool = False


class LightboxController:
    def __init__(
        self,
        items: ListState,
        emitter: ViewCountEmitter,
        interval: float = DEFAULT_SLIDESHOW_INTERVAL,
        call_later: Optional[Callable] = None,
    ):
        self.items = items
        self.emitter = emitter
        self.state = LightboxState()
        self.timer = SlideshowTimer(interval, self._tick, call_later=call_later)
        self.items.add_listener(self._on_list_changed)

    @property
    def is_open(self) -> bool:
        return self.state.selected_item is not None

    @property
    def selected_item(self) -> Optional[GalleryItem]:
        return self.state.selected_item

    @property
    def active_index(self) -> int:
        return self.state.active_index

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    def open(self, item: GalleryItem, index: int) -> None:
        if not 0 <= index < len(self.items):
            raise IndexError(f"Lightbox index {index} outside loaded list of {len(self.items)}")
        self.state.selected_item = item
        self.state.active_index = index
        self.emitter.increment(item.id)
        self._sync_timer()

    def next(self) -> None:
        self._step(1)

    def previous(self) -> None:
        self._step(-1)

    def _step(self, offset: int) -> None:
        count = len(self.items)
        if not self.is_open or count <= 1:
            return
        self.state.active_index = (self.state.active_index + offset) % count
        self.state.selected_item = self.items.items[self.state.active_index]
        self._sync_timer()

    def close(self) -> None:
        self.state.selected_item = None
        self.state.is_playing = False
        self.timer.cancel()

    def toggle_play(self) -> None:
        self.state.is_playing = not self.state.is_playing
        self._sync_timer()

    def handle_key(self, key: str) -> bool:
        if not self.is_open:
            return False
        if key == KEY_NEXT:
            self.next()
        elif key == KEY_PREVIOUS:
            self.previous()
        elif key == KEY_CLOSE:
            self.close()
        else:
            return False
        return True

    def dispose(self) -> None:
        """Tear down: no tick may fire after this."""
        self.items.remove_listener(self._on_list_changed)
        self.state.is_playing = False
        self.timer.cancel()

    def _on_list_changed(self) -> None:
        # the loaded list was replaced or cleared; follow the selected item or close
        if not self.is_open:
            return
        selected_id = self.state.selected_item.id
        for index, item in enumerate(self.items.items):
            if item.id == selected_id:
                self.state.active_index = index
                self.state.selected_item = item
                if self.timer.armed != self._slideshow_should_run():
                    self._sync_timer()
                return
        logger.debug(f"Closing lightbox: item {selected_id} is no longer loaded")
        self.close()

    def _slideshow_should_run(self) -> bool:
        item = self.state.selected_item
        return (
            self.state.is_playing
            and item is not None
            and len(self.items) > 1
            # videos use their own playback controls
            and not item.is_video
        )

    def _sync_timer(self) -> None:
        if self._slideshow_should_run():
            self.timer.arm()
        else:
            self.timer.cancel()

    def _tick(self) -> None:
        logger.debug(f"Slideshow tick at index {self.state.active_index}")
        self.next()
