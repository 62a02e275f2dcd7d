import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol

from pydantic import BaseModel

from activities import (
    CONTROLLER_FALLBACKS,
    LAST_RESORT_ACTIVITY,
    Activity,
    ActivityResult,
    RandomIndex,
    apply_multiplayer_prefix,
    pick_random,
    share_text,
)

logger = logging.getLogger("controller")

MIN_PLAYERS = 2
MAX_PLAYERS = 10
MAX_ATTEMPTS = 2
COPY_CONFIRMATION_SECONDS = 2.0


class GameMode(str, Enum):
    SOLO = "solo"
    MULTIPLAYER = "multiplayer"


class Notice(BaseModel):
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class ActivityProvider(Protocol):
    def obtain_activity(self) -> ActivityResult: ...


class Cancelable(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Cancelable]
ClipboardWriter = Callable[[str], None]


def start_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def clamp_players(n: int) -> int:
    return max(MIN_PLAYERS, min(MAX_PLAYERS, int(n)))


class InteractionController:
    """Per-session interaction state around an activity provider.

    Holds the current activity, the solo/multiplayer settings and the copy confirmation,
    and queues user-facing notices for the presentation layer to pick up.
    """

    def __init__(
        self,
        source: ActivityProvider,
        clipboard: Optional[ClipboardWriter] = None,
        random_index: Optional[RandomIndex] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.source = source
        self.clipboard = clipboard
        self.random_index = random_index
        self.scheduler = scheduler or start_timer

        self.current: Optional[Activity] = None
        self.busy = False
        self.retry_count = 0
        self.mode = GameMode.SOLO
        self.player_count = MIN_PLAYERS
        self.copied = False

        self._notices: List[Notice] = []
        self._lock = threading.Lock()
        self._copy_reset: Optional[Cancelable] = None
        # Guards copied and the pending reset; the reset fires on a timer thread.
        self._copy_lock = threading.Lock()
        self._copy_generation = 0

    def set_mode(self, mode) -> GameMode:
        self.mode = GameMode(mode)
        return self.mode

    def set_player_count(self, n: int) -> int:
        self.player_count = clamp_players(n)
        return self.player_count

    def increment_player_count(self) -> int:
        return self.set_player_count(self.player_count + 1)

    def decrement_player_count(self) -> int:
        return self.set_player_count(self.player_count - 1)

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self._notices.append(Notice(title=title, description=description, variant=variant))

    def drain_notices(self) -> List[Notice]:
        notices, self._notices = self._notices, []
        return notices

    def _for_players(self, activity: Activity) -> Activity:
        if self.mode == GameMode.MULTIPLAYER and self.player_count > 1:
            return apply_multiplayer_prefix(activity, self.player_count)
        return activity

    def _static_fallback(self) -> Activity:
        return self._for_players(pick_random(CONTROLLER_FALLBACKS, self.random_index))

    def _last_resort(self) -> Activity:
        try:
            return self._static_fallback()
        except Exception:
            logger.exception("Static fallback failed; using last-resort activity")
            return self._for_players(LAST_RESORT_ACTIVITY)

    def request_new_activity(self) -> Activity:
        """Fetch a new activity, retrying once on a logical failure before using the static list.

        Concurrent calls on the same controller run one after the other.
        """
        with self._lock:
            self.busy = True
            try:
                activity = None
                for attempt in range(1, MAX_ATTEMPTS + 1):
                    result = self.source.obtain_activity()
                    if result.success and result.activity is not None:
                        activity = result.activity
                        break
                    logger.warning("Activity generation attempt %d/%d failed: %s", attempt, MAX_ATTEMPTS, result.error)
                    if attempt < MAX_ATTEMPTS:
                        self.retry_count = attempt
                        self._notify("Trying again", "The first attempt didn't work. Trying one more time...")

                if activity is None:
                    self.current = self._static_fallback()
                    self._notify(
                        "Using fallback activity",
                        "We couldn't generate a new activity after multiple attempts. "
                        "Here's one from our collection instead.",
                        "destructive",
                    )
                else:
                    self.current = self._for_players(activity)
            except Exception:
                logger.exception("Failed to generate activity")
                self.current = self._last_resort()
                self._notify(
                    "Something went wrong",
                    "Couldn't generate a new activity. Using one from our collection instead.",
                    "destructive",
                )
            finally:
                self.retry_count = 0
                self.busy = False
            return self.current

    def _clear_copied(self, generation: int) -> None:
        with self._copy_lock:
            # A newer copy owns the flag now.
            if generation != self._copy_generation:
                return
            self.copied = False
            self._copy_reset = None

    def _cancel_copy_reset(self) -> None:
        if self._copy_reset is not None:
            self._copy_reset.cancel()
            self._copy_reset = None

    def copy_current_to_clipboard(self) -> bool:
        if self.current is None:
            return False
        text = share_text(self.current)
        try:
            if self.clipboard is None:
                raise RuntimeError("no clipboard available")
            self.clipboard(text)
        except Exception:
            logger.exception("Error copying to clipboard")
            self._notify(
                "Couldn't copy to clipboard",
                "Try selecting and copying the text manually.",
                "destructive",
            )
            return False

        with self._copy_lock:
            self._cancel_copy_reset()
            self._copy_generation += 1
            generation = self._copy_generation
            self.copied = True
            self._copy_reset = self.scheduler(COPY_CONFIRMATION_SECONDS, lambda: self._clear_copied(generation))
        self._notify("Copied to clipboard!", "Now you can paste and send to your friends.")
        return True

    def close(self) -> None:
        with self._copy_lock:
            self._cancel_copy_reset()
            self._copy_generation += 1
            self.copied = False

    def snapshot(self) -> Dict[str, Any]:
        return {
            "activity": self.current.model_dump() if self.current else None,
            "busy": self.busy,
            "retry_count": self.retry_count,
            "mode": self.mode.value,
            "player_count": self.player_count,
            "copied": self.copied,
        }
