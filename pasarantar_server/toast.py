"""Auto-dismissing "added to cart" notification."""

import asyncio
import logging
import threading
from typing import Callable, Optional, Protocol

from .models import ToastState

logger = logging.getLogger(__name__)

DEFAULT_TOAST_SECONDS = 4.0


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]
ToastListener = Callable[[ToastState], None]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Schedule on the running event loop, or on a timer thread outside one."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer
    return loop.call_later(delay, callback)


class ToastNotifier:
    """
    Hidden/visible state machine for the cart toast.

    ``show`` replaces whatever is displayed and restarts the dismissal
    timer; ``hide`` cancels it. Each show gets a generation number and a
    timer only hides the toast it was scheduled for.
    """

    def __init__(
        self,
        duration: float = DEFAULT_TOAST_SECONDS,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.duration = duration
        self._scheduler = scheduler or loop_scheduler
        self._state = ToastState()
        self._timer: Optional[TimerHandle] = None
        self._generation = 0
        self._listeners: list[ToastListener] = []
        # Timer threads expire toasts outside the caller's thread
        self._lock = threading.RLock()

    @property
    def state(self) -> ToastState:
        return self._state.model_copy()

    @property
    def is_visible(self) -> bool:
        return self._state.show

    def subscribe(self, listener: ToastListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def show(self, product_name: str, product_image: str, variant_info: str) -> None:
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            generation = self._generation
            self._timer = self._scheduler(self.duration, lambda: self._expire(generation))
            self._set_state(
                ToastState(
                    show=True,
                    product_name=product_name,
                    product_image=product_image,
                    variant_info=variant_info,
                )
            )

    def hide(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            if self._state.show:
                self._set_state(ToastState())

    def _expire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Ignoring stale toast timer")
                return
            self._timer = None
            self._set_state(ToastState())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set_state(self, state: ToastState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(self.state)
