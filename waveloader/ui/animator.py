#!/usr/bin/env python3
"""
Frame-driven animators for the loader.

Two independent ratios are animated:
- the water level, by a one-shot decelerating tween (FillLevelAnimator)
- the horizontal wave shift, by an endless linear loop (WaveShiftLoop)

Neither owns a timer. The host calls advance(dt_ms) once per frame; every
change of a ratio is reported through ``on_change`` so the widget can
request a redraw.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .easing import Easing, decelerate, linear

DEFAULT_FILL_DURATION_MS = 1000
DEFAULT_WAVE_PERIOD_MS = 1000


class AnimatorState(Enum):
    """Fill-level animator states."""

    IDLE = "idle"
    ANIMATING = "animating"


@dataclass(frozen=True)
class FillLevelTween:
    """Parameters of one water-level animation."""

    start: float
    end: float
    duration_ms: float = DEFAULT_FILL_DURATION_MS
    easing: Easing = decelerate

    def value_at(self, elapsed_ms: float) -> float:
        if self.duration_ms <= 0:
            return self.end
        t = min(elapsed_ms / self.duration_ms, 1.0)
        return self.start + (self.end - self.start) * self.easing(t)


@dataclass(frozen=True)
class WaveShiftTween:
    """Parameters of the wave-shift loop: 0 -> 1 over one period, forever."""

    period_ms: float = DEFAULT_WAVE_PERIOD_MS
    easing: Easing = linear


class FillLevelAnimator:
    """Animates the water level ratio toward the latest requested target."""

    def __init__(self, value: float = 1.0, on_change: Callable[[], None] | None = None):
        self._value = value
        self._tween: FillLevelTween | None = None
        self._elapsed = 0.0
        self.on_change = on_change

    @property
    def value(self) -> float:
        return self._value

    @property
    def state(self) -> AnimatorState:
        return AnimatorState.ANIMATING if self._tween is not None else AnimatorState.IDLE

    @property
    def target(self) -> float:
        """Where the ratio is heading (the current value when idle)."""
        return self._tween.end if self._tween is not None else self._value

    def animate_to(self, tween: FillLevelTween):
        """Start ``tween``, replacing any animation in flight.

        A non-positive duration applies the end value immediately.
        """
        if tween.duration_ms <= 0:
            self._tween = None
            self._set(tween.end)
            return
        self._tween = tween
        self._elapsed = 0.0
        self._set(tween.start)

    def advance(self, dt_ms: float):
        """Move the running tween forward by ``dt_ms``."""
        tween = self._tween
        if tween is None:
            return
        self._elapsed += max(0.0, dt_ms)
        if self._elapsed >= tween.duration_ms:
            self._tween = None
            self._set(tween.end)
        else:
            self._set(tween.value_at(self._elapsed))

    def cancel(self):
        """Stop the running tween; the ratio stays where it is."""
        self._tween = None

    def _set(self, value: float):
        if value != self._value:
            self._value = value
            if self.on_change is not None:
                self.on_change()


class WaveShiftLoop:
    """Cycles the wave shift ratio 0 -> 1 while running."""

    def __init__(
        self,
        tween: WaveShiftTween = WaveShiftTween(),
        on_change: Callable[[], None] | None = None,
    ):
        self.tween = tween
        self._ratio = 0.0
        self._elapsed = 0.0
        self._running = False
        self.on_change = on_change

    @property
    def ratio(self) -> float:
        return self._ratio

    @property
    def running(self) -> bool:
        return self._running

    @property
    def period_ms(self) -> float:
        return self.tween.period_ms

    def start(self):
        """(Re)start the cycle from ratio 0."""
        self._elapsed = 0.0
        self._running = True
        self._set(0.0)

    def stop(self):
        """Freeze the ratio at its current value."""
        self._running = False

    def set_tween(self, tween: WaveShiftTween):
        """Replace the loop parameters, restarting if the loop was running."""
        was_running = self._running
        self.stop()
        self.tween = tween
        if was_running:
            self.start()

    def advance(self, dt_ms: float):
        if not self._running:
            return
        period = self.tween.period_ms
        self._elapsed = (self._elapsed + max(0.0, dt_ms)) % period
        self._set(self.tween.easing(self._elapsed / period))

    def _set(self, ratio: float):
        if ratio != self._ratio:
            self._ratio = ratio
            if self.on_change is not None:
                self.on_change()
