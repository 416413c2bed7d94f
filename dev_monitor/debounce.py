# debounce.py
'''
Restart debouncing.

A single save can produce several modify events, and creating an empty
file fires a modify right after the create.  DebounceGate lets at most one
restart through per window and none inside the window that follows a
create.  The create guard is purely time based: a create anywhere in the
tree also holds back saves of unrelated files until the window elapses.
'''

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional


def monotonic_ms() -> int:
  return time.monotonic_ns() // 1_000_000


@dataclass
class RestartState:
  last_restart_at: Optional[int] = None
  last_create_at: Optional[int] = None


class DebounceGate:
  def __init__(
    self,
    delay_ms: int = 500,
    clock: Callable[[], int] = monotonic_ms,
  ) -> None:
    self.delay_ms = delay_ms
    self.state = RestartState()
    self._clock = clock

  def _elapsed(self, since: Optional[int], now: int) -> bool:
    return since is None or now - since > self.delay_ms

  def accept(self, now: Optional[int] = None) -> bool:
    '''Return True if a restart may run at *now*; records it when it may.'''
    now = self._clock() if now is None else now
    s = self.state
    if self._elapsed(s.last_restart_at, now) and self._elapsed(s.last_create_at, now):
      # recorded before the restart runs so events racing it are dropped
      s.last_restart_at = _later(s.last_restart_at, now)
      return True
    return False

  def note_create(self, now: Optional[int] = None) -> None:
    now = self._clock() if now is None else now
    self.state.last_create_at = _later(self.state.last_create_at, now)


def _later(old: Optional[int], new: int) -> int:
  return new if old is None else max(old, new)
