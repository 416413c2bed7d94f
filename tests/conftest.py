# conftest.py
from __future__ import annotations

import asyncio

import pytest


class FakeClock:
  '''Settable millisecond clock for DebounceGate.'''

  def __init__(self, now: int = 0) -> None:
    self.now = now

  def __call__(self) -> int:
    return self.now


@pytest.fixture
def clock():
  return FakeClock()


async def wait_for(pred, timeout: float = 5.0, step: float = 0.02) -> bool:
  '''Poll *pred* on the running loop until it holds or *timeout* passes.'''
  loop = asyncio.get_running_loop()
  deadline = loop.time() + timeout
  while not pred():
    if loop.time() > deadline:
      return False
    await asyncio.sleep(step)
  return True
