# test_debounce.py
'''
Tests for debounce.DebounceGate, alone and behind EventClassifier.

Two-space indent, single quotes everywhere.
'''

from __future__ import annotations

import pytest

from dev_monitor.debounce import DebounceGate
from dev_monitor.events import EventClassifier, EventKind, FsEvent


class _Registry:
  def __init__(self) -> None:
    self.added: list[str] = []
    self.removed: list[str] = []

  def add(self, path):
    self.added.append(path)
    return False

  def remove(self, path):
    self.removed.append(path)
    return []


@pytest.fixture
def gate(clock):
  return DebounceGate(500, clock=clock)


@pytest.fixture
def wired(gate, clock):
  '''Classifier whose restart requests go through *gate*; returns the hit list.'''
  restarts: list[str] = []

  def on_restart(path):
    if gate.accept():
      restarts.append(path)

  return EventClassifier(_Registry(), gate, on_restart), restarts


# ─────────────────────────────────────────────────────────────────────────────
# 1. Gate on its own
# ─────────────────────────────────────────────────────────────────────────────
def test_first_request_accepted(gate, clock):
  clock.now = 10
  assert gate.accept()
  assert gate.state.last_restart_at == 10


def test_requests_inside_window_rejected(gate, clock):
  assert gate.accept()
  for t in (1, 250, 500):
    clock.now = t
    assert not gate.accept()
  clock.now = 501
  assert gate.accept()


def test_rejected_request_does_not_move_window(gate, clock):
  assert gate.accept()
  clock.now = 400
  assert not gate.accept()
  assert gate.state.last_restart_at == 0
  clock.now = 501
  assert gate.accept()


def test_create_blocks_until_window_passes(gate, clock):
  clock.now = 1000
  gate.note_create()
  assert not gate.accept()
  clock.now = 1500
  assert not gate.accept()
  clock.now = 1501
  assert gate.accept()


def test_create_of_other_file_also_blocks(gate, clock):
  # the guard is time based, not per file
  clock.now = 2000
  gate.note_create()
  clock.now = 2100
  assert not gate.accept()


def test_timestamps_never_go_backwards(gate, clock):
  clock.now = 900
  gate.note_create()
  gate.note_create(now=100)
  assert gate.state.last_create_at == 900


def test_explicit_now_overrides_clock(gate):
  assert gate.accept(now=5000)
  assert not gate.accept(now=5200)
  assert gate.accept(now=5600)


def test_zero_delay_allows_distinct_instants(clock):
  g = DebounceGate(0, clock=clock)
  assert g.accept()
  assert not g.accept()
  clock.now = 1
  assert g.accept()


# ─────────────────────────────────────────────────────────────────────────────
# 2. Through the classifier
# ─────────────────────────────────────────────────────────────────────────────
def test_burst_of_saves_gives_one_restart(wired, clock):
  clf, restarts = wired
  clock.now = 10_000
  for i in range(5):
    clf.handle(FsEvent(EventKind.MODIFIED, f'/p/lib/f{i}.py'))
    clock.now += 50
  assert restarts == ['/p/lib/f0.py']


def test_new_empty_file_does_not_restart(wired, clock):
  clf, restarts = wired
  clock.now = 10_000
  clf.handle(FsEvent(EventKind.CREATED, '/p/lib/new.py'))
  clf.handle(FsEvent(EventKind.MODIFIED, '/p/lib/new.py'))
  assert restarts == []


def test_move_counts_as_save(wired, clock):
  clf, restarts = wired
  clock.now = 10_000
  clf.handle(FsEvent(EventKind.MOVED, '/p/lib/a.tmp', '/p/lib/a.py'))
  assert restarts == ['/p/lib/a.py']


def test_delete_never_restarts(wired, clock):
  clf, restarts = wired
  clock.now = 10_000
  clf.handle(FsEvent(EventKind.DELETED, '/p/lib/a.py'))
  assert restarts == []


def test_documented_timeline(wired, clock):
  '''create@0, save@0, save@600, save@650, save@700, save@1300.'''
  clf, restarts = wired
  f = '/p/lib/a.dart'
  timeline = [
    (0, EventKind.CREATED),
    (0, EventKind.MODIFIED),
    (600, EventKind.MODIFIED),
    (650, EventKind.MODIFIED),
    (700, EventKind.MODIFIED),
    (1300, EventKind.MODIFIED),
  ]
  seen = []
  for t, kind in timeline:
    clock.now = t
    before = len(restarts)
    clf.handle(FsEvent(kind, f))
    seen.append(len(restarts) > before)
  assert seen == [False, False, True, False, False, True]
  assert len(restarts) == 2
