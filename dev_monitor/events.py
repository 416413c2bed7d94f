# events.py
'''
Classify raw watchdog events and route them.

    classify(raw)            -> FsEvent | None
    EventClassifier.handle(ev)

Routing
-------
    CREATED   : note the create time, try to watch the path as a directory
    MODIFIED  : ask for a restart
    MOVED     : forget the old path, ask for a restart, watch the destination
    DELETED   : drop the path (and everything below it) from the registry
'''

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import Callable, Optional

from watchdog.events import (
  EVENT_TYPE_CREATED,
  EVENT_TYPE_DELETED,
  EVENT_TYPE_MODIFIED,
  EVENT_TYPE_MOVED,
  FileSystemEvent,
)

from .debounce import DebounceGate
from .log import get_logger

log = get_logger(__name__)


class EventKind(enum.Enum):
  CREATED = 'created'
  MODIFIED = 'modified'
  MOVED = 'moved'
  DELETED = 'deleted'


@dataclass(frozen=True)
class FsEvent:
  kind: EventKind
  path: str
  dest: Optional[str] = None

  def __post_init__(self) -> None:
    if self.kind is EventKind.MOVED and self.dest is None:
      raise ValueError(f'moved event without destination: {self.path!r}')


def classify(raw: FileSystemEvent) -> Optional[FsEvent]:
  '''Map a watchdog event onto an FsEvent; None for kinds we do not act on.'''
  kind = raw.event_type
  path = os.fsdecode(raw.src_path)
  if kind == EVENT_TYPE_CREATED:
    return FsEvent(EventKind.CREATED, path)
  if kind == EVENT_TYPE_MODIFIED:
    # watchdog also reports the parent directory as modified on every
    # create/delete inside it; that is not a save
    if raw.is_directory:
      return None
    return FsEvent(EventKind.MODIFIED, path)
  if kind == EVENT_TYPE_MOVED:
    return FsEvent(EventKind.MOVED, path, os.fsdecode(raw.dest_path))
  if kind == EVENT_TYPE_DELETED:
    return FsEvent(EventKind.DELETED, path)
  return None   # opened / closed / closed_no_write


class EventClassifier:
  def __init__(
    self,
    registry,
    gate: DebounceGate,
    on_restart: Callable[[Optional[str]], object],
  ) -> None:
    self._registry = registry
    self._gate = gate
    self._on_restart = on_restart

  def handle(self, event: FsEvent) -> None:
    log.debug('fs event', kind=event.kind.value, path=event.path, dest=event.dest)
    kind = event.kind
    if kind is EventKind.CREATED:
      self._gate.note_create()
      self._registry.add(event.path)
    elif kind is EventKind.MODIFIED:
      self._on_restart(event.path)
    elif kind is EventKind.MOVED:
      # the old path is gone; a directory made there later must be re-added
      self._registry.remove(event.path)
      self._on_restart(event.dest)
      self._registry.add(event.dest)
    elif kind is EventKind.DELETED:
      self._registry.remove(event.path)
    else:   # pragma: no cover
      raise ValueError(f'unhandled event kind: {kind!r}')

  def handle_raw(self, raw: FileSystemEvent) -> None:
    event = classify(raw)
    if event is not None:
      self.handle(event)
