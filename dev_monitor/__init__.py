# dev_monitor/__init__.py
from importlib.metadata import version, PackageNotFoundError

try:
  __version__ = version('dev-monitor')
except PackageNotFoundError:      # development mode
  __version__ = '0.0.0.dev0'

from .config import Config                                      # re-export
from .controller import Controller, State                       # re-export
from .debounce import DebounceGate, RestartState                # re-export
from .dev_watchdog import WatchRegistry                         # re-export
from .events import EventClassifier, EventKind, FsEvent, classify  # re-export
from .supervisor import LaunchError, ProcessSupervisor          # re-export

__all__ = [
  'Config', 'Controller', 'State',
  'DebounceGate', 'RestartState',
  'WatchRegistry',
  'EventClassifier', 'EventKind', 'FsEvent', 'classify',
  'LaunchError', 'ProcessSupervisor',
]
