import argparse
from typing import List, Optional

from .config import DEFAULT_DELAY_MS, DEFAULT_WATCH_DIR


def parse_argv(argv: Optional[List[str]] = None) -> argparse.Namespace:
  '''
  Parse command-line arguments for *dev-monitor*.

  Every option is optional: started bare from a project root the monitor
  watches ``lib/`` and runs ``bin/main.py``.

  Parameters
  ----------
  argv
    A custom argument list (mainly for testing).  When None the
    function uses ``sys.argv[1:]`` automatically.

  Returns
  -------
  argparse.Namespace
    • watch_dir : Directory (relative to the cwd) to watch recursively
    • delay     : Debounce window in milliseconds
    • verbose   : Verbosity count (-v, -vv, …)
    • command   : Server command line; empty means the default entry point
  '''
  parser = argparse.ArgumentParser(
      prog='dev-monitor',
      description='Restart a development server whenever its sources change.',
  )

  parser.add_argument(
      '--watch-dir',
      '-w',
      default=DEFAULT_WATCH_DIR,
      metavar='DIR',
      help=f'Source directory to watch, relative to the cwd (default: {DEFAULT_WATCH_DIR}).',
  )
  parser.add_argument(
      '--delay',
      '-d',
      type=int,
      default=DEFAULT_DELAY_MS,
      metavar='MS',
      help=f'Debounce window between restarts (default: {DEFAULT_DELAY_MS} ms).',
  )

  # verbosity
  parser.add_argument(
      '--verbose',
      '-v',
      action='count',
      default=0,
      help='Increase logging verbosity; repeat for more detail.',
  )

  # server command, e.g.  dev-monitor -- python -m myapp
  parser.add_argument(
      'command',
      nargs=argparse.REMAINDER,
      help='Server command to run (default: python bin/main.py).',
  )

  try:
    import argcomplete
    argcomplete.autocomplete(parser)
  except ImportError:
    pass

  args = parser.parse_args(argv)
  if args.command and args.command[0] == '--':
    args.command = args.command[1:]
  if args.delay < 0:
    parser.error('--delay must not be negative')
  return args
