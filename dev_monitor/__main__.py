# __main__.py
import asyncio
import sys

from .config import Config
from .controller import Controller
from .dev_argparse import parse_argv
from .log import configure_logging


def main() -> None:
  args = parse_argv()
  configure_logging(args.verbose)
  cfg = Config(watch_dir=args.watch_dir, command=args.command, delay_ms=args.delay)
  sys.exit(asyncio.run(Controller(cfg).run()))


if __name__ == '__main__':
  main()
