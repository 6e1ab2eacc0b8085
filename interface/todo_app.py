"""Entry point for the ``todo`` command."""

import logging
import sys
from typing import List, Optional

from . import cli_commands
from .cli_parser import build_parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser(cli_commands)
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return int(args.func(args) or 0)


__all__ = ["main"]
