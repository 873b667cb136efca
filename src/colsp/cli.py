"""
colsp – Colang Language Server CLI entry point.

Usage
-----
    colsp                       # stdio mode (default, for use with editors)
    colsp --stdio               # explicit stdio mode
    colsp --tcp 2087            # listen on TCP port (useful for debugging)
    colsp --log-level debug     # same level names as the ``logLevel`` setting
"""
from __future__ import annotations

import argparse
import logging
import sys

from colsp import __version__
from colsp.config import parse_log_level

LOG_FORMAT = '%(levelname)s %(name)s: %(message)s'


def _log_level(raw: str) -> int:
    level = parse_log_level(raw)
    if level is None:
        raise argparse.ArgumentTypeError(f'unknown log level: {raw!r}')
    return level


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='colsp',
        description='Colang Language Server (LSP) for .co files.',
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        '--stdio',
        action='store_true',
        help='Communicate over stdin/stdout (default when no flag given)',
    )
    mode.add_argument(
        '--tcp',
        metavar='PORT',
        type=int,
        help='Listen for connections on the given TCP port instead of stdio',
    )
    p.add_argument(
        '--host',
        default='127.0.0.1',
        help='Address to bind with --tcp (default: 127.0.0.1)',
    )
    p.add_argument(
        '--log-level',
        metavar='LEVEL',
        type=_log_level,
        default='warning',
        help='debug, info, warning, error or critical, in any case (default: warning)',
    )
    p.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return p


def colsp(argv: list[str] | None = None) -> None:
    """Entry point for the ``colsp`` command."""
    args = _build_parser().parse_args(argv)
    # stdout carries the LSP stream in stdio mode
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)

    from colsp.server import server

    if args.tcp is not None:
        server.start_tcp(args.host, args.tcp)
    else:
        server.start_io()


if __name__ == '__main__':
    colsp()
