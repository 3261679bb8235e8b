"""Command-line front door for frecd.

Parses options, loads the visit history, and dispatches to one operation:
emit shell hooks, record a visit, resolve a query, or list the history.
A resolved path is the only thing ever written to stdout.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import termios

from .config import database_path, load_frecency_model
from .selector import SelectionCancelled, interactive_select
from .shell import init_script, supported_shells
from .store import PathStore

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEBUG_ENV = "FRECD_DEBUG"
TTY_PATH = "/dev/tty"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frecd",
        description="Jump to frequently and recently visited directories.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help=f"Print debug information to stderr (also enabled by {DEBUG_ENV}).",
    )
    operation = parser.add_mutually_exclusive_group()
    operation.add_argument(
        "--init",
        metavar="SHELL",
        default=None,
        help=f"Print initialization hooks to eval in SHELL ({', '.join(supported_shells())}).",
    )
    operation.add_argument(
        "-d",
        "--dir",
        action="store_true",
        default=False,
        help="Print the directory best matching TARGET; used via the 'z' function --init creates.",
    )
    operation.add_argument(
        "--add-dir",
        metavar="DIRECTORY",
        default=None,
        help="Record a visit to DIRECTORY.",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        default=False,
        help="Interactively filter directory matches.",
    )
    parser.add_argument("dir_target", nargs="?", default=None, help="Pattern to match against visited directories.")
    return parser


def configure_logging(debug: bool) -> None:
    """Send log records to stderr; stdout is reserved for the resolved path."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
    )


def _select_interactively(matches: list[tuple[str, float]]) -> str:
    """Draw the selector on the controlling tty so stdout stays capturable."""
    tty_fd = os.open(TTY_PATH, os.O_RDWR)
    try:
        stdin_fd = sys.stdin.fileno()
        input_fd = stdin_fd if os.isatty(stdin_fd) else tty_fd
        return interactive_select(matches, input_fd, tty_fd)
    finally:
        os.close(tty_fd)


def run_dir(store: PathStore, target: str | None, interactive: bool) -> None:
    matches = store.query(target)
    if not matches:
        logger.debug("no directory matches %r", target)
        raise SystemExit(1)

    if not interactive:
        sys.stdout.write(matches[0][0])
        return

    try:
        chosen = _select_interactively(matches)
    except SelectionCancelled:
        raise SystemExit(1) from None
    except (OSError, termios.error) as exc:
        raise SystemExit(f"frecd: interactive selection failed: {exc}") from exc
    sys.stdout.write(chosen)


def run_add_dir(store: PathStore, directory: str) -> None:
    store.visit(os.path.abspath(directory))
    try:
        store.save()
    except OSError as exc:
        raise SystemExit(f"frecd: error adding directory: {exc}") from exc


def print_history(store: PathStore) -> None:
    for path, score in store.items_with_frecency():
        sys.stdout.write(f"{score * 100:.4f}\t{path}\n")


def _allow_undecodable_paths_on_stdout() -> None:
    """Let paths that are not valid UTF-8 reach the shell byte for byte."""
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors="surrogateescape")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the requested operation.

    Failures exit non-zero through ``SystemExit``; a message is printed to
    stderr for errors but not for "no match" or a cancelled selection.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug or bool(os.environ.get(DEBUG_ENV)))
    _allow_undecodable_paths_on_stdout()

    if args.init is not None:
        script = init_script(args.init)
        if script is None:
            parser.print_usage(sys.stderr)
            raise SystemExit(f"Unsupported shell: {args.init}")
        sys.stdout.write(script)
        return

    store = PathStore.load(database_path(), model=load_frecency_model())

    if args.add_dir is not None:
        run_add_dir(store, args.add_dir)
        return

    if args.dir or args.interactive:
        run_dir(store, args.dir_target, args.interactive)
        return

    print_history(store)


if __name__ == "__main__":
    main()
