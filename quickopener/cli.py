"""Command-line front door for quickopener.

Parses CLI options, optionally persists prefixes or exclusions, builds a scan
cache and resolver from the config file, resolves one query and prints the
candidate labels.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from .config import load_scan_settings, save_exclude, save_prefix
from .resolver import PathResolver, Resolution
from .scan_cache import ScanCache


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _prefix_assignment(value: str) -> tuple[str, str]:
    """argparse type for ``ALIAS=DIR`` named-prefix assignments."""
    alias, sep, target = value.partition("=")
    alias = alias.strip()
    if not sep or not alias or not target or os.sep in alias:
        raise argparse.ArgumentTypeError(f"expected ALIAS=DIR, got {value!r}")
    return alias, os.path.abspath(os.path.expanduser(target))


def format_resolution(resolution: Resolution, long_format: bool) -> str:
    """Render entry labels one per line, optionally prefixed by kind markers.

    Long format marks directories ``d``, files ``f``, and workspace roots
    with a trailing ``*`` on the marker.
    """
    out: list[str] = []
    for entry in resolution.entries:
        if not long_format:
            out.append(entry.label)
            continue
        marker = "d" if entry.is_dir else "f"
        if entry.is_workspace_root:
            marker += "*"
        out.append(f"{marker:<2} {entry.label}")
    return "".join(line + "\n" for line in out)


async def _resolve_once(resolver: PathResolver, query: str, settle: float) -> Resolution:
    resolution = await resolver.resolve(query)
    if settle > 0:
        # Background child scans keep filling the cache; re-resolve once warm.
        await asyncio.sleep(settle)
        resolution = await resolver.resolve(query)
    return resolution


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments, resolve ``query`` and print matching entries."""
    parser = argparse.ArgumentParser(
        description="List files and directories matching a partially typed path."
    )
    parser.add_argument("query", nargs="?", default="", help="Partial path, relative to --base unless absolute.")
    parser.add_argument("--base", default=None, help="Base directory. Defaults to the current directory.")
    parser.add_argument("--timeout", type=_positive_int, default=None, help="Scan time budget in milliseconds.")
    parser.add_argument("--max-items", type=_positive_int, default=None, help="Maximum number of listed entries.")
    parser.add_argument(
        "--settle",
        type=_positive_int,
        default=None,
        help="Wait this many milliseconds for background scans and resolve again.",
    )
    parser.add_argument(
        "--workspace",
        action="append",
        default=[],
        metavar="DIR",
        help="Mark DIR as a workspace root (repeatable).",
    )
    parser.add_argument(
        "--save-prefix",
        type=_prefix_assignment,
        action="append",
        default=[],
        metavar="ALIAS=DIR",
        help="Persist a named prefix in the config file before resolving (repeatable).",
    )
    parser.add_argument(
        "--save-exclude",
        action="append",
        default=None,
        metavar="NAME",
        help="Replace the persisted scan exclusions with these names (repeatable).",
    )
    parser.add_argument("-l", "--long", action="store_true", help="Prefix entries with kind markers.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log scan diagnostics to stderr.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    base = Path(args.base).expanduser() if args.base is not None else Path.cwd()
    if not base.is_dir():
        raise SystemExit(f"Directory not found: {base}")

    for alias, target in args.save_prefix:
        save_prefix(alias, target)
    if args.save_exclude is not None:
        save_exclude(args.save_exclude)

    settings = load_scan_settings()
    overrides: dict[str, object] = {}
    if args.timeout is not None:
        overrides["timeout"] = args.timeout / 1000.0
    scanner = ScanCache.from_settings(settings, **overrides)
    resolver = PathResolver(
        scanner,
        base_directory=os.path.abspath(base),
        prefixes=settings.prefixes,
        workspace_roots=[os.path.abspath(Path(root).expanduser()) for root in args.workspace],
        max_items=args.max_items,
    )

    settle = (args.settle or 0) / 1000.0
    resolution = asyncio.run(_resolve_once(resolver, args.query, settle))
    sys.stdout.write(format_resolution(resolution, args.long))


if __name__ == "__main__":
    main()
