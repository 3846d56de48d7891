#!/usr/bin/env python3
"""Print a life grid summary and optionally annotate a range of months.

Examples:
    lifegrid-summary.py alice
    lifegrid-summary.py alice --viewer alice --annotate 216 263 --label College
    lifegrid-summary.py alice --viewer alice --annotate 216 263 --clear
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from lifegrid.editor.client import LifeDataClient
from lifegrid.editor.config import LifeGridConfig
from lifegrid.editor.coordinates import from_month_index
from lifegrid.editor.session import GridSession, open_session

LOGGER = logging.getLogger("lifegrid-summary")


def _print_summary(session: GridSession) -> None:
    stats = session.stats()
    owner = " (you)" if session.is_owner else ""
    print(f"@{session.profile.username}{owner}")
    print(f"Lived {stats.months_lived:,} months, remaining {stats.months_remaining:,} of {stats.total_months:,}")
    print("Rows: " + " ".join(session.row_labels()))
    sections = session.legend()
    if not sections:
        print("No labeled sections")
        return
    for section in sections:
        row, year_offset = from_month_index(section.first_month_index)
        start = session.describe_cell(row, year_offset)
        print(f"  {section.color}  {section.label} ({section.count}m) from {start}")


def _annotate(session: GridSession, args: argparse.Namespace) -> bool:
    if not session.editable:
        LOGGER.error("Only the owner can annotate @%s", session.profile.username)
        return False
    start_row, start_year = from_month_index(args.annotate[0])
    end_row, end_year = from_month_index(args.annotate[1])
    session.click(start_row, start_year)
    session.click(end_row, end_year)
    if not session.selection.editing:
        LOGGER.error("Range %s..%s is outside the grid", args.annotate[0], args.annotate[1])
        session.cancel()
        return False

    if args.clear:
        return session.clear()
    if args.color and not session.pick_color(args.color):
        LOGGER.error("Invalid color %r", args.color)
        session.cancel()
        return False
    if args.label:
        session.set_label(args.label)
    pending = session.selection.pending
    LOGGER.info("%s: %s", session.editor_title(), pending.color if pending else "?")
    return session.apply()


async def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("username")
    parser.add_argument("--viewer", help="Username of the signed-in viewer (defaults to LIFEGRID_VIEWER)")
    parser.add_argument("--annotate", nargs=2, type=int, metavar=("START", "END"), help="Month indices from birth")
    parser.add_argument("--color", help="Hex color; defaults to the next distinct color")
    parser.add_argument("--label")
    parser.add_argument("--clear", action="store_true", help="Remove annotations in the range instead")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = LifeGridConfig.from_env()
    client = LifeDataClient(config.api)
    try:
        session = await open_session(client, args.username, viewer=args.viewer or config.viewer, grid=config.grid)
        if session is None:
            print(f"User @{args.username} not found", file=sys.stderr)
            return 1
        try:
            if args.annotate:
                if not _annotate(session, args):
                    return 2
                if not await session.saver.flush():
                    LOGGER.error("Changes were not saved: %s", session.saver.last_error)
                    return 3
            _print_summary(session)
        finally:
            session.close()
    finally:
        await client.close()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass
