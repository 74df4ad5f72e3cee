#!/usr/bin/env python3
"""Show exchange request statistics straight from PocketBase."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pocketbase import PocketBase  # noqa: E402

from api.settings import get_settings  # noqa: E402
from shelf.feed import RequestSummary, summarize_requests  # noqa: E402
from shelf.logging_config import configure_logging, get_logger  # noqa: E402
from shelf.repositories import RequestRepository  # noqa: E402

logger = get_logger(__name__)


def render_summary(summary: RequestSummary) -> str:
    """Render a summary as the plain-text report printed by main()."""
    lines = ["=" * 40, "EXCHANGE REQUESTS", "=" * 40]
    for status, count in summary.by_status.items():
        lines.append(f"  {status:12} {count:>6}")
    lines.append(f"  {'TOTAL':12} {summary.total:>6}")
    if summary.stranded_request_ids:
        lines.append("")
        lines.append(f"Pending requests on already-promised listings: {len(summary.stranded_request_ids)}")
        lines.extend(f"    {request_id}" for request_id in summary.stranded_request_ids)
    return "\n".join(lines)


async def collect(pb: PocketBase) -> RequestSummary:
    requests = await RequestRepository(pb).list_all()
    return summarize_requests(requests)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", help="PocketBase URL (defaults to POCKETBASE_URL)")
    args = parser.parse_args()

    configure_logging(source="stats")
    settings = get_settings()

    pb = PocketBase(args.url or settings.pocketbase_url)
    pb.collection("_superusers").auth_with_password(
        settings.pocketbase_admin_email,
        settings.pocketbase_admin_password,
    )
    logger.debug("Authenticated with PocketBase")

    print(render_summary(asyncio.run(collect(pb))))


if __name__ == "__main__":
    main()
