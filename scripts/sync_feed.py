#!/usr/bin/env python3
"""
Beer feed sync CLI tool.

Usage:
    python scripts/sync_feed.py                    # Sync if an update is due
    python scripts/sync_feed.py --force            # Sync now, even if the feed is unchanged
    python scripts/sync_feed.py --url URL [--url URL2]   # Sync from specific feed URLs
    python scripts/sync_feed.py --file beer.json   # Import a local copy of the feed
    python scripts/sync_feed.py --stats            # Show database statistics
    python scripts/sync_feed.py --export ratings.csv     # Export rated beers
"""

import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
project_path = Path(__file__).parent.parent
sys.path.insert(0, str(project_path))

from dotenv import load_dotenv

from beerfest.config import Config
from beerfest.feed.fetcher import FileFeedFetcher, HttpFeedFetcher
from beerfest.services.beer_store import BeerStore
from beerfest.services.exporter import ratings_csv
from beerfest.services.preferences import AppPreferences
from beerfest.services.sync_engine import SyncEngine
from beerfest.services.update_service import UpdateService


def run_sync(urls: list[str], feed_file: str, force: bool, timeout: float) -> int:
    """Run one sync. Returns a process exit code."""
    store = BeerStore()
    preferences = AppPreferences()

    if feed_file:
        fetcher = FileFeedFetcher(feed_file)
    else:
        fetcher = HttpFeedFetcher(urls or Config.feed_urls())

    service = UpdateService(
        SyncEngine(store, fetcher),
        store,
        preferences,
        interval=timedelta(hours=Config.update_interval_hours()),
    )

    print(f"\n{'='*60}")
    print(f"Syncing: {feed_file or ', '.join(fetcher.urls)}")
    print(f"{'='*60}")

    result = service.run(force=force, timeout=timeout)
    store.close()

    if result is None:
        print(f"No update due until {preferences.next_update_time.isoformat()} (use --force)")
        return 0

    if result.unchanged:
        print("Feed unchanged since last sync.")
    print(f"\nFinished in {result.elapsed:.1f}s: {result.state.value}")
    print(f"  Breweries upserted: {result.breweries_upserted:,}")
    print(f"  Beers upserted: {result.beers_upserted:,}")
    print(f"  Skipped entries: {result.skipped_count:,}")

    if result.messages:
        print(f"  Messages: {len(result.messages)}")
        for message in result.messages[:5]:
            print(f"    - [{message.kind.value}] {message.detail}")
        if len(result.messages) > 5:
            print(f"    ... and {len(result.messages) - 5} more")

    return 0 if result.succeeded else 1


def show_stats():
    """Show database statistics."""
    print("\n" + "="*60)
    print("Beer Database Statistics")
    print("="*60)

    store = BeerStore()
    print(f"\nBreweries: {store.brewery_count():,}")
    print(f"Beers: {store.count():,}")
    print(f"Rated beers: {len(store.rated_beers()):,}")
    print(f"Low/no alcohol beers: {len(store.beers(category=Config.LOW_NO_ALCOHOL_CATEGORY)):,}")

    styles = store.available_styles()
    print(f"\nStyles ({len(styles)}):")
    for style in styles:
        print(f"  {style}")

    allergens = store.available_allergens()
    print(f"\nAllergens ({len(allergens)}): {', '.join(allergens) or 'none'}")

    preferences = AppPreferences()
    print(f"\nBookmarked beers: {len(preferences.get_bookmarked_ids()):,}")
    print(f"Next scheduled update: {preferences.next_update_time.isoformat()}")

    store.close()


def export_ratings(path: str):
    """Write rated beers to a CSV file."""
    store = BeerStore()
    body = ratings_csv(store.rated_beers())
    store.close()
    Path(path).write_text(body, encoding="utf-8")
    print(f"Wrote ratings to {path}")


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Beer festival feed sync CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--url", "-u",
        action="append",
        help="Feed URL (repeatable). Default: FEED_URLS"
    )
    parser.add_argument(
        "--file",
        help="Read the feed from a local JSON file"
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Sync even if no update is due or the feed is unchanged"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Fetch timeout in seconds. Default: FETCH_TIMEOUT"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show database statistics"
    )
    parser.add_argument(
        "--export",
        metavar="PATH",
        help="Export rated beers as CSV"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, Config.log_level(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.stats:
        show_stats()
        return

    if args.export:
        export_ratings(args.export)
        return

    exit_code = run_sync(args.url, args.file, args.force, args.timeout)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
