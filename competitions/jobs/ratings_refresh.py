"""
Background Scheduler for Rating Refresh.

Re-fetches the external rating table on a schedule so the cache holds a
fresh snapshot before results summaries ask for it. Runs either inside the
web app (a daemon thread started from its lifespan) or standalone.
"""

import asyncio
import logging
import threading
import time
from typing import Optional

import schedule

from competitions import config
from competitions.clients.ratings import RatingsClient, get_ratings_client

logger = logging.getLogger(__name__)


def refresh_ratings(client: Optional[RatingsClient] = None) -> int:
    """Background job to refresh ratings. Returns the number of rated teams."""
    client = client or get_ratings_client()
    logger.info("Starting scheduled rating refresh...")
    try:
        table = asyncio.run(client.get_rating_table(force_refresh=True))
    except Exception as e:
        logger.error(f"Error during rating refresh: {e}")
        return 0
    logger.info(f"Rating refresh complete: {len(table)} teams")
    return len(table)


def start_background_refresh(
    client: Optional[RatingsClient] = None,
    interval_minutes: Optional[int] = None,
) -> threading.Event:
    """
    Run the refresh job on a daemon thread.

    Returns:
        Event that stops the thread when set
    """
    interval = interval_minutes or config.RATINGS_REFRESH_MINUTES
    scheduler = schedule.Scheduler()
    scheduler.every(interval).minutes.do(refresh_ratings, client)
    stop = threading.Event()

    def run():
        refresh_ratings(client)
        while not stop.is_set():
            scheduler.run_pending()
            stop.wait(30)

    threading.Thread(target=run, name="ratings-refresh", daemon=True).start()
    logger.info(f"Rating refresh scheduled every {interval} minutes")
    return stop


def main():
    """Main entry point for scheduler."""
    logging.basicConfig(level=config.LOG_LEVEL.upper())

    if not config.RATINGS_URL:
        logger.error("RATINGS_URL is not set; nothing to refresh")
        return

    # Run immediately on start
    refresh_ratings()

    schedule.every(config.RATINGS_REFRESH_MINUTES).minutes.do(refresh_ratings)
    logger.info(f"Scheduled to run every {config.RATINGS_REFRESH_MINUTES} minutes")

    # Keep running
    while True:
        schedule.run_pending()
        time.sleep(60)


if __name__ == '__main__':
    main()
