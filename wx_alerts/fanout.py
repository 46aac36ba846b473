"""Concurrent retrieval of every configured region feed."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .fetchers.battleboard import FeedError, fetch_feed, parse_feed
from .models import RawAlertRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


@dataclass
class FanoutResult:
    """Entries and failures collected from one poll cycle."""

    records: List[RawAlertRecord] = field(default_factory=list)
    failures: List[FeedError] = field(default_factory=list)
    succeeded: int = 0


def fetch_all(
    locators: List[str],
    host: Optional[str],
    fetch: Callable[..., bytes] = fetch_feed,
    parse: Callable[[bytes, str], List[RawAlertRecord]] = parse_feed,
    max_workers: int = DEFAULT_MAX_WORKERS,
    **fetch_kwargs,
) -> FanoutResult:
    """
    Fetch and parse all locators concurrently.

    Waits for every fetch to finish. A failed locator is logged and
    contributes nothing; it never aborts the others.

    Args:
        locators: Feed locators from build_paths
        host: Feed host; nothing is fetched when missing
        fetch: Function retrieving raw bytes for (locator, host)
        parse: Function turning raw bytes into records
        max_workers: Upper bound on concurrent requests
        **fetch_kwargs: Passed through to fetch (session, timeout, user_agent)

    Returns:
        FanoutResult with records in no particular cross-region order
    """
    result = FanoutResult()

    if not locators:
        logger.info("No regions configured; skipping fetch")
        return result
    if not host:
        logger.warning("Missing api host in config; skipping fetch")
        return result

    def task(locator: str) -> List[RawAlertRecord]:
        data = fetch(locator, host, **fetch_kwargs)
        return parse(data, locator)

    workers = max(1, min(max_workers, len(locators)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="feed-fetch") as pool:
        futures = {pool.submit(task, locator): locator for locator in locators}
        done, _ = wait(futures)

    for future in done:
        locator = futures[future]
        try:
            records = future.result()
        except FeedError as e:
            logger.warning(str(e))
            result.failures.append(e)
            continue
        except Exception as e:
            logger.error(f"Error processing feed {locator}: {e}")
            result.failures.append(FeedError(locator, str(e)))
            continue
        result.records.extend(records)
        result.succeeded += 1
        logger.debug(f"Fetched {len(records)} entries from {locator}")

    logger.info(
        f"Fetched {len(result.records)} entries from {result.succeeded}/{len(locators)} feeds"
    )
    return result
