"""Environment Canada battleboard feed fetcher."""

import feedparser
import logging
import requests
from typing import Iterable, List, Optional

from ..models import RawAlertRecord, RegionSpec

logger = logging.getLogger(__name__)

FEED_PREFIX = "/rss/battleboard"
DEFAULT_TIMEOUT = 15
DEFAULT_USER_AGENT = "wx-alerts/0.1"

# feedparser flags these on documents that are otherwise well formed
_BENIGN_BOZO = (
    feedparser.CharacterEncodingOverride,
    feedparser.NonXMLContentType,
)


class FeedError(Exception):
    """Base class for per-locator feed failures."""

    def __init__(self, locator: str, message: str):
        super().__init__(message)
        self.locator = locator


class FetchError(FeedError):
    """Bad status, transport failure or timeout while retrieving a feed."""

    def __init__(
        self,
        locator: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        timeout: bool = False,
    ):
        if timeout:
            message = f"Request for {locator} timed out"
        elif status_code is not None:
            message = f"Could not get alert data from {locator} - Error {status_code}"
        else:
            message = f"Failed making request for {locator} - {cause}"
        super().__init__(locator, message)
        self.status_code = status_code
        self.cause = cause
        self.timeout = timeout


class ParseError(FeedError):
    """Feed document could not be parsed."""

    def __init__(self, locator: str, cause: Optional[BaseException] = None):
        super().__init__(locator, f"Error parsing XML data from {locator}: {cause}")
        self.cause = cause


def build_paths(regions: Iterable[RegionSpec], lang: Optional[str] = None) -> List[str]:
    """
    Build feed locators for the configured regions.

    Regions without a code are skipped. The language initial is the lowercase
    first character of ``lang``, or ``e`` when unset.

    Returns:
        List of locators such as ``/rss/battleboard/on61_e.xml``
    """
    initial = lang[0].lower() if lang else "e"
    paths = []
    for region in regions:
        code = region.code if region is not None else None
        if not code:
            continue
        paths.append(f"{FEED_PREFIX}/{code}_{initial}.xml")
    return paths


def fetch_feed(
    locator: str,
    host: str,
    session=None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bytes:
    """
    Fetch one feed document.

    Args:
        locator: Path produced by build_paths
        host: Feed host, e.g. "weather.gc.ca"
        session: Optional requests.Session (or compatible object)
        timeout: Seconds before the request is abandoned
        user_agent: User-Agent header value

    Returns:
        Raw response body

    Raises:
        FetchError: on non-2xx status, transport failure or timeout
    """
    url = f"https://{host}{locator}"
    http = session or requests
    logger.debug(f"Fetching feed {url}")

    try:
        response = http.get(url, headers={"User-Agent": user_agent}, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise FetchError(locator, cause=e, timeout=True) from e
    except requests.exceptions.RequestException as e:
        raise FetchError(locator, cause=e) from e

    try:
        if response.status_code < 200 or response.status_code > 299:
            raise FetchError(locator, status_code=response.status_code)
        return response.content
    finally:
        response.close()


def parse_feed(data: bytes, locator: str = "") -> List[RawAlertRecord]:
    """
    Parse a feed document into raw alert records.

    A document with no entries is a valid, empty result. A document that
    is not well formed raises ParseError, even if some entries came out.
    """
    feed = feedparser.parse(data)
    exc = feed.get("bozo_exception")

    if feed.bozo and not isinstance(exc, _BENIGN_BOZO):
        raise ParseError(locator, exc)
    if feed.bozo:
        logger.warning(f"Feed parsing warning for {locator}: {exc}")

    records = []
    for entry in feed.entries:
        summary = entry.get("summary", "") or entry.get("description", "")
        records.append(
            RawAlertRecord(
                title_raw=entry.get("title", "") or "",
                updated_raw=entry.get("updated") or None,
                summary_raw=summary or "",
                locator=locator,
            )
        )

    logger.debug(f"Parsed {len(records)} entries from {locator}")
    return records
