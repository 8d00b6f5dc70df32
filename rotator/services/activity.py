"""
Activity oracle: classifies accounts as still eligible for work or complete.

The portal reports season points per account; an account whose points
reached the configured limit is complete. Lookups that keep failing count
as active so the account is not silently abandoned.
"""
import asyncio
import logging
import os
import random
from typing import Any, List, Optional, Protocol

import aiohttp

from protocol.models import ActivityReport
from rotator.errors import ActivityCheckError
from rotator.utils.env import (
    ACTIVITY_API_URL,
    ACTIVITY_POINTS_LIMIT,
    ACTIVITY_SEASON,
    PROXIES_FILE,
)
from rotator.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/121.0",
]


class ActivityOracle(Protocol):
    async def check_batch(self, account_ids: List[str]) -> ActivityReport:
        ...


def load_proxies(path: str = PROXIES_FILE) -> List[str]:
    """Read proxy URLs (one per line); a missing file means no proxies."""
    if not os.path.isfile(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        proxies = [line.strip() for line in f if line.strip() and not line.startswith("#")]
    return [p if "://" in p else f"http://{p}" for p in proxies]


def parse_season_points(data: Any, season: int) -> int:
    """Return totalScore of the given season entry, 0 if absent."""
    if not isinstance(data, list):
        return 0
    for item in data:
        if isinstance(item, dict) and item.get("season") == season:
            return int(item.get("totalScore") or 0)
    return 0


class PortalActivityOracle:
    """Checks account points against the portal calculator API."""

    def __init__(
        self,
        base_url: str = ACTIVITY_API_URL,
        points_limit: int = ACTIVITY_POINTS_LIMIT,
        season: int = ACTIVITY_SEASON,
        proxies: Optional[List[str]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.points_limit = points_limit
        self.season = season
        self.proxies = proxies if proxies is not None else load_proxies()
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=10, delay=1.0)
        self.timeout = timeout

    async def fetch_points(self, account_id: str) -> int:
        """
        Fetch the account's season points once.

        Raises:
            ActivityCheckError: On HTTP error, timeout or bad payload
        """
        headers = {
            "User-Agent": random.choice(USER_AGENTS),
            "Accept": "application/json",
            "Accept-Language": "en-US,en;q=0.9",
        }
        proxy = random.choice(self.proxies) if self.proxies else None
        url = f"{self.base_url}/profile/calculator"
        try:
            async with aiohttp.ClientSession(headers=headers) as session:
                async with session.get(
                    url,
                    params={"address": account_id},
                    proxy=proxy,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise ActivityCheckError(
                            f"Portal returned status {response.status} for {account_id}"
                        )
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ActivityCheckError(f"Timeout checking {account_id}") from e
        except aiohttp.ClientError as e:
            raise ActivityCheckError(f"HTTP error checking {account_id}: {e}") from e
        return parse_season_points(data, self.season)

    async def check_account(self, account_id: str) -> Optional[int]:
        """Points for one account after retries, or None if every attempt failed."""
        try:
            return await self.retry_policy.call(self.fetch_points, account_id)
        except ActivityCheckError as e:
            logger.error(f"{account_id}: activity check failed - {e}")
            return None

    async def check_batch(self, account_ids: List[str]) -> ActivityReport:
        """
        Check all accounts concurrently and partition them.

        Failed lookups are reported as active.
        """
        logger.info(f"Checking {len(account_ids)} accounts...")
        points = await asyncio.gather(*(self.check_account(a) for a in account_ids))

        report = ActivityReport()
        for account_id, value in zip(account_ids, points):
            if value is not None and value >= self.points_limit:
                report.completed.append(account_id)
                logger.debug(f"{account_id}: {value}/{self.points_limit} (complete)")
            else:
                report.active.append(account_id)
                if value is not None:
                    logger.debug(f"{account_id}: {value}/{self.points_limit} (active)")

        logger.info(
            f"Activity check: {len(report.active)} active, {len(report.completed)} complete"
        )
        return report
