# polling.py
from typing import Set

from playwright.async_api import Page

from .constants import logger, BUBBLE_SELECTOR, COLOR_CLASSES, SPAWN_SLACK, TIME_PER_BUBBLE
from .errors import ToleranceBandError
from .models import CountBand
from .snapshots import count_candidates


def band_around(expected: int, slack: int = SPAWN_SLACK, floor: int = 0) -> CountBand:
    # spawn timer and poll are not synchronised; never assert equality
    return CountBand(max(floor, expected - slack), expected + slack)


async def wait_intervals(page: Page, intervals: int, interval: int = TIME_PER_BUBBLE):
    logger.debug(f"Waiting {intervals} spawn intervals ({intervals * interval} ms)")
    await page.wait_for_timeout(intervals * interval)


async def ensure_count_band(page: Page, band: CountBand, selector: str = BUBBLE_SELECTOR, what: str = "bubbles") -> int:
    count = await count_candidates(page, selector)
    if count not in band:
        raise ToleranceBandError(what, band, count)
    logger.debug(f"{count} {what} within {band.describe()}")
    return count


async def distinct_colors(page: Page, selector: str = BUBBLE_SELECTOR) -> Set[str]:
    colors = set()
    for color in COLOR_CLASSES:
        if await page.locator(f"{selector}.{color}").count() > 0:
            colors.add(color)
    return colors
