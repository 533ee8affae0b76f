# snapshots.py
from typing import Dict, List

import yaml
from playwright.async_api import Page

from .constants import logger, CONTAINER_SELECTOR, BUBBLE_SELECTOR, LIST_ITEM_SELECTOR
from .errors import StructuralContractError, CountMismatchError
from .models import Snapshot, ListItem, ListSnapshot
from .registry import IdentityRegistry

# visibility: hidden still takes up layout and counts as present
DESCRIBE_SCRIPT = """node => ({
  rendered: node.isConnected && window.getComputedStyle(node).display !== 'none',
  classes: [...node.classList],
})"""

LIST_ITEMS_SCRIPT = """nodes => nodes.map(node => {
  const img = node.querySelector('img');
  return {
    text: node.textContent.replace(/\\s+/g, ' ').trim(),
    image_src: img ? img.getAttribute('src') : null,
  };
})"""


async def ensure_only_candidates(page: Page, container: str = CONTAINER_SELECTOR, candidate: str = ".circle"):
    # one query, so a spawn between two counts cannot trip it
    offending = await page.locator(f"{container} > *:not({candidate})").count()
    if offending:
        raise StructuralContractError(container, offending)


async def count_candidates(page: Page, selector: str = BUBBLE_SELECTOR) -> int:
    return await page.locator(selector).count()


async def ensure_count(page: Page, expected: int, selector: str = BUBBLE_SELECTOR, what: str = "bubbles") -> int:
    actual = await count_candidates(page, selector)
    if actual != expected:
        raise CountMismatchError(what, expected, actual)
    return actual


async def capture_snapshot(
    page: Page,
    registry: IdentityRegistry,
    container: str = CONTAINER_SELECTOR,
    candidate: str = ".circle",
) -> Snapshot:
    """Map identity -> classList for every candidate currently rendered.

    Nodes suppressed with ``display: none`` are left out, but keep their identity
    in the registry and come back under it if they are shown again. The read is
    not atomic: stop any background producer first when exact counts matter.
    """
    await ensure_only_candidates(page, container, candidate)

    nodes = await page.locator(f"{container} > {candidate}").all()
    snapshot: Snapshot = {}

    for node in nodes:
        identity = await registry.identity_of(node)
        described = await node.evaluate(DESCRIBE_SCRIPT)
        if described["rendered"]:
            snapshot[identity] = list(described["classes"])

    logger.debug(f"Captured {len(snapshot)} of {len(nodes)} candidates")
    return snapshot


async def capture_list(page: Page, selector: str = LIST_ITEM_SELECTOR) -> ListSnapshot:
    rows: List[Dict] = await page.locator(selector).evaluate_all(LIST_ITEMS_SCRIPT)
    return tuple(ListItem(text=row["text"], image_src=row.get("image_src")) for row in rows)


def dump_snapshot(snapshot: Snapshot) -> str:
    data = {identity: list(classes) for identity, classes in sorted(snapshot.items())}
    return yaml.dump(data, allow_unicode=True, default_flow_style=None)
