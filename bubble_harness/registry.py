# registry.py
import uuid
from typing import Union

from playwright.async_api import ElementHandle, Locator

from .constants import logger
from .errors import IdentityResolutionError

NodeHandle = Union[ElementHandle, Locator]

# The association lives in the page, keyed by the DOM node itself. A Python
# handle is a fresh wrapper on every query, so it cannot serve as the key.
REGISTER_SCRIPT = """(node, ns) => {
  const root = window.__bubbleHarness || (window.__bubbleHarness = {});
  const reg = root[ns] || (root[ns] = { ids: new WeakMap(), next: 0 });
  if (!reg.ids.has(node)) {
    reg.ids.set(node, reg.next++);
  }
  return reg.ids.get(node);
}"""

LOOKUP_SCRIPT = """(node, ns) => {
  const reg = window.__bubbleHarness && window.__bubbleHarness[ns];
  if (!reg || !reg.ids.has(node)) {
    return null;
  }
  return reg.ids.get(node);
}"""


class IdentityRegistry:
    """Hands out stable integer identities for DOM nodes of one page incarnation.

    Identities are allocated lazily from a counter starting at 0. Asking again
    for a node that is already known returns its existing identity, and two
    different nodes never share one, whatever their classes. Entries are never
    removed; a detached node is simply never asked about again.

    The registry belongs to a single page session. Call ``reset()`` whenever the
    page is navigated or reloaded so that identities from the old document are
    not mixed with the new one.
    """

    def __init__(self, name: str = "bubbles"):
        self.name = name
        self.generation = 0
        self.namespace = self._new_namespace()

    def _new_namespace(self) -> str:
        return f"{self.name}-{uuid.uuid4().hex[:12]}-{self.generation}"

    async def identity_of(self, node: NodeHandle) -> int:
        identity = await node.evaluate(REGISTER_SCRIPT, self.namespace)
        return int(identity)

    async def lookup(self, node: NodeHandle) -> int:
        """Identity of a node some earlier snapshot must already have registered."""
        identity = await node.evaluate(LOOKUP_SCRIPT, self.namespace)
        if identity is None:
            raise IdentityResolutionError(str(node))
        return int(identity)

    def reset(self):
        self.generation += 1
        self.namespace = self._new_namespace()
        logger.debug(f"Identity registry reset, namespace {self.namespace}")

    def __repr__(self):
        return f"IdentityRegistry(namespace={self.namespace!r})"
