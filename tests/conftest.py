"""
Fake page and nodes standing in for Playwright handles in unit tests
"""
import re
import sys
import os
from typing import Callable, Dict, List

import pytest

# Put the project root on the import path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bubble_harness import scenarios
from bubble_harness.constants import (
    CONTAINER_SELECTOR, TIME_PER_BUBBLE, ITEM_NAME_INPUT, ITEM_PRICE_INPUT,
    ITEM_IMAGE_URL_INPUT, ADD_ITEM_BUTTON, CLEAR_BUTTON, LIST_ITEM_SELECTOR,
)
from bubble_harness.interactions import CLASS_LIST_SCRIPT, IMAGES_COMPLETE_SCRIPT
from bubble_harness.registry import REGISTER_SCRIPT, LOOKUP_SCRIPT, IdentityRegistry
from bubble_harness.rules import DEFAULT_RULES
from bubble_harness.snapshots import DESCRIBE_SCRIPT, LIST_ITEMS_SCRIPT, capture_snapshot


class FakeWindow:
    """In-page registry store, keyed by node object like a JS WeakMap."""

    def __init__(self):
        self.registries: Dict[str, dict] = {}

    def register(self, node, ns):
        reg = self.registries.setdefault(ns, {'ids': {}, 'next': 0})
        if node not in reg['ids']:
            reg['ids'][node] = reg['next']
            reg['next'] += 1
        return reg['ids'][node]

    def lookup(self, node, ns):
        reg = self.registries.get(ns)
        if reg is None or node not in reg['ids']:
            return None
        return reg['ids'][node]


class FakeNode:

    def __init__(self, page, classes, node_id=None, display='block', visibility='visible'):
        self.page = page
        self.classes = list(classes)
        self.node_id = node_id
        self.display = display
        self.visibility = visibility
        self.connected = True

    async def evaluate(self, script, arg=None):
        if script == REGISTER_SCRIPT:
            return self.page.window.register(self, arg)
        if script == LOOKUP_SCRIPT:
            return self.page.window.lookup(self, arg)
        if script == DESCRIBE_SCRIPT:
            return {
                'rendered': self.connected and self.display != 'none',
                'classes': list(self.classes),
            }
        if script == CLASS_LIST_SCRIPT:
            return list(self.classes)
        raise AssertionError(f"Unexpected script: {script}")

    async def click(self):
        self.page.clicks.append(self)
        self.page.on_click(self.page, self)

    async def hover(self, no_wait_after=False):
        self.page.on_hover(self.page, self)

    def __repr__(self):
        return f"FakeNode({' '.join(self.classes)})"


def _matches(node, simple: str) -> bool:
    negated = re.findall(r':not\(([^)]*)\)', simple)
    simple = re.sub(r':not\([^)]*\)', '', simple)
    if simple.startswith('#'):
        return node.node_id == simple[1:]
    if simple not in ('', '*'):
        for cls in re.findall(r'\.([\w-]+)', simple):
            if cls not in node.classes:
                return False
    for neg in negated:
        if all(cls in node.classes for cls in re.findall(r'\.([\w-]+)', neg)):
            return False
    return True


class FakeLocator:

    def __init__(self, page, selector, index=None):
        self.page = page
        self.selector = selector
        self.index = index

    @property
    def first(self):
        return FakeLocator(self.page, self.selector, 0)

    @property
    def last(self):
        return FakeLocator(self.page, self.selector, -1)

    def nth(self, index):
        return FakeLocator(self.page, self.selector, index)

    def _resolve(self):
        nodes = self.page.match(self.selector)
        if self.index is None:
            assert len(nodes) == 1, f"strict mode violation: {self.selector} matched {len(nodes)}"
            return nodes[0]
        return nodes[self.index]

    async def count(self):
        return len(self.page.match(self.selector))

    async def all(self):
        self.page.all_calls += 1
        return [FakeLocator(self.page, self.selector, i) for i in range(await self.count())]

    async def evaluate(self, script, arg=None):
        return await self._resolve().evaluate(script, arg)

    async def click(self):
        control = self.page.controls.get(self.selector)
        if control:
            control(self.page)
            return
        await self._resolve().click()

    async def hover(self, no_wait_after=False):
        await self._resolve().hover(no_wait_after=no_wait_after)


def apply_color_rules(page, node):
    """Bubble app behaving as the default rule table says."""
    if 'orange' in node.classes and 'border' in node.classes:
        page.remove(node)
        return
    removes = {'purple': {'purple'}, 'green': {'green', 'blue'}}
    for color, colors in removes.items():
        if color in node.classes:
            for other in list(page.children):
                if set(other.classes) & colors:
                    page.remove(other)


def hide_on_hover(page, node):
    node.display = 'none'


class FakePage:

    def __init__(self, on_click: Callable = apply_color_rules, on_hover: Callable = hide_on_hover):
        self.window = FakeWindow()
        self.children: List[FakeNode] = []
        self.clicks: List[FakeNode] = []
        self.controls: Dict[str, Callable] = {}
        self.on_click = on_click
        self.on_hover = on_hover
        self.spawning = False
        self.waited: List[int] = []
        self.all_calls = 0
        self.handle_queries = 0

    def add(self, classes, **kwargs) -> FakeNode:
        node = FakeNode(self, classes, **kwargs)
        self.children.append(node)
        return node

    def remove(self, node):
        node.connected = False
        self.children.remove(node)

    def match(self, selector: str) -> List[FakeNode]:
        selector = selector.strip()
        if selector.startswith(CONTAINER_SELECTOR):
            rest = selector[len(CONTAINER_SELECTOR):].strip()
            if rest.startswith('>'):
                rest = rest[1:].strip()
            return [n for n in self.children if _matches(n, rest)]
        return []

    def locator(self, selector):
        return FakeLocator(self, selector)

    async def query_selector_all(self, selector):
        self.handle_queries += 1
        return self.match(selector)

    async def wait_for_timeout(self, ms):
        self.waited.append(ms)
        if self.spawning:
            for _ in range(ms // TIME_PER_BUBBLE):
                self.add(['circle', 'red'])


class FakeSession:

    def __init__(self, page):
        self.page = page
        self.registry = IdentityRegistry()
        self.rules = list(DEFAULT_RULES)
        self.interval = TIME_PER_BUBBLE

    async def snapshot(self):
        return await capture_snapshot(self.page, self.registry)

    async def reload(self):
        await self.page.reload()
        self.registry.reset()


class FakeShoppingApp:
    """Shopping list page: form inputs, rendered items and stored items."""

    def __init__(self, validate=True, clear_form=True, persist=True, clear_storage=True,
                 reorder_on_reload=False, placeholder_image=False):
        self.validate = validate
        self.clear_form = clear_form
        self.persist = persist
        self.clear_storage = clear_storage
        self.reorder_on_reload = reorder_on_reload
        self.placeholder_image = placeholder_image
        self.inputs = {ITEM_NAME_INPUT: '', ITEM_PRICE_INPUT: '', ITEM_IMAGE_URL_INPUT: ''}
        self.items: List[dict] = []
        self.stored: List[dict] = []
        self.reloads = 0
        self.image_waits = 0

    def _reset_form(self):
        for key in self.inputs:
            self.inputs[key] = ''

    def submit(self):
        name = self.inputs[ITEM_NAME_INPUT]
        price = self.inputs[ITEM_PRICE_INPUT]
        if self.validate and not (name and price):
            return
        image = self.inputs[ITEM_IMAGE_URL_INPUT] or ('placeholder.png' if self.placeholder_image else None)
        self.items.append({'name': name, 'price': price, 'image_url': image})
        self.stored = list(self.items)
        if self.clear_form:
            self._reset_form()

    def clear(self):
        self.items = []
        if self.clear_storage:
            self.stored = []

    def item_text(self, item) -> str:
        price = f"{float(item['price']):g}" if item['price'] else ''
        return f"{item['name']} {price}".strip()

    def locator(self, selector):
        return FakeShoppingLocator(self, selector)

    async def reload(self):
        self.reloads += 1
        self._reset_form()
        self.items = list(self.stored) if self.persist else []
        if self.reorder_on_reload:
            self.items.reverse()

    async def wait_for_function(self, script):
        assert script == IMAGES_COMPLETE_SCRIPT
        self.image_waits += 1


class FakeShoppingLocator:

    def __init__(self, app, selector, index=None):
        self.app = app
        self.selector = selector
        self.index = index

    @property
    def first(self):
        return FakeShoppingLocator(self.app, self.selector, 0)

    @property
    def last(self):
        return FakeShoppingLocator(self.app, self.selector, -1)

    def _rows(self) -> List[dict]:
        if self.selector == LIST_ITEM_SELECTOR:
            rows = self.app.items
        elif self.selector == f"{LIST_ITEM_SELECTOR} img":
            rows = [item for item in self.app.items if item['image_url']]
        else:
            raise AssertionError(f"Unexpected selector: {self.selector}")
        if self.index is not None:
            return [rows[self.index]]
        return rows

    def _single(self) -> dict:
        rows = self._rows()
        assert len(rows) == 1, f"strict mode violation: {self.selector} matched {len(rows)}"
        return rows[0]

    async def fill(self, value):
        self.app.inputs[self.selector] = value

    async def input_value(self):
        return self.app.inputs[self.selector]

    async def click(self):
        if self.selector == ADD_ITEM_BUTTON:
            self.app.submit()
        elif self.selector == CLEAR_BUTTON:
            self.app.clear()
        else:
            raise AssertionError(f"Nothing to click at {self.selector}")

    async def count(self):
        return len(self._rows())

    async def evaluate_all(self, script):
        assert script == LIST_ITEMS_SCRIPT
        return [{'text': self.app.item_text(item), 'image_src': item['image_url']} for item in self._rows()]

    def text(self) -> str:
        return self.app.item_text(self._single())

    def attribute(self, name) -> str:
        assert name == 'src'
        return self._single()['image_url']


class FakeExpect:
    """Stands in for playwright's ``expect`` on fake locators."""

    def __init__(self, locator):
        self.locator = locator

    async def to_contain_text(self, text):
        actual = self.locator.text()
        if text not in actual:
            raise AssertionError(f"Locator expected to contain text {text!r}, got {actual!r}")

    async def to_be_visible(self):
        self.locator._single()

    async def to_have_attribute(self, name, value):
        actual = self.locator.attribute(name)
        if actual != value:
            raise AssertionError(f"Locator expected to have attribute {name}={value!r}, got {actual!r}")


def build_bubble_page(**kwargs) -> FakePage:
    """26 bubbles, laid out like the static bubble page."""
    page = FakePage(**kwargs)
    layout = [
        (['circle', 'purple'], 5),
        (['circle', 'green'], 4),
        (['circle', 'blue'], 3),
        (['circle', 'orange'], 3),
        (['circle', 'orange', 'border'], 2),
        (['circle', 'red'], 5),
        (['circle', 'yellow'], 3),
    ]
    for classes, count in layout:
        for _ in range(count):
            page.add(classes)
    page.add(['circle'], node_id='gradient-circle')
    return page


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def bubble_page():
    return build_bubble_page()


@pytest.fixture
def session(bubble_page):
    return FakeSession(bubble_page)


@pytest.fixture
def registry():
    return IdentityRegistry()


@pytest.fixture
def fake_expect(monkeypatch):
    monkeypatch.setattr(scenarios, 'expect', FakeExpect)
    return FakeExpect


@pytest.fixture
def shopping_app():
    return FakeShoppingApp()
