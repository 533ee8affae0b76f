# scenarios.py
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from playwright.async_api import Locator, expect

from .constants import (
    logger, PART1_PATH, PART2_PATH, PART3_PATH, BUBBLE_SELECTOR, GRADIENT_BUBBLE_SELECTOR,
    LIST_ITEM_SELECTOR, START_BUBBLE_COUNT, MIN_DISTINCT_COLORS, COLOR_CLASSES, SETTLE_DELAY,
)
from .errors import ToleranceBandError
from .interactions import (
    classes_of, hover_without_settling, stop_spawning, fill_item, submit_item,
    add_item, clear_items, form_values, wait_for_images,
)
from .models import CountBand, ScenarioResult, ShoppingItem
from .oracle import assert_transition
from .polling import band_around, wait_intervals, ensure_count_band, distinct_colors
from .rules import rule_for, predict_removals
from .snapshots import ensure_only_candidates, ensure_count, count_candidates, capture_list

ScenarioFunc = Callable[..., Awaitable[None]]


@dataclass
class Scenario:
    name: str
    part: str
    func: ScenarioFunc


SCENARIOS: List[Scenario] = []

PART_PATHS = {
    'part1': PART1_PATH,
    'part2': PART2_PATH,
    'part3': PART3_PATH,
}


def scenario(part: str, name: str):
    def register(func: ScenarioFunc) -> ScenarioFunc:
        SCENARIOS.append(Scenario(name, part, func))
        return func
    return register


def select_scenarios(parts: Optional[List[str]] = None, keyword: Optional[str] = None) -> List[Scenario]:
    selected = [s for s in SCENARIOS if parts is None or s.part in parts]
    if keyword:
        selected = [s for s in selected if keyword.lower() in s.name.lower()]
    return selected


# Shared steps

async def expect_bubble_start_state(session):
    await ensure_only_candidates(session.page)
    await ensure_count(session.page, START_BUBBLE_COUNT)


async def click_by_rule(session, locator: Locator):
    """Click one bubble and check the removals its rule predicts."""
    before = await session.snapshot()
    clicked = await session.registry.lookup(locator)
    rule = rule_for(await classes_of(locator), session.rules)
    expected = predict_removals(rule, before, clicked)
    logger.info(f"Clicking bubble {clicked} ({rule}), expecting {len(expected)} removals")

    await locator.click()

    await assert_transition(before, session.snapshot, expected)


def shopping_item_texts(item: ShoppingItem) -> List[str]:
    # the app may print 2.30 as 2.3
    price = item.price.rstrip('0').rstrip('.') if '.' in item.price else item.price
    return [item.name, price]


async def expect_item(locator: Locator, item: ShoppingItem):
    for text in shopping_item_texts(item):
        await expect(locator).to_contain_text(text)


RASPBERRIES = ShoppingItem("Raspberries", "2.30", "https://picsum.photos/id/429/350/350")
BANANA = ShoppingItem("Banana", "10", "https://upload.wikimedia.org/wikipedia/commons/4/4c/Bananas.jpg")
COMPUTER = ShoppingItem("Computer", "1200", "https://picsum.photos/id/0/300/300")


# part1: static bubbles

@scenario('part1', "Click on a purple bubble, which removes all the purple bubbles")
async def click_first_purple(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.purple").first)


@scenario('part1', "Click on a different purple bubble, which removes all the purple bubbles")
async def click_other_purple(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.purple").nth(3))


@scenario('part1', "Click on a green bubble, which removes all the green and blue bubbles")
async def click_first_green(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.green").first)


@scenario('part1', "Click on a different green bubble, which removes all the green and blue bubbles")
async def click_other_green(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.green").nth(3))


@scenario('part1', "Click on a blue bubble, which does not remove any bubbles")
async def click_blue(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.blue").first)


@scenario('part1', "Click on an orange, non-bordered bubble, which does not remove any bubbles")
async def click_orange(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.orange:not(.border)").first)


@scenario('part1', "Click on an orange, bordered bubble, which removes just that bubble (first)")
async def click_first_bordered_orange(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.orange.border").first)


@scenario('part1', "Click on an orange, bordered bubble, which removes just that bubble (last)")
async def click_last_bordered_orange(session):
    await click_by_rule(session, session.page.locator(".shape-container .circle.orange.border").last)


@scenario('part1', "Hover over the gradient bubble, causing that bubble to be hidden")
async def hover_gradient(session):
    before = await session.snapshot()
    gradient = session.page.locator(GRADIENT_BUBBLE_SELECTOR)
    gradient_id = await session.registry.lookup(gradient)

    await hover_without_settling(gradient)

    # fails if the bubble comes back after the hover
    await assert_transition(before, session.snapshot, {gradient_id})


# part2: timed spawner

@scenario('part2', "Wait for some bubbles to load")
async def spawn_count(session):
    page = session.page
    await ensure_only_candidates(page)

    start = await ensure_count_band(page, CountBand(0, 5))
    await wait_intervals(page, 5, session.interval)
    end = await ensure_count_band(page, band_around(start + 5))

    await wait_intervals(page, 5, session.interval)
    await ensure_count_band(page, band_around(end + 5))

    await ensure_only_candidates(page)


@scenario('part2', "Bubbles should have random color")
async def random_colors(session):
    page = session.page
    await ensure_only_candidates(page)

    await wait_intervals(page, 20, session.interval)

    colors = await distinct_colors(page)
    if len(colors) < MIN_DISTINCT_COLORS:
        raise ToleranceBandError("distinct colors", CountBand(MIN_DISTINCT_COLORS, len(COLOR_CLASSES)), len(colors))

    await ensure_only_candidates(page)


@scenario('part2', "Stop button should stop the bubbles from spawning")
async def stop_button(session):
    page = session.page
    await ensure_only_candidates(page)

    await wait_intervals(page, 5, session.interval)
    start = await count_candidates(page)

    await stop_spawning(page)
    await wait_intervals(page, 5, session.interval)

    await ensure_count_band(page, CountBand(max(1, start - 1), start + 1))
    await ensure_only_candidates(page)


@scenario('part2', "Clicking a bubble will cause it to be removed")
async def click_removes_bubble(session):
    page = session.page
    await ensure_only_candidates(page)

    # exact removals need a quiet page
    await wait_intervals(page, 7, session.interval)
    await stop_spawning(page)
    await page.wait_for_timeout(SETTLE_DELAY)

    before = await session.snapshot()

    bubbles = await page.query_selector_all(BUBBLE_SELECTOR)
    await ensure_count_band(page, CountBand(5, max(5, len(bubbles))))
    first, second = bubbles[1], bubbles[4]
    first_id = await session.registry.lookup(first)
    second_id = await session.registry.lookup(second)

    await first.click()
    await assert_transition(before, session.snapshot, {first_id})

    await second.click()
    await assert_transition(before, session.snapshot, {first_id, second_id})

    await ensure_only_candidates(page)


# part3: shopping list

@scenario('part3', "No elements are added if the form is missing values.")
async def missing_values(session):
    page = session.page

    await submit_item(page)
    await ensure_count(page, 0, LIST_ITEM_SELECTOR, "items")

    await fill_item(page, ShoppingItem("Raspberries", ""))
    await submit_item(page)
    await ensure_count(page, 0, LIST_ITEM_SELECTOR, "items")

    await fill_item(page, ShoppingItem("", "2.30"))
    await submit_item(page)
    await ensure_count(page, 0, LIST_ITEM_SELECTOR, "items")

    await fill_item(page, ShoppingItem("Raspberries", "2.30"))
    await submit_item(page)
    await ensure_count(page, 1, LIST_ITEM_SELECTOR, "items")


@scenario('part3', "New elements are added correctly (single).")
async def add_single(session):
    page = session.page
    await add_item(page, RASPBERRIES)

    await ensure_count(page, 1, LIST_ITEM_SELECTOR, "items")
    await expect_item(page.locator(LIST_ITEM_SELECTOR), RASPBERRIES)

    await wait_for_images(page)


@scenario('part3', "New elements are added correctly (multiple).")
async def add_multiple(session):
    page = session.page
    await add_item(page, RASPBERRIES)

    values = await form_values(page)
    if any(values.values()):
        raise AssertionError(f"Expected the form to be cleared after adding, but found {values}")

    await add_item(page, BANANA)

    await ensure_count(page, 2, LIST_ITEM_SELECTOR, "items")
    items = page.locator(LIST_ITEM_SELECTOR)
    await expect_item(items.first, RASPBERRIES)
    await expect_item(items.last, BANANA)

    await wait_for_images(page)


@scenario('part3', "The <img> tag is rendered when it should be.")
async def image_rendered(session):
    page = session.page
    await add_item(page, RASPBERRIES)

    image = page.locator(f"{LIST_ITEM_SELECTOR} img")
    await wait_for_images(page)

    await expect(image).to_be_visible()
    await expect(image).to_have_attribute("src", RASPBERRIES.image_url)


@scenario('part3', "The <img> tag is not rendered when it shouldn't be.")
async def image_not_rendered(session):
    page = session.page
    await add_item(page, ShoppingItem("Raspberries", "2.30"))
    await wait_for_images(page)

    await ensure_count(page, 1, LIST_ITEM_SELECTOR, "items")
    await ensure_count(page, 0, f"{LIST_ITEM_SELECTOR} img", "images")


@scenario('part3', "Elements are persisted on reload.")
async def persisted_on_reload(session):
    page = session.page
    await add_item(page, RASPBERRIES)
    await add_item(page, BANANA)
    before = await capture_list(page)

    await session.reload()

    await ensure_count(page, 2, LIST_ITEM_SELECTOR, "items")
    after = await capture_list(page)
    if after != before:
        raise AssertionError(f"Expected the same items after reload, {before}, but found {after}")
    items = page.locator(LIST_ITEM_SELECTOR)
    await expect_item(items.first, RASPBERRIES)
    await expect_item(items.last, BANANA)

    await add_item(page, COMPUTER)
    await ensure_count(page, 3, LIST_ITEM_SELECTOR, "items")
    await expect(page.locator(LIST_ITEM_SELECTOR).last).to_contain_text(COMPUTER.name)


@scenario('part3', "Elements persisted on reload can be cleared.")
async def cleared_on_reload(session):
    page = session.page
    await add_item(page, RASPBERRIES)
    await add_item(page, BANANA)

    await session.reload()
    await ensure_count(page, 2, LIST_ITEM_SELECTOR, "items")

    await clear_items(page)
    await ensure_count(page, 0, LIST_ITEM_SELECTOR, "items")

    await session.reload()
    await ensure_count(page, 0, LIST_ITEM_SELECTOR, "items")

    await add_item(page, COMPUTER)
    await ensure_count(page, 1, LIST_ITEM_SELECTOR, "items")
    await expect(page.locator(LIST_ITEM_SELECTOR).last).to_contain_text(COMPUTER.name)


PART_SETUP: Dict[str, ScenarioFunc] = {
    'part1': expect_bubble_start_state,
}


async def run_scenario(session, scenario: Scenario) -> ScenarioResult:
    started = time.monotonic()
    logger.info(f"[{scenario.part}] {scenario.name}")
    try:
        await session.open(PART_PATHS[scenario.part])
        setup = PART_SETUP.get(scenario.part)
        if setup:
            await setup(session)
        await scenario.func(session)
    except Exception as e:
        logger.error(f"FAILED {scenario.name}: {e}")
        return ScenarioResult(scenario.name, scenario.part, False, str(e), time.monotonic() - started)

    logger.info(f"passed {scenario.name}")
    return ScenarioResult(scenario.name, scenario.part, True, duration=time.monotonic() - started)
