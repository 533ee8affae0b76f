# interactions.py
from typing import Dict

from playwright.async_api import Page, Locator

from .constants import (
    logger, STOP_BUTTON_SELECTOR, ITEM_NAME_INPUT, ITEM_PRICE_INPUT,
    ITEM_IMAGE_URL_INPUT, ADD_ITEM_BUTTON, CLEAR_BUTTON,
)
from .models import ShoppingItem

CLASS_LIST_SCRIPT = "node => [...node.classList]"

IMAGES_COMPLETE_SCRIPT = """() => {
  const images = Array.from(document.querySelectorAll('img'));
  return images.every(img => img.complete);
}"""


async def classes_of(node) -> list:
    return await node.evaluate(CLASS_LIST_SCRIPT)


async def hover_without_settling(locator: Locator):
    # checked right away so an effect that reverts on its own is caught
    await locator.hover(no_wait_after=True)


async def stop_spawning(page: Page):
    logger.info("Stopping bubble spawner")
    await page.locator(STOP_BUTTON_SELECTOR).click()


async def fill_item(page: Page, item: ShoppingItem):
    await page.locator(ITEM_NAME_INPUT).fill(item.name)
    await page.locator(ITEM_PRICE_INPUT).fill(item.price)
    if item.image_url:
        await page.locator(ITEM_IMAGE_URL_INPUT).fill(item.image_url)


async def submit_item(page: Page):
    await page.locator(ADD_ITEM_BUTTON).click()


async def add_item(page: Page, item: ShoppingItem):
    logger.debug(f"Adding item {item.name} ({item.price})")
    await fill_item(page, item)
    await submit_item(page)


async def clear_items(page: Page):
    await page.locator(CLEAR_BUTTON).click()


async def form_values(page: Page) -> Dict[str, str]:
    return {
        'name': await page.locator(ITEM_NAME_INPUT).input_value(),
        'price': await page.locator(ITEM_PRICE_INPUT).input_value(),
        'image_url': await page.locator(ITEM_IMAGE_URL_INPUT).input_value(),
    }


async def wait_for_images(page: Page):
    await page.wait_for_function(IMAGES_COMPLETE_SCRIPT)
