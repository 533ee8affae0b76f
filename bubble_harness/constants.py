# constants.py
import logging

logger = logging.getLogger(__name__)

# Constants
BASE_URL = "http://localhost:3000"
PART1_PATH = "/part1/index.html"
PART2_PATH = "/part2/index.html"
PART3_PATH = "/part3/index.html"

# Bubbles
CONTAINER_SELECTOR = ".shape-container"
BUBBLE_SELECTOR = ".shape-container > .circle"
GRADIENT_BUBBLE_SELECTOR = ".shape-container #gradient-circle"
STOP_BUTTON_SELECTOR = "#stop-button"

COLOR_CLASSES = ["red", "orange", "yellow", "green", "blue", "purple"]
BORDER_CLASS = "border"
START_BUBBLE_COUNT = 26

TIME_PER_BUBBLE = 500  # ms between spawns
SPAWN_SLACK = 1
MIN_DISTINCT_COLORS = 3

# Shopping list
ITEM_NAME_INPUT = "#item-name-input"
ITEM_PRICE_INPUT = "#item-price-input"
ITEM_IMAGE_URL_INPUT = "#item-image-url-input"
ADD_ITEM_BUTTON = "#add-item"
CLEAR_BUTTON = "#clear-button"
LIST_ITEM_SELECTOR = "#items .shopping-list-item"

# Browser
DEFAULT_TIMEOUT = 10000
SETTLE_DELAY = 100
