# config.py
import argparse
from typing import Any, Dict, List, Optional

from .constants import BASE_URL, DEFAULT_TIMEOUT, TIME_PER_BUBBLE
from .rules import DEFAULT_RULES, load_rules

PARTS = ['part1', 'part2', 'part3']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Bubble and shopping list verification harness')
    parser.add_argument('--url', default=BASE_URL, help='Base URL of the application under test')
    parser.add_argument('--part', action='append', choices=PARTS, help='Only run scenarios of this part (repeatable)')
    parser.add_argument('-k', '--keyword', help='Only run scenarios whose name contains this text')
    parser.add_argument('--rules', help='YAML file with the removal rule table')
    parser.add_argument('--interval', type=int, default=TIME_PER_BUBBLE, help='Spawn interval in ms')
    parser.add_argument('--timeout', type=int, default=DEFAULT_TIMEOUT, help='Default Playwright timeout in ms')
    parser.add_argument('--headful', action='store_true', help='Show browser')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--list', action='store_true', help='List scenarios and exit')
    return parser


def build_config(args: Optional[List[str]] = None) -> Dict[str, Any]:
    parsed = build_parser().parse_args(args)
    return {
        'base_url': parsed.url.rstrip('/'),
        'parts': parsed.part or list(PARTS),
        'keyword': parsed.keyword,
        'rules': load_rules(parsed.rules) if parsed.rules else list(DEFAULT_RULES),
        'interval': parsed.interval,
        'timeout': parsed.timeout,
        'headful': parsed.headful,
        'verbose': parsed.verbose,
        'list_only': parsed.list,
    }
