# main.py
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

from .config import build_config
from .constants import logger
from .models import ScenarioResult
from .scenarios import select_scenarios, run_scenario
from .session import HarnessSession


async def run(config: Dict[str, Any]) -> List[ScenarioResult]:
    scenarios = select_scenarios(config['parts'], config.get('keyword'))
    results = []

    async with HarnessSession(config) as session:
        for scenario in scenarios:
            results.append(await run_scenario(session, scenario))

    failed = [r for r in results if not r.passed]
    logger.info(f"Run completed! {len(results) - len(failed)} passed, {len(failed)} failed")
    for result in failed:
        logger.info(f"  [{result.part}] {result.name}")
    return results


def main(argv: Optional[List[str]] = None) -> int:
    config = build_config(argv)

    logging.basicConfig(
        level=logging.DEBUG if config['verbose'] or config['headful'] else logging.INFO,
        format='%(asctime)s %(levelname)-5s %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    if config['list_only']:
        for scenario in select_scenarios(config['parts'], config.get('keyword')):
            print(f"{scenario.part}  {scenario.name}")
        return 0

    results = asyncio.run(run(config))
    return 0 if all(r.passed for r in results) else 1


if __name__ == '__main__':
    sys.exit(main())
