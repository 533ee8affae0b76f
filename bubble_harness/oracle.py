# oracle.py
from typing import Awaitable, Callable, Iterable

from playwright.async_api import Page

from .constants import logger, COLOR_CLASSES
from .errors import TransitionAssertionError
from .models import Snapshot, SnapshotDiff, Violation
from .registry import IdentityRegistry
from .snapshots import capture_snapshot, dump_snapshot

SnapshotProducer = Callable[[], Awaitable[Snapshot]]


def diff_snapshots(before: Snapshot, after: Snapshot) -> SnapshotDiff:
    return SnapshotDiff(
        removed=sorted(i for i in before if i not in after),
        added=sorted(i for i in after if i not in before),
        kept=sorted(i for i in before if i in after),
    )


async def assert_transition(before: Snapshot, after_producer: SnapshotProducer, expected_removed: Iterable[int]) -> Snapshot:
    """Check that exactly ``expected_removed`` disappeared out of ``before``.

    Every identity of ``before`` is visited and all violations are reported
    together. Identities that only exist in the new snapshot are not checked,
    so nodes spawned while the action ran do not fail the transition.
    """
    expected = set(expected_removed)
    after = await after_producer()

    stray = expected.difference(before)
    if stray:
        logger.debug(f"Expected removals {sorted(stray)} were not in the before snapshot")

    violations = []
    for identity, classes in before.items():
        present = identity in after
        if identity in expected:
            if present:
                violations.append(Violation(identity, classes, expected="removed", observed="present"))
        elif not present:
            violations.append(Violation(identity, classes, expected="present", observed="removed"))

    diff = diff_snapshots(before, after)
    logger.debug(f"Transition: removed={diff.removed} added={diff.added} kept={len(diff.kept)}")

    if violations:
        logger.debug(f"Snapshot after transition:\n{dump_snapshot(after)}")
        raise TransitionAssertionError(violations)
    return after


def expected_removals_for_colors(snapshot: Snapshot, colors: Iterable[str]) -> set:
    colors = set(colors)
    ids = set()
    for identity, classes in snapshot.items():
        color_classes = [cls for cls in classes if cls in COLOR_CLASSES]
        if any(cls in colors for cls in color_classes):
            ids.add(identity)
    return ids


async def expect_removed(page: Page, registry: IdentityRegistry, before: Snapshot, identities: Iterable[int]) -> Snapshot:
    return await assert_transition(before, lambda: capture_snapshot(page, registry), identities)


async def expect_colors_removed(page: Page, registry: IdentityRegistry, before: Snapshot, colors: Iterable[str]) -> Snapshot:
    return await expect_removed(page, registry, before, expected_removals_for_colors(before, colors))
