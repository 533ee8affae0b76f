# errors.py
from typing import List, Optional

from .models import CountBand, Violation


class HarnessError(Exception):
    """Base class for harness failures that are not application defects."""


class StructuralContractError(AssertionError):
    """Something other than a candidate node sits in the container."""

    def __init__(self, container: str, offending: int, total: Optional[int] = None):
        self.container = container
        self.offending = offending
        self.total = total
        msg = f"Expected only bubbles to be present in {container}, but found {offending} other elements"
        if total is not None:
            msg += f" ({total} elements in total)"
        super().__init__(msg)


class IdentityResolutionError(HarnessError, LookupError):
    """A node was looked up before any snapshot registered it."""

    def __init__(self, description: str = "node"):
        self.description = description
        super().__init__(
            f"No identity registered for {description}; capture a snapshot before looking it up"
        )


class TransitionAssertionError(AssertionError):

    def __init__(self, violations: List[Violation]):
        self.violations = violations
        lines = [v.message() for v in violations]
        super().__init__(f"{len(violations)} bubble(s) in unexpected state:\n  " + "\n  ".join(lines))

    @property
    def identities(self) -> List[int]:
        return [v.identity for v in self.violations]


class ToleranceBandError(AssertionError):

    def __init__(self, what: str, band: CountBand, actual: int):
        self.band = band
        self.actual = actual
        super().__init__(f"Expected {band.describe()} {what}, but found {actual} {what}")


class CountMismatchError(AssertionError):

    def __init__(self, what: str, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} {what}, but found {actual} {what}")
