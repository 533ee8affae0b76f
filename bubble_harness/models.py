# models.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# identity -> classList of every node rendered at capture time
Snapshot = Dict[int, List[str]]

@dataclass(frozen=True)
class CountBand:
    at_least: int
    at_most: int

    def __contains__(self, count: int) -> bool:
        return self.at_least <= count <= self.at_most

    def describe(self) -> str:
        if self.at_least == self.at_most:
            return f"{self.at_least}"
        return f"between {self.at_least} and {self.at_most}"

@dataclass
class Violation:
    identity: int
    classes: List[str]
    expected: str  # removed or present
    observed: str

    def message(self) -> str:
        return (
            f"Expected bubble {self.identity} ({' '.join(self.classes)}) to be {self.expected}, "
            f"but it is {'still present' if self.observed == 'present' else 'removed'}"
        )

@dataclass
class SnapshotDiff:
    removed: List[int] = field(default_factory=list)
    added: List[int] = field(default_factory=list)
    kept: List[int] = field(default_factory=list)

@dataclass(frozen=True)
class ListItem:
    text: str
    image_src: Optional[str] = None

@dataclass
class ShoppingItem:
    name: str
    price: str
    image_url: Optional[str] = None

@dataclass
class ScenarioResult:
    name: str
    part: str
    passed: bool
    error: Optional[str] = None
    duration: float = 0.0

ListSnapshot = Tuple[ListItem, ...]
