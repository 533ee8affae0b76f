from .registry import IdentityRegistry
from .snapshots import capture_snapshot, ensure_only_candidates
from .oracle import assert_transition
from .session import HarnessSession

__all__ = [
    'IdentityRegistry',
    'capture_snapshot',
    'ensure_only_candidates',
    'assert_transition',
    'HarnessSession',
]
