"""Base exception and transaction outcome shared by all prosemark packages.

Every package defines its own typed errors in an ``errors`` module; all of
them inherit from ProsemarkError so callers can catch any application-level
failure in one place.
"""

from enum import Enum
from typing import Optional


class TransactionOutcome(Enum):
    """Terminal state of a node-creation transaction.

    - REJECTED: input was invalid, no I/O was performed
    - FAILED_PRE_COMMIT: failed before the binder referenced the node; the
      node file was never written or has been rolled back
    - COMMITTED: the binder references the node (or already did)
    - FAILED_POST_COMMIT: failed after commit; node and binder are retained
    """
    REJECTED = "rejected"
    FAILED_PRE_COMMIT = "failed-pre-commit"
    COMMITTED = "committed"
    FAILED_POST_COMMIT = "failed-post-commit"


class ProsemarkError(Exception):
    """Base exception for all prosemark errors.

    Attributes:
        outcome: Transaction outcome this error represents, when it was
                 raised from inside a node-creation transaction
    """

    outcome: Optional[TransactionOutcome] = None
