"""Pipeline stage and retry-strategy enumerations.

The compiler moves through a strictly linear sequence of stages::

    RECEIVED -> TIME_RESOLVED -> RECURRENCE_NORMALIZED -> VALIDATED -> DONE

``FAILED`` is terminal and reachable from any non-terminal stage.
"""

from __future__ import annotations

from enum import Enum


class Stage(str, Enum):
    """A phase of the compiler pipeline."""

    RECEIVED = "received"
    TIME_RESOLVED = "time_resolved"
    RECURRENCE_NORMALIZED = "recurrence_normalized"
    VALIDATED = "validated"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Stage.DONE, Stage.FAILED)


class RetryStrategy(str, Enum):
    """What a caller should do after a failed compile.

    ``REPROMPT`` means the NL front-end produced something unusable and may
    succeed if asked again with the error as feedback.  ``REJECT`` means the
    request itself is structurally unacceptable.
    """

    REPROMPT = "reprompt"
    REJECT = "reject"


# Stages at which a failure is attributed to the NL front-end's output.
_REPROMPT_STAGES = frozenset({Stage.TIME_RESOLVED, Stage.RECURRENCE_NORMALIZED})


def retry_strategy_for(stage: Stage) -> RetryStrategy:
    """Return the retry strategy appropriate for a failure at *stage*."""
    if stage in _REPROMPT_STAGES:
        return RetryStrategy.REPROMPT
    return RetryStrategy.REJECT
