"""Core data structures for the contribution and review pipeline."""

from .agent import User, System, Agent, agent_factory
from .patch import Patch, ABSENT
from .stats import ContributorStats, TrustLevel
from .submission import Submission, EntityKind, ParentReference, QueueItem, \
    SubmitResult, ReviewResult
