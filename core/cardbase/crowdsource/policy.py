"""
Authorization policy for reviewing and auto-approving submissions.

All role checks in the pipeline go through this module. Agents whose role
is in ``TRUSTED_ROLES`` may review submissions, and their own submissions
are approved as soon as they are made. If ``AUTO_APPROVE_TRUST_LEVEL`` is
set, contributors who have reached that trust level are auto-approved too
(but still may not review other people's submissions).
"""

import logging
from typing import List, Optional

from .config import get_setting
from .domain.agent import Agent, System
from .domain.stats import ContributorStats, TrustLevel
from .exceptions import Forbidden

logger = logging.getLogger(__name__)


def trusted_roles() -> List[str]:
    """Get the roles that may review submissions."""
    roles = get_setting('TRUSTED_ROLES')
    if isinstance(roles, str):
        roles = roles.split(',')
    return [role.strip() for role in roles if role.strip()]


def auto_approve_level() -> Optional[TrustLevel]:
    """Get the trust level at which contributors are auto-approved."""
    level = get_setting('AUTO_APPROVE_TRUST_LEVEL')
    if not level:
        return None
    return TrustLevel(level)


def can_review(agent: Agent) -> bool:
    """Whether ``agent`` may approve or reject submissions."""
    if isinstance(agent, System):
        return True
    return getattr(agent, 'role', None) in trusted_roles()


def require_reviewer(agent: Agent) -> None:
    """
    Verify that ``agent`` may review submissions.

    Raises
    ------
    :class:`.Forbidden`

    """
    if not can_review(agent):
        logger.info('Agent %s (%s) may not review submissions',
                    agent.native_id, getattr(agent, 'role', None))
        raise Forbidden('Only administrators may review submissions')


def auto_approves(agent: Agent,
                  stats: Optional[ContributorStats] = None) -> bool:
    """Whether submissions by ``agent`` skip the review queue."""
    if getattr(agent, 'role', None) in trusted_roles():
        return True
    threshold = auto_approve_level()
    if threshold is None or stats is None:
        return False
    return stats.trust_level.at_least(threshold)
