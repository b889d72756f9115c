"""
Client metadata attached to sessions, impersonations and audit entries.

Device and browser are derived from the User-Agent with the user-agents
library. Parsing is best-effort: an unreadable agent yields "Unknown" and
never fails the request.
"""

import logging
from typing import Optional

from pydantic import BaseModel
from user_agents import parse as parse_user_agent

logger = logging.getLogger(__name__)

_KNOWN_BROWSERS = ("Chrome", "Firefox", "Safari", "Edge", "Opera")


class ClientInfo(BaseModel):
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def device_info(self) -> str:
        """Mobile, Tablet, Desktop or Unknown"""
        if not self.user_agent:
            return "Unknown"
        try:
            ua = parse_user_agent(self.user_agent)
        except Exception as exc:
            logger.warning("Failed to parse user agent: %s", exc)
            return "Unknown"
        if ua.is_tablet:
            return "Tablet"
        if ua.is_mobile:
            return "Mobile"
        if ua.is_pc:
            return "Desktop"
        return "Unknown"

    @property
    def browser(self) -> str:
        """Browser family collapsed to the names the POS front end knows"""
        if not self.user_agent:
            return "Other"
        try:
            family = parse_user_agent(self.user_agent).browser.family or ""
        except Exception as exc:
            logger.warning("Failed to parse user agent: %s", exc)
            return "Other"
        for known in _KNOWN_BROWSERS:
            if known in family:
                return known
        return "Other"

    def truncated_user_agent(self) -> Optional[str]:
        return self.user_agent[:500] if self.user_agent else None
