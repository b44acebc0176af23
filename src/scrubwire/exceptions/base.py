"""
Base exception for scrubwire.

Every error carries a short correlation ID so a message printed by the
command line can be matched with the debug log of the same run.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _new_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class ExceptionContext:
    """Optional details attached to a ``ScrubwireError``."""

    help_text: Optional[str] = None
    error_code: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)
    user_action: Optional[str] = None
    correlation_id: Optional[str] = None


class ScrubwireError(Exception):
    """Base exception for all scrubwire errors.

    Attributes:
        message: The error message
        help_text: Guidance shown below the message
        error_code: Stable code for programmatic handling
        context: Values that identify what failed, e.g. the offending field
        user_action: What the user can do about it
        correlation_id: ID shown to the user and written to the log
    """

    def __init__(self, message: str, context: Optional[ExceptionContext] = None):
        details = context or ExceptionContext()
        self.message = message
        self.help_text = details.help_text
        self.error_code = details.error_code
        self.context = dict(details.context)
        self.user_action = details.user_action
        self.correlation_id = details.correlation_id or _new_correlation_id()
        super().__init__(message)

    def __str__(self) -> str:
        sections: List[str] = [self.message]
        if self.help_text:
            sections.append(f"Help: {self.help_text}")
        if self.user_action:
            sections.append(f"Action: {self.user_action}")

        items = [f"{key}: {value}" for key, value in self.context.items() if value is not None]
        if items:
            sections.append(f"Context: {', '.join(items)}")

        sections.append(f"Error ID: {self.correlation_id}")
        return "\n\n".join(sections)

    def add_context(self, **kwargs) -> "ScrubwireError":
        """Attach more context values and return the same error."""
        self.context.update(kwargs)
        return self
