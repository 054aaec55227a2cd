"""
OutcomeRecord - Structured result of one derivative pipeline run.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional, Tuple


class OutcomeKind(str, Enum):
    SKIPPED = 'skipped'
    NO_SOURCE = 'no_source'
    SCALE_FAILED = 'scale_failed'
    WRITE_FAILED = 'write_failed'
    SUCCESS = 'success'


class Channel(str, Enum):
    """Where a message should be routed by the host."""
    USER = 'user'
    LOG = 'log'


class Severity(str, Enum):
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'

    @property
    def log_level(self) -> int:
        return {
            Severity.INFO: logging.INFO,
            Severity.WARNING: logging.WARNING,
            Severity.ERROR: logging.ERROR,
        }[self]


@dataclass(frozen=True)
class Message:
    """
    A single outcome message.

    Attributes:
        text: Message template with {name} placeholders
        substitutions: Values for the placeholders
        channel: USER for display, LOG for the log only
        severity: Message severity
    """
    text: str
    substitutions: Tuple[Tuple[str, str], ...] = ()
    channel: Channel = Channel.USER
    severity: Severity = Severity.INFO

    @classmethod
    def create(
        cls,
        text: str,
        substitutions: Optional[Mapping[str, str]] = None,
        channel: Channel = Channel.USER,
        severity: Severity = Severity.INFO
    ) -> 'Message':
        subs = tuple(sorted((substitutions or {}).items()))
        return cls(text, subs, channel, severity)

    def format(self) -> str:
        """Render the text with its substitutions applied."""
        if not self.substitutions:
            return self.text
        return self.text.format(**dict(self.substitutions))

    def to_dict(self) -> dict:
        return {
            'text': self.text,
            'substitutions': dict(self.substitutions),
            'channel': self.channel.value,
            'severity': self.severity.value,
            'message': self.format(),
        }


@dataclass(frozen=True)
class OutcomeRecord:
    """
    Immutable result of a derivative pipeline invocation.

    Attributes:
        kind: Which terminal state the pipeline reached
        success: False for any failure outcome
        messages: Ordered messages for display or logging
    """
    kind: OutcomeKind
    success: bool
    messages: Tuple[Message, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> bool:
        return not self.success

    def user_messages(self) -> List[str]:
        """Formatted messages meant for the user."""
        return [m.format() for m in self.messages if m.channel == Channel.USER]

    def log_messages(self) -> List[Message]:
        return [m for m in self.messages if m.channel == Channel.LOG]

    def log_to(self, logger: logging.Logger) -> None:
        """Emit log-channel messages at the level matching their severity."""
        for message in self.log_messages():
            logger.log(message.severity.log_level, message.format())

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'kind': self.kind.value,
            'success': self.success,
            'messages': [m.to_dict() for m in self.messages],
        }
