"""Exception hierarchy for chat-cli.

Errors are raised by the component where they occur and handled by the
session loop or the CLI. Nothing in the package retries.
"""


class ChatError(Exception):
    """Base class for all chat-cli errors."""


class ConfigError(ChatError):
    """Startup configuration is unusable (missing credential, directories)."""


class ConversationError(ChatError):
    """A conversation invariant would be violated."""


class TranscriptError(ChatError):
    """A transcript could not be written or read."""


class CompletionError(ChatError):
    """The completion backend failed to produce a reply."""


class EmptyCompletionError(CompletionError):
    """The completion backend answered with zero choices."""


class ImageGenerationError(ChatError):
    """The image backend failed or its result could not be stored."""
