"""XML transcript store.

Writes one ``<id>.xml`` file per conversation:

    <conversation id="..." created_at="...">
      <messages>
        <message role="user" timestamp="...">
          <content>...</content>
        </message>
      </messages>
    </conversation>

Every save re-serializes the whole conversation into a temporary file in
the target directory and renames it over the previous transcript.
"""

import logging
import os
import re
import stat
import tempfile
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path

from ..conversation.models import Conversation, Message, Role
from ..errors import TranscriptError
from .base import TranscriptStore

logger = logging.getLogger(__name__)

TRANSCRIPT_EXTENSION = ".xml"
INDENT = "  "

REPLACEMENT_CHAR = "\ufffd"

# Characters XML 1.0 cannot carry, even as character references
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_TEXT_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
    "\r": "&#13;",
}

# Parsers normalize whitespace inside attribute values, so it is escaped too
_ATTR_ESCAPES = {
    **_TEXT_ESCAPES,
    "\n": "&#10;",
    "\t": "&#9;",
}

_TEXT_PATTERN = re.compile("[" + re.escape("".join(_TEXT_ESCAPES)) + "]")
_ATTR_PATTERN = re.compile("[" + re.escape("".join(_ATTR_ESCAPES)) + "]")


def _representable(value: str) -> str:
    """Replace characters XML cannot carry with U+FFFD."""
    return _INVALID_XML_CHARS.sub(REPLACEMENT_CHAR, value)


def escape_text(value: str) -> str:
    """Escape element text."""
    value = _representable(value)
    return _TEXT_PATTERN.sub(lambda m: _TEXT_ESCAPES[m.group()], value)


def escape_attr(value: str) -> str:
    """Escape an attribute value for use inside double quotes."""
    value = _representable(value)
    return _ATTR_PATTERN.sub(lambda m: _ATTR_ESCAPES[m.group()], value)


def _file_mode(path: Path) -> int:
    """Mode a plain ``open()`` would give ``path``: its current one, else 0o666 less umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def format_timestamp(value: datetime) -> str:
    """RFC 3339 with second precision and a numeric UTC offset."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat(timespec="seconds")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp (accepts a trailing ``Z``)."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def serialize(conversation: Conversation) -> str:
    """Render a conversation as a pretty-printed XML document.

    Characters XML cannot represent are written as U+FFFD.
    """
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<conversation id="{escape_attr(conversation.id)}" '
        f'created_at="{escape_attr(format_timestamp(conversation.created_at))}">',
        f"{INDENT}<messages>",
    ]
    for message in conversation.messages:
        lines.append(
            f'{INDENT * 2}<message role="{escape_attr(message.role.value)}" '
            f'timestamp="{escape_attr(format_timestamp(message.timestamp))}">'
        )
        lines.append(f"{INDENT * 3}<content>{escape_text(message.content)}</content>")
        lines.append(f"{INDENT * 2}</message>")
    lines.append(f"{INDENT}</messages>")
    lines.append("</conversation>")
    return "\n".join(lines) + "\n"


def deserialize(document: str | bytes) -> Conversation:
    """Rebuild a conversation from an XML document.

    Raises:
        TranscriptError: If the document is malformed
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise TranscriptError(f"malformed transcript: {e}") from e
    return _from_element(root)


def _from_element(root: ET.Element) -> Conversation:
    if root.tag != "conversation":
        raise TranscriptError(f"unexpected root element <{root.tag}>")

    conversation_id = root.get("id")
    raw_created_at = root.get("created_at")
    if not conversation_id or not raw_created_at:
        raise TranscriptError("conversation is missing its id or created_at attribute")

    try:
        created_at = parse_timestamp(raw_created_at)
    except ValueError as e:
        raise TranscriptError(f"invalid created_at {raw_created_at!r}") from e

    messages: list[Message] = []
    container = root.find("messages")
    if container is not None:
        for index, element in enumerate(container.findall("message")):
            messages.append(_message_from_element(element, index))

    return Conversation(id=conversation_id, created_at=created_at, messages=messages)


def _message_from_element(element: ET.Element, index: int) -> Message:
    raw_role = element.get("role", "")
    try:
        role = Role(raw_role)
    except ValueError as e:
        raise TranscriptError(f"message {index} has unknown role {raw_role!r}") from e

    raw_timestamp = element.get("timestamp", "")
    try:
        timestamp = parse_timestamp(raw_timestamp)
    except ValueError as e:
        raise TranscriptError(f"message {index} has invalid timestamp {raw_timestamp!r}") from e

    content_element = element.find("content")
    content = "" if content_element is None else (content_element.text or "")
    return Message(role=role, content=content, timestamp=timestamp)


class XMLTranscriptStore(TranscriptStore):
    """Stores each conversation as ``<directory>/<id>.xml``.

    The directory is not created here; a missing directory is a save error.
    """

    def __init__(self, directory: str | Path = "chats"):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, conversation: Conversation) -> Path:
        return self._directory / f"{conversation.id}{TRANSCRIPT_EXTENSION}"

    def save(self, conversation: Conversation) -> Path:
        """Atomically replace the transcript with the current conversation."""
        document = serialize(conversation)
        path = self.path_for(conversation)

        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                newline="",
                dir=self._directory,
                prefix=f".{conversation.id}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(document)
                tmp.flush()
                os.fsync(tmp.fileno())
            # mkstemp creates 0600 files
            os.chmod(tmp_name, _file_mode(path))
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise TranscriptError(f"failed to write {path}: {e}") from e

        logger.debug("Saved %d messages to %s", len(conversation.messages), path)
        return path

    def load(self, path: str | Path) -> Conversation:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise TranscriptError(f"failed to read {path}: {e}") from e
        return deserialize(data)

    def list_transcripts(self) -> list[Path]:
        if not self._directory.is_dir():
            return []
        return sorted(self._directory.glob(f"*{TRANSCRIPT_EXTENSION}"))

    @property
    def backend_type(self) -> str:
        return "xml"
