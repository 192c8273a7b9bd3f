"""Unit tests for the conversation module."""
import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from chatcli.config import DEFAULT_SYSTEM_PROMPT, ChatConfig
from chatcli.conversation import Conversation, ConversationEngine, Message, Role
from chatcli.errors import ConversationError


@pytest.fixture
def plain_engine():
    return ConversationEngine(ChatConfig())


class TestCreate:
    """Tests for starting a conversation."""

    def test_seeds_single_system_message(self, plain_engine):
        """Test that a new conversation holds only the system prompt."""
        conversation = plain_engine.create()

        assert len(conversation.messages) == 1
        assert conversation.messages[0].role == Role.SYSTEM
        assert conversation.messages[0].content == DEFAULT_SYSTEM_PROMPT
        assert conversation.system_message is conversation.messages[0]

    def test_uses_configured_prompt(self):
        """Test that the configured system prompt is used."""
        engine = ConversationEngine(ChatConfig(system_prompt="Be terse."))
        assert engine.create().messages[0].content == "Be terse."

    def test_ids_are_unique_within_a_run(self, plain_engine):
        """Test that ids do not collide within a run."""
        ids = {plain_engine.create().id for _ in range(200)}
        assert len(ids) == 200

    def test_id_is_time_based(self, plain_engine):
        """Test that the id starts with chat_<unix seconds>."""
        conversation = plain_engine.create()
        stamp = int(conversation.created_at.timestamp())
        assert conversation.id.startswith(f"chat_{stamp}_")

    def test_created_at_is_timezone_aware(self, plain_engine):
        """Test that created_at carries an offset."""
        assert plain_engine.create().created_at.tzinfo is not None

    def test_identity_is_immutable(self, plain_engine):
        """Test that id and created_at cannot be reassigned."""
        conversation = plain_engine.create()
        with pytest.raises(ValidationError):
            conversation.id = "other"
        with pytest.raises(ValidationError):
            conversation.created_at = conversation.created_at


class TestAppend:
    """Tests for appending messages."""

    def test_appends_in_order(self, plain_engine):
        """Test that messages keep insertion order."""
        conversation = plain_engine.create()
        plain_engine.append(conversation, Role.USER, "hello")
        plain_engine.append(conversation, Role.ASSISTANT, "hi")
        plain_engine.append(conversation, Role.USER, "bye")

        assert [m.role for m in conversation.messages] == [
            Role.SYSTEM, Role.USER, Role.ASSISTANT, Role.USER
        ]
        assert [m.content for m in conversation.messages[1:]] == ["hello", "hi", "bye"]

    def test_returns_appended_message(self, plain_engine):
        """Test that append returns the stored message."""
        conversation = plain_engine.create()
        message = plain_engine.append(conversation, Role.USER, "hello")
        assert conversation.messages[-1] is message
        assert message.timestamp.tzinfo is not None

    def test_accepts_role_string(self, plain_engine):
        """Test that a role name is coerced to Role."""
        conversation = plain_engine.create()
        message = plain_engine.append(conversation, "assistant", "ok")
        assert message.role == Role.ASSISTANT

    def test_rejects_unknown_role(self, plain_engine):
        """Test that an unknown role is rejected without appending."""
        conversation = plain_engine.create()
        with pytest.raises(ValueError):
            plain_engine.append(conversation, "bot", "beep")
        assert len(conversation.messages) == 1

    def test_rejects_second_system_message(self, plain_engine):
        """Test that only one system message is allowed."""
        conversation = plain_engine.create()
        with pytest.raises(ConversationError):
            plain_engine.append(conversation, Role.SYSTEM, "new rules")
        assert conversation.count(Role.SYSTEM) == 1

    def test_accepts_arbitrary_content(self, plain_engine):
        """Test that content is stored verbatim."""
        conversation = plain_engine.create()
        content = "line one\nline two\t<tag> & 'quotes' \U0001F600"
        plain_engine.append(conversation, Role.USER, content)
        assert conversation.messages[-1].content == content

    def test_messages_are_frozen(self, plain_engine):
        """Test that a stored message cannot be edited."""
        conversation = plain_engine.create()
        message = plain_engine.append(conversation, Role.USER, "hello")
        with pytest.raises(ValidationError):
            message.content = "edited"


class TestImageTrigger:
    """Tests for trigger keyword detection."""

    @pytest.mark.parametrize("text", [
        "visualiser a cat",
        "Visualiser",
        "VISUALISER",
        "please visualiser this",
        "supervisualisers",
    ])
    def test_detects_keyword_in_any_case(self, plain_engine, text):
        """Test that the keyword matches in any case and position."""
        assert plain_engine.is_image_request(text)

    @pytest.mark.parametrize("text", ["visualise a cat", "visualizer", "hello", ""])
    def test_ignores_other_text(self, plain_engine, text):
        """Test that near misses do not trigger."""
        assert not plain_engine.is_image_request(text)

    def test_uses_configured_keyword(self):
        """Test that a configured keyword replaces the default."""
        engine = ConversationEngine(ChatConfig(trigger_keyword="Draw"))
        assert engine.is_image_request("please draw a boat")
        assert not engine.is_image_request("visualiser a boat")

    def test_empty_keyword_rejected(self):
        """Test that an empty keyword is invalid."""
        with pytest.raises(ValidationError):
            ChatConfig(trigger_keyword="")


class TestCompletionContext:
    """Tests for the messages replayed to the completion backend."""

    def test_includes_all_messages_without_trigger(self, plain_engine):
        """Test that plain turns are all replayed in order."""
        conversation = plain_engine.create()
        plain_engine.append(conversation, Role.USER, "hello")
        plain_engine.append(conversation, Role.ASSISTANT, "hi")
        plain_engine.append(conversation, Role.USER, "how are you")

        context = plain_engine.build_completion_context(conversation)

        assert [(m.role, m.content) for m in context] == [
            (m.role, m.content) for m in conversation.messages
        ]

    @pytest.mark.parametrize("trigger", ["Visualiser", "VISUALISER", "please visualiser this"])
    def test_excludes_trigger_user_messages(self, plain_engine, trigger):
        """Test that user messages with the keyword are left out."""
        conversation = plain_engine.create()
        plain_engine.append(conversation, Role.USER, "hello")
        plain_engine.append(conversation, Role.ASSISTANT, "hi")
        plain_engine.append(conversation, Role.USER, trigger)
        plain_engine.append(conversation, Role.ASSISTANT, "Generated image: images/img_1.png")
        plain_engine.append(conversation, Role.USER, "thanks")

        context = plain_engine.build_completion_context(conversation)

        assert [m.content for m in context] == [
            DEFAULT_SYSTEM_PROMPT,
            "hello",
            "hi",
            "Generated image: images/img_1.png",
            "thanks",
        ]
        # Still present in the full history
        assert trigger in [m.content for m in conversation.messages]

    def test_never_filters_assistant_or_system(self):
        """Test that only user messages are filtered."""
        engine = ConversationEngine(ChatConfig(system_prompt="You may visualiser things."))
        conversation = engine.create()
        engine.append(conversation, Role.ASSISTANT, "I cannot visualiser that")

        context = engine.build_completion_context(conversation)

        assert [m.role for m in context] == [Role.SYSTEM, Role.ASSISTANT]

    def test_does_not_mutate_conversation(self, plain_engine):
        """Test that building the context leaves the conversation unchanged."""
        conversation = plain_engine.create()
        plain_engine.append(conversation, Role.USER, "visualiser a dog")
        before = list(conversation.messages)

        plain_engine.build_completion_context(conversation)

        assert conversation.messages == before

    @given(st.lists(st.tuples(st.booleans(), st.text(max_size=30)), max_size=10))
    def test_context_is_ordered_subsequence(self, turns):
        """Property test: context keeps order and drops only trigger user turns."""
        engine = ConversationEngine(ChatConfig())
        conversation = engine.create()
        for is_user, text in turns:
            engine.append(conversation, Role.USER if is_user else Role.ASSISTANT, text)

        context = engine.build_completion_context(conversation)
        expected = [
            (m.role, m.content)
            for m in conversation.messages
            if not (m.role == Role.USER and "visualiser" in m.content.lower())
        ]

        assert [(m.role, m.content) for m in context] == expected
        assert context[0].role == Role.SYSTEM


class TestModels:
    """Tests for the conversation data models."""

    def test_message_rejects_unknown_role(self):
        """Test that Message validates its role."""
        with pytest.raises(ValidationError):
            Message(role="moderator", content="x")

    def test_conversation_len_and_count(self):
        """Test len() and per-role counts."""
        conversation = Conversation(messages=[
            Message(role=Role.SYSTEM, content="s"),
            Message(role=Role.USER, content="u"),
        ])
        assert len(conversation) == 2
        assert conversation.count(Role.USER) == 1
        assert conversation.count(Role.ASSISTANT) == 0

    def test_system_message_missing(self):
        """Test that an empty conversation has no system message."""
        assert Conversation().system_message is None
