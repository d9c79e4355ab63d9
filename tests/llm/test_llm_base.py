"""
Tests for the language model base class.

Summaries, relationship extraction and retries are implemented once in the
base class on top of generate_chat_completion.
"""

import pytest

from src.core.llm.base import RELATIONSHIP_SYSTEM_PROMPT, LanguageModel
from src.models.chat import ChatMessage
from src.utils.exceptions import LanguageServiceError, ValidationError


class ScriptedLLM(LanguageModel):
    """Language model returning a fixed reply."""

    retryable_errors = (ConnectionError,)

    def __init__(self, reply: str = "", retry_attempts: int = 2):
        self.reply = reply
        self.retry_attempts = retry_attempts
        self.retry_delay = 0
        self.messages: list[ChatMessage] = []

    async def generate_embedding(self, text):
        return [0.0]

    async def generate_chat_completion(self, messages):
        self.messages = messages
        return self.reply

    async def stream_chat_completion(self, messages):
        yield self.reply

    async def list_models(self):
        return []

    async def is_healthy(self):
        return True

    async def close(self):
        pass


@pytest.mark.unit
@pytest.mark.asyncio
class TestLanguageModelBase:
    """Test base language model behaviour."""

    async def test_abstract_instantiation(self):
        """Test that abstract class cannot be instantiated."""
        with pytest.raises(TypeError, match="Can't instantiate abstract class"):
            LanguageModel()


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerateSummary:
    """Test summary generation."""

    async def test_summary_is_stripped(self):
        llm = ScriptedLLM("  The gist.  \n")

        assert await llm.generate_summary("long text") == "The gist."

    async def test_prompt_carries_max_length(self):
        llm = ScriptedLLM("ok")

        await llm.generate_summary("long text", max_length=120)

        assert llm.messages[0].role == "system"
        assert "120 characters" in llm.messages[0].content
        assert llm.messages[1].content == "long text"

    async def test_long_summary_truncated(self):
        """Test replies over max_length end with an ellipsis within the limit."""
        llm = ScriptedLLM("x" * 50)

        summary = await llm.generate_summary("text", max_length=20)

        assert len(summary) == 20
        assert summary == "x" * 17 + "..."

    async def test_exact_length_not_truncated(self):
        llm = ScriptedLLM("y" * 20)

        assert await llm.generate_summary("text", max_length=20) == "y" * 20

    @pytest.mark.parametrize("text", ["", "   "])
    async def test_empty_text_rejected(self, text):
        with pytest.raises(ValidationError):
            await ScriptedLLM("ok").generate_summary(text)

    @pytest.mark.parametrize("max_length", [0, -5])
    async def test_non_positive_length_rejected(self, max_length):
        with pytest.raises(ValidationError):
            await ScriptedLLM("ok").generate_summary("text", max_length=max_length)


@pytest.mark.unit
@pytest.mark.asyncio
class TestExtractRelationships:
    """Test relationship extraction parsing."""

    async def test_parses_array(self):
        llm = ScriptedLLM(
            '[{"source": "Ann", "target": "Acme", "type": "works_for", '
            '"confidence": 0.9, "context": "Ann works at Acme"}]'
        )

        relationships = await llm.extract_relationships("Ann works at Acme")

        assert len(relationships) == 1
        assert relationships[0].source == "Ann"
        assert relationships[0].type == "works_for"
        assert relationships[0].confidence == 0.9
        assert relationships[0].context == "Ann works at Acme"
        assert llm.messages[0].content == RELATIONSHIP_SYSTEM_PROMPT

    async def test_markdown_fences_and_prose(self):
        """Test the array is found inside fenced or chatty replies."""
        llm = ScriptedLLM(
            'Here you go:\n```json\n[{"source": "a", "target": "b", "type": "uses"}]\n```\nDone.'
        )

        relationships = await llm.extract_relationships("text")

        assert [(r.source, r.target, r.type) for r in relationships] == [("a", "b", "uses")]
        assert relationships[0].confidence == 0.5

    @pytest.mark.parametrize(
        "reply",
        ["not json", "[not, valid json]", '{"source": "a"}', "", "]["],
    )
    async def test_malformed_reply_yields_empty(self, reply):
        assert await ScriptedLLM(reply).extract_relationships("text") == []

    async def test_invalid_items_skipped(self):
        """Test entries missing fields or with bad confidence are dropped."""
        llm = ScriptedLLM(
            "["
            '{"source": "a", "target": "b", "type": "uses"},'
            '{"source": "a", "type": "uses"},'
            '{"source": " ", "target": "b", "type": "uses"},'
            '{"source": "a", "target": "b", "type": "uses", "confidence": "high"},'
            '"just a string",'
            '{"source": "c", "target": "d", "type": "is_a", "confidence": 3}'
            "]"
        )

        relationships = await llm.extract_relationships("text")

        assert [(r.source, r.confidence) for r in relationships] == [("a", 0.5), ("c", 1.0)]

    async def test_empty_text_rejected(self):
        with pytest.raises(ValidationError):
            await ScriptedLLM("[]").extract_relationships("  ")


@pytest.mark.unit
@pytest.mark.asyncio
class TestRetry:
    """Test retry with exponential backoff."""

    async def test_retries_transient_errors(self):
        llm = ScriptedLLM(retry_attempts=2)
        calls = 0

        async def flaky():
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ConnectionError("reset")
            return "ok"

        assert await llm._with_retry(flaky, "flaky") == "ok"
        assert calls == 3

    async def test_gives_up_after_attempts(self):
        llm = ScriptedLLM(retry_attempts=2)
        calls = 0

        async def down():
            nonlocal calls
            calls += 1
            raise ConnectionError("refused")

        with pytest.raises(LanguageServiceError, match="after 3 attempts"):
            await llm._with_retry(down, "down")
        assert calls == 3

    async def test_non_transient_error_not_retried(self):
        llm = ScriptedLLM(retry_attempts=2)
        calls = 0

        async def broken():
            nonlocal calls
            calls += 1
            raise KeyError("message")

        with pytest.raises(LanguageServiceError) as exc_info:
            await llm._with_retry(broken, "broken")

        assert calls == 1
        assert isinstance(exc_info.value.__cause__, KeyError)

    async def test_domain_errors_pass_through(self):
        llm = ScriptedLLM(retry_attempts=2)

        async def invalid():
            raise ValidationError("bad input")

        with pytest.raises(ValidationError):
            await llm._with_retry(invalid, "invalid")
