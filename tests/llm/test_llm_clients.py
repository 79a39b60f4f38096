"""Tests for LLM client implementations (OpenAI and Anthropic)."""

from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from slate_config.settings import Settings
from slate_llm import AnthropicClient, OpenAIClient, build_llm_client
from slate_llm.client import (
    LLMAuthError,
    LLMError,
    LLMRateLimitError,
    LLMToolCall,
    LLMValidationError,
)

TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "get_scenes",
            "description": "Get all scenes",
            "parameters": {"type": "object", "properties": {}, "required": []},
        },
    }
]

CONVERSATION = [
    {"role": "user", "content": "Schedule scene 1"},
    {
        "role": "assistant",
        "content": None,
        "tool_calls": [LLMToolCall(id="call_1", name="get_scenes", arguments="{}")],
    },
    {"role": "tool", "tool_call_id": "call_1", "content": '[{"id":"scene-1"}]'},
]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def mock_anthropic_api_key(monkeypatch):
    """Mock Anthropic API key in environment."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test-key-12345")


@pytest.fixture
def mock_openai_api_key(monkeypatch):
    """Mock OpenAI API key in environment."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key-12345")


@pytest.fixture
def anthropic_client(mock_anthropic_api_key):
    """Create Anthropic client with mocked API key."""
    return AnthropicClient(model="claude-sonnet-4-5-20250929")


@pytest.fixture
def openai_client(mock_openai_api_key):
    """Create OpenAI client with mocked API key."""
    return OpenAIClient(model="gpt-4o")


def openai_response(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


# ============================================================================
# OPENAI CLIENT TESTS
# ============================================================================


def test_openai_client_initialization(mock_openai_api_key):
    client = OpenAIClient(model="gpt-4o-mini")

    assert client.model_name == "gpt-4o-mini"
    assert client.api_key == "sk-test-key-12345"


def test_openai_client_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(LLMAuthError, match="OPENAI_API_KEY not found"):
        OpenAIClient()


@pytest.mark.asyncio
async def test_openai_generate_success(openai_client):
    with patch.object(
        openai_client.client.chat.completions, "create", new_callable=AsyncMock
    ) as mock_create:
        mock_create.return_value = openai_response(content="Two scenes scheduled.")

        result = await openai_client.generate(prompt="Summarize", system_prompt="Be brief")

        assert result == "Two scenes scheduled."
        messages = mock_create.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Summarize"},
        ]


@pytest.mark.asyncio
async def test_openai_complete_with_tools_parses_calls(openai_client):
    call = SimpleNamespace(
        id="call_9",
        function=SimpleNamespace(name="create_scene", arguments='{"scene_number": "15"}'),
    )
    with patch.object(
        openai_client.client.chat.completions, "create", new_callable=AsyncMock
    ) as mock_create:
        mock_create.return_value = openai_response(content=None, tool_calls=[call])

        completion = await openai_client.complete_with_tools(
            CONVERSATION, TOOLS, system_prompt="system"
        )

    assert completion.content is None
    assert completion.tool_calls == [
        LLMToolCall(id="call_9", name="create_scene", arguments='{"scene_number": "15"}')
    ]
    kwargs = mock_create.call_args.kwargs
    assert kwargs["tools"] == TOOLS
    assert kwargs["tool_choice"] == "auto"
    assert kwargs["messages"][0] == {"role": "system", "content": "system"}
    assert kwargs["messages"][2]["tool_calls"][0] == {
        "id": "call_1",
        "type": "function",
        "function": {"name": "get_scenes", "arguments": "{}"},
    }
    assert kwargs["messages"][3] == {
        "role": "tool",
        "tool_call_id": "call_1",
        "content": '[{"id":"scene-1"}]',
    }


@pytest.mark.asyncio
async def test_openai_without_tools_omits_tool_choice(openai_client):
    with patch.object(
        openai_client.client.chat.completions, "create", new_callable=AsyncMock
    ) as mock_create:
        mock_create.return_value = openai_response(content="hi")

        await openai_client.complete_with_tools([{"role": "user", "content": "hi"}], [])

    assert "tools" not in mock_create.call_args.kwargs
    assert "tool_choice" not in mock_create.call_args.kwargs


@pytest.mark.asyncio
async def test_openai_rate_limit_error(openai_client):
    from openai import RateLimitError

    with patch.object(
        openai_client.client.chat.completions, "create", new_callable=AsyncMock
    ) as mock_create:
        mock_create.side_effect = RateLimitError(
            message="Rate limit exceeded",
            response=MagicMock(status_code=429),
            body={"error": {"message": "Rate limit exceeded"}},
        )

        with pytest.raises(LLMRateLimitError, match="OpenAI rate limit exceeded"):
            await openai_client.generate(prompt="Test")


# ============================================================================
# ANTHROPIC CLIENT TESTS
# ============================================================================


def test_anthropic_client_missing_api_key(monkeypatch):
    """Test Anthropic client raises error when API key missing."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    with pytest.raises(LLMAuthError, match="ANTHROPIC_API_KEY not found"):
        AnthropicClient()


@pytest.mark.asyncio
async def test_anthropic_generate_success(anthropic_client):
    """Test successful text generation."""
    mock_response = MagicMock()
    mock_response.content = [SimpleNamespace(type="text", text="Generated response from Claude")]

    with patch.object(
        anthropic_client.client.messages,
        "create",
        new_callable=AsyncMock,
    ) as mock_create:
        mock_create.return_value = mock_response

        result = await anthropic_client.generate(
            prompt="Test prompt",
            system_prompt="Test system",
            temperature=0.5,
        )

        assert result == "Generated response from Claude"
        mock_create.assert_called_once()
        assert mock_create.call_args.kwargs["system"] == "Test system"


@pytest.mark.asyncio
async def test_anthropic_complete_with_tools(anthropic_client):
    mock_response = MagicMock()
    mock_response.content = [
        SimpleNamespace(type="text", text="Let me create that."),
        SimpleNamespace(
            type="tool_use", id="toolu_1", name="create_scene", input={"scene_number": "15"}
        ),
    ]

    with patch.object(
        anthropic_client.client.messages, "create", new_callable=AsyncMock
    ) as mock_create:
        mock_create.return_value = mock_response

        completion = await anthropic_client.complete_with_tools(CONVERSATION, TOOLS)

    assert completion.content == "Let me create that."
    assert completion.tool_calls[0].id == "toolu_1"
    assert completion.tool_calls[0].name == "create_scene"
    assert completion.tool_calls[0].arguments == '{"scene_number": "15"}'

    kwargs = mock_create.call_args.kwargs
    assert kwargs["tools"] == [
        {
            "name": "get_scenes",
            "description": "Get all scenes",
            "input_schema": {"type": "object", "properties": {}, "required": []},
        }
    ]
    assert kwargs["messages"] == [
        {"role": "user", "content": [{"type": "text", "text": "Schedule scene 1"}]},
        {
            "role": "assistant",
            "content": [{"type": "tool_use", "id": "call_1", "name": "get_scenes", "input": {}}],
        },
        {
            "role": "user",
            "content": [
                {"type": "tool_result", "tool_use_id": "call_1", "content": '[{"id":"scene-1"}]'}
            ],
        },
    ]


def test_anthropic_wire_merges_consecutive_tool_results():
    wire = AnthropicClient._to_wire(
        [
            {"role": "user", "content": "go"},
            {
                "role": "assistant",
                "content": "Reading both.",
                "tool_calls": [
                    LLMToolCall(id="a", name="get_scenes"),
                    LLMToolCall(id="b", name="get_cast"),
                ],
            },
            {"role": "tool", "tool_call_id": "a", "content": "[]"},
            {"role": "tool", "tool_call_id": "b", "content": "[]"},
        ]
    )

    assert [turn["role"] for turn in wire] == ["user", "assistant", "user"]
    assert [block["type"] for block in wire[1]["content"]] == ["text", "tool_use", "tool_use"]
    assert [block["tool_use_id"] for block in wire[2]["content"]] == ["a", "b"]


@pytest.mark.asyncio
async def test_anthropic_authentication_error(anthropic_client):
    """Test Anthropic authentication error handling."""
    from anthropic import AuthenticationError

    with patch.object(
        anthropic_client.client.messages,
        "create",
        new_callable=AsyncMock,
    ) as mock_create:
        mock_create.side_effect = AuthenticationError(
            message="Invalid API key",
            response=MagicMock(status_code=401),
            body={"error": {"message": "Invalid API key"}},
        )

        with pytest.raises(LLMAuthError, match="Anthropic authentication failed"):
            await anthropic_client.generate(prompt="Test")


# ============================================================================
# STRUCTURED OUTPUT
# ============================================================================


@pytest.mark.asyncio
async def test_generate_json_with_markdown(anthropic_client):
    mock_response = MagicMock()
    mock_response.content = [
        SimpleNamespace(type="text", text='Here it is:\n```json\n{"scenes": 3,}\n```')
    ]

    with patch.object(
        anthropic_client.client.messages, "create", new_callable=AsyncMock
    ) as mock_create:
        mock_create.return_value = mock_response

        result = await anthropic_client.generate_json(prompt="Count", schema={"type": "object"})

    assert result == {"scenes": 3}


@pytest.mark.asyncio
async def test_generate_json_parse_error(anthropic_client):
    """Test JSON parse error handling."""
    mock_response = MagicMock()
    mock_response.content = [SimpleNamespace(type="text", text="This is not valid JSON")]

    with patch.object(
        anthropic_client.client.messages,
        "create",
        new_callable=AsyncMock,
    ) as mock_create:
        mock_create.return_value = mock_response

        with pytest.raises(LLMValidationError, match="Failed to parse JSON"):
            await anthropic_client.generate_json(prompt="Test", schema={"type": "object"})


# ============================================================================
# FACTORY
# ============================================================================


def test_build_llm_client_selects_provider():
    anthropic = build_llm_client(
        Settings(LLM_PROVIDER="anthropic", ANTHROPIC_API_KEY="sk-ant-x", ANTHROPIC_MODEL="claude-x")
    )
    openai = build_llm_client(Settings(LLM_PROVIDER="openai", OPENAI_API_KEY="sk-x"))

    assert isinstance(anthropic, AnthropicClient)
    assert anthropic.model_name == "claude-x"
    assert isinstance(openai, OpenAIClient)


def test_llm_errors_share_a_base():
    assert issubclass(LLMRateLimitError, LLMError)
    assert issubclass(LLMValidationError, LLMError)
