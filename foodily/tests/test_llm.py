import json
from unittest.mock import MagicMock, patch

from foodily.llm.cache import clear_cache, get_cache_stats
from foodily.llm.config import LLMConfig
from foodily.llm.groq_client import (
    analyze_weekly_habits,
    chat_reply,
    expand_slot_options,
    extract_cuisine_from_search,
)

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)

SAMPLE_HISTORY = [
    {"date": "2024-05-05", "cuisine": "Japanese", "foodType": "Ramen"},
    {"date": "2024-05-06", "cuisine": "Italian", "foodType": "Pizza"},
]


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


# ── Chat ─────────────────────────────────────────────────────────────────


@patch("foodily.llm.groq_client.Groq")
def test_chat_reply_includes_history(mock_groq_cls):
    create = mock_groq_cls.return_value.chat.completions.create
    create.return_value = _mock_groq_response("  Try the laksa!  ")
    history = [
        {"role": "user", "content": "I like spicy food"},
        {"role": "assistant", "content": "Noted!"},
    ]

    reply = chat_reply("What should I eat?", history, config=ENABLED_CONFIG)

    assert reply == "Try the laksa!"
    messages = create.call_args.kwargs["messages"]
    assert messages[0]["role"] == "system"
    assert messages[1:3] == history
    assert messages[-1] == {"role": "user", "content": "What should I eat?"}


def test_chat_reply_disabled():
    assert chat_reply("hi", config=DISABLED_CONFIG) is None


@patch("foodily.llm.groq_client.Groq")
def test_chat_reply_api_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")
    assert chat_reply("hi", config=ENABLED_CONFIG) is None


# ── Cuisine extraction ───────────────────────────────────────────────────


@patch("foodily.llm.groq_client.Groq")
def test_extract_cuisine(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps({"cuisine": "Japanese", "foodType": "Ramen"})
    )
    assert extract_cuisine_from_search("spicy ramen", config=ENABLED_CONFIG) == {
        "cuisine": "Japanese",
        "foodType": "Ramen",
    }


@patch("foodily.llm.groq_client.Groq")
def test_extract_cuisine_missing_keys_use_defaults(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("{}")
    assert extract_cuisine_from_search("food", config=ENABLED_CONFIG) == {
        "cuisine": "General",
        "foodType": "Exploring",
    }


@patch("foodily.llm.groq_client.Groq")
def test_extract_cuisine_invalid_json_echoes_query(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not json")
    assert extract_cuisine_from_search("pho", config=ENABLED_CONFIG) == {"cuisine": "pho", "foodType": "pho"}


def test_extract_cuisine_disabled_empty_query():
    assert extract_cuisine_from_search("", config=DISABLED_CONFIG) == {
        "cuisine": "General",
        "foodType": "Exploring",
    }


# ── Slot options ─────────────────────────────────────────────────────────


@patch("foodily.llm.groq_client.Groq")
def test_slot_options_cached(mock_groq_cls):
    clear_cache()
    create = mock_groq_cls.return_value.chat.completions.create
    create.return_value = _mock_groq_response(json.dumps({"options": ["Pad Thai", " ", "Som Tam"]}))

    first = expand_slot_options("food", "Thai", config=ENABLED_CONFIG)
    second = expand_slot_options("food", "  thai ", config=ENABLED_CONFIG)

    assert first == ["Pad Thai", "Som Tam"]
    assert second == first
    assert create.call_count == 1
    assert get_cache_stats()["hits"] == 1


@patch("foodily.llm.groq_client.Groq")
def test_slot_options_prompt_by_target(mock_groq_cls):
    clear_cache()
    create = mock_groq_cls.return_value.chat.completions.create
    create.return_value = _mock_groq_response(json.dumps({"options": ["Japanese"]}))

    expand_slot_options("cuisine", "Ramen", config=ENABLED_CONFIG)

    prompt = create.call_args.kwargs["messages"][0]["content"]
    assert "cuisines" in prompt
    assert '"Ramen"' in prompt


@patch("foodily.llm.groq_client.Groq")
def test_slot_options_error_not_cached(mock_groq_cls):
    clear_cache()
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")
    assert expand_slot_options("food", "Thai", config=ENABLED_CONFIG) == []
    assert get_cache_stats()["size"] == 0


def test_slot_options_disabled():
    clear_cache()
    assert expand_slot_options("food", "Korean", config=DISABLED_CONFIG) == []


# ── Habit analysis ───────────────────────────────────────────────────────


@patch("foodily.llm.groq_client.Groq")
def test_analyze_weekly_habits(mock_groq_cls):
    create = mock_groq_cls.return_value.chat.completions.create
    create.return_value = _mock_groq_response("* **Variety:** Good mix\n**Next Step**: Try Thai")

    text = analyze_weekly_habits(SAMPLE_HISTORY, config=ENABLED_CONFIG)

    assert text.startswith("* **Variety:**")
    user_message = create.call_args.kwargs["messages"][1]["content"]
    assert "2024-05-05: Japanese Ramen" in user_message


def test_analyze_weekly_habits_no_history():
    assert analyze_weekly_habits([], config=ENABLED_CONFIG) is None


@patch("foodily.llm.groq_client.Groq")
def test_analyze_weekly_habits_api_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")
    assert analyze_weekly_habits(SAMPLE_HISTORY, config=ENABLED_CONFIG) is None
