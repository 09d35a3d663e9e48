"""
Chat Tests
Structured replies, chart frames and the chat endpoint.
"""
import json

import pytest

from omondi.ai import prompts
from omondi.ai.chat import chart_frame, chat
from omondi.ai.provider import TEXT
from omondi.core.errors import GenerationError
from omondi.schemas import ChartData, ChatMessage

from conftest import FakeProvider

SALES_CHART = {
    "title": "Quarterly sales",
    "data": [
        {"quarter": "Q1", "north": 10, "south": "7"},
        {"quarter": "Q2", "north": 14, "south": 9},
    ],
    "categories": ["north", "south"],
    "index": "quarter",
    "type": "line",
}


@pytest.mark.unit
class TestChatTurn:
    def test_structured_reply_with_chart(self):
        provider = FakeProvider(text=json.dumps({"response": "Here you go", "chart": SALES_CHART}))
        output = chat(provider, [], "Show me sales")

        assert output.response == "Here you go"
        assert output.chart.title == "Quarterly sales"
        assert output.chart.type == "line"

    def test_structured_reply_without_chart(self):
        provider = FakeProvider(text='{"response": "Hello!", "chart": null}')
        output = chat(provider, [], "Hi")
        assert output.response == "Hello!"
        assert output.chart is None

    def test_plain_text_reply_is_returned_as_is(self):
        provider = FakeProvider(text="Just some **markdown**")
        output = chat(provider, [], "Hi")
        assert output.response == "Just some **markdown**"
        assert output.chart is None

    @pytest.mark.parametrize(
        "chart",
        [
            {**SALES_CHART, "type": "pie"},
            {key: value for key, value in SALES_CHART.items() if key != "index"},
            "not a chart",
        ],
    )
    def test_malformed_chart_is_dropped_and_text_kept(self, chart):
        provider = FakeProvider(text=json.dumps({"response": "Sales are up", "chart": chart}))
        output = chat(provider, [], "Show me sales")
        assert output.response == "Sales are up"
        assert output.chart is None

    @pytest.mark.parametrize("reply", ['["a", "list"]', '{"answer": "no response key"}', '{"response": 42}'])
    def test_json_without_response_text_is_returned_raw(self, reply):
        output = chat(FakeProvider(text=reply), [], "Hi")
        assert output.response == reply
        assert output.chart is None

    def test_history_and_instructions_are_sent(self):
        provider = FakeProvider(text='{"response": "Sure"}')
        history = [
            ChatMessage(role="user", content="Hello"),
            ChatMessage(role="model", content="Hi! How can I help?"),
        ]
        chat(provider, history, "Tell me a joke")

        call = provider.calls[0]
        assert call["prompt"] == "Tell me a joke"
        assert call["modalities"] == (TEXT,)
        assert call["history"] == history
        assert call["system_instruction"] == prompts.CHAT_SYSTEM
        assert call["json_output"] is True
        assert call["safety_settings"] == prompts.CHAT_SAFETY_SETTINGS
        assert len(history) == 2

    def test_empty_reply_is_an_error(self):
        with pytest.raises(GenerationError):
            chat(FakeProvider(text="  "), [], "Hi")


@pytest.mark.unit
def test_chart_frame_is_long_format():
    frame = chart_frame(ChartData(**SALES_CHART))

    assert list(frame.columns) == ["quarter", "series", "value"]
    assert len(frame) == 4
    south_q1 = frame[(frame["quarter"] == "Q1") & (frame["series"] == "south")]
    assert south_q1["value"].iloc[0] == 7


@pytest.mark.unit
def test_chart_frame_skips_missing_categories():
    chart = ChartData(
        title="Partial",
        data=[{"month": "Jan", "a": 1}, {"month": "Feb", "a": 2, "b": 3}],
        categories=["a", "b"],
        index="month",
    )
    frame = chart_frame(chart)
    assert len(frame) == 3
    assert chart.type == "bar"


class TestChatEndpoint:
    def test_chat_returns_reply_and_chart(self, auth_client, provider):
        provider.text = json.dumps({"response": "Sales are up", "chart": SALES_CHART})
        response = auth_client.post(
            "/api/chat",
            json={
                "history": [{"role": "user", "content": "Hi"}, {"role": "model", "content": "Hello"}],
                "new_message": "How are sales?",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "Sales are up"
        assert body["chart"]["categories"] == ["north", "south"]
        assert [m.role for m in provider.calls[0]["history"]] == ["user", "model"]

    def test_bad_chart_still_returns_reply_text(self, auth_client, provider):
        provider.text = json.dumps({"response": "Sales are up", "chart": {**SALES_CHART, "type": "pie"}})
        response = auth_client.post("/api/chat", json={"new_message": "How are sales?"})
        assert response.status_code == 200
        assert response.json() == {"response": "Sales are up", "chart": None}

    def test_invalid_role_is_rejected(self, auth_client, provider):
        response = auth_client.post(
            "/api/chat",
            json={"history": [{"role": "system", "content": "x"}], "new_message": "Hi"},
        )
        assert response.status_code == 422
        assert provider.calls == []

    def test_empty_reply_is_a_502(self, auth_client, provider):
        provider.text = ""
        response = auth_client.post("/api/chat", json={"new_message": "Hi"})
        assert response.status_code == 502
