"""
Assistant chat, with optional chart output.
"""

import json
import logging
from typing import Optional, Sequence

import pandas as pd
from pydantic import ValidationError

from omondi.ai import prompts
from omondi.ai.provider import TEXT, Provider
from omondi.core.errors import GenerationError
from omondi.schemas import ChartData, ChatMessage, ChatOutput

logger = logging.getLogger(__name__)


def chat(provider: Provider, history: Sequence[ChatMessage], new_message: str) -> ChatOutput:
    """Run one conversation turn. History is not modified."""
    result = provider.generate(
        new_message,
        (TEXT,),
        system_instruction=prompts.CHAT_SYSTEM,
        history=list(history),
        json_output=True,
        safety_settings=prompts.CHAT_SAFETY_SETTINGS,
    )
    text = (result.text or "").strip()
    if not text:
        raise GenerationError("The assistant returned an empty response.")

    try:
        payload = json.loads(text)
    except ValueError:
        logger.warning("Chat reply was not JSON, returning it as plain text")
        return ChatOutput(response=text)

    if not isinstance(payload, dict) or not isinstance(payload.get("response"), str):
        logger.warning("Chat reply JSON has no response text, returning it as plain text")
        return ChatOutput(response=text)

    return ChatOutput(response=payload["response"], chart=_parse_chart(payload.get("chart")))


def _parse_chart(raw) -> Optional[ChartData]:
    """A chart from the reply, or None when it is absent or malformed."""
    if raw is None:
        return None
    try:
        return ChartData.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Dropping malformed chart from chat reply: {e.error_count()} errors")
        return None


def chart_frame(chart: ChartData) -> pd.DataFrame:
    """
    Reshape chart rows into long format for plotting.

    Columns: <chart.index>, "series", "value". Rows missing a category are
    skipped.
    """
    rows = []
    for record in chart.data:
        for category in chart.categories:
            if category not in record:
                continue
            rows.append(
                {chart.index: record.get(chart.index), "series": category, "value": record[category]}
            )
    frame = pd.DataFrame(rows, columns=[chart.index, "series", "value"])
    frame["value"] = pd.to_numeric(frame["value"], errors="coerce")
    return frame
