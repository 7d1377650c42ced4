"""Instrument analysis from an Amazon Bedrock chat model."""

import json
import logging
from typing import Any, Optional

from langchain_aws import ChatBedrock
from langchain_core.messages import HumanMessage, SystemMessage

from ..config import BedrockConfig
from ..models import SENTIMENTS, Analysis, Instrument
from .base import AnalysisProvider

logger = logging.getLogger(__name__)

FAILED_ANALYSIS = Analysis(
    summary="CONNECTION ERROR. ANALYSIS FAILED. RETRY LATER.",
    sentiment="NEUTRAL",
)

SYSTEM_PROMPT = """STYLE: BRUTALIST, RAW, ROBOTIC.
NO FILLER WORDS. SHORT SENTENCES. UPPERCASE ONLY.

Return ONLY a raw JSON object. No markdown. No explanation.
Required JSON format:
{"summary": "string", "sentiment": "BULLISH" | "BEARISH" | "NEUTRAL"}
"""


def analysis_prompt(instrument: Instrument) -> str:
    return (
        "Analyze this stock data immediately.\n"
        f"Symbol: {instrument.symbol}\n"
        f"Price: {instrument.price}\n"
        f"Change: {instrument.change} ({instrument.change_percent}%)\n"
        f"Volume: {instrument.volume}\n"
        "Explain the movement. Predict the next hour based on volatility."
    )


def strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def parse_analysis(text: str) -> Optional[Analysis]:
    """Parse a model reply into an Analysis, or None if the shape is wrong."""
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError:
        return None

    if not isinstance(data, dict):
        return None
    summary = data.get("summary")
    sentiment = str(data.get("sentiment", "")).upper()
    if not isinstance(summary, str) or not summary.strip() or sentiment not in SENTIMENTS:
        return None
    return Analysis(summary=summary.strip(), sentiment=sentiment)  # type: ignore[arg-type]


class BedrockAnalyst(AnalysisProvider):
    """Asks a Bedrock chat model for a short sentiment call on an instrument."""

    def __init__(self, config: Optional[BedrockConfig] = None, llm: Any = None) -> None:
        self.config = config or BedrockConfig()
        self._llm = llm or ChatBedrock(
            model=self.config.MODEL_ID,
            model_kwargs={"temperature": self.config.TEMPERATURE},
            region_name=self.config.REGION,
        )

    async def analyze(self, instrument: Instrument) -> Analysis:
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=analysis_prompt(instrument)),
        ]
        try:
            response = await self._llm.ainvoke(messages)
        except Exception as e:
            logger.warning("Analysis failed for %s: %s", instrument.symbol, e)
            return FAILED_ANALYSIS

        content = response.content if isinstance(response.content, str) else ""
        analysis = parse_analysis(content)
        if analysis is None:
            logger.warning("Malformed analysis for %s: %r", instrument.symbol, content[:200])
            return FAILED_ANALYSIS
        return analysis
