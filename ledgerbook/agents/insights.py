"""
Spending Insights Agent

The LLM is an ADVISOR over numbers we already have.
- It is given the period's transactions, already validated
- It returns at most three sentences of advice
- It NEVER writes anything back and its output is never aggregated

If Gemini is unavailable or fails, a fixed fallback message is returned
instead of an error.
"""

import json
from typing import Any, Iterable, Optional

import google.generativeai as genai

from ledgerbook.activity import get_logger
from ledgerbook.config import GeminiSettings, get_settings
from ledgerbook.models.records import Transaction


logger = get_logger(__name__)

INSIGHTS_UNAVAILABLE = "Sorry, financial insights are currently unavailable."
NO_TRANSACTIONS = "No transactions recorded for this period yet."


class InsightsAgent:
    """Asks Gemini for short, practical advice on a set of transactions."""

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        if model is not None:
            self._model = model
            return
        self._settings = settings or get_settings().gemini
        self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @staticmethod
    def build_prompt(transactions: Iterable[Transaction]) -> str:
        summary = [
            {
                "type": t.kind.value,
                "amount": str(t.amount),
                "date": t.date.isoformat(),
                "description": t.description,
                "remarks": t.remarks or "",
                "source": t.source or "",
            }
            for t in transactions
        ]
        return (
            "Analyze these financial transactions and provide professional "
            "financial advice in English (max 3 sentences) on how to optimize "
            "spending and save money for this farm. Return ONLY the text in "
            f"English. Data: {json.dumps(summary)}"
        )

    async def financial_insights(self, transactions: Iterable[Transaction]) -> str:
        """
        Advice over the given transactions.

        Returns the fallback message on any failure; never raises.
        """
        transactions = list(transactions)
        if not transactions:
            return NO_TRANSACTIONS

        try:
            response = await self._model.generate_content_async(
                self.build_prompt(transactions)
            )
            text = (response.text or "").strip()
        except Exception as e:
            logger.warning("insights_failed", error=str(e), error_type=type(e).__name__)
            return INSIGHTS_UNAVAILABLE

        return text or INSIGHTS_UNAVAILABLE
