from __future__ import annotations

import json

from .base import BaseLLM


class MockAdapter(BaseLLM):
    """Return predictable JSON payloads for each scoring tier."""

    model_name = "mock"

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        prompt = f"{system_prompt}\n{user_prompt}".lower()
        if "keys: overallscore, callcategorisation" in prompt:
            return json.dumps(
                {
                    "overallScore": 3.8,
                    "callCategorisation": "Good",
                    "summary": "Agent opened confidently and explained the offer clearly.",
                    "strengths": ["Clear opening", "Benefit-led pitch"],
                    "areasForImprovement": ["Ask more discovery questions"],
                    "redFlags": [],
                    "metricScores": [
                        {"metric": "Introduction Quality", "score": 4, "feedback": "Warm and direct."},
                        {"metric": "Closing Effectiveness", "score": 3.6, "feedback": "CTA could be firmer."},
                    ],
                    "improvementSituations": [],
                    "suggestedDisposition": "Follow Up",
                    "conversionReadiness": "Medium",
                }
            )
        if "keys: summary, strengths, areasforimprovement, overallscore" in prompt:
            return json.dumps(
                {
                    "summary": "Transcript shows a structured pitch with a soft close.",
                    "strengths": ["Structured pitch"],
                    "areasForImprovement": ["Stronger close"],
                    "overallScore": 3.0,
                }
            )
        return "{}"
