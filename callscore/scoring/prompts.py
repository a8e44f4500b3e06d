from __future__ import annotations

from callscore.scoring.models import AnalysisRequest

DEEP_ANALYSIS_SYSTEM_PROMPT = (
    "You are a telesales performance coach scoring call quality. Return only JSON."
)
FALLBACK_SYSTEM_PROMPT = (
    "You are a telesales coach producing a brief call summary. Return only JSON."
)


def deep_analysis_prompt(request: AnalysisRequest, transcript: str) -> str:
    """Build prompt for the full rubric-based analysis."""
    return (
        "Score this sales call against the quality rubric.\n"
        "Return ONLY strict JSON with keys: overallScore, callCategorisation, summary, "
        "strengths, areasForImprovement, redFlags, metricScores, improvementSituations, "
        "suggestedDisposition, conversionReadiness.\n"
        "Rules:\n"
        "- Every score is a number from 0 to 5\n"
        "- metricScores is a list of {metric, score, feedback}, one per rubric metric\n"
        "- Rubric covers: introduction and rapport, pitch and value communication, "
        "needs discovery, objection handling, closing and call to action\n"
        "- overallScore is the average of all metric scores\n"
        "- improvementSituations lists 2-4 moments as {timeInCall, context, userDialogue, "
        "agentResponse, suggestedResponse}\n"
        "- conversionReadiness is one of Low, Medium, High\n\n"
        f"{call_context(request, transcript)}"
    )


def fallback_prompt(request: AnalysisRequest, transcript: str) -> str:
    """Build prompt for the reduced, summary-only analysis."""
    return (
        "Summarize the quality of this sales call from the transcript alone.\n"
        "Return ONLY strict JSON with keys: summary, strengths, areasForImprovement, overallScore.\n"
        "Constraints:\n"
        "- summary is one short paragraph\n"
        "- strengths and areasForImprovement hold 2-3 items each\n"
        "- overallScore is a number from 0 to 5\n\n"
        f"{call_context(request, transcript)}"
    )


def call_context(request: AnalysisRequest, transcript: str) -> str:
    """Shared call facts appended to every scoring prompt."""
    product_context = request.product_context or (
        "No product context provided. Use general knowledge of the product name."
    )
    return (
        f"Product: {request.product.value}\n"
        f"Agent: {request.agent_name or 'Not Provided'}\n"
        f"Product context:\n{product_context}\n\n"
        f"Transcript:\n{transcript}\n"
    )
