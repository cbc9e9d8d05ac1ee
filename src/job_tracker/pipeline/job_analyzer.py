"""Job Analyzer - extracts structured fields and a CV fit score from a job description."""

from __future__ import annotations

import logging

import anthropic

from job_tracker.clients.llm_client import DEFAULT_MODEL, LLMClient
from job_tracker.models.analysis import AIAnalysisResult
from job_tracker.utils.json_parser import AnalysisParseError, extract_json_object

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50
TRUNCATED_REASON = (
    "The analysis was truncated before scoring; a neutral score was assigned. "
    "Re-run the analysis for a full assessment."
)
GENERIC_NEXT_STEPS = [
    "Review the listed requirements and highlight matching experience in your application",
    "Research the company's products, culture and recent news",
    "Tailor your resume and cover letter to the role's key responsibilities",
]

INVALID_DATA_MESSAGE = "AI analysis returned invalid data; please retry."

BASE_PROMPT = '''\
Please analyze this job description and extract structured information. CRITICAL: Only extract information that is explicitly mentioned - never guess or hallucinate data.

Job Description:
"""
{description}
"""

Extract the following information in JSON format. Use null for any field where information is not explicitly provided:

{{
  "salaryMin": number | null,
  "salaryMax": number | null,
  "salaryCurrency": string | null (e.g., "USD", "CAD"),
  "responsibilities": string[] (only clear responsibilities listed),
  "requirements": string[] (only explicit requirements/skills),
  "benefits": string[] (only explicit benefits mentioned),
  "workArrangement": string | null ("remote" | "hybrid" | "onsite"),
{score_fields}
}}

IMPORTANT RULES:
- Only extract salary if specific numbers are mentioned (ranges like "$100k-200k" or exact figures)
- Only list responsibilities that are clearly stated as job duties
- Only include requirements that are explicitly mentioned as needed skills/experience
- For work arrangement, only specify if clearly stated (phrases like "remote", "fully distributed", "office-based")
- Be conservative - prefer null over guessing
- For suggestedNextSteps, provide 3-5 specific, actionable steps based on this exact role and company
- Respond with the JSON object only'''

SCORE_FIELDS_WITH_CV = '''\
  "suitabilityScore": number (0-100, based on CV match),
  "suitabilityReason": string (brief explanation of score),
  "suggestedNextSteps": string[] (3-5 actionable, specific steps for this application based on job requirements and candidate background)'''

SCORE_FIELDS_WITHOUT_CV = '''\
  "suggestedNextSteps": string[] (3-5 actionable steps for applying to this role)'''

CV_SECTION = '''

For suitability analysis, here is the candidate's CV:
"""
{cv_text}
"""

Score how well this candidate matches the role based on:
- Required skills and experience alignment
- Years of experience vs requirements
- Technical skills match
- Industry/domain relevance

Provide a score from 0-100 and a brief 1-2 sentence explanation.

For suggestedNextSteps, provide personalized, actionable steps based on:
- Specific job requirements and how the candidate should address them
- Skills gaps that need highlighting or bridging
- Company research tasks specific to this organization
- Interview preparation focused on this role's key areas'''


def build_analysis_prompt(description: str, cv_text: str | None = None) -> str:
    """Build the extraction prompt, adding the scoring section when a CV is given."""
    prompt = BASE_PROMPT.format(
        description=description,
        score_fields=SCORE_FIELDS_WITH_CV if cv_text else SCORE_FIELDS_WITHOUT_CV,
    )
    if cv_text:
        prompt += CV_SECTION.format(cv_text=cv_text)
    return prompt


def _number(value: object) -> int | float | None:
    # bool is an int subclass; "true" is not a salary
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _text(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def parse_analysis_response(raw_text: str, *, expect_score: bool = True) -> AIAnalysisResult:
    """Turn a raw model completion into a fully defaulted analysis result.

    Wrong-typed fields fall back to None / []. When the completion carried
    requirements or responsibilities but stopped before the scoring section,
    a neutral score and generic next steps are filled in so the degraded
    result is visible as such.

    Args:
        raw_text: Completion text, possibly wrapped in prose or truncated.
        expect_score: Whether the prompt asked for a suitability score
            (only when a CV was supplied).

    Raises:
        AnalysisParseError: No JSON object could be located or repaired.
    """
    data = extract_json_object(raw_text)

    result = AIAnalysisResult(
        salary_min=_number(data.get("salaryMin")),
        salary_max=_number(data.get("salaryMax")),
        salary_currency=_text(data.get("salaryCurrency")),
        responsibilities=_string_list(data.get("responsibilities")),
        requirements=_string_list(data.get("requirements")),
        benefits=_string_list(data.get("benefits")),
        work_arrangement=_text(data.get("workArrangement")),
        suitability_score=_number(data.get("suitabilityScore")),
        suitability_reason=_text(data.get("suitabilityReason")),
        suggested_next_steps=_string_list(data.get("suggestedNextSteps")),
    )

    if not result.has_signal:
        return result

    if expect_score and result.suitability_score is None:
        logger.warning("Analysis missing suitability score; assigning neutral score")
        result.suitability_score = NEUTRAL_SCORE
        if not result.suitability_reason:
            result.suitability_reason = TRUNCATED_REASON
        else:
            result.suitability_reason = f"{result.suitability_reason} ({TRUNCATED_REASON})"

    if not result.suggested_next_steps:
        logger.warning("Analysis missing next steps; using generic checklist")
        result.suggested_next_steps = list(GENERIC_NEXT_STEPS)

    return result


def classify_analysis_error(exc: BaseException) -> str:
    """Map an analysis failure to a user-facing, retryable message."""
    message = str(exc)
    lower = message.lower()
    if isinstance(exc, AnalysisParseError):
        return INVALID_DATA_MESSAGE
    if isinstance(exc, anthropic.AuthenticationError) or "anthropic_api_key" in lower or "api key" in lower:
        return "AI service not configured. Please add your Anthropic API key."
    if isinstance(exc, anthropic.RateLimitError) or "rate limit" in lower or "429" in message:
        return "AI service rate limit reached. Please wait a moment and try again."
    if isinstance(exc, anthropic.APITimeoutError) or "timed out" in lower or "timeout" in lower:
        return "AI analysis timed out. Please try again."
    return "Failed to analyze job description. Please try again."


class JobAnalyzer:
    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1000,
    ):
        self.llm = llm
        self.model = model
        self.max_tokens = max_tokens

    async def analyze(self, description: str, cv_text: str | None = None) -> AIAnalysisResult:
        """Analyze a job description, scoring it against the CV when one is given."""
        if not description or not description.strip():
            raise ValueError("Job description is required")

        logger.info("Analyzing job description (%d chars, cv=%s)", len(description), bool(cv_text))
        response = await self.llm.generate(
            prompt=build_analysis_prompt(description, cv_text),
            model=self.model,
            max_tokens=self.max_tokens,
        )
        if response.truncated:
            logger.warning("Completion hit max_tokens (%d); attempting recovery", self.max_tokens)

        try:
            return parse_analysis_response(response.text, expect_score=bool(cv_text))
        except AnalysisParseError:
            logger.error("Failed to parse AI response: %s", response.text[:200])
            raise
