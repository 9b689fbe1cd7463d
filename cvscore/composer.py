"""Score composer - turns the rule-based result into the user-facing ATS response."""

import logging
import math

from google import genai

from .cache import ScoreCache
from .grader import TIMEOUT_SECONDS, fetch_llm_grade
from .messages import msg
from .models import (
    AtsCategory,
    AtsPositive,
    AtsScoreResponse,
    AtsSuggestion,
    CvDocument,
    Grade,
    LlmGrade,
    RuleBasedResult,
    ScoreBreakdown,
    SectionKey,
    normalize_locale,
)
from .scorer import score

logger = logging.getLogger(__name__)

GRADE_PENALTY: dict[str, int] = {
    "A": 0,
    "B": -1,
    "C": -2,
    "D": -3,
    "F": -5,
}
MAX_LLM_PENALTY = -10
GOOD_THRESHOLD = 80

SECTION_KEYS: dict[str, SectionKey] = {
    "contact": "header",
    "summary": "summary",
    "experience": "experience",
    "education": "education",
    "skills": "skills",
    "projects": "projects",
    "languages": "languages",
    "formatting": "general",
    "dateContinuity": "experience",
}

_PRIORITY_ORDER = {"critical": 0, "recommended": 1, "optional": 2}


def grade_penalty(grade: Grade | None) -> int:
    """Points deducted for one grade; unknown or missing grades cost nothing."""
    return GRADE_PENALTY.get(grade or "", 0)


def llm_penalty(grade: LlmGrade | None) -> int:
    """Combined summary + experience penalty, never below MAX_LLM_PENALTY."""
    if grade is None:
        return 0
    return max(MAX_LLM_PENALTY, grade_penalty(grade.summary_grade) + grade_penalty(grade.experience_grade))


def percentage(earned: int, max_points: int) -> int:
    if max_points <= 0:
        return 100
    return math.floor(100 * earned / max_points + 0.5)


def build_categories(result: RuleBasedResult, locale: str) -> list[AtsCategory]:
    categories = []
    for key, section in result.sections.items():
        pct = percentage(section.earned, section.max)
        if section.issues:
            feedback = "; ".join(issue.text for issue in section.issues)
        else:
            feedback = msg(locale, "feedback.good" if pct >= GOOD_THRESHOLD else "feedback.needs_improvement")
        categories.append(
            AtsCategory(
                name=msg(locale, f"section.{key}"),
                score=pct,
                feedback=feedback,
                section=SECTION_KEYS.get(key, "general"),
            )
        )
    return categories


def build_suggestions(result: RuleBasedResult) -> list[AtsSuggestion]:
    """All issues, critical first. The sort is stable so section order is kept within a priority."""
    issues = [issue for _, section in result.sections.items() for issue in section.issues]
    issues.sort(key=lambda issue: _PRIORITY_ORDER[issue.priority])
    return [AtsSuggestion(text=i.text, priority=i.priority, section=i.section) for i in issues]


def build_positives(result: RuleBasedResult) -> list[AtsPositive]:
    return [
        AtsPositive(text=p.text, section=p.section) for _, section in result.sections.items() for p in section.positives
    ]


def build_breakdown(result: RuleBasedResult) -> ScoreBreakdown:
    s = result.sections
    return ScoreBreakdown(
        contact=s.contact.earned,
        summary=s.summary.earned,
        experience=s.experience.earned,
        education=s.education.earned,
        skills=s.skills.earned,
        formatting=s.formatting.earned,
        date_continuity=s.date_continuity.earned,
        languages=s.languages.earned,
        projects=s.projects.earned,
    )


def compose_response(
    rule_result: RuleBasedResult,
    locale: str = "en",
    grade: LlmGrade | None = None,
) -> AtsScoreResponse:
    """Blend *rule_result* with an optional LLM *grade* into the final response.

    Without a grade the overall score equals the rule-based total.
    """
    loc = normalize_locale(locale)
    suggestions = build_suggestions(rule_result)
    if grade is not None and grade.top_suggestion.strip():
        suggestions.append(AtsSuggestion(text=grade.top_suggestion, priority="recommended", section="general"))

    overall = max(0, min(100, rule_result.total_score + llm_penalty(grade)))

    return AtsScoreResponse(
        overall_score=overall,
        categories=build_categories(rule_result, loc),
        suggestions=suggestions,
        positives=build_positives(rule_result),
        rule_score=rule_result.total_score,
        llm_grade=grade.overall_impression if grade is not None else None,
        breakdown=build_breakdown(rule_result),
    )


def analyze_cv(
    cv: CvDocument,
    locale: str = "en",
    client: genai.Client | None = None,
    cache: ScoreCache | None = None,
    timeout: float = TIMEOUT_SECONDS,
) -> AtsScoreResponse:
    """Score *cv* end to end: cache lookup, rules, best-effort LLM grade, compose, cache store.

    Args:
        cv: Validated CV document.
        locale: Message and word-list locale; anything but 'pt' means English.
        client: Gemini client. When None the LLM grade is skipped.
        cache: Optional result cache.
        timeout: Wall-clock limit for the LLM grade, in seconds.

    Returns:
        The composed ATS score response.
    """
    loc = normalize_locale(locale)
    mode = "llm" if client is not None else "rules"

    if cache is not None:
        cached = cache.load(cv, loc, mode)
        if cached is not None:
            return cached

    rule_result = score(cv, loc)
    grade = fetch_llm_grade(client, cv, timeout=timeout) if client is not None else None
    response = compose_response(rule_result, loc, grade)

    # A failed grade is not cached so the next run can retry it
    if cache is not None and (client is None or grade is not None):
        cache.save(cv, loc, response, mode)
    logger.info(
        "Scored CV: rules=%d overall=%d grade=%s", rule_result.total_score, response.overall_score, response.llm_grade
    )
    return response
