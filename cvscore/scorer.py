"""Rule-based ATS scoring: run every section checker and total the points."""

from .checks import (
    CONTACT_MAX,
    DATE_CONTINUITY_MAX,
    EDUCATION_MAX,
    EXPERIENCE_MAX,
    FORMATTING_MAX,
    LANGUAGES_MAX,
    PROJECTS_MAX,
    SKILLS_MAX,
    SUMMARY_MAX,
    check_contact,
    check_date_continuity,
    check_education,
    check_experience,
    check_formatting,
    check_languages,
    check_projects,
    check_skills,
    check_summary,
)
from .models import CvDocument, RuleBasedResult, SectionResults, normalize_locale

# Section maxima by wire key, in checker order
SECTION_MAX: dict[str, int] = {
    "contact": CONTACT_MAX,
    "summary": SUMMARY_MAX,
    "experience": EXPERIENCE_MAX,
    "education": EDUCATION_MAX,
    "skills": SKILLS_MAX,
    "projects": PROJECTS_MAX,
    "languages": LANGUAGES_MAX,
    "formatting": FORMATTING_MAX,
    "dateContinuity": DATE_CONTINUITY_MAX,
}
MAX_SCORE = sum(SECTION_MAX.values())


def score(cv: CvDocument, locale: str = "en") -> RuleBasedResult:
    """Score *cv* against the nine ATS checks.

    Pure and deterministic: the CV is not modified and no I/O happens.
    Unsupported locales are scored as English.
    """
    loc = normalize_locale(locale)
    sections = SectionResults(
        contact=check_contact(cv, loc),
        summary=check_summary(cv, loc),
        experience=check_experience(cv, loc),
        education=check_education(cv, loc),
        skills=check_skills(cv, loc),
        projects=check_projects(cv, loc),
        languages=check_languages(cv, loc),
        formatting=check_formatting(cv, loc),
        date_continuity=check_date_continuity(cv, loc),
    )
    total = sum(section.earned for _, section in sections.items())
    return RuleBasedResult(total_score=total, max_score=MAX_SCORE, sections=sections)
