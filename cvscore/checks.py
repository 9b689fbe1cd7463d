"""Section checkers for the rule-based ATS score.

Each checker is a pure function of the CV and locale. Every sub-check adds
its points and emits exactly one issue or one positive. Presence checks that
fail end the section early, except for contact which has no such gate.
"""

import math
import re

from .dates import DateRange, has_gap, parse_date_range
from .messages import msg
from .models import (
    CvDocument,
    Locale,
    Priority,
    SectionKey,
    SectionScore,
    ValidationIssue,
    ValidationPositive,
)
from .word_lists import action_verbs, pronoun_pattern

CONTACT_MAX = 10
SUMMARY_MAX = 10
EXPERIENCE_MAX = 30
EDUCATION_MAX = 8
SKILLS_MAX = 12
PROJECTS_MAX = 5
LANGUAGES_MAX = 5
FORMATTING_MAX = 15
DATE_CONTINUITY_MAX = 5

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LINKEDIN_RE = re.compile(r"linkedin\.com/in/", re.IGNORECASE)
METRIC_RE = re.compile(r"\d+%|\$[\d,]+|R\$[\d.,]+|\b\d{2,}\b")
ATS_DATE_RE = re.compile(
    r"\b(?:Jan(?:uary|eiro)?|Feb(?:ruary)?|Fev(?:ereiro)?|Mar(?:ch|ço|co)?|Apr(?:il)?|Abr(?:il)?"
    r"|May|Mai(?:o)?|Jun(?:e|ho)?|Jul(?:y|ho)?|Aug(?:ust)?|Ago(?:sto)?|Sep(?:t|tember)?|Set(?:embro)?"
    r"|Oct(?:ober)?|Out(?:ubro)?|Nov(?:ember|embro)?|Dec(?:ember)?|Dez(?:embro)?)\s+\d{4}\b"
    r"|\b\d{2}/\d{4}\b|\b\d{4}\b|Present|Presente|Atual",
    re.IGNORECASE,
)
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_TRAILING_PUNCT = re.compile(r"[.,;:]$")


class _Tally:
    """Running score for one section."""

    def __init__(self, locale: Locale, section: SectionKey, max_points: int):
        self.locale = locale
        self.section = section
        self.max = max_points
        self.earned = 0
        self.issues: list[ValidationIssue] = []
        self.positives: list[ValidationPositive] = []

    def ok(self, points: int, key: str, **variables) -> None:
        self.earned += points
        self.positives.append(ValidationPositive(text=msg(self.locale, key, variables), section=self.section))

    def fail(self, points: int, key: str, priority: Priority, **variables) -> None:
        self.earned += points
        self.issues.append(
            ValidationIssue(text=msg(self.locale, key, variables), priority=priority, section=self.section)
        )

    def result(self) -> SectionScore:
        return SectionScore(earned=self.earned, max=self.max, issues=self.issues, positives=self.positives)


def _filled(value: str) -> bool:
    return bool(value.strip())


def _share(points: int, part: int, total: int) -> int:
    """Proportional credit, rounded half up."""
    return math.floor(points * part / total + 0.5)


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------


def check_contact(cv: CvDocument, locale: Locale) -> SectionScore:
    h = cv.header
    t = _Tally(locale, "header", CONTACT_MAX)

    if _filled(h.name):
        t.ok(2, "contact.name_ok")
    else:
        t.fail(0, "contact.name_missing", "critical")

    email = h.email.strip()
    if not email:
        t.fail(0, "contact.email_missing", "critical")
    elif EMAIL_RE.match(email):
        t.ok(3, "contact.email_ok")
    else:
        t.fail(1, "contact.email_invalid", "recommended")

    if _filled(h.phone):
        t.ok(2, "contact.phone_ok")
    else:
        t.fail(0, "contact.phone_missing", "recommended")

    linkedin = h.linkedin.strip()
    if not linkedin:
        t.fail(0, "contact.linkedin_missing", "recommended")
    elif LINKEDIN_RE.search(linkedin):
        t.ok(2, "contact.linkedin_ok")
    else:
        t.fail(1, "contact.linkedin_invalid", "recommended")

    if _filled(h.location):
        t.ok(1, "contact.location_ok")
    else:
        t.fail(0, "contact.location_missing", "optional")

    return t.result()


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def count_sentences(text: str) -> int:
    return sum(1 for fragment in _SENTENCE_SPLIT.split(text) if fragment.strip())


def check_summary(cv: CvDocument, locale: Locale) -> SectionScore:
    text = cv.summary.text.strip()
    t = _Tally(locale, "summary", SUMMARY_MAX)

    if not text:
        t.fail(0, "summary.missing", "critical")
        return t.result()
    t.ok(3, "summary.present")

    sentences = count_sentences(text)
    if 2 <= sentences <= 5:
        t.ok(4, "summary.good_length")
    elif sentences < 2:
        t.fail(2, "summary.too_short", "recommended")
    else:
        t.fail(2, "summary.too_long", "recommended")

    if pronoun_pattern(locale).search(text):
        t.fail(0, "summary.has_pronouns", "recommended")
    else:
        t.ok(3, "summary.no_pronouns")

    return t.result()


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------


def first_word(text: str) -> str:
    words = text.split()
    if not words:
        return ""
    return _TRAILING_PUNCT.sub("", words[0].lower())


def check_experience(cv: CvDocument, locale: Locale) -> SectionScore:
    items = cv.experience.items
    t = _Tally(locale, "experience", EXPERIENCE_MAX)

    if not items:
        t.fail(0, "experience.no_items", "critical")
        return t.result()
    t.ok(5, "experience.has_items")

    complete = sum(1 for i in items if _filled(i.company) and _filled(i.role) and _filled(i.date))
    if complete == len(items):
        t.ok(5, "experience.fields_complete")
    else:
        t.fail(_share(5, complete, len(items)), "experience.missing_fields", "critical", count=len(items) - complete)

    highlights = [h for i in items for h in i.highlights if _filled(h)]
    average = len(highlights) / len(items)
    if 3 <= average <= 6:
        t.ok(5, "experience.good_highlights")
    elif average >= 1:
        if average < 3:
            t.fail(2, "experience.few_highlights", "recommended")
        else:
            t.fail(2, "experience.many_highlights", "optional")
    else:
        t.fail(0, "experience.no_highlights", "critical")

    if not highlights:
        return t.result()

    strong, weak = action_verbs(locale)
    first_words = [first_word(h) for h in highlights]
    # Words in neither list count as strong.
    strong_count = sum(1 for w in first_words if w in strong or w not in weak)
    ratio = strong_count / len(highlights)
    if ratio >= 0.8:
        t.ok(8, "experience.strong_verbs")
    elif ratio >= 0.5:
        t.fail(4, "experience.some_weak_verbs", "recommended")
    else:
        t.fail(2, "experience.weak_verbs", "critical")

    quantified = sum(1 for h in highlights if METRIC_RE.search(h))
    ratio = quantified / len(highlights)
    if ratio >= 0.5:
        t.ok(7, "experience.quantified")
    elif ratio >= 0.2:
        t.fail(3, "experience.some_metrics", "recommended")
    else:
        t.fail(1, "experience.needs_metrics", "critical")

    return t.result()


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------


def check_education(cv: CvDocument, locale: Locale) -> SectionScore:
    items = cv.education.items
    t = _Tally(locale, "education", EDUCATION_MAX)

    if not items:
        t.fail(0, "education.no_items", "critical")
        return t.result()
    t.ok(3, "education.has_items")

    complete = sum(1 for i in items if _filled(i.institution) and _filled(i.degree))
    if complete == len(items):
        t.ok(3, "education.fields_complete")
    else:
        t.fail(_share(3, complete, len(items)), "education.missing_fields", "recommended", count=len(items) - complete)

    dated = sum(1 for i in items if _filled(i.date))
    if dated == len(items):
        t.ok(2, "education.dates_complete")
    else:
        t.fail(_share(2, dated, len(items)), "education.missing_dates", "optional", count=len(items) - dated)

    return t.result()


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------


def count_skills(values: str) -> int:
    return sum(1 for v in values.split(",") if v.strip())


def check_skills(cv: CvDocument, locale: Locale) -> SectionScore:
    categories = cv.skills.categories
    t = _Tally(locale, "skills", SKILLS_MAX)

    if not categories:
        t.fail(0, "skills.no_categories", "critical")
        return t.result()
    t.ok(3, "skills.has_categories")

    if len(categories) >= 2:
        t.ok(3, "skills.good_categories")
    else:
        t.fail(0, "skills.few_categories", "recommended")

    total = sum(count_skills(c.values) for c in categories)
    if total >= 8:
        t.ok(3, "skills.enough_skills")
    else:
        t.fail(0, "skills.few_skills", "recommended", count=total)

    empty = sum(1 for c in categories if not _filled(c.name) or not _filled(c.values))
    if empty == 0:
        t.ok(3, "skills.no_empty")
    else:
        t.fail(0, "skills.empty_category", "recommended", count=empty)

    return t.result()


# ---------------------------------------------------------------------------
# Projects and languages
# ---------------------------------------------------------------------------


def _check_listing(
    locale: Locale,
    prefix: str,
    section: SectionKey,
    max_points: int,
    total: int,
    complete: int,
) -> SectionScore:
    t = _Tally(locale, section, max_points)

    if total == 0:
        t.fail(0, f"{prefix}.no_items", "optional")
        return t.result()
    t.ok(2, f"{prefix}.has_items")

    if complete == total:
        t.ok(3, f"{prefix}.fields_complete")
    else:
        t.fail(_share(3, complete, total), f"{prefix}.missing_fields", "recommended", count=total - complete)

    return t.result()


def check_projects(cv: CvDocument, locale: Locale) -> SectionScore:
    items = cv.projects.items
    complete = sum(1 for i in items if _filled(i.name) and any(_filled(h) for h in i.highlights))
    return _check_listing(locale, "projects", "projects", PROJECTS_MAX, len(items), complete)


def check_languages(cv: CvDocument, locale: Locale) -> SectionScore:
    items = cv.languages.items
    complete = sum(1 for i in items if _filled(i.name) and _filled(i.level))
    return _check_listing(locale, "languages", "languages", LANGUAGES_MAX, len(items), complete)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def collect_text(cv: CvDocument) -> str:
    """Concatenate the body text an ATS would read."""
    parts = [cv.summary.text]
    for e in cv.experience.items:
        parts.extend([e.role, e.company, *e.highlights])
    for ed in cv.education.items:
        parts.extend([ed.degree, ed.institution, *ed.highlights])
    for p in cv.projects.items:
        parts.extend([p.name, *p.highlights])
    for c in cv.skills.categories:
        parts.extend([c.name, c.values])
    return " ".join(parts)


def collect_highlights(cv: CvDocument) -> list[str]:
    return [
        *(h for e in cv.experience.items for h in e.highlights),
        *(h for ed in cv.education.items for h in ed.highlights),
        *(h for p in cv.projects.items for h in p.highlights),
    ]


def collect_dates(cv: CvDocument) -> list[str]:
    dates = [e.date for e in cv.experience.items]
    dates += [ed.date for ed in cv.education.items]
    dates += [p.date for p in cv.projects.items]
    return [d for d in dates if _filled(d)]


def check_formatting(cv: CvDocument, locale: Locale) -> SectionScore:
    t = _Tally(locale, "general", FORMATTING_MAX)
    text = collect_text(cv)

    words = len(text.split())
    if 450 <= words <= 1200:
        t.ok(5, "formatting.good_length")
    elif 200 <= words < 450:
        t.fail(3, "formatting.short", "recommended", count=words)
    elif 1200 < words <= 1500:
        t.fail(3, "formatting.long", "recommended", count=words)
    elif words > 0:
        t.fail(1, "formatting.very_off", "critical", count=words)
    else:
        t.fail(0, "formatting.empty", "critical")

    highlights = collect_highlights(cv)
    empty = sum(1 for h in highlights if not _filled(h))
    if empty:
        t.fail(0, "formatting.empty_bullets", "recommended", count=empty)
    elif highlights:
        t.ok(3, "formatting.no_empty_bullets")
    else:
        t.earned += 3

    dates = collect_dates(cv)
    safe = sum(1 for d in dates if ATS_DATE_RE.search(d))
    if not dates:
        t.earned += 4
    elif safe == len(dates):
        t.ok(4, "formatting.ats_dates")
    else:
        t.fail(_share(4, safe, len(dates)), "formatting.bad_dates", "recommended", count=len(dates) - safe)

    if pronoun_pattern(locale).search(text):
        t.fail(0, "formatting.has_pronouns", "recommended")
    elif words:
        t.ok(3, "formatting.no_pronouns")
    else:
        t.earned += 3

    return t.result()


# ---------------------------------------------------------------------------
# Date continuity
# ---------------------------------------------------------------------------


def check_date_continuity(cv: CvDocument, locale: Locale) -> SectionScore:
    t = _Tally(locale, "experience", DATE_CONTINUITY_MAX)

    ranges: list[DateRange] = []
    unparsed = 0
    for item in cv.experience.items:
        if not _filled(item.date):
            continue
        parsed = parse_date_range(item.date)
        if parsed is None:
            unparsed += 1
        else:
            ranges.append(parsed)

    # Nothing to judge: no experience, or no date we can read.
    if not ranges:
        t.earned = DATE_CONTINUITY_MAX
        return t.result()

    if unparsed == 0:
        t.ok(2, "dateContinuity.dates_parseable")
    else:
        t.fail(1, "dateContinuity.some_unparseable", "optional", count=unparsed)

    if has_gap(ranges):
        t.fail(0, "dateContinuity.has_gaps", "optional")
    else:
        t.ok(3, "dateContinuity.no_gaps")

    return t.result()
