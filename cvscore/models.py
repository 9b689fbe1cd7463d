"""Pydantic models for cvscore data structures."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

Locale = Literal["pt", "en"]
Priority = Literal["critical", "recommended", "optional"]
SectionKey = Literal["header", "summary", "education", "experience", "projects", "skills", "languages", "general"]
Grade = Literal["A", "B", "C", "D", "F"]

DEFAULT_LOCALE: Locale = "en"

Text = Annotated[str, StringConstraints(max_length=500)]
LongText = Annotated[str, StringConstraints(max_length=5000)]
Highlight = Annotated[str, StringConstraints(max_length=1000)]


def normalize_locale(value: object) -> Locale:
    """Map anything other than 'pt' to the default locale."""
    return "pt" if value == "pt" else DEFAULT_LOCALE


class _CvModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# CV document (input)
# ---------------------------------------------------------------------------


class Header(_CvModel):
    name: Text = ""
    location: Text = ""
    phone: Text = ""
    email: Text = ""
    linkedin: Text = ""
    github: Text = ""


class Summary(_CvModel):
    title: Text = ""
    text: LongText = ""


class EducationItem(_CvModel):
    institution: Text = ""
    degree: Text = ""
    date: Text = ""
    location: Text = ""
    highlights: list[Highlight] = Field(default_factory=list, max_length=20)


class ExperienceItem(_CvModel):
    company: Text = ""
    role: Text = ""
    date: Text = ""
    location: Text = ""
    highlights: list[Highlight] = Field(default_factory=list, max_length=20)


class ProjectItem(_CvModel):
    name: Text = ""
    tech: Text = ""
    date: Text = ""
    highlights: list[Highlight] = Field(default_factory=list, max_length=20)


class SkillCategory(_CvModel):
    name: Text = ""
    values: LongText = Field(default="", description="Comma-separated skills")


class LanguageItem(_CvModel):
    name: Text = ""
    level: Text = ""


class EducationSection(_CvModel):
    title: Text = ""
    items: list[EducationItem] = Field(default_factory=list, max_length=20)


class ExperienceSection(_CvModel):
    title: Text = ""
    items: list[ExperienceItem] = Field(default_factory=list, max_length=20)


class ProjectsSection(_CvModel):
    title: Text = ""
    items: list[ProjectItem] = Field(default_factory=list, max_length=20)


class SkillsSection(_CvModel):
    title: Text = ""
    categories: list[SkillCategory] = Field(default_factory=list, max_length=20)


class LanguagesSection(_CvModel):
    title: Text = ""
    items: list[LanguageItem] = Field(default_factory=list, max_length=20)


class CustomSectionItem(_CvModel):
    text: Highlight = ""


class CustomSection(_CvModel):
    id: Annotated[str, StringConstraints(max_length=50)] = ""
    title: Text = ""
    items: list[CustomSectionItem] = Field(default_factory=list, max_length=30)


class CvDocument(_CvModel):
    """A structured CV as authored in the editor.

    Layout-only fields (template, section order, custom sections, raw LaTeX)
    are accepted so that stored documents validate, but scoring ignores them.
    """

    template_id: str = Field(default="jake", alias="templateId", max_length=50)
    locale: Locale | None = None
    section_order: list[Annotated[str, StringConstraints(max_length=50)]] = Field(
        default_factory=list, alias="sectionOrder", max_length=16
    )
    custom_sections: list[CustomSection] = Field(default_factory=list, alias="customSections", max_length=10)
    custom_latex: str | None = Field(default=None, alias="customLatex", max_length=100_000)

    header: Header = Field(default_factory=Header)
    summary: Summary = Field(default_factory=Summary)
    education: EducationSection = Field(default_factory=EducationSection)
    experience: ExperienceSection = Field(default_factory=ExperienceSection)
    projects: ProjectsSection = Field(default_factory=ProjectsSection)
    skills: SkillsSection = Field(default_factory=SkillsSection)
    languages: LanguagesSection = Field(default_factory=LanguagesSection)

    @field_validator("section_order", "custom_sections", mode="before")
    @classmethod
    def _none_to_empty_list(cls, v):
        return [] if v is None else v

    @field_validator("header", "summary", "education", "experience", "projects", "skills", "languages", mode="before")
    @classmethod
    def _none_to_empty_section(cls, v):
        return {} if v is None else v

    @field_validator("section_order")
    @classmethod
    def _unique_order(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("sectionOrder must not contain duplicates")
        return v


# ---------------------------------------------------------------------------
# Rule-based scoring results
# ---------------------------------------------------------------------------


class _ResultModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ValidationIssue(_ResultModel):
    """A sub-criterion that was not fully satisfied."""

    text: str
    priority: Priority
    section: SectionKey


class ValidationPositive(_ResultModel):
    """A sub-criterion that was satisfied."""

    text: str
    section: SectionKey


class SectionScore(_ResultModel):
    earned: int = Field(ge=0)
    max: int = Field(ge=0)
    issues: list[ValidationIssue] = Field(default_factory=list)
    positives: list[ValidationPositive] = Field(default_factory=list)


class SectionResults(_ResultModel):
    """One score per checker, in a fixed order."""

    contact: SectionScore
    summary: SectionScore
    experience: SectionScore
    education: SectionScore
    skills: SectionScore
    projects: SectionScore
    languages: SectionScore
    formatting: SectionScore
    date_continuity: SectionScore = Field(alias="dateContinuity")

    def items(self) -> list[tuple[str, SectionScore]]:
        """Return (wire key, score) pairs in checker order."""
        return [
            ("contact", self.contact),
            ("summary", self.summary),
            ("experience", self.experience),
            ("education", self.education),
            ("skills", self.skills),
            ("projects", self.projects),
            ("languages", self.languages),
            ("formatting", self.formatting),
            ("dateContinuity", self.date_continuity),
        ]


class RuleBasedResult(_ResultModel):
    total_score: int = Field(ge=0, le=100, alias="totalScore")
    max_score: int = Field(default=100, alias="maxScore")
    sections: SectionResults


# ---------------------------------------------------------------------------
# LLM grade and composed response
# ---------------------------------------------------------------------------


class LlmGrade(_ResultModel):
    """Categorical writing-quality grade returned by the external grader."""

    summary_grade: Grade = Field(alias="summaryGrade")
    experience_grade: Grade = Field(alias="experienceGrade")
    overall_impression: Grade = Field(alias="overallImpression")
    top_suggestion: str = Field(default="", alias="topSuggestion")


class AtsCategory(_ResultModel):
    name: str
    score: int = Field(ge=0, le=100)
    feedback: str
    section: SectionKey | None = None


class AtsSuggestion(_ResultModel):
    text: str
    priority: Priority
    section: SectionKey | None = None


class AtsPositive(_ResultModel):
    text: str
    section: SectionKey | None = None


class ScoreBreakdown(_ResultModel):
    contact: int = Field(ge=0, le=10)
    summary: int = Field(ge=0, le=10)
    experience: int = Field(ge=0, le=30)
    education: int = Field(ge=0, le=8)
    skills: int = Field(ge=0, le=12)
    formatting: int = Field(ge=0, le=15)
    date_continuity: int = Field(ge=0, le=5, alias="dateContinuity")
    languages: int = Field(ge=0, le=5)
    projects: int = Field(ge=0, le=5)


class AtsScoreResponse(_ResultModel):
    """The user-facing ATS score assembled from the rule-based result."""

    overall_score: int = Field(ge=0, le=100, alias="overallScore")
    categories: list[AtsCategory]
    suggestions: list[AtsSuggestion]
    positives: list[AtsPositive] = Field(default_factory=list)
    rule_score: int | None = Field(default=None, ge=0, le=100, alias="ruleScore")
    llm_grade: Grade | None = Field(default=None, alias="llmGrade")
    breakdown: ScoreBreakdown | None = None
