"""Tests for cvscore.models - CV document validation and result serialisation."""

import pytest
from pydantic import ValidationError

from cvscore.models import (
    AtsScoreResponse,
    CvDocument,
    LlmGrade,
    RuleBasedResult,
    SectionScore,
    ValidationIssue,
    normalize_locale,
)


class TestNormalizeLocale:
    @pytest.mark.parametrize("value", ["en", None, "fr", "PT", "pt-BR", "", 42])
    def test_anything_but_pt_is_english(self, value):
        assert normalize_locale(value) == "en"

    def test_pt(self):
        assert normalize_locale("pt") == "pt"


class TestCvDocument:
    def test_empty_payload_gets_blank_sections(self):
        cv = CvDocument.model_validate({})
        assert cv.header.name == ""
        assert cv.summary.text == ""
        assert cv.experience.items == []
        assert cv.skills.categories == []
        assert cv.template_id == "jake"
        assert cv.locale is None

    def test_null_sections_become_empty(self):
        cv = CvDocument.model_validate(
            {"summary": None, "experience": None, "sectionOrder": None, "customSections": None}
        )
        assert cv.summary.text == ""
        assert cv.experience.items == []
        assert cv.section_order == []
        assert cv.custom_sections == []

    def test_camel_case_aliases(self, full_cv_data: dict):
        full_cv_data["sectionOrder"] = ["summary", "experience"]
        full_cv_data["customLatex"] = "\\section{x}"
        cv = CvDocument.model_validate(full_cv_data)
        assert cv.section_order == ["summary", "experience"]
        assert cv.custom_latex == "\\section{x}"

    def test_snake_case_names_accepted(self):
        cv = CvDocument(template_id="modern", section_order=["skills"])
        assert cv.template_id == "modern"
        assert cv.section_order == ["skills"]

    def test_unknown_keys_ignored(self):
        cv = CvDocument.model_validate({"header": {"name": "Ana", "twitter": "@ana"}, "photo": "x.png"})
        assert cv.header.name == "Ana"

    def test_duplicate_section_order_rejected(self):
        with pytest.raises(ValidationError, match="duplicates"):
            CvDocument.model_validate({"sectionOrder": ["skills", "skills"]})

    def test_long_string_rejected(self):
        with pytest.raises(ValidationError):
            CvDocument.model_validate({"header": {"name": "x" * 501}})

    def test_summary_allows_long_text(self):
        cv = CvDocument.model_validate({"summary": {"text": "word " * 900}})
        assert len(cv.summary.text) == 4500

    def test_too_many_highlights_rejected(self):
        item = {"company": "A", "role": "B", "date": "2020", "highlights": ["Built it"] * 21}
        with pytest.raises(ValidationError):
            CvDocument.model_validate({"experience": {"items": [item]}})

    def test_invalid_locale_rejected(self):
        with pytest.raises(ValidationError):
            CvDocument.model_validate({"locale": "fr"})


class TestResultModels:
    def test_negative_earned_rejected(self):
        with pytest.raises(ValidationError):
            SectionScore(earned=-1, max=5)

    def test_issue_priority_is_checked(self):
        with pytest.raises(ValidationError):
            ValidationIssue(text="x", priority="urgent", section="general")

    def test_rule_result_dumps_camel_case(self, full_cv: CvDocument):
        from cvscore.scorer import score

        data = score(full_cv).model_dump(by_alias=True)
        assert "totalScore" in data
        assert data["maxScore"] == 100
        assert "dateContinuity" in data["sections"]

    def test_rule_result_rejects_total_above_100(self):
        section = SectionScore(earned=0, max=0)
        with pytest.raises(ValidationError):
            RuleBasedResult.model_validate(
                {
                    "totalScore": 101,
                    "sections": {
                        "contact": section,
                        "summary": section,
                        "experience": section,
                        "education": section,
                        "skills": section,
                        "projects": section,
                        "languages": section,
                        "formatting": section,
                        "dateContinuity": section,
                    },
                }
            )


class TestLlmGrade:
    def test_parses_wire_format(self):
        grade = LlmGrade.model_validate(
            {"summaryGrade": "A", "experienceGrade": "C", "overallImpression": "B", "topSuggestion": "Add metrics"}
        )
        assert grade.experience_grade == "C"
        assert grade.top_suggestion == "Add metrics"

    def test_rejects_e_grade(self):
        with pytest.raises(ValidationError):
            LlmGrade.model_validate({"summaryGrade": "E", "experienceGrade": "A", "overallImpression": "A"})

    def test_top_suggestion_optional(self):
        grade = LlmGrade.model_validate({"summaryGrade": "A", "experienceGrade": "A", "overallImpression": "A"})
        assert grade.top_suggestion == ""


class TestAtsScoreResponse:
    def test_round_trip_through_aliases(self):
        response = AtsScoreResponse(overall_score=80, categories=[], suggestions=[], rule_score=82, llm_grade="B")
        data = response.model_dump(by_alias=True)
        assert data["overallScore"] == 80
        assert data["ruleScore"] == 82
        assert data["llmGrade"] == "B"
        assert AtsScoreResponse.model_validate(data) == response
