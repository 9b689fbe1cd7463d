"""CV loading - reads structured JSON CVs, imports PDF, DOCX, MD and TXT files, and translates CVs."""

import json
from pathlib import Path

import docx
import pdfplumber
from google import genai
from pydantic import ValidationError

from .grader import strip_for_ai
from .llm import call_gemini, create_client, parse_json
from .models import CvDocument, normalize_locale

TEXT_EXTENSIONS = {".pdf", ".docx", ".md", ".txt"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | {".json"}

_SECTION_TITLES = {
    "pt": '"Resumo Profissional", "Formação Acadêmica", "Experiência Profissional", "Projetos", "Habilidades", "Idiomas"',
    "en": '"Professional Summary", "Education", "Experience", "Projects", "Skills", "Languages"',
}


def extract_text(cv_path: str | Path) -> str:
    """
    Extract text from a CV file. Supports PDF, DOCX, Markdown, and plain text.

    Args:
        cv_path: Path to the CV file.

    Returns:
        Extracted text content as a string.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the format is unsupported or no text could be extracted.
    """
    cv_path = Path(cv_path)

    if not cv_path.exists():
        raise FileNotFoundError(f"CV file not found: {cv_path}")

    suffix = cv_path.suffix.lower()

    if suffix not in TEXT_EXTENSIONS:
        raise ValueError(f"Unsupported file format: {suffix}. Supported: {', '.join(sorted(TEXT_EXTENSIONS))}")

    if suffix == ".pdf":
        text = _extract_from_pdf(cv_path)
    elif suffix == ".docx":
        text = _extract_from_docx(cv_path)
    else:  # .md, .txt
        text = cv_path.read_text(encoding="utf-8")

    text = _clean_text(text)

    if not text:
        raise ValueError(f"No text could be extracted from: {cv_path}")

    return text


def _extract_from_pdf(pdf_path: Path) -> str:
    text_parts: list[str] = []

    with pdfplumber.open(pdf_path) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)

    return "\n\n".join(text_parts)


def _extract_from_docx(docx_path: Path) -> str:
    doc = docx.Document(str(docx_path))
    paragraphs = [p.text for p in doc.paragraphs if p.text.strip()]
    return "\n\n".join(paragraphs)


def _clean_text(text: str) -> str:
    """Strip every line and collapse runs of blank lines."""
    cleaned = "\n".join(line.strip() for line in text.split("\n"))
    while "\n\n\n" in cleaned:
        cleaned = cleaned.replace("\n\n\n", "\n\n")
    return cleaned.strip()


# ---------------------------------------------------------------------------
# Structuring imported text
# ---------------------------------------------------------------------------


def build_parse_prompt(locale: str | None = None) -> str:
    """System prompt for turning free CV text into a CvDocument."""
    if locale:
        loc = normalize_locale(locale)
        language = "Portuguese" if loc == "pt" else "English"
        locale_rules = (
            f'- The CV is in {language}. Set locale to "{loc}". Use section titles in {language}:\n'
            f"  {_SECTION_TITLES[loc]}"
        )
    else:
        locale_rules = (
            '- Auto-detect the language of the CV. Set locale to "pt" if Portuguese, "en" if English or any other '
            "language.\n"
            "- Use section titles matching the detected language:\n"
            f"  - Portuguese: {_SECTION_TITLES['pt']}\n"
            f"  - English: {_SECTION_TITLES['en']}"
        )

    schema = json.dumps(CvDocument.model_json_schema(by_alias=True))

    return f"""You are a CV/resume parser. Extract ALL information from the provided resume text into structured JSON.

Rules:
{locale_rules}
- Each bullet point or achievement = one separate string in the highlights array
- For skills, group by category (e.g. "Programming Languages", "Frameworks"). The "values" field is a comma-separated string of skills in that category
- For languages, include name and proficiency level
- Empty or missing fields = empty string ""
- Keep dates in the original format found in the CV
- Do NOT invent or hallucinate information not present in the text
- Set templateId to "jake"
- Extract the person's name, location, phone, email, LinkedIn URL, and GitHub URL from the header/contact section
- If a section is not present in the CV, use an empty title and empty items array

You must respond ONLY with valid JSON matching this schema:
{schema}"""


def parse_cv_text(client: genai.Client, cv_text: str, locale: str | None = None) -> CvDocument:
    """
    Structure raw CV text into a CvDocument with Gemini.

    Args:
        client: Gemini client instance.
        cv_text: Text extracted from the CV file.
        locale: CV language if known; auto-detected otherwise.

    Returns:
        The validated CV document.

    Raises:
        ValueError: If no valid document could be produced after retries.
    """
    prompt = f"{build_parse_prompt(locale)}\n\nResume text:\n\n{cv_text}"
    last_error: Exception | None = None

    for attempt in range(2):
        content = call_gemini(client, prompt, temperature=0.0, max_tokens=8192, json_output=True)
        try:
            data = parse_json(content)
            if not isinstance(data, dict):
                raise ValueError("Expected a JSON object for the CV")
            return CvDocument.model_validate(data)
        except (ValueError, ValidationError) as exc:
            last_error = exc
            if attempt == 0:
                prompt = (
                    f"{build_parse_prompt(locale)}\n\n"
                    "Your previous response was invalid or incomplete JSON. "
                    "Re-generate the FULL CV as one valid JSON object.\n\n"
                    f"Resume text:\n\n{cv_text}"
                )

    raise ValueError(f"Failed to structure CV text into JSON: {last_error}")


def load_cv(cv_path: str | Path, client: genai.Client | None = None, locale: str | None = None) -> CvDocument:
    """Load a CV from disk.

    ``.json`` files are validated directly. Other supported formats are
    extracted to text and structured by Gemini; a client is created from the
    environment when none is given.
    """
    cv_path = Path(cv_path)
    if not cv_path.exists():
        raise FileNotFoundError(f"CV file not found: {cv_path}")

    if cv_path.suffix.lower() == ".json":
        try:
            return CvDocument.model_validate_json(cv_path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise ValueError(f"Invalid CV document {cv_path}: {exc}") from exc

    text = extract_text(cv_path)
    return parse_cv_text(client or create_client(), text, locale)


_TRANSLATED_TITLES = {
    "pt": '"Resumo Profissional", "Formação Acadêmica", "Experiência Profissional", "Projetos Principais", '
    '"Habilidades Técnicas", "Idiomas"',
    "en": '"Professional Summary", "Education", "Professional Experience", "Key Projects", "Technical Skills", '
    '"Languages"',
}


def build_translate_prompt(target_locale: str) -> str:
    """Build the Gemini prompt that translates a CV document into *target_locale*."""
    loc = normalize_locale(target_locale)
    language = "Brazilian Portuguese" if loc == "pt" else "English"
    schema = json.dumps(CvDocument.model_json_schema(by_alias=True))

    return f"""Translate CV to {language}. Set locale="{loc}".
Section titles: {_TRANSLATED_TITLES[loc]}
Translate: titles, summary, highlights, job titles, degrees, skill names, language levels.
Keep: proper names, companies, URLs, emails, phones, tech names (React, Python, etc).
Keep same JSON structure. Professional tone.

You must respond ONLY with valid JSON matching this schema:
{schema}"""


def translate_cv(client: genai.Client, cv: CvDocument, target_locale: str) -> CvDocument:
    """
    Translate a CV document into English or Portuguese with Gemini.

    Args:
        client: Gemini client instance.
        cv: The CV to translate. It is not modified.
        target_locale: "pt" or "en"; anything else is treated as "en".

    Returns:
        A new CV document with ``locale`` set to the target and the source's
        ``templateId`` kept. ``customLatex`` is dropped since it no longer
        matches the translated content.

    Raises:
        ValueError: If the response is not a valid CV document.
    """
    loc = normalize_locale(target_locale)
    payload = json.dumps(strip_for_ai(cv), ensure_ascii=False)
    prompt = f"{build_translate_prompt(loc)}\n\nCV Data to translate:\n{payload}"

    content = call_gemini(client, prompt, temperature=0.0, max_tokens=8192, json_output=True)
    try:
        data = parse_json(content)
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object for the CV")
        translated = CvDocument.model_validate(data)
    except (ValueError, ValidationError) as exc:
        raise ValueError(f"Invalid translation response from Gemini: {exc}") from exc

    return translated.model_copy(update={"locale": loc, "template_id": cv.template_id, "custom_latex": None})
