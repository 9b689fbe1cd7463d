"""Optional LLM grader - asks Gemini for a categorical writing-quality grade.

The grade is advisory. Every failure (timeout, API error, malformed or
off-schema response) is logged and reported as ``None`` so the rule-based
score always stands on its own.
"""

import json
import logging
import os
import threading

from google import genai
from google.genai.errors import ClientError, ServerError
from pydantic import ValidationError

from .llm import call_gemini, parse_json
from .models import CvDocument, LlmGrade

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = float(os.getenv("CVSCORE_LLM_TIMEOUT", "30"))

GRADER_SYSTEM_PROMPT = """You are an expert resume reviewer. Evaluate this CV's writing quality.
Respond ONLY with JSON:
{
  "summaryGrade": "A"|"B"|"C"|"D"|"F",
  "experienceGrade": "A"|"B"|"C"|"D"|"F",
  "overallImpression": "A"|"B"|"C"|"D"|"F",
  "topSuggestion": "<single most impactful improvement>"
}
Grades: A=excellent, B=good, C=fair, D=needs work, F=major issues"""


def strip_for_ai(cv: CvDocument) -> dict:
    """Return the CV payload sent to the model, without layout-only fields."""
    return cv.model_dump(by_alias=True, exclude={"custom_latex", "template_id"})


def grade_cv(client: genai.Client, cv: CvDocument) -> LlmGrade:
    """Grade *cv* with a single Gemini call.

    Raises the underlying API, parsing or validation error on failure; use
    :func:`fetch_llm_grade` for the fail-open variant.
    """
    payload = json.dumps(strip_for_ai(cv), ensure_ascii=False)
    prompt = f"{GRADER_SYSTEM_PROMPT}\n\nCV Data:\n{payload}"

    content = call_gemini(client, prompt, temperature=0.0, max_tokens=1024, max_retries=1, json_output=True)
    data = parse_json(content)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return LlmGrade.model_validate(data)


def _run_with_deadline(fn, timeout: float, *args):
    """Run ``fn(*args)`` on a daemon thread and wait at most *timeout* seconds.

    Raises TimeoutError when the call overruns. The worker is a daemon, so an
    overrunning call never keeps the interpreter alive.
    """
    outcome: dict = {}

    def _target():
        try:
            outcome["result"] = fn(*args)
        except Exception as exc:  # noqa: BLE001
            outcome["error"] = exc

    worker = threading.Thread(target=_target, name="cvscore-grader", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise TimeoutError(f"call did not finish within {timeout}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


def fetch_llm_grade(
    client: genai.Client,
    cv: CvDocument,
    timeout: float = TIMEOUT_SECONDS,
) -> LlmGrade | None:
    """Best-effort grade with a wall-clock *timeout*.

    Returns None when the grader is unavailable for any reason. A call that
    overruns the timeout is abandoned, not awaited.
    """
    try:
        return _run_with_deadline(grade_cv, timeout, client, cv)
    except TimeoutError:
        logger.warning("LLM grading timed out after %ss, using rule-based score only", timeout)
    except (ServerError, ClientError) as exc:
        logger.warning("LLM grading failed with API error: %s", exc)
    except ValidationError as exc:
        logger.warning("LLM grade did not match the expected schema: %s", exc.error_count())
    except ValueError as exc:
        logger.warning("LLM grading returned an unusable response: %s", exc)
    except Exception:
        logger.exception("Unexpected error during LLM grading")
    return None
