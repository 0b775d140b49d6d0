"""
AI-assisted planner.
Wraps the deterministic scheduler with an optional LLM review step, and falls
back to the plain scheduler result when the LLM call fails.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from careshift.core.config import settings
from careshift.services.scheduling import Issue, IssueType, ScheduleResult, run_schedule

from .llm_provider import BaseLLMProvider, get_llm_provider
from .prompts import build_system_prompt, build_user_prompt


logger = logging.getLogger(__name__)


class PlannerError(Exception):
    pass


@dataclass
class PlanResult:
    result: ScheduleResult
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {**self.result.to_dict(), "metadata": self.metadata}


def _review_with_llm(provider: BaseLLMProvider, request: dict, result: ScheduleResult) -> dict:
    response = provider.generate_json(
        build_system_prompt(),
        build_user_prompt(request, result.to_dict()),
    )
    if not response.success or response.parsed_json is None:
        raise PlannerError(response.error or "LLM returned no content")
    if not isinstance(response.parsed_json, dict):
        raise PlannerError("LLM returned a non-object JSON payload")

    summary = response.parsed_json.get("summary")
    return {
        "mode": "ai",
        "model": response.model_used,
        "response_id": response.response_id,
        "summary": summary if isinstance(summary, str) else None,
    }


def plan_schedule(
    shift_template,
    employees,
    availability,
    existing=None,
    *,
    use_ai: Optional[bool] = None,
    provider: Optional[BaseLLMProvider] = None,
) -> PlanResult:
    """
    Main entry point for planning.

    Flow:
    1. Run the deterministic scheduler
    2. If AI is disabled, return it as-is (mode "local")
    3. Otherwise ask the LLM to review it (mode "ai")
    4. On any LLM failure, return the local result with an ai_planner_error issue (mode "fallback")

    Assignments always come from the scheduler; the LLM only adds a summary.
    """
    use_ai = settings.USE_AI if use_ai is None else use_ai
    result = run_schedule(shift_template, employees, availability, existing)

    if not use_ai:
        return PlanResult(result=result, metadata={"mode": "local"})

    request = {
        "shift_template": shift_template,
        "employees": employees,
        "availability": availability,
        "existing": existing,
    }
    try:
        metadata = _review_with_llm(provider or get_llm_provider(), request, result)
    except (PlannerError, ValueError) as e:
        logger.warning(f"AI planner failed, using local schedule: {e}")
        result.issues.append(Issue(
            shift_id=None,
            employee_id=None,
            reason=f"AI planner failed: {e}",
            type=IssueType.AI_PLANNER_ERROR.value,
        ))
        return PlanResult(result=result, metadata={"mode": "fallback", "error": str(e)})

    return PlanResult(result=result, metadata=metadata)
