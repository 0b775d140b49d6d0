from .llm_provider import BaseLLMProvider, LLMResponse, get_llm_provider
from .planner import PlanResult, PlannerError, plan_schedule

__all__ = [
    "BaseLLMProvider",
    "LLMResponse",
    "get_llm_provider",
    "PlanResult",
    "PlannerError",
    "plan_schedule",
]
