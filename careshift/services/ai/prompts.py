"""
Prompt construction for the AI planner.
"""

import json


def build_system_prompt() -> str:
    return """You are an AI assistant for CareShift, a care facility shift scheduling system.
A deterministic scheduler has already assigned staff to shifts while enforcing role coverage,
availability, weekly hour caps, and overlap rules. Your job is to review the plan and summarise it
for the scheduling manager.

IMPORTANT RULES:
- Respond ONLY with valid JSON. No markdown, no explanation.
- Never propose different assignments; describe the plan as given.
- Call out unfilled shifts and the reasons recorded in the issues list.
- Respond with: {"summary": "short plain-language summary"}"""


def build_user_prompt(request: dict, result: dict) -> str:
    """Build user prompt with the scheduling input and the computed plan."""

    input_counts = {name: len(records or []) for name, records in request.items()}
    request_str = json.dumps(input_counts, indent=2)
    result_str = json.dumps(result, indent=2, default=str)

    return f"""Scheduling input (record counts):
{request_str}

Computed plan:
{result_str}

Summarise this plan as JSON."""
