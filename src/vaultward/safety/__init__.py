"""
VaultWard Safety Reflection

Destructive tool calls are checked by a second LLM before they run:

    ReflectionEvaluator.evaluate(request) → ReflectionVerdict

Failures of the reflection model are fail-open (approved with a warning).
"""

from vaultward.safety.evaluator import ReflectionEvaluator, fail_open_verdict, strip_code_fences
from vaultward.safety.prompts import REFLECTION_SYSTEM_PROMPT, ReflectionPromptBuilder

__all__ = [
    "REFLECTION_SYSTEM_PROMPT",
    "ReflectionEvaluator",
    "ReflectionPromptBuilder",
    "fail_open_verdict",
    "strip_code_fences",
]
