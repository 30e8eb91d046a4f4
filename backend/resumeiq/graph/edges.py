"""Routing decisions. Pure functions of state, no side effects."""
from enum import Enum

from .retry import DEFAULT_MAX_RETRIES, can_retry
from .stages import GENERATION_STAGE
from .state import current_validation

HALT_CONFIDENCE = 0.9
WARN_CONFIDENCE = 0.7
MIN_QUALITY_SCORE = 30
MAX_TOLERATED_WARNINGS = 2


class FakeJdDecision(str, Enum):
    CONTINUE = "continue"
    WARN = "warn"
    HALT = "halt"


class ValidationDecision(str, Enum):
    VALID = "valid"
    RETRY = "retry"
    FAIL = "fail"


def fake_jd_decision(state) -> FakeJdDecision:
    assessment = state.get("jd_quality_assessment")
    if assessment is None:
        return FakeJdDecision.CONTINUE

    if assessment.is_fake and assessment.fake_confidence > HALT_CONFIDENCE:
        return FakeJdDecision.HALT
    if assessment.is_fake and assessment.fake_confidence > WARN_CONFIDENCE:
        return FakeJdDecision.WARN
    if assessment.quality_score < MIN_QUALITY_SCORE:
        return FakeJdDecision.WARN
    return FakeJdDecision.CONTINUE


def validation_decision(state, max_retries: int = DEFAULT_MAX_RETRIES) -> ValidationDecision:
    result = current_validation(state)
    if result is None or result.is_valid:
        return ValidationDecision.VALID

    budget_left = can_retry(state, GENERATION_STAGE, max_retries)

    if result.issues_with_severity("critical") or not result.compliance_check.passed:
        return ValidationDecision.RETRY if budget_left else ValidationDecision.FAIL

    if len(result.issues_with_severity("warning")) > MAX_TOLERATED_WARNINGS and budget_left:
        return ValidationDecision.RETRY

    # warnings alone never block completion
    return ValidationDecision.VALID
