"""Render a quote's step trace as a single audit line"""
from decimal import Decimal

from estimator.core.enums import StepKind
from estimator.services.pricing import Incomplete, QuoteOutcome, Step

SEPARATOR = " | "


def format_amount(value: Decimal) -> str:
    if value == value.to_integral_value():
        return f"${int(value)}"
    return f"${value:.2f}"


def format_range(low: Decimal, high: Decimal) -> str:
    return f"{format_amount(low)}-{format_amount(high)}"


def format_step(step: Step) -> str:
    if step.kind == StepKind.BASE:
        return f"Base: {format_range(step.amount.min, step.amount.max)}"
    if step.kind == StepKind.MULTIPLIER:
        return f"{step.label} ({step.key}): ×{step.multiplier:.2f}"
    if step.kind == StepKind.SURCHARGE and not step.linked:
        return f"{step.label} ({step.key}): +{format_range(step.amount.min, step.amount.max)}"
    return f"{step.label}: +{format_range(step.amount.min, step.amount.max)}"


def format_breakdown(steps) -> str:
    return SEPARATOR.join(format_step(step) for step in steps)


def format_result(outcome: QuoteOutcome) -> str:
    if isinstance(outcome, Incomplete):
        return f"Incomplete: missing {', '.join(outcome.missing)}"
    return format_breakdown(outcome.steps)
