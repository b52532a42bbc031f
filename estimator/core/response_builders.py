from estimator.core.enums import QuoteStatus
from estimator.schemas.catalog import (
    CatalogEntryOut,
    CoefficientAxisOut,
    FlatFeeOut,
    PriceRangeOut,
    SchemeOut,
    SurchargeAxisOut,
)
from estimator.schemas.quote import QuoteResponse, StepOut
from estimator.services.breakdown import format_breakdown, format_step
from estimator.services.catalog import CatalogEntry
from estimator.services.pricing import Incomplete, QuoteOutcome, Step
from estimator.services.rules import PriceRange, PricingScheme


def build_range_response(rng: PriceRange) -> PriceRangeOut:
    return PriceRangeOut(min=float(rng.min), max=float(rng.max))


def build_step_response(step: Step) -> StepOut:
    return StepOut(
        kind=step.kind,
        axis=step.axis,
        label=step.label,
        key=step.key,
        multiplier=float(step.multiplier) if step.multiplier is not None else None,
        min=float(step.amount.min) if step.amount is not None else None,
        max=float(step.amount.max) if step.amount is not None else None,
        text=format_step(step),
    )


def build_quote_response(outcome: QuoteOutcome) -> QuoteResponse:
    if isinstance(outcome, Incomplete):
        return QuoteResponse(status=QuoteStatus.INCOMPLETE, missing=list(outcome.missing))
    return QuoteResponse(
        status=QuoteStatus.COMPUTED,
        min=outcome.min,
        max=outcome.max,
        breakdown=[build_step_response(step) for step in outcome.steps],
        summary=format_breakdown(outcome.steps),
    )


def build_entry_response(entry: CatalogEntry) -> CatalogEntryOut:
    return CatalogEntryOut(
        id=entry.id,
        name=entry.name,
        category=entry.category,
        base_price=build_range_response(entry.base_price),
        description=entry.description,
        included=list(entry.included),
    )


def build_entry_response_list(entries) -> list:
    return [build_entry_response(entry) for entry in entries]


def build_scheme_response(scheme: PricingScheme) -> SchemeOut:
    return SchemeOut(
        name=scheme.name,
        coefficient_axes=[
            CoefficientAxisOut(
                name=axis.name,
                label=axis.label,
                multipliers={key: float(value) for key, value in axis.table.items()},
                surcharges={key: build_range_response(rng) for key, rng in axis.linked_surcharges.items()},
            )
            for axis in scheme.coefficient_axes
        ],
        surcharge_axes=[
            SurchargeAxisOut(
                name=axis.name,
                label=axis.label,
                surcharges={key: build_range_response(rng) for key, rng in axis.table.items()},
            )
            for axis in scheme.surcharge_axes
        ],
        fees=[
            FlatFeeOut(name=fee.name, label=fee.label, amount=build_range_response(fee.amount))
            for fee in scheme.fees
        ],
    )
