"""Quote calculator.

One pipeline prices both single services and maintenance packages:

1. start from the entry's base range
2. multiply both bounds by each coefficient axis, in declared order
3. add the summed surcharges once
4. add each selected flat fee
5. round both bounds half-up, exactly once

Intermediate values are exact decimals; nothing is rounded before step 5.
A request missing a required single-choice selection is not priced at all
and comes back as ``Incomplete``.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping, Optional, Sequence, Union

from estimator.core.enums import StepKind
from estimator.core.metrics import quotes_computed, quotes_incomplete
from estimator.services.catalog import CatalogEntry, Catalog, get_catalog
from estimator.services.rules import (
    PricingScheme,
    PriceRange,
    ZERO_RANGE,
    SERVICE_SCHEME,
    PACKAGE_SCHEME,
    resolve_coefficient,
    resolve_surcharge,
    report_unknown_key,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuoteSelections:
    coefficients: Mapping[str, Optional[str]] = field(default_factory=dict)
    surcharges: Mapping[str, Sequence[str]] = field(default_factory=dict)
    fees: Sequence[str] = ()


@dataclass(frozen=True)
class Step:
    kind: StepKind
    axis: str
    label: str
    key: Optional[str] = None
    multiplier: Optional[Decimal] = None
    amount: Optional[PriceRange] = None
    linked: bool = False


@dataclass(frozen=True)
class QuoteResult:
    min: int
    max: int
    steps: tuple[Step, ...]
    raw_min: Decimal
    raw_max: Decimal


@dataclass(frozen=True)
class Incomplete:
    missing: tuple[str, ...]


QuoteOutcome = Union[QuoteResult, Incomplete]


def round_currency(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def missing_selections(entry: Optional[CatalogEntry], selections: QuoteSelections,
                       scheme: PricingScheme, entry_label: str = "service") -> tuple[str, ...]:
    missing = [] if entry is not None else [entry_label]
    for axis in scheme.coefficient_axes:
        if not selections.coefficients.get(axis.name):
            missing.append(axis.name)
    return tuple(missing)


def _surcharge_steps(selections: QuoteSelections, scheme: PricingScheme) -> list[Step]:
    steps = []
    for axis in scheme.coefficient_axes:
        key = selections.coefficients.get(axis.name)
        if key and key in axis.linked_surcharges:
            steps.append(Step(
                kind=StepKind.SURCHARGE,
                axis=axis.name,
                label=axis.linked_labels.get(key, axis.label),
                key=key,
                amount=axis.linked_surcharges[key],
                linked=True,
            ))

    for axis in scheme.surcharge_axes:
        chosen = set()
        for key in selections.surcharges.get(axis.name) or ():
            if key not in axis.table:
                report_unknown_key(axis.name, key)
                continue
            chosen.add(key)
        # table order, so selection order never changes the trace
        for key in axis.table:
            if key in chosen:
                steps.append(Step(
                    kind=StepKind.SURCHARGE,
                    axis=axis.name,
                    label=axis.label,
                    key=key,
                    amount=resolve_surcharge(key, axis.table, axis.name),
                ))
    return steps


def compute_quote(entry: Optional[CatalogEntry], selections: QuoteSelections,
                  scheme: PricingScheme = SERVICE_SCHEME, entry_label: str = "service") -> QuoteOutcome:
    missing = missing_selections(entry, selections, scheme, entry_label)
    if missing:
        quotes_incomplete.labels(scheme=scheme.name).inc()
        logger.debug(f"{scheme.name} quote incomplete, missing: {', '.join(missing)}")
        return Incomplete(missing=missing)

    price = entry.base_price
    steps = [Step(kind=StepKind.BASE, axis="base", label="Base", key=entry.id, amount=entry.base_price)]

    for axis in scheme.coefficient_axes:
        key = selections.coefficients.get(axis.name)
        factor = resolve_coefficient(key, axis.table, axis.name)
        price = price.scale(factor)
        steps.append(Step(kind=StepKind.MULTIPLIER, axis=axis.name, label=axis.label, key=key, multiplier=factor))

    surcharge_steps = _surcharge_steps(selections, scheme)
    surcharge_total = ZERO_RANGE
    for step in surcharge_steps:
        surcharge_total = surcharge_total + step.amount
    price = price + surcharge_total
    steps.extend(surcharge_steps)

    for name in dict.fromkeys(selections.fees):
        fee = scheme.fee(name)
        if fee is None:
            report_unknown_key(f"{scheme.name}.fees", name)
            continue
        price = price + fee.amount
        steps.append(Step(kind=StepKind.FEE, axis=fee.name, label=fee.label, key=fee.name, amount=fee.amount))

    result = QuoteResult(
        min=round_currency(price.min),
        max=round_currency(price.max),
        steps=tuple(steps),
        raw_min=price.min,
        raw_max=price.max,
    )
    quotes_computed.labels(scheme=scheme.name).inc()
    logger.debug(f"{scheme.name} quote for {entry.id}: ${result.min}-${result.max}")
    return result


def quote_service(service_id: Optional[str], selections: QuoteSelections,
                  catalog: Optional[Catalog] = None) -> QuoteOutcome:
    catalog = catalog or get_catalog()
    return compute_quote(catalog.get_service(service_id), selections, SERVICE_SCHEME, "service")


def quote_package(package_id: Optional[str], selections: QuoteSelections,
                  catalog: Optional[Catalog] = None) -> QuoteOutcome:
    catalog = catalog or get_catalog()
    return compute_quote(catalog.get_package(package_id), selections, PACKAGE_SCHEME, "package")
