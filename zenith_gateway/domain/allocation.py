"""Cost-center allocation (rateio) - percentage validation and amount distribution"""

from decimal import Decimal
from typing import Iterable, List, Sequence
from zenith_gateway.config import settings
from zenith_gateway.domain.models import AllocationEntry, AllocationAmount
from zenith_gateway.domain.exceptions import ValidationError, RoundingInvariantViolation
from zenith_gateway.utils.money import HUNDRED, quantize_money, quantize_percentage, to_decimal


def validate_allocations(
    entries: Sequence[AllocationEntry],
    tolerance: Decimal | None = None,
) -> None:
    """
    Validate a cost-center allocation set.

    Rules:
    - At least one entry
    - Each percentage in (0, 100]
    - Each entry names a cost center
    - No cost center appears twice
    - Percentages sum to 100 within tolerance (default ±0.01)

    Percentages are checked at the 2-digit scale they are stored with.

    Raises:
        ValidationError: with every violation found, in input order
    """
    if tolerance is None:
        tolerance = settings.percentage_tolerance

    if not entries:
        raise ValidationError(["Pelo menos um centro de custo é obrigatório"])

    errors: List[str] = []
    for index, entry in enumerate(entries, start=1):
        percentage = quantize_percentage(entry.percentage)
        if percentage <= 0 or percentage > HUNDRED:
            errors.append(f"Alocação {index}: O percentual deve estar entre 0.01 e 100")
        if not entry.cost_center_id:
            errors.append(f"Alocação {index}: Centro de custo é obrigatório")

    cost_center_ids = [e.cost_center_id for e in entries if e.cost_center_id]
    if len(set(cost_center_ids)) != len(cost_center_ids):
        errors.append("Centros de custo duplicados não são permitidos")

    total = sum((quantize_percentage(e.percentage) for e in entries), Decimal(0))
    if abs(total - HUNDRED) > tolerance:
        errors.append(f"A soma dos percentuais deve ser 100%. Atual: {total:.2f}%")

    if errors:
        raise ValidationError(errors)


def compute_amounts(
    entries: Sequence[AllocationEntry],
    total_amount: Decimal | int | str,
) -> List[AllocationAmount]:
    """
    Split total_amount across entries by percentage.

    Each amount is total * percentage / 100 rounded to cents, with the
    percentage taken at its stored 2-digit scale. Whatever the
    rounding leaves over (total - sum of amounts) goes to the entry with the
    largest amount; on a tie the first one in input order takes it.

    Example:
        R$ 100.00 over 33.33 / 33.33 / 33.34 → 33.33, 33.33, 33.34
        R$ 10.00 over 33.33 / 33.33 / 33.34
        → 3.33, 3.33, 3.33, residual 0.01 to the first → 3.34, 3.33, 3.33

    Raises:
        RoundingInvariantViolation: if the adjusted amounts still miss the total
    """
    if not entries:
        return []

    total = quantize_money(total_amount)

    results = []
    for entry in entries:
        percentage = quantize_percentage(entry.percentage)
        results.append(
            AllocationAmount(
                cost_center_id=entry.cost_center_id,
                percentage=percentage,
                amount=quantize_money(total * percentage / HUNDRED),
            )
        )

    residual = total - sum((r.amount for r in results), Decimal(0))
    if residual != 0:
        # max() keeps the first of equal keys
        largest = max(results, key=lambda r: r.amount)
        largest.amount = quantize_money(largest.amount + residual)

    allocated = sum((r.amount for r in results), Decimal(0))
    if allocated != total:
        raise RoundingInvariantViolation(
            f"Allocated {allocated} does not match total {total} after residual assignment"
        )

    return results


def equal_split(cost_center_ids: Sequence[str]) -> List[AllocationEntry]:
    """
    Distribute 100% evenly across cost centers.

    Each gets round(100 / N, 2); the last one absorbs the rounding difference.

    Example:
        3 centers → 33.33, 33.33, 33.34
    """
    if not cost_center_ids:
        return []

    share = quantize_percentage(HUNDRED / len(cost_center_ids))
    percentages = [share] * len(cost_center_ids)

    difference = HUNDRED - sum(percentages, Decimal(0))
    if difference != 0:
        percentages[-1] = quantize_percentage(percentages[-1] + difference)

    return [
        AllocationEntry(cost_center_id=cc_id, percentage=pct)
        for cc_id, pct in zip(cost_center_ids, percentages)
    ]


def recalculate_allocations(
    existing: Iterable[AllocationEntry],
    new_total_amount: Decimal | int | str,
) -> List[AllocationAmount]:
    """Re-derive amounts from stored percentages after a transaction total changes"""
    entries = [
        AllocationEntry(cost_center_id=e.cost_center_id, percentage=to_decimal(e.percentage))
        for e in existing
    ]
    return compute_amounts(entries, new_total_amount)


def legacy_allocation(cost_center_id: str) -> AllocationEntry:
    """Convert a single cost-center link into a 100% allocation"""
    return AllocationEntry(cost_center_id=cost_center_id, percentage=Decimal("100.00"))
