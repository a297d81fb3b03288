"""Unit tests for cost-center allocation"""

import pytest
from decimal import Decimal
from zenith_gateway.domain.allocation import (
    compute_amounts,
    equal_split,
    legacy_allocation,
    recalculate_allocations,
    validate_allocations,
)
from zenith_gateway.domain.exceptions import ValidationError
from zenith_gateway.domain.models import AllocationEntry


def entries(*pairs):
    return [AllocationEntry(cost_center_id=cc, percentage=Decimal(pct)) for cc, pct in pairs]


def test_validate_accepts_full_allocation():
    """Test valid set passes silently"""
    validate_allocations(entries(("A", "60"), ("B", "40")))


def test_validate_empty_set():
    """Test at least one cost center is required"""
    with pytest.raises(ValidationError) as exc:
        validate_allocations([])
    assert exc.value.messages == ["Pelo menos um centro de custo é obrigatório"]


def test_validate_duplicate_cost_center():
    """Test same cost center twice is rejected even when the sum is 100"""
    with pytest.raises(ValidationError) as exc:
        validate_allocations(entries(("A", "50"), ("A", "50")))
    assert exc.value.messages == ["Centros de custo duplicados não são permitidos"]


def test_validate_collects_every_violation():
    """Test all violations are reported together"""
    with pytest.raises(ValidationError) as exc:
        validate_allocations(entries(("", "0"), ("B", "150")))

    assert exc.value.messages == [
        "Alocação 1: O percentual deve estar entre 0.01 e 100",
        "Alocação 1: Centro de custo é obrigatório",
        "Alocação 2: O percentual deve estar entre 0.01 e 100",
        "A soma dos percentuais deve ser 100%. Atual: 150.00%",
    ]


def test_validate_sum_within_tolerance():
    """Test 99.99% is accepted (±0.01 tolerance)"""
    validate_allocations(entries(("A", "33.33"), ("B", "33.33"), ("C", "33.33")))


def test_validate_sum_outside_tolerance():
    """Test 99.98% is rejected"""
    with pytest.raises(ValidationError) as exc:
        validate_allocations(entries(("A", "50"), ("B", "49.98")))
    assert exc.value.messages == ["A soma dos percentuais deve ser 100%. Atual: 99.98%"]


def test_compute_amounts_exact_split():
    """Test amounts without rounding residual"""
    result = compute_amounts(entries(("A", "60"), ("B", "40")), Decimal("1000.00"))

    assert [r.amount for r in result] == [Decimal("600.00"), Decimal("400.00")]
    assert [r.cost_center_id for r in result] == ["A", "B"]


def test_compute_amounts_residual_goes_to_first_on_tie():
    """Test R$ 10.00 over 33.33/33.33/33.34: all round to 3.33, first absorbs +0.01"""
    result = compute_amounts(entries(("A", "33.33"), ("B", "33.33"), ("C", "33.34")), "10.00")

    assert [r.amount for r in result] == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]
    assert sum(r.amount for r in result) == Decimal("10.00")


def test_compute_amounts_negative_residual_goes_to_largest():
    """Test R$ 0.10 over 50/25/25: 0.05 + 0.03 + 0.03 overshoots, largest gives back 0.01"""
    result = compute_amounts(entries(("A", "50"), ("B", "25"), ("C", "25")), "0.10")

    assert [r.amount for r in result] == [Decimal("0.04"), Decimal("0.03"), Decimal("0.03")]


def test_compute_amounts_residual_from_percentage_tolerance():
    """Test 99.99% total still allocates the full amount"""
    result = compute_amounts(entries(("A", "33.33"), ("B", "33.33"), ("C", "33.33")), "300.00")

    assert result[0].amount == Decimal("100.02")
    assert sum(r.amount for r in result) == Decimal("300.00")


def test_compute_amounts_zero_total():
    result = compute_amounts(entries(("A", "70"), ("B", "30")), "0")
    assert [r.amount for r in result] == [Decimal("0.00"), Decimal("0.00")]


def test_compute_amounts_empty():
    assert compute_amounts([], "100.00") == []


@pytest.mark.parametrize("total", ["0.01", "1.00", "99.99", "1234.56", "1000000.00", "0.07"])
@pytest.mark.parametrize("count", [1, 2, 3, 6, 7, 9, 12])
def test_compute_amounts_always_sums_to_total(total, count):
    """Test allocated amounts add up to the total to the cent"""
    split = equal_split([f"CC{i}" for i in range(count)])

    result = compute_amounts(split, total)

    assert sum(r.amount for r in result) == Decimal(total)


def test_compute_amounts_is_idempotent():
    """Test identical inputs give identical outputs"""
    allocation = entries(("A", "33.33"), ("B", "33.33"), ("C", "33.34"))

    assert compute_amounts(allocation, "10.00") == compute_amounts(allocation, "10.00")


def test_equal_split_three():
    """Test last entry absorbs the rounding difference"""
    result = equal_split(["A", "B", "C"])

    assert [e.percentage for e in result] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert [e.cost_center_id for e in result] == ["A", "B", "C"]


def test_equal_split_six():
    """Test 16.67 x 6 overshoots, last entry drops to 16.65"""
    result = equal_split(["A", "B", "C", "D", "E", "F"])

    assert result[0].percentage == Decimal("16.67")
    assert result[-1].percentage == Decimal("16.65")


@pytest.mark.parametrize("count", range(1, 26))
def test_equal_split_sums_to_hundred(count):
    result = equal_split([f"CC{i}" for i in range(count)])

    assert len(result) == count
    assert sum(e.percentage for e in result) == Decimal("100.00")


def test_equal_split_empty():
    assert equal_split([]) == []


def test_recalculate_allocations_after_total_change():
    """Test stored percentages re-applied to a new total"""
    stored = entries(("A", "70.00"), ("B", "30.00"))

    result = recalculate_allocations(stored, "250.00")

    assert [r.amount for r in result] == [Decimal("175.00"), Decimal("75.00")]


def test_legacy_allocation():
    """Test single cost center converts to a 100% allocation"""
    entry = legacy_allocation("CC-1")

    assert entry.cost_center_id == "CC-1"
    assert entry.percentage == Decimal("100.00")
    validate_allocations([entry])


def test_validate_sub_cent_percentage_rejected():
    """Test 0.004% rounds to 0.00% and fails the range check"""
    with pytest.raises(ValidationError) as exc:
        validate_allocations(entries(("A", "0.004"), ("B", "99.996")))
    assert exc.value.messages == ["Alocação 1: O percentual deve estar entre 0.01 e 100"]


def test_compute_amounts_uses_stored_percentage_scale():
    """Test amounts follow the 2-digit percentage that gets stored"""
    result = compute_amounts(entries(("A", "33.335"), ("B", "66.665")), "1000.00")

    assert [r.percentage for r in result] == [Decimal("33.34"), Decimal("66.67")]
    assert [r.amount for r in result] == [Decimal("333.40"), Decimal("666.60")]
