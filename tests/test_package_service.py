"""패키지 요약 / 할인 계산 테스트.

테스트 대상:
  - compute_package_summary(): 정가 합계, 절약 금액/비율, 시술별 배분
  - calc_package_price_from_discount / apply_target_discount
  - duplicate_package
"""
import pytest

from clinic_pricing.models.package_model import Package, PackageItem, PriceSource
from clinic_pricing.services.package_service import (
    apply_target_discount,
    calc_package_price_from_discount,
    compute_package_summary,
    duplicate_package,
)
from clinic_pricing.utils.id_provider import SequentialIdFactory


def _pkg(price, *items, id_="pkg-1", name="패키지"):
    return Package(
        id=id_,
        name=name,
        package_price=price,
        items=[
            PackageItem(procedure_name=n, quantity=q, individual_price=p, price_source=PriceSource.TRIAL)
            for n, q, p in items
        ],
    )


# ── compute_package_summary ──

def test_summary_basic():
    summary = compute_package_summary(_pkg(150000, ("A", 1, 100000), ("B", 2, 50000)))

    assert summary.total_regular_price == 200000
    assert summary.package_price == 150000
    assert summary.savings_amount == 50000
    assert summary.savings_percent == 25.0
    assert [(b.name, b.quantity, b.original_price, b.allocated_price, b.savings_percent)
            for b in summary.per_item_breakdown] == [
        ("A", 1, 100000, 75000, 25.0),
        ("B", 2, 100000, 75000, 25.0),
    ]


def test_summary_without_items():
    summary = compute_package_summary(_pkg(99000))

    assert summary.total_regular_price == 0
    assert summary.package_price == 99000
    assert summary.savings_amount == 0
    assert summary.savings_percent == 0
    assert summary.per_item_breakdown == []


def test_summary_none_package():
    summary = compute_package_summary(None)
    assert summary.package_price == 0
    assert summary.per_item_breakdown == []


def test_summary_with_zero_regular_price():
    """정가가 모두 0이면 비율 계산 없이 0."""
    summary = compute_package_summary(_pkg(50000, ("A", 1, 0), ("B", 1, 0)))

    assert summary.total_regular_price == 0
    assert summary.savings_amount == -50000
    assert summary.savings_percent == 0
    assert all(b.allocated_price == 0 and b.savings_percent == 0 for b in summary.per_item_breakdown)


def test_summary_package_more_expensive_than_regular():
    summary = compute_package_summary(_pkg(120000, ("A", 1, 100000)))

    assert summary.savings_amount == -20000
    assert summary.savings_percent == -20.0


def test_allocation_rounding_drift_is_bounded():
    """배분 합계는 패키지가와 시술 수 이내로만 차이 남 (오차 보정 없음)."""
    pkg = _pkg(10000, ("A", 1, 10000), ("B", 1, 10000), ("C", 1, 10000))
    summary = compute_package_summary(pkg)

    allocated = [b.allocated_price for b in summary.per_item_breakdown]
    assert allocated == [3333, 3333, 3333]
    assert abs(sum(allocated) - pkg.package_price) <= len(pkg.items)


# ── 목표 할인율 ──

def test_price_from_discount():
    pkg = _pkg(0, ("A", 1, 100000), ("B", 2, 50000))
    assert calc_package_price_from_discount(pkg, 30) == 140000
    assert calc_package_price_from_discount(_pkg(0, ("A", 1, 1234000)), 10, 10000) == 1110000
    assert calc_package_price_from_discount(_pkg(0, ("A", 1, 0)), 30) == 0


def test_apply_target_discount():
    packages = [
        _pkg(150000, ("A", 1, 100000), ("B", 2, 50000), id_="pkg-1"),
        _pkg(99000, ("C", 1, 0), id_="pkg-2"),
        _pkg(80000, ("D", 1, 100000), id_="pkg-3"),
    ]
    result = apply_target_discount(packages, 20)

    assert [p.package_price for p in result.packages] == [160000, 99000, 80000]
    assert result.changed_count == 1
    assert result.total_count == 3
    assert result.total_before == 230000
    assert result.total_after == 240000
    assert result.diff == -10000
    # 원본 불변
    assert packages[0].package_price == 150000


@pytest.mark.parametrize("discount", [0, -5, 100, 150])
def test_apply_target_discount_out_of_range(discount):
    with pytest.raises(ValueError, match="1~99%"):
        apply_target_discount([_pkg(10000, ("A", 1, 10000))], discount)


# ── 복제 ──

def test_duplicate_package():
    original = _pkg(150000, ("A", 1, 100000))
    copy = duplicate_package(original, SequentialIdFactory(prefix="copy"))

    assert copy.id == "copy-1"
    assert copy.name == "패키지 (복사)"
    assert copy.items == original.items
    assert copy.items[0] is not original.items[0]
