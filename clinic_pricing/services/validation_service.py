"""
validation_service.py — Monotonic Discount Rule 검증.

규칙:
  - 회차↑ → 회당가 반드시 ↓
  - 샷수↑ → 샷당가 반드시 ↓
  - 혼합형: 총샷수(샷×회) 기준, 총량↑ → 샷당가↓

경쟁사 행, 가격/단가/총량이 0인 행은 검증 대상이 아님.
위반 행은 입력 목록 내 위치로 식별 (라벨이 같은 행이 있어도 오표시 없음).
"""
import logging
from typing import Iterable

from clinic_pricing.models.pricing_model import Row, RowType, ValidationResult
from clinic_pricing.utils.amount_utils import format_number

logger = logging.getLogger(__name__)

_CHECKABLE = (RowType.TRIAL, RowType.EVENT, RowType.OPTION)


def _is_checkable(row: Row) -> bool:
    return (
        row.row_type in _CHECKABLE
        and row.price > 0
        and row.unit_price > 0
        and row.total_quantity > 0
    )


def _violation_message(curr: Row, prev: Row, item_name: str) -> str:
    prefix = f"[{item_name}] " if item_name else ""
    return (
        f'{prefix}"{curr.label}" 단가({format_number(curr.unit_price)}원)가 '
        f'"{prev.label}" 단가({format_number(prev.unit_price)}원)보다 '
        f"높거나 같습니다. 수량↑ → 단가↓ 규칙 위반!"
    )


def validate_monotonic(rows: list[Row], item_name: str = "") -> ValidationResult:
    """
    총량 오름차순(같으면 원래 순서)으로 정렬 후 차례로 비교.
    각 행은 자기보다 총량이 '엄격히 작은' 행들 중 최저 단가 행과 비교하며,
    단가가 같거나 높으면 위반. 총량이 같은 행끼리는 비교하지 않음.
    (정상적으로 내려가는 가격표에서는 바로 앞 행과의 비교와 같음)

    원본 rows와 Row 객체는 변경하지 않고 새 목록 반환.
    """
    eligible = [(i, r) for i, r in enumerate(rows) if _is_checkable(r)]
    eligible.sort(key=lambda pair: pair[1].total_quantity)  # stable

    violations: list[str] = []
    violating: set[int] = set()

    cheapest: Row | None = None        # 이전 총량 그룹들 중 최저 단가 행
    group_qty: int | None = None
    group_best: Row | None = None      # 현재 총량 그룹의 최저 단가 행

    for idx, row in eligible:
        if row.total_quantity != group_qty:
            if group_best is not None and (cheapest is None or group_best.unit_price < cheapest.unit_price):
                cheapest = group_best
            group_qty = row.total_quantity
            group_best = None

        if cheapest is not None and row.unit_price >= cheapest.unit_price:
            violating.add(idx)
            violations.append(_violation_message(row, cheapest, item_name))

        if group_best is None or row.unit_price < group_best.unit_price:
            group_best = row

    if violations:
        logger.debug("Monotonic 위반 %d건 (%s)", len(violations), item_name or "-")

    checked = [r.model_copy(update={"violation": i in violating}) for i, r in enumerate(rows)]
    return ValidationResult(rows=checked, violations=violations)


def validate_all(items: Iterable[tuple[str, list[Row]]]) -> list[str]:
    """전체 시술의 위반 메시지를 선언 순서대로 모아서 반환."""
    all_violations: list[str] = []
    for name, rows in items:
        all_violations.extend(validate_monotonic(rows, name).violations)
    return all_violations
