"""
pricing_service.py — 시술 가격 계산 (단가 / 할인율 / 경쟁사 대비 우위).

시술 유형:
  session — 회차 기반 (1/3/5/10회)
  shot    — 샷수 기반 (100/300/600샷)
  mixed   — 혼합형 (N샷 × M회)

핵심 공식:
  회당가 = 가격 ÷ 회차
  샷당가 = 가격 ÷ 총샷수
  할인율(%) = (1 - 옵션단가 ÷ 기준단가) × 100
"""
import logging

from clinic_pricing.config import settings
from clinic_pricing.models.pricing_model import (
    ItemResult,
    PricingItem,
    ProcedureType,
    Row,
    RowType,
)
from clinic_pricing.services.validation_service import validate_monotonic
from clinic_pricing.utils.amount_utils import round_half_up

logger = logging.getLogger(__name__)

_SHOT_TYPES = (ProcedureType.SHOT, ProcedureType.MIXED)


def round_price(value: float, unit: int = 1000) -> int:
    """
    금액을 unit 단위로 반올림 (0.5는 올림).
    unit ≤ 0 이면 1원 단위 반올림.
    """
    if not unit or unit <= 0:
        return int(round_half_up(value))
    return int(round_half_up(value / unit)) * unit


def resolve_round_unit(value: int | None) -> int:
    """허용된 반올림 단위(100/1000/10000)가 아니면 기본값."""
    if value in settings.ALLOWED_ROUND_UNITS:
        return value
    return settings.ROUND_UNIT


def unit_round_unit(type_: ProcedureType, round_unit: int) -> int:
    """
    단가 반올림 단위.
    회당가는 round_unit 그대로, 샷당가는 round_unit / SHOT_ROUND_DIVISOR (최소 1원).
    예) round_unit=1000 → 회당가 1,000원 단위 / 샷당가 10원 단위
    """
    if round_unit <= 0 or type_ not in _SHOT_TYPES:
        return round_unit
    return max(1, round_unit // settings.SHOT_ROUND_DIVISOR)


def calc_discount_rate(base_unit_price: float | None, option_unit_price: float) -> float | None:
    """
    할인율 (소수점 1자리). 양수 = 기준보다 저렴, 음수 = 비쌈.
    기준 단가가 0 이하이면 None (계산 불가).
    """
    if not base_unit_price or base_unit_price <= 0:
        return None
    return round_half_up((1 - option_unit_price / base_unit_price) * 100, 1)


def calc_competitor_advantage(competitor_unit_price: float | None, our_unit_price: float) -> float | None:
    """경쟁사 대비 가격 우위(%) = (경쟁사단가 - 우리단가) ÷ 경쟁사단가 × 100"""
    if not competitor_unit_price or competitor_unit_price <= 0:
        return None
    rate = (competitor_unit_price - our_unit_price) / competitor_unit_price * 100
    return round_half_up(rate, 1)


def calc_total_quantity(type_: ProcedureType, sessions: int | None, shots: int | None) -> int:
    """총량: 회차 / 샷수 / 샷수 × 회차"""
    if type_ == ProcedureType.SESSION:
        return sessions or 0
    if type_ == ProcedureType.SHOT:
        return shots or 0
    if type_ == ProcedureType.MIXED:
        return (shots or 0) * (sessions or 0)
    return 0


def calc_unit_price(
    type_: ProcedureType,
    price: int | None,
    sessions: int | None,
    shots: int | None,
    round_unit: int = 1000,
) -> int:
    """유형별 단가 (회당가 또는 샷당가). 가격/총량이 0 이하이면 0."""
    if not price or price <= 0:
        return 0
    total = calc_total_quantity(type_, sessions, shots)
    if total <= 0:
        return 0
    return round_price(price / total, unit_round_unit(type_, round_unit))


def get_unit_label(type_: ProcedureType | str | None) -> str:
    if type_ == ProcedureType.SESSION:
        return "회당가"
    if type_ in _SHOT_TYPES:
        return "샷당가"
    return "단가"


def _option_label(type_: ProcedureType, sessions: int, shots: int) -> str:
    if type_ == ProcedureType.SESSION:
        return f"{sessions}회"
    if type_ == ProcedureType.SHOT:
        return f"{shots}샷"
    if type_ == ProcedureType.MIXED:
        return f"{shots}샷 × {sessions}회 (총 {shots * sessions}샷)"
    return "옵션"


def _event_label(type_: ProcedureType, shots: int) -> str:
    if type_ == ProcedureType.SHOT:
        return f"이벤트가 ({shots}샷)"
    if type_ == ProcedureType.MIXED:
        return f"이벤트가 ({shots}샷×1회)"
    return "이벤트가 (1회)"


def _competitor_label(type_: ProcedureType, name: str, sessions: int, shots: int) -> str:
    label = name or "경쟁사"
    if type_ == ProcedureType.SESSION:
        return f"{label} ({sessions}회)"
    if type_ == ProcedureType.SHOT:
        return f"{label} ({shots}샷)"
    if type_ == ProcedureType.MIXED:
        return f"{label} ({shots}샷×{sessions}회)"
    return label


# ─────────────────────────────────────────────────────────────────
# 시술 1개 전체 결과 행
# ─────────────────────────────────────────────────────────────────

def compute_item_rows(item: PricingItem, round_unit: int = 1000) -> list[Row]:
    """
    결과 행 순서: 체험가 → 이벤트가 → 옵션들 → 경쟁사(활성화 시).
    violation 플래그는 여기서 설정하지 않음 (validate_monotonic 담당).
    """
    type_ = item.type
    base_shots = item.base_shots or settings.DEFAULT_BASE_SHOTS
    single_shots = base_shots if type_ in _SHOT_TYPES else 0
    rows: list[Row] = []

    # ── 1) 체험가 행 ──
    trial_unit = calc_unit_price(type_, item.trial_price, 1, single_shots, round_unit)
    rows.append(Row(
        row_type=RowType.TRIAL,
        label="1회체험가",
        price=item.trial_price or 0,
        sessions=1,
        shots=single_shots,
        total_quantity=calc_total_quantity(type_, 1, single_shots),
        unit_price=trial_unit,
    ))

    # ── 2) 이벤트가 행 ──
    event_unit = calc_unit_price(type_, item.event_price, 1, single_shots, round_unit)
    rows.append(Row(
        row_type=RowType.EVENT,
        label=_event_label(type_, single_shots),
        price=item.event_price or 0,
        sessions=1,
        shots=single_shots,
        total_quantity=calc_total_quantity(type_, 1, single_shots),
        unit_price=event_unit,
        discount_from_trial=calc_discount_rate(trial_unit, event_unit),
    ))

    # ── 3) 옵션 행들 ──
    for opt in item.options:
        sessions = opt.sessions or 1
        shots = opt.shots or item.base_shots or 0
        unit = calc_unit_price(type_, opt.price, sessions, shots, round_unit)
        rows.append(Row(
            row_type=RowType.OPTION,
            label=_option_label(type_, sessions, shots),
            price=opt.price or 0,
            sessions=sessions,
            shots=shots,
            total_quantity=calc_total_quantity(type_, sessions, shots),
            unit_price=unit,
            discount_from_trial=calc_discount_rate(trial_unit, unit),
            discount_from_event=calc_discount_rate(event_unit, unit),
        ))

    # ── 4) 경쟁사 행 ──
    comp = item.competitor
    if comp is not None and comp.enabled:
        sessions = comp.sessions or 1
        shots = comp.shots or item.base_shots or 0
        unit = calc_unit_price(type_, comp.price, sessions, shots, round_unit)
        rows.append(Row(
            row_type=RowType.COMPETITOR,
            label=_competitor_label(type_, comp.name, sessions, shots),
            price=comp.price or 0,
            sessions=sessions,
            shots=shots,
            total_quantity=calc_total_quantity(type_, sessions, shots),
            unit_price=unit,
            competitor_advantage=calc_competitor_advantage(unit, event_unit),
        ))

    return rows


def evaluate_item(item: PricingItem, round_unit: int = 1000) -> ItemResult:
    """계산 + Monotonic 검증까지 마친 시술 1개 결과."""
    rows = compute_item_rows(item, round_unit)
    checked = validate_monotonic(rows, item.name)
    if checked.violations:
        logger.warning("단조 할인 규칙 위반 %d건: %s", len(checked.violations), item.name or "(이름 없음)")
    return ItemResult(
        name=item.name,
        type=item.type,
        unit_label=get_unit_label(item.type),
        rows=checked.rows,
        violations=checked.violations,
    )


def evaluate_items(items: list[PricingItem], round_unit: int = 1000) -> list[ItemResult]:
    return [evaluate_item(item, round_unit) for item in items]
