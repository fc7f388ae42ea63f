"""시술 가격 계산 테스트.

테스트 대상:
  - round_price / resolve_round_unit
  - calc_discount_rate / calc_competitor_advantage (기준 0 → None)
  - calc_total_quantity / calc_unit_price
  - compute_item_rows(): 행 순서, 라벨, 단가, 할인율
  - evaluate_item(): 검증 결과 연결
"""
from clinic_pricing.models.pricing_model import (
    Competitor,
    PricingItem,
    PricingOption,
    ProcedureType,
    RowType,
)
from clinic_pricing.services.pricing_service import (
    calc_competitor_advantage,
    calc_discount_rate,
    calc_total_quantity,
    calc_unit_price,
    compute_item_rows,
    evaluate_item,
    evaluate_items,
    get_unit_label,
    resolve_round_unit,
    round_price,
)


# ── 반올림 ──

def test_round_price():
    assert round_price(1500, 1000) == 2000
    assert round_price(1499, 1000) == 1000
    assert round_price(96666.67, 1000) == 97000
    assert round_price(1234.5, 0) == 1235
    assert round_price(1234.5, 100) == 1200


def test_resolve_round_unit():
    assert resolve_round_unit(100) == 100
    assert resolve_round_unit(10000) == 10000
    assert resolve_round_unit(500) == 1000
    assert resolve_round_unit(None) == 1000


# ── 할인율 / 경쟁사 우위 ──

def test_discount_rate():
    assert calc_discount_rate(1500, 1300) == 13.3
    assert calc_discount_rate(1000, 1200) == -20.0
    assert calc_discount_rate(100000, 100000) == 0


def test_discount_rate_without_base_is_none():
    """기준 단가가 0이면 0%가 아니라 None (계산 불가)."""
    assert calc_discount_rate(0, 1300) is None
    assert calc_discount_rate(None, 1300) is None


def test_competitor_advantage():
    assert calc_competitor_advantage(200000, 150000) == 25.0
    assert calc_competitor_advantage(100000, 120000) == -20.0
    assert calc_competitor_advantage(0, 150000) is None


# ── 총량 / 단가 ──

def test_total_quantity():
    assert calc_total_quantity(ProcedureType.SESSION, 3, 100) == 3
    assert calc_total_quantity(ProcedureType.SHOT, 3, 300) == 300
    assert calc_total_quantity(ProcedureType.MIXED, 3, 100) == 300
    assert calc_total_quantity(ProcedureType.MIXED, None, 100) == 0


def test_unit_price_session():
    assert calc_unit_price(ProcedureType.SESSION, 300000, 3, 0) == 100000
    assert calc_unit_price(ProcedureType.SESSION, 290000, 3, 0) == 97000


def test_unit_price_shot_rounds_finer():
    """샷당가는 회당가보다 잘게 반올림 (1,000원 단위 → 10원 단위)."""
    assert calc_unit_price(ProcedureType.SHOT, 390000, 1, 300) == 1300
    assert calc_unit_price(ProcedureType.SHOT, 99000, 1, 100) == 990
    assert calc_unit_price(ProcedureType.SHOT, 100000, 1, 300, round_unit=100) == 333


def test_unit_price_zero_guards():
    assert calc_unit_price(ProcedureType.SESSION, 0, 3, 0) == 0
    assert calc_unit_price(ProcedureType.SESSION, None, 3, 0) == 0
    assert calc_unit_price(ProcedureType.SESSION, 300000, 0, 0) == 0
    assert calc_unit_price(ProcedureType.SHOT, 300000, 1, None) == 0


def test_unit_label():
    assert get_unit_label(ProcedureType.SESSION) == "회당가"
    assert get_unit_label(ProcedureType.SHOT) == "샷당가"
    assert get_unit_label(ProcedureType.MIXED) == "샷당가"
    assert get_unit_label(None) == "단가"


# ── compute_item_rows ──

def test_shot_item_rows():
    item = PricingItem(
        name="울쎄라",
        type=ProcedureType.SHOT,
        trial_price=99000,
        event_price=150000,
        base_shots=100,
        options=[PricingOption(shots=300, price=390000)],
    )
    rows = compute_item_rows(item, 1000)

    assert [r.row_type for r in rows] == [RowType.TRIAL, RowType.EVENT, RowType.OPTION]
    assert [r.label for r in rows] == ["1회체험가", "이벤트가 (100샷)", "300샷"]
    assert [r.unit_price for r in rows] == [990, 1500, 1300]
    assert rows[2].discount_from_event == 13.3
    assert rows[2].discount_from_trial == -31.3
    assert rows[1].discount_from_trial == -51.5
    assert all(not r.violation for r in rows)


def test_session_item_rows():
    item = PricingItem(
        name="아쿠아필",
        type=ProcedureType.SESSION,
        trial_price=100000,
        event_price=80000,
        options=[
            PricingOption(sessions=3, price=210000),
            PricingOption(sessions=5, price=300000),
        ],
    )
    rows = compute_item_rows(item)

    assert [r.label for r in rows] == ["1회체험가", "이벤트가 (1회)", "3회", "5회"]
    assert [r.unit_price for r in rows] == [100000, 80000, 70000, 60000]
    assert [r.total_quantity for r in rows] == [1, 1, 3, 5]
    assert rows[2].discount_from_event == 12.5
    assert rows[3].discount_from_trial == 40.0
    assert rows[0].discount_from_trial is None


def test_mixed_item_labels():
    item = PricingItem(
        name="인모드",
        type=ProcedureType.MIXED,
        trial_price=0,
        event_price=250000,
        base_shots=100,
        options=[PricingOption(sessions=3, shots=300, price=1800000)],
    )
    rows = compute_item_rows(item)

    assert rows[1].label == "이벤트가 (100샷×1회)"
    assert rows[2].label == "300샷 × 3회 (총 900샷)"
    assert rows[2].total_quantity == 900
    assert rows[2].unit_price == 2000


def test_missing_trial_price_gives_null_discounts():
    item = PricingItem(
        type=ProcedureType.SESSION,
        event_price=80000,
        options=[PricingOption(sessions=3, price=210000)],
    )
    rows = compute_item_rows(item)

    assert rows[0].unit_price == 0
    assert rows[1].discount_from_trial is None
    assert rows[2].discount_from_trial is None
    assert rows[2].discount_from_event == 12.5


def test_shot_item_default_base_shots():
    item = PricingItem(type=ProcedureType.SHOT, trial_price=100000)
    rows = compute_item_rows(item)

    assert rows[0].shots == 100
    assert rows[0].unit_price == 1000


def test_competitor_row():
    item = PricingItem(
        name="아쿠아필",
        type=ProcedureType.SESSION,
        event_price=150000,
        competitor=Competitor(enabled=True, name="A의원", price=200000, sessions=1),
    )
    rows = compute_item_rows(item)

    assert rows[-1].row_type == RowType.COMPETITOR
    assert rows[-1].label == "A의원 (1회)"
    assert rows[-1].unit_price == 200000
    assert rows[-1].competitor_advantage == 25.0


def test_disabled_competitor_is_omitted():
    item = PricingItem(
        type=ProcedureType.SESSION,
        event_price=150000,
        competitor=Competitor(enabled=False, name="A의원", price=200000),
    )
    assert all(r.row_type != RowType.COMPETITOR for r in compute_item_rows(item))


# ── evaluate_item ──

def test_evaluate_item_flags_rising_option():
    item = PricingItem(
        name="리쥬란",
        type=ProcedureType.SESSION,
        event_price=50000,
        options=[PricingOption(sessions=3, price=180000)],
    )
    result = evaluate_item(item)

    assert result.unit_label == "회당가"
    assert [r.violation for r in result.rows] == [False, False, True]
    assert len(result.violations) == 1
    assert result.violations[0].startswith("[리쥬란] ")


def test_evaluate_items_keeps_order():
    items = [
        PricingItem(name="A", type=ProcedureType.SESSION, event_price=10000),
        PricingItem(name="B", type=ProcedureType.SHOT, event_price=10000),
    ]
    results = evaluate_items(items)

    assert [r.name for r in results] == ["A", "B"]
    assert not results[0].has_competitor
