"""내보내기 테스트.

테스트 대상:
  - generate_kakao_text / generate_excel_text (시술 가격표)
  - generate_package_kakao_text / generate_package_excel_text
  - generate_excel(): 시트 구성, 값
"""
from datetime import date

from openpyxl import load_workbook

from clinic_pricing.models.package_model import Package, PackageItem, PriceSource
from clinic_pricing.models.pricing_model import (
    Competitor,
    PricingItem,
    PricingOption,
    ProcedureType,
)
from clinic_pricing.services.excel_service import generate_excel
from clinic_pricing.services.export_service import (
    generate_excel_text,
    generate_kakao_text,
    generate_package_excel_text,
    generate_package_kakao_text,
)
from clinic_pricing.services.pricing_service import evaluate_items

TODAY = date(2026, 10, 19)


def _items():
    return evaluate_items([
        PricingItem(
            name="아쿠아필",
            type=ProcedureType.SESSION,
            trial_price=100000,
            event_price=80000,
            options=[PricingOption(sessions=3, price=210000)],
        ),
        PricingItem(
            name="리쥬란",
            type=ProcedureType.SESSION,
            event_price=50000,
            options=[PricingOption(sessions=3, price=180000)],
            competitor=Competitor(enabled=True, name="A의원", price=60000, sessions=1),
        ),
    ])


def _packages():
    return [
        Package(id="pkg-1", name="슈링크+인모드", package_price=150000, memo="부가세별도", items=[
            PackageItem(procedure_name="슈링크", individual_price=100000, price_source=PriceSource.TRIAL),
            PackageItem(procedure_name="인모드", quantity=2, individual_price=50000, price_source=PriceSource.EVENT),
        ]),
        Package(id="pkg-2", name="아쿠아필 3회", package_price=99000),
    ]


# ── 카카오톡 ──

def test_kakao_text():
    text = generate_kakao_text(_items(), 1000, today=TODAY)
    lines = text.split("\n")

    assert lines[:2] == ["📋 이벤트 가격표", "📅 2026. 10. 19."]
    assert "▸ 아쿠아필" in lines
    assert "  1회체험가: 100,000원" in lines
    assert "  이벤트가: 80,000원 (회당가 80,000원)" in lines
    assert "  3회: 210,000원 (회당가 70,000원) [12.5%↓]" in lines
    assert lines[-1] == "반올림: 1,000원 단위"


def test_kakao_text_marks_violation_and_competitor():
    text = generate_kakao_text(_items(), 1000, today=TODAY)

    assert "  3회: 180,000원 (회당가 60,000원) [20%↑] ⚠️" in text
    assert "  🏢 A의원 (1회): 60,000원 (회당가 60,000원) [우리가 16.7% 저렴]" in text


def test_package_kakao_text():
    text = generate_package_kakao_text(_packages(), today=TODAY)
    assert text.split("\n") == [
        "한정 이벤트",
        "2026. 10. 19.",
        "",
        "●슈링크+인모드 150,000원",
        "●아쿠아필 3회 99,000원",
    ]


# ── 엑셀 (TSV) ──

def test_excel_text():
    lines = generate_excel_text(_items()).split("\n")

    assert lines[0] == "시술명\t옵션\t가격\t회당가\t체험가대비\t이벤트가대비\t규칙"
    assert lines[1] == "아쿠아필\t1회체험가\t100000\t100000\t-\t-\t✓ OK"
    assert lines[3] == "아쿠아필\t3회\t210000\t70000\t30%\t12.5%\t✓ OK"


def test_excel_text_competitor_column():
    text = generate_excel_text(_items())
    assert "\t경쟁사 가격우위" in text
    assert "리쥬란\t3회\t180000\t60000\t-\t-20%\t⚠ 위반\t-" in text


def test_package_excel_text():
    lines = generate_package_excel_text(_packages()).split("\n")

    assert lines[0] == "패키지명\t구성 시술\t정가 합계\t패키지가\t절약 금액\t할인율"
    assert lines[1] == "슈링크+인모드\t슈링크 + 인모드\t200000\t150000\t50000\t25%"
    assert lines[2] == "아쿠아필 3회\t\t0\t99000\t0\t-"


# ── Excel 파일 ──

def test_generate_excel(tmp_path):
    path = generate_excel(tmp_path, packages=_packages(), items=_items(), clinic_name="테스트 의원")

    assert path.exists()
    assert path.name.startswith("pricing_테스트_의원_")

    wb = load_workbook(path)
    assert wb.sheetnames == ["Packages", "Allocation", "Pricing", "Violations"]

    ws = wb["Packages"]
    assert ws["A2"].value == "슈링크+인모드"
    assert ws["C2"].value == 200000
    assert ws["D2"].value == 150000
    assert ws["G2"].value == "부가세별도"

    alloc = wb["Allocation"]
    assert [alloc.cell(row=r, column=5).value for r in (2, 3)] == [75000, 75000]

    violations = wb["Violations"]
    assert violations["A2"].value == "리쥬란"
    assert "규칙 위반" in violations["B2"].value


def test_generate_excel_empty(tmp_path):
    path = generate_excel(tmp_path)
    wb = load_workbook(path)

    assert wb["Violations"]["A2"].value == "위반 없음"
    assert wb["Packages"].max_row == 1
