"""
excel_service.py — 패키지 / 시술 가격표를 서식 있는 Excel 파일로 출력.

시트 구성:
  Packages    — 패키지별 정가 합계 / 패키지가 / 절약 금액 / 할인율
  Allocation  — 패키지가의 시술별 배분 내역
  Pricing     — 시술별 가격표 (단가, 할인율, 규칙 위반 표시)
  Violations  — 단조 할인 규칙 위반 메시지 모음
"""
import logging
from datetime import datetime
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import (
    Alignment,
    Border,
    Font,
    PatternFill,
    Side,
)
from openpyxl.utils import get_column_letter

from clinic_pricing.models.package_model import Package
from clinic_pricing.models.pricing_model import ItemResult, RowType
from clinic_pricing.services.package_service import compute_package_summary

logger = logging.getLogger(__name__)

# ─── 색상 ───────────────────────────────────────────────────────
C_HEADER     = "4472C4"   # 파랑 — 헤더
C_SECTION    = "455A64"   # 진회색 — 시술 구분
C_VIOLATION  = "FFC7CE"   # 연빨강 — 규칙 위반
C_COMPETITOR = "E4DFEC"   # 연보라 — 경쟁사 행
C_SAVING     = "E2EFDA"   # 연녹색 — 절약
C_LOSS       = "FFEB9C"   # 연노랑 — 패키지가 > 정가 합계


def _fill(hex_color: str) -> PatternFill:
    return PatternFill(fill_type="solid", fgColor=hex_color)


def _font(bold=False, color="000000", size=10) -> Font:
    return Font(bold=bold, color=color, size=size, name="맑은 고딕")


def _border() -> Border:
    thin = Side(style="thin", color="CCCCCC")
    return Border(left=thin, right=thin, top=thin, bottom=thin)


def _align(horizontal="left", wrap=False) -> Alignment:
    return Alignment(horizontal=horizontal, vertical="center", wrap_text=wrap)


def _write_cell(ws, row: int, col: int, value, fill=None, font=None, align=None, number_format=None):
    cell = ws.cell(row=row, column=col, value=value)
    if fill:
        cell.fill = fill
    if font:
        cell.font = font
    cell.alignment = align or _align()
    cell.border = _border()
    if number_format:
        cell.number_format = number_format
    return cell


def _write_header(ws, headers: list[str], row: int = 1) -> None:
    for col, h in enumerate(headers, 1):
        _write_cell(ws, row, col, h,
                    fill=_fill(C_HEADER),
                    font=_font(bold=True, color="FFFFFF"),
                    align=_align("center"))


def _set_widths(ws, widths: list[int]) -> None:
    for i, w in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(i)].width = w


def _percent(rate: float | None) -> float | None:
    """13.3 → 0.133 (엑셀 % 서식용)"""
    return None if rate is None else rate / 100


# ─── 공개 API ────────────────────────────────────────────────────

def generate_excel(
    output_dir: Path,
    packages: list[Package] | None = None,
    items: list[ItemResult] | None = None,
    clinic_name: str = "clinic",
) -> Path:
    """
    패키지 요약 + 시술 가격표를 Excel 파일로 저장.
    반환: 저장된 파일 경로
    """
    packages = packages or []
    items = items or []

    wb = Workbook()
    wb.remove(wb.active)  # 기본 Sheet 제거

    _write_packages(wb, packages)
    _write_allocation(wb, packages)
    _write_pricing(wb, items)
    _write_violations(wb, items)

    # 파일명: pricing_{병원명}_{일시}.xlsx
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    safe_name = clinic_name.replace(" ", "_").replace("/", "_")[:20]
    output_path = Path(output_dir) / f"pricing_{safe_name}_{stamp}.xlsx"

    wb.save(str(output_path))
    logger.info("Excel 저장 완료: %s (패키지 %d개, 시술 %d개)", output_path, len(packages), len(items))
    return output_path


# ─── Packages 시트 ───────────────────────────────────────────────

def _write_packages(wb: Workbook, packages: list[Package]) -> None:
    ws = wb.create_sheet("Packages")
    ws.sheet_view.showGridLines = False

    _write_header(ws, ["패키지명", "구성 시술", "정가 합계", "패키지가", "절약 금액", "할인율", "메모"])

    for row, pkg in enumerate(packages, 2):
        summary = compute_package_summary(pkg)
        row_fill = _fill(C_LOSS) if summary.savings_amount < 0 else None

        vals = [
            pkg.name,
            " + ".join(i.procedure_name for i in pkg.items),
            summary.total_regular_price,
            summary.package_price,
            summary.savings_amount,
        ]
        for col, val in enumerate(vals, 1):
            _write_cell(ws, row, col, val, fill=row_fill,
                        number_format="#,##0" if col >= 3 else None)

        rate_fill = _fill(C_SAVING) if summary.savings_percent > 0 else row_fill
        _write_cell(ws, row, 6, _percent(summary.savings_percent), fill=rate_fill,
                    align=_align("center"), number_format="0.0%")
        _write_cell(ws, row, 7, pkg.memo or "", fill=row_fill, align=_align(wrap=True))

    _set_widths(ws, [30, 40, 12, 12, 12, 8, 30])
    ws.freeze_panes = "A2"


# ─── Allocation 시트 ─────────────────────────────────────────────

def _write_allocation(wb: Workbook, packages: list[Package]) -> None:
    ws = wb.create_sheet("Allocation")
    ws.sheet_view.showGridLines = False

    _write_header(ws, ["패키지명", "시술명", "수량", "정가", "배분가", "할인율"])

    row = 2
    for pkg in packages:
        for b in compute_package_summary(pkg).per_item_breakdown:
            _write_cell(ws, row, 1, pkg.name)
            _write_cell(ws, row, 2, b.name)
            _write_cell(ws, row, 3, b.quantity, align=_align("center"))
            _write_cell(ws, row, 4, b.original_price, number_format="#,##0")
            _write_cell(ws, row, 5, b.allocated_price, number_format="#,##0")
            _write_cell(ws, row, 6, _percent(b.savings_percent),
                        align=_align("center"), number_format="0.0%")
            row += 1

    _set_widths(ws, [30, 25, 6, 12, 12, 8])
    ws.freeze_panes = "A2"


# ─── Pricing 시트 ────────────────────────────────────────────────

def _write_pricing(wb: Workbook, items: list[ItemResult]) -> None:
    ws = wb.create_sheet("Pricing")
    ws.sheet_view.showGridLines = False

    _write_header(ws, ["시술명", "옵션", "가격", "단가", "체험가대비", "이벤트가대비", "경쟁사 가격우위", "규칙"])

    row = 2
    for item in items:
        if not item.rows:
            continue

        ws.merge_cells(f"A{row}:H{row}")
        c = ws[f"A{row}"]
        c.value = f"■ {item.name or '시술명 미입력'} ({item.unit_label})"
        c.font = _font(bold=True, color="FFFFFF")
        c.fill = _fill(C_SECTION)
        c.alignment = _align("left")
        row += 1

        for r in item.rows:
            if r.violation:
                row_fill = _fill(C_VIOLATION)
            elif r.row_type == RowType.COMPETITOR:
                row_fill = _fill(C_COMPETITOR)
            else:
                row_fill = None

            _write_cell(ws, row, 1, item.name, fill=row_fill)
            _write_cell(ws, row, 2, r.label, fill=row_fill)
            _write_cell(ws, row, 3, r.price, fill=row_fill, number_format="#,##0")
            _write_cell(ws, row, 4, r.unit_price, fill=row_fill, number_format="#,##0")
            for col, rate in ((5, r.discount_from_trial), (6, r.discount_from_event), (7, r.competitor_advantage)):
                _write_cell(ws, row, col, _percent(rate) if rate is not None else "-", fill=row_fill,
                            align=_align("center"), number_format="0.0%")
            _write_cell(ws, row, 8, "⚠ 위반" if r.violation else "✓ OK", fill=row_fill,
                        font=_font(bold=r.violation), align=_align("center"))
            row += 1

    _set_widths(ws, [20, 32, 12, 10, 10, 10, 12, 8])
    ws.freeze_panes = "A2"


# ─── Violations 시트 ─────────────────────────────────────────────

def _write_violations(wb: Workbook, items: list[ItemResult]) -> None:
    ws = wb.create_sheet("Violations")
    ws.sheet_view.showGridLines = False

    _write_header(ws, ["시술명", "위반 내용"])

    row = 2
    for item in items:
        for msg in item.violations:
            _write_cell(ws, row, 1, item.name)
            _write_cell(ws, row, 2, msg, fill=_fill(C_VIOLATION), align=_align(wrap=True))
            row += 1

    if row == 2:
        _write_cell(ws, 2, 1, "위반 없음")
        _write_cell(ws, 2, 2, "모든 시술이 수량↑ → 단가↓ 규칙을 만족합니다.")

    _set_widths(ws, [20, 80])
    ws.freeze_panes = "A2"
