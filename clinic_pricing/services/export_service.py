"""
카카오톡 / 엑셀(TSV) 복사용 텍스트 생성.

카톡용: 이모지 포함, 사람이 읽기 좋은 형식
엑셀용: 탭 구분 (스프레드시트에 그대로 붙여넣기)
"""
from datetime import date

from clinic_pricing.models.package_model import Package
from clinic_pricing.models.pricing_model import ItemResult, RowType
from clinic_pricing.services.package_service import compute_package_summary
from clinic_pricing.utils.amount_utils import format_number, format_price


def _date_string(today: date | None = None) -> str:
    """"2026. 10. 19." 형식"""
    d = today or date.today()
    return f"{d.year}. {d.month}. {d.day}."


def _fmt_discount(rate: float | None) -> str:
    if rate is None:
        return ""
    return f"{format_number(abs(rate))}%{'↓' if rate >= 0 else '↑'}"


def _fmt_rate(rate: float | None) -> str:
    return "-" if rate is None else f"{format_number(rate)}%"


# ─── 시술 가격표 ─────────────────────────────────────────────────

def generate_kakao_text(items: list[ItemResult], round_unit: int, today: date | None = None) -> str:
    lines = ["📋 이벤트 가격표", f"📅 {_date_string(today)}"]

    for item in items:
        if not item.rows:
            continue

        lines.append("")
        lines.append(f"▸ {item.name or '시술명 미입력'}")

        for row in item.rows:
            unit_str = f"({item.unit_label} {format_price(row.unit_price)})"

            if row.row_type == RowType.COMPETITOR:
                adv = row.competitor_advantage
                adv_str = (
                    f" [우리가 {format_number(abs(adv))}%{' 저렴' if adv >= 0 else ' 비쌈'}]"
                    if adv is not None else ""
                )
                lines.append(f"  🏢 {row.label}: {format_price(row.price)} {unit_str}{adv_str}")
            elif row.row_type == RowType.TRIAL:
                lines.append(f"  1회체험가: {format_price(row.price)}")
            elif row.row_type == RowType.EVENT:
                lines.append(f"  이벤트가: {format_price(row.price)} {unit_str}")
            else:
                discount_str = f" [{_fmt_discount(row.discount_from_event)}]" if row.discount_from_event else ""
                warning_str = " ⚠️" if row.violation else ""
                lines.append(f"  {row.label}: {format_price(row.price)} {unit_str}{discount_str}{warning_str}")

    lines.append("")
    lines.append(f"반올림: {format_number(round_unit)}원 단위")
    return "\n".join(lines)


def generate_excel_text(items: list[ItemResult]) -> str:
    out: list[str] = []

    for item in items:
        if not item.rows:
            continue

        header = ["시술명", "옵션", "가격", item.unit_label, "체험가대비", "이벤트가대비", "규칙"]
        if item.has_competitor:
            header.append("경쟁사 가격우위")
        out.append("\t".join(header))

        for row in item.rows:
            cols = [
                item.name,
                row.label,
                str(row.price),
                str(row.unit_price),
                _fmt_rate(row.discount_from_trial),
                _fmt_rate(row.discount_from_event),
                "⚠ 위반" if row.violation else "✓ OK",
            ]
            if item.has_competitor:
                cols.append(_fmt_rate(row.competitor_advantage))
            out.append("\t".join(cols))

        out.append("")  # 시술 간 빈 줄

    return "\n".join(out)


# ─── 패키지 ──────────────────────────────────────────────────────

def generate_package_kakao_text(packages: list[Package], today: date | None = None) -> str:
    """형식: ●패키지명 가격원"""
    lines = ["한정 이벤트", _date_string(today), ""]
    for pkg in packages:
        lines.append(f"●{pkg.name} {format_number(pkg.package_price)}원")
    return "\n".join(lines)


def generate_package_excel_text(packages: list[Package]) -> str:
    out = ["\t".join(["패키지명", "구성 시술", "정가 합계", "패키지가", "절약 금액", "할인율"])]
    for pkg in packages:
        summary = compute_package_summary(pkg)
        out.append("\t".join([
            pkg.name,
            " + ".join(i.procedure_name for i in pkg.items),
            str(summary.total_regular_price),
            str(pkg.package_price),
            str(summary.savings_amount),
            f"{format_number(summary.savings_percent)}%" if summary.savings_percent else "-",
        ]))
    return "\n".join(out)
