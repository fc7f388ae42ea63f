"""
csv_service.py — 지점 수가표 CSV → BranchProcedure 목록.

  1. 인코딩 감지: UTF-8(BOM 포함/미포함) → CP949 → EUC-KR 순으로 시도
  2. 구분자 감지: 첫 줄의 쉼표 vs 탭 개수
  3. 헤더 → 표준 필드 자동 매핑 (번호/대분류/진료항목명/표준가격/과세여부/등록일)
"""
import csv
import io
import logging

from clinic_pricing.models.branch_model import BranchProcedure, ColumnMap, CsvImportResult

logger = logging.getLogger(__name__)

_ENCODINGS = ("utf-8-sig", "cp949", "euc-kr")

# 정규화된 헤더 → ColumnMap 필드
_HEADER_ALIASES: dict[str, str] = {
    "no.": "no", "no": "no", "번호": "no",
    "대분류": "category", "카테고리": "category", "분류": "category",
    "진료항목명": "name", "항목명": "name", "시술명": "name", "상품명": "name",
    "표준가격": "standard_price", "가격": "standard_price", "단가": "standard_price", "금액": "standard_price",
    "과세여부": "taxable", "과세": "taxable",
    "등록일": "registered_date", "날짜": "registered_date", "등록일시": "registered_date",
}


def decode_csv_bytes(data: bytes) -> str:
    """CSV 원문 bytes → str. 어떤 인코딩으로도 안 되면 깨진 문자를 치환해서 반환."""
    for enc in _ENCODINGS:
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    logger.warning("CSV 인코딩 감지 실패, utf-8 (replace)로 읽음")
    return data.decode("utf-8", errors="replace")


def detect_delimiter(first_line: str) -> str:
    return "\t" if first_line.count("\t") > first_line.count(",") else ","


def detect_columns(headers: list[str]) -> ColumnMap:
    column_map = ColumnMap()
    for i, header in enumerate(headers):
        norm = "".join(header.replace('"', "").split()).lower()
        field_name = _HEADER_ALIASES.get(norm)
        if field_name:
            setattr(column_map, field_name, i)
    return column_map


def _cell(row: list[str], idx: int) -> str:
    if idx < 0 or idx >= len(row):
        return ""
    return (row[idx] or "").strip()


def _to_int(value: str) -> int:
    digits = "".join(ch for ch in value if ch.isdigit() or ch == ".")
    try:
        return int(float(digits)) if digits else 0
    except (ValueError, OverflowError):
        return 0


def normalize_rows(rows: list[list[str]], column_map: ColumnMap) -> list[BranchProcedure]:
    """항목명이 빈 행은 제외. 가격의 쉼표/"원"/공백 제거."""
    result: list[BranchProcedure] = []
    for row in rows:
        name = _cell(row, column_map.name)
        if not name:
            continue
        result.append(BranchProcedure(
            no=_to_int(_cell(row, column_map.no)),
            category=_cell(row, column_map.category),
            name=name,
            standard_price=_to_int(_cell(row, column_map.standard_price)),
            taxable=_cell(row, column_map.taxable),
        ))
    return result


def parse_csv_text(text: str) -> tuple[list[str], list[list[str]]]:
    """CSV 텍스트 → (헤더, 행 목록). 빈 줄 제외, 따옴표 필드 지원."""
    text = text.lstrip("\ufeff")
    if not text.strip():
        return [], []

    first_line = next((ln for ln in text.splitlines() if ln.strip()), "")
    reader = csv.reader(io.StringIO(text), delimiter=detect_delimiter(first_line))
    records = [[cell.strip() for cell in rec] for rec in reader if any(cell.strip() for cell in rec)]
    if not records:
        return [], []
    return records[0], records[1:]


def parse_branch_csv(data: bytes) -> CsvImportResult:
    """
    CSV 파일 → 지점 수가표.
    헤더 없음 / 항목명 컬럼 없음 / 가격 컬럼 없음 → ValueError
    """
    headers, rows = parse_csv_text(decode_csv_bytes(data))
    if not headers:
        raise ValueError("CSV 파일에 헤더가 없습니다")

    column_map = detect_columns(headers)
    if column_map.name < 0:
        raise ValueError("항목명 컬럼을 찾을 수 없습니다 (진료항목명, 항목명, 시술명 등)")
    if column_map.standard_price < 0:
        raise ValueError("가격 컬럼을 찾을 수 없습니다 (표준가격, 가격, 단가 등)")

    procedures = normalize_rows(rows, column_map)
    logger.info("CSV 파싱 완료: %d행 중 %d개 시술", len(rows), len(procedures))
    return CsvImportResult(
        headers=headers,
        data=procedures,
        column_map=column_map,
        raw_row_count=len(rows),
    )
