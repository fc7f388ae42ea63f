"""
bulk_parser_service.py — 벌크 텍스트 → Package 목록 변환.

GPT/카톡에서 복사한 패키지 텍스트를 그대로 붙여넣으면 패키지 단위로 구조화.

문법 2종 (■ 또는 ㄴ 로 시작하는 줄이 하나라도 있으면 enhanced):
  simple   — 한 줄 = 패키지 1개
             "●슈링크300+인모드fx 얼전 690,000원"
  enhanced — ■ 줄이 패키지 시작, ㄴ 줄이 구성 시술, 그 외 줄은 설명
             "■테스트 패키지 (부가세별도)"
             "ㄴ시술A: 1체 5.5만원 / 이벤트 12.9만원"

가격 인식 실패는 0으로 처리하고 예외를 던지지 않음 (입력 중인 텍스트도 그대로 파싱).
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from clinic_pricing.models.package_model import Package, PackageItem, PriceSource
from clinic_pricing.utils.amount_utils import EVENT_LABEL, extract_prices, parse_korean_price
from clinic_pricing.utils.id_provider import IdFactory, uuid_id_factory

logger = logging.getLogger(__name__)

BULLET_GLYPHS = "●•·-*■"
MAIN_MARKER = "■"
SUB_MARKER = "ㄴ"

# ── 토큰 ─────────────────────────────────────────────────────────

# simple: 공백 뒤 줄 끝의 "690,000원" / "690000"
_TRAILING_PRICE = re.compile(r"\s(\d[\d,]*)\s*원?\s*$")
# 구성 시술 끝의 "3회" (최대 4자리)
_QUANTITY_SUFFIX = re.compile(r"(?<!\d)(\d{1,4})\s*회$")
# 괄호 메모 (전각 괄호 포함)
_PAREN = re.compile(r"[(（]([^()（）]*)[)）]")
# enhanced 메인 줄 가격: 단위(만/원)가 반드시 붙은 숫자
_MAIN_PRICE = re.compile(r"(?<![\d.,])(\d[\d,]*(?:\.\d+)?\s*(?:만\s*원?|원))")
_COLONS = (":", "：")


class LineKind(str, Enum):
    MAIN = "main"   # ■ 패키지 시작
    SUB  = "sub"    # ㄴ 구성 시술
    TEXT = "text"   # 그 외


@dataclass
class SubItem:
    name: str
    price_parts: list[str] = field(default_factory=list)
    is_note: bool = False

    @property
    def price_text(self) -> str:
        return " / ".join(self.price_parts)


@dataclass
class PackageDraft:
    """enhanced 문법에서 ■ 줄부터 다음 ■ 줄 전까지 누적되는 패키지."""
    name: str
    package_price: int = 0
    memo_parts: list[str] = field(default_factory=list)
    sub_items: list[SubItem] = field(default_factory=list)


# ─────────────────────────────────────────────────────────────────
# 공개 API
# ─────────────────────────────────────────────────────────────────

def parse_package_text(text: str | None, id_factory: IdFactory | None = None) -> list[Package]:
    """
    벌크 텍스트를 Package 목록으로 변환.
    빈 텍스트 → [] / 이름이 없는 줄은 버림.
    id_factory: 패키지 id 생성기 (기본 uuid4)
    """
    if not text or not text.strip():
        return []

    new_id = id_factory or uuid_id_factory
    lines = [ln.strip() for ln in text.splitlines()]
    lines = [ln for ln in lines if ln]

    if is_enhanced_format(lines):
        packages = _parse_enhanced(lines, new_id)
        grammar = "enhanced"
    else:
        packages = [p for p in (parse_simple_line(ln, new_id) for ln in lines) if p is not None]
        grammar = "simple"

    logger.info("벌크 파싱 완료: %d줄 → 패키지 %d개 (%s)", len(lines), len(packages), grammar)
    return packages


def is_enhanced_format(lines: list[str]) -> bool:
    return any(classify_line(ln) != LineKind.TEXT for ln in lines)


def classify_line(line: str) -> LineKind:
    if line.startswith(MAIN_MARKER):
        return LineKind.MAIN
    if line.startswith(SUB_MARKER):
        return LineKind.SUB
    return LineKind.TEXT


# ─────────────────────────────────────────────────────────────────
# simple 문법
# ─────────────────────────────────────────────────────────────────

def parse_simple_line(line: str, id_factory: IdFactory) -> Package | None:
    text = strip_bullet(line)
    name, price = split_trailing_price(text)
    if not name:
        logger.debug("이름 없는 줄 건너뜀: %r", line)
        return None
    return Package(
        id=id_factory(),
        name=name,
        package_price=price,
        items=decompose_items(name),
    )


def strip_bullet(line: str) -> str:
    """앞의 글머리 기호 1개 제거: "●슈링크300" → "슈링크300" """
    text = line.strip()
    if text and text[0] in BULLET_GLYPHS:
        text = text[1:].strip()
    return text


def split_trailing_price(text: str) -> tuple[str, int]:
    """
    "슈링크300+인모드fx 얼전 690,000원" → ("슈링크300+인모드fx 얼전", 690000)
    가격이 없으면 (text, 0)
    """
    m = _TRAILING_PRICE.search(text)
    if not m:
        return text.strip(), 0
    return text[:m.start()].strip(), parse_korean_price(m.group(1))


def decompose_items(name: str) -> list[PackageItem]:
    """
    패키지명을 + 기준으로 나눠 구성 시술 생성.
    "파워윤곽주사 3회" → [PackageItem(procedure_name="파워윤곽주사", quantity=3)]
    """
    items: list[PackageItem] = []
    for segment in name.split("+"):
        segment = segment.strip()
        if not segment:
            continue

        procedure_name = segment
        quantity = 1
        m = _QUANTITY_SUFFIX.search(segment)
        if m and segment[:m.start()].strip():
            procedure_name = segment[:m.start()].strip()
            quantity = max(1, int(m.group(1)))

        items.append(PackageItem(
            procedure_name=procedure_name,
            quantity=quantity,
            individual_price=0,
            price_source=PriceSource.MANUAL,
        ))
    return items


# ─────────────────────────────────────────────────────────────────
# enhanced 문법
# ─────────────────────────────────────────────────────────────────

def _parse_enhanced(lines: list[str], id_factory: IdFactory) -> list[Package]:
    packages: list[Package] = []
    draft: PackageDraft | None = None

    for line in lines:
        kind = classify_line(line)

        if kind == LineKind.MAIN:
            if draft is not None:
                packages.append(finalize_draft(draft, id_factory))
            draft = parse_main_line(line[len(MAIN_MARKER):])
            if draft is None:
                logger.debug("이름 없는 ■ 줄 건너뜀: %r", line)
            continue

        if draft is None:
            logger.debug("패키지 시작(■) 전 줄 무시: %r", line)
            continue

        if kind == LineKind.SUB:
            apply_sub_line(draft, line[len(SUB_MARKER):].strip())
        else:
            draft.memo_parts.append(line)

    if draft is not None:
        packages.append(finalize_draft(draft, id_factory))

    return packages


def parse_main_line(content: str) -> PackageDraft | None:
    """
    ■ 뒤 내용 → PackageDraft
    "테스트 패키지 (부가세별도)"          → name="테스트 패키지", memo=["부가세별도"]
    "슈링크+인모드 49만원 1인 1회 한정"   → name="슈링크+인모드", price=490000, memo=["1인 1회 한정"]
    """
    memo_parts = [m.strip() for m in _PAREN.findall(content) if m.strip()]
    text = " ".join(_PAREN.sub(" ", content).split())

    price = 0
    m = _MAIN_PRICE.search(text)
    if m:
        price = parse_korean_price(m.group(1))
        trailing = text[m.end():].strip()
        if trailing:
            memo_parts.append(trailing)
        text = text[:m.start()]

    name = text.strip().rstrip("-:/·").strip()
    if not name:
        return None
    return PackageDraft(name=name, package_price=price, memo_parts=memo_parts)


def split_sub_segments(content: str) -> list[tuple[str | None, str]]:
    """
    ㄴ 줄 내용을 / 기준으로 나눔.
    반환: [(시술명 | None, 가격표현)], None = 직전 시술의 가격표현 이어쓰기
    "시술A: 1체 5.5만원 / 이벤트 12.9만원" → [("시술A", "1체 5.5만원"), (None, "이벤트 12.9만원")]
    """
    result: list[tuple[str | None, str]] = []
    for segment in content.split("/"):
        segment = segment.strip()
        if not segment:
            continue
        name, expr = _split_named_segment(segment)
        result.append((name, expr))
    return result


def _split_named_segment(segment: str) -> tuple[str | None, str]:
    idx = min((segment.find(c) for c in _COLONS if c in segment), default=-1)
    if idx < 0 or segment[0].isdigit():
        return None, segment

    name = segment[:idx].strip()
    # "이벤트: 12.9만원" 은 시술명이 아니라 가격 라벨
    if not name or name.startswith(EVENT_LABEL):
        return None, segment
    return name, segment[idx + 1:].strip()


def apply_sub_line(draft: PackageDraft, content: str) -> None:
    """ㄴ 줄 1개를 draft에 반영. 콜론이 없으면 메모 전용 노트."""
    if not content:
        return

    if not any(c in content for c in _COLONS):
        draft.sub_items.append(SubItem(name=content, is_note=True))
        draft.memo_parts.append(content)
        return

    for name, expr in split_sub_segments(content):
        if name is not None:
            draft.sub_items.append(SubItem(name=name, price_parts=[expr] if expr else []))
            continue

        current = next((s for s in reversed(draft.sub_items) if not s.is_note), None)
        if current is None:
            logger.debug("시술명 없는 가격표현 무시: %r", expr)
            continue
        current.price_parts.append(expr)


def finalize_draft(draft: PackageDraft, id_factory: IdFactory) -> Package:
    """
    가격이 있는 ㄴ 시술이 있으면 그것으로 items 구성 (체험가 우선),
    없으면 패키지명을 + 로 분해.
    """
    items: list[PackageItem] = []
    for sub in draft.sub_items:
        if sub.is_note:
            continue
        prices = extract_prices(sub.price_text)
        if prices.trial <= 0 and prices.event <= 0:
            continue
        items.append(PackageItem(
            procedure_name=sub.name,
            quantity=1,
            individual_price=prices.trial or prices.event,
            price_source=PriceSource.TRIAL if prices.trial else PriceSource.EVENT,
        ))

    if not items:
        items = decompose_items(draft.name)

    memo = " / ".join(p for p in draft.memo_parts if p)
    return Package(
        id=id_factory(),
        name=draft.name,
        package_price=draft.package_price,
        memo=memo or None,
        items=items,
    )
