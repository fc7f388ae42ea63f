"""
mapping_service.py — 자유 입력 시술명 ↔ 가격 라이브러리 매칭.

우선순위 (앞 단계에서 찾으면 즉시 종료, 같은 단계 내에서는 목록 순서 우선):
  1단계: 완전 일치
  2단계: 공백 제거 + 소문자 일치
  3단계: 정규화 후 포함 관계 (양방향)
  4단계: 토큰 매칭 (2글자 이상 토큰 2개 이상, 모든 토큰이 후보명에 포함)

이미 가격이 붙은 시술(price_source ≠ manual, individual_price > 0)은 다시 매칭하지 않음.
"""
import logging
from typing import Callable, Sequence, TypeVar

from clinic_pricing.models.branch_model import BranchProcedure
from clinic_pricing.models.package_model import Package, PackageItem, PriceSource
from clinic_pricing.models.pricing_model import Procedure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_name(s: str) -> str:
    """
    시술명 정규화: 모든 공백 제거 + 소문자.
    예: "인모드 FX 얼전" → "인모드fx얼전"
    """
    return "".join(s.split()).lower()


def find_best_match(
    query: str,
    candidates: Sequence[T],
    key: Callable[[T], str] = lambda c: c.name,
) -> T | None:
    """query와 가장 잘 맞는 후보 1개 반환 (없으면 None)."""
    if not query or not candidates:
        return None

    # ── 1단계: 완전 일치 ───────────────────────────────────
    for c in candidates:
        if key(c) == query:
            return c

    q_norm = normalize_name(query)
    if not q_norm:
        return None
    normed = [(c, normalize_name(key(c))) for c in candidates]

    # ── 2단계: 정규화 일치 ─────────────────────────────────
    for c, n in normed:
        if n == q_norm:
            return c

    # ── 3단계: 포함 관계 ───────────────────────────────────
    for c, n in normed:
        if n and (q_norm in n or n in q_norm):
            return c

    # ── 4단계: 토큰 매칭 ───────────────────────────────────
    tokens = [t.lower() for t in query.split() if len(t) > 1]
    if len(tokens) >= 2:
        for c, n in normed:
            if all(t in n for t in tokens):
                return c

    return None


def _is_priced(item: PackageItem) -> bool:
    return item.price_source != PriceSource.MANUAL and item.individual_price > 0


def match_procedure_prices(
    packages: list[Package],
    procedures: list[Procedure],
) -> list[Package]:
    """
    시술 라이브러리에서 정가 자동 매칭 (체험가 우선, 없으면 이벤트가).
    원본 packages는 변경하지 않고 새 목록 반환.
    """
    if not procedures:
        return [p.model_copy(deep=True) for p in packages]

    matched = 0
    result: list[Package] = []
    for pkg in packages:
        items: list[PackageItem] = []
        for item in pkg.items:
            if _is_priced(item):
                items.append(item.model_copy())
                continue

            proc = find_best_match(item.procedure_name, procedures)
            if proc is None or (proc.trial_price <= 0 and proc.event_price <= 0):
                items.append(item.model_copy())
                continue

            logger.debug("라이브러리 매칭: %r → %r", item.procedure_name, proc.name)
            matched += 1
            items.append(item.model_copy(update={
                "individual_price": proc.trial_price or proc.event_price,
                "price_source": PriceSource.TRIAL if proc.trial_price else PriceSource.EVENT,
                "procedure_id": proc.id,
            }))
        result.append(pkg.model_copy(update={"items": items}))

    logger.info("시술 라이브러리 매칭: %d개 시술 가격 반영", matched)
    return result


def match_branch_prices(
    packages: list[Package],
    branch_procedures: list[BranchProcedure],
) -> list[Package]:
    """지점 수가표의 표준가격으로 정가 자동 매칭."""
    if not branch_procedures:
        return [p.model_copy(deep=True) for p in packages]

    matched = 0
    result: list[Package] = []
    for pkg in packages:
        items: list[PackageItem] = []
        for item in pkg.items:
            if _is_priced(item):
                items.append(item.model_copy())
                continue

            bp = find_best_match(item.procedure_name, branch_procedures)
            if bp is None or bp.standard_price <= 0:
                items.append(item.model_copy())
                continue

            logger.debug("지점 수가 매칭: %r → %r (%d원)",
                         item.procedure_name, bp.name, bp.standard_price)
            matched += 1
            items.append(item.model_copy(update={
                "individual_price": bp.standard_price,
                "price_source": PriceSource.BRANCH,
                "branch_category": bp.category or None,
            }))
        result.append(pkg.model_copy(update={"items": items}))

    logger.info("지점 수가 매칭: %d개 시술 가격 반영", matched)
    return result
