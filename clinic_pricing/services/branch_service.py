"""
지점 간 수가 비교 및 전 지점 자동완성.
branch_store에 저장된 지점 수가표를 mapping_service 매칭 규칙으로 조회.
"""
import logging

from clinic_pricing.models.branch_model import (
    BranchComparison,
    BranchPrice,
    BranchSearchHit,
    ProcedurePriceMatrix,
)
from clinic_pricing.services.mapping_service import find_best_match, normalize_name
from clinic_pricing.utils import branch_store

logger = logging.getLogger(__name__)


def compare_procedure_across_branches(procedure_name: str) -> list[BranchComparison]:
    """시술 1개를 전 지점에서 찾아 표준가격 오름차순 반환."""
    if not procedure_name:
        return []

    results: list[BranchComparison] = []
    for branch in branch_store.load_manifest().branches:
        match = find_best_match(procedure_name, branch_store.load_branch_data(branch.name))
        if match is None:
            continue
        results.append(BranchComparison(
            branch=branch.name,
            name=match.name,
            standard_price=match.standard_price,
            category=match.category,
        ))

    return sorted(results, key=lambda r: r.standard_price)


def search_procedures_across_branches(query: str, limit: int = 20) -> list[BranchSearchHit]:
    """
    전 지점에서 시술명 자동완성 (한 글자부터).
    정규화 이름이 같으면 하나로 합치고 지점별 가격을 모음.
    """
    if not query or not query.strip():
        return []

    q = normalize_name(query)
    hits: dict[str, BranchSearchHit] = {}

    for branch in branch_store.load_manifest().branches:
        for proc in branch_store.load_branch_data(branch.name):
            key = normalize_name(proc.name)
            if q not in key:
                continue
            hit = hits.setdefault(key, BranchSearchHit(name=proc.name, category=proc.category))
            hit.branches.append(BranchPrice(branch=branch.name, price=proc.standard_price))

    return sorted(hits.values(), key=lambda h: h.name)[:limit]


def compare_multiple_procedures(
    procedure_names: list[str],
    branch_filter: list[str] | None = None,
) -> list[ProcedurePriceMatrix]:
    """여러 시술 × 지점 가격표. branch_filter가 비어 있으면 전체 지점."""
    if not procedure_names:
        return []

    branches = branch_store.load_manifest().branches
    if branch_filter:
        branches = [b for b in branches if b.name in branch_filter]
    data_by_branch = {b.name: branch_store.load_branch_data(b.name) for b in branches}

    rows: list[ProcedurePriceMatrix] = []
    for name in procedure_names:
        row = ProcedurePriceMatrix(name=name, category="")
        for branch_name, data in data_by_branch.items():
            match = find_best_match(name, data)
            if match is None:
                continue
            row.prices[branch_name] = match.standard_price
            if not row.category and match.category:
                row.category = match.category
        rows.append(row)

    logger.debug("지점 비교: 시술 %d개 × 지점 %d개", len(procedure_names), len(data_by_branch))
    return rows
