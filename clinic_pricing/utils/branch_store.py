"""
지점 수가 데이터 저장소 (in-memory).
서버 재시작 시 초기화됨. 영구 저장은 외부 persistence 계층 담당.

구조:
  manifest        → BranchManifest(branches=[BranchInfo...], active_branch)
  _store[지점명]   → [BranchProcedure...]
"""
import logging
from datetime import datetime

from clinic_pricing.models.branch_model import BranchInfo, BranchManifest, BranchProcedure

logger = logging.getLogger(__name__)

# 지점명 → 수가표
_store: dict[str, list[BranchProcedure]] = {}
_manifest = BranchManifest()


def _normalize(name: str) -> str:
    return "".join(name.split()).lower()


# ── Manifest ─────────────────────────────────────────────────────

def load_manifest() -> BranchManifest:
    return _manifest.model_copy(deep=True)


def get_active_branch() -> str | None:
    return _manifest.active_branch


def set_active_branch(branch_name: str) -> None:
    if not has_branch(branch_name):
        logger.warning("set_active_branch: 지점 %r 없음", branch_name)
        return
    _manifest.active_branch = branch_name


def get_branch_names() -> list[str]:
    return [b.name for b in _manifest.branches]


def has_branch(branch_name: str) -> bool:
    return any(b.name == branch_name for b in _manifest.branches)


# ── Branch Data CRUD ─────────────────────────────────────────────

def save_branch_data(branch_name: str, procedures: list[BranchProcedure]) -> BranchInfo:
    """지점 수가표 저장 (같은 이름이면 덮어쓰기). 첫 지점은 자동으로 활성 지점."""
    _store[branch_name] = [p.model_copy() for p in procedures]

    entry = BranchInfo(
        name=branch_name,
        imported_at=datetime.now().isoformat(timespec="seconds"),
        row_count=len(procedures),
    )
    for i, b in enumerate(_manifest.branches):
        if b.name == branch_name:
            _manifest.branches[i] = entry
            break
    else:
        _manifest.branches.append(entry)

    if not _manifest.active_branch:
        _manifest.active_branch = branch_name

    logger.info("지점 수가 저장: %s (%d행)", branch_name, len(procedures))
    return entry


def load_branch_data(branch_name: str | None) -> list[BranchProcedure]:
    if not branch_name:
        return []
    return list(_store.get(branch_name, []))


def delete_branch_data(branch_name: str) -> None:
    _store.pop(branch_name, None)
    _manifest.branches = [b for b in _manifest.branches if b.name != branch_name]
    if _manifest.active_branch == branch_name:
        _manifest.active_branch = _manifest.branches[0].name if _manifest.branches else None


def delete_all_branch_data() -> None:
    _store.clear()
    _manifest.branches = []
    _manifest.active_branch = None


# ── Query ────────────────────────────────────────────────────────

def search_branch_procedures(
    branch_name: str,
    query: str = "",
    category: str = "",
) -> list[BranchProcedure]:
    """지점 수가표 필터: 대분류 일치 + 이름 포함 (공백 무시, 대소문자 무시)."""
    data = load_branch_data(branch_name)
    if not query and not category:
        return data

    q = _normalize(query)
    return [
        p for p in data
        if (not category or p.category == category)
        and (not q or q in _normalize(p.name))
    ]


def extract_categories(data: list[BranchProcedure]) -> list[str]:
    return sorted({p.category.strip() for p in data if p.category and p.category.strip()})


def get_branch_storage_stats() -> dict[str, int]:
    return {
        "total_branches": len(_manifest.branches),
        "total_rows": sum(b.row_count for b in _manifest.branches),
    }
