"""
FastAPI 라우터: 패키지 파싱/요약, 시술 가격 계산, 내보내기, 지점 수가 관리.
"""
import logging

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse

from clinic_pricing.config import settings
from clinic_pricing.models.api_model import (
    BranchMatchRequest,
    DiscountRequest,
    ExcelExportRequest,
    PackageWithSummary,
    ParseRequest,
    ParseResponse,
    PricingRequest,
    PricingResponse,
    TextExportRequest,
)
from clinic_pricing.models.package_model import Package, PackageSummary
from clinic_pricing.services.branch_service import (
    compare_multiple_procedures,
    compare_procedure_across_branches,
    search_procedures_across_branches,
)
from clinic_pricing.services.bulk_parser_service import parse_package_text
from clinic_pricing.services.csv_service import parse_branch_csv
from clinic_pricing.services.excel_service import generate_excel
from clinic_pricing.services.export_service import (
    generate_excel_text,
    generate_kakao_text,
    generate_package_excel_text,
    generate_package_kakao_text,
)
from clinic_pricing.services.mapping_service import match_branch_prices, match_procedure_prices
from clinic_pricing.services.package_service import apply_target_discount, compute_package_summary
from clinic_pricing.services.pricing_service import evaluate_items, resolve_round_unit
from clinic_pricing.utils import branch_store

router = APIRouter()
logger = logging.getLogger(__name__)


def _with_summaries(packages: list[Package]) -> ParseResponse:
    return ParseResponse(packages=[
        PackageWithSummary(package=p, summary=compute_package_summary(p)) for p in packages
    ])


def _require_branch(branch_name: str | None) -> str:
    name = branch_name or branch_store.get_active_branch()
    if not name or not branch_store.has_branch(name):
        raise HTTPException(status_code=404, detail=f"지점을 찾을 수 없습니다: {name or '(활성 지점 없음)'}")
    return name


# ─────────────────────────────────────────────────────────────────
# 패키지
# ─────────────────────────────────────────────────────────────────

@router.post("/packages/parse", response_model=ParseResponse)
async def parse_packages(req: ParseRequest):
    packages = parse_package_text(req.text)
    if req.procedures:
        packages = match_procedure_prices(packages, req.procedures)
    if req.branch_name:
        packages = match_branch_prices(packages, branch_store.load_branch_data(_require_branch(req.branch_name)))
    return _with_summaries(packages)


@router.post("/packages/summary", response_model=PackageSummary)
async def package_summary(pkg: Package):
    return compute_package_summary(pkg)


@router.post("/packages/discount")
async def package_discount(req: DiscountRequest):
    round_unit = resolve_round_unit(req.round_unit)
    try:
        result = apply_target_discount(req.packages, req.discount, round_unit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "discount":      result.discount,
        "round_unit":    result.round_unit,
        "changed_count": result.changed_count,
        "total_count":   result.total_count,
        "total_before":  result.total_before,
        "total_after":   result.total_after,
        "diff":          result.diff,
        "packages":      _with_summaries(result.packages).packages,
    }


@router.post("/packages/match-branch", response_model=ParseResponse)
async def package_match_branch(req: BranchMatchRequest):
    branch_name = _require_branch(req.branch_name)
    packages = match_branch_prices(req.packages, branch_store.load_branch_data(branch_name))
    return _with_summaries(packages)


# ─────────────────────────────────────────────────────────────────
# 시술 가격표
# ─────────────────────────────────────────────────────────────────

@router.post("/pricing/rows", response_model=PricingResponse)
async def pricing_rows(req: PricingRequest):
    round_unit = resolve_round_unit(req.round_unit)
    results = evaluate_items(req.items, round_unit)
    return PricingResponse(
        round_unit=round_unit,
        items=results,
        violations=[msg for r in results for msg in r.violations],
    )


# ─────────────────────────────────────────────────────────────────
# 내보내기
# ─────────────────────────────────────────────────────────────────

@router.post("/export/text", response_class=PlainTextResponse)
async def export_text(req: TextExportRequest):
    round_unit = resolve_round_unit(req.round_unit)
    results = evaluate_items(req.items, round_unit)

    parts: list[str] = []
    if req.format == "kakao":
        if results:
            parts.append(generate_kakao_text(results, round_unit))
        if req.packages:
            parts.append(generate_package_kakao_text(req.packages))
    else:
        if results:
            parts.append(generate_excel_text(results))
        if req.packages:
            parts.append(generate_package_excel_text(req.packages))
    return "\n\n".join(parts)


@router.post("/export/excel")
async def export_excel(req: ExcelExportRequest):
    round_unit = resolve_round_unit(req.round_unit)
    output_path = generate_excel(
        output_dir=settings.outputs_dir,
        packages=req.packages,
        items=evaluate_items(req.items, round_unit),
        clinic_name=req.clinic_name,
    )
    return FileResponse(
        path=output_path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=output_path.name,
    )


# ─────────────────────────────────────────────────────────────────
# 지점 수가
# ─────────────────────────────────────────────────────────────────

@router.post("/branches/import")
async def import_branch(
    branch_name: str = Form(..., description="지점명"),
    csv_file: UploadFile = File(..., description="지점 수가표 CSV"),
):
    max_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024
    content = await csv_file.read()
    if len(content) > max_bytes:
        raise HTTPException(status_code=413, detail=f"파일 크기는 {settings.MAX_FILE_SIZE_MB}MB 이하여야 합니다.")

    branch_name = branch_name.strip()
    if not branch_name:
        raise HTTPException(status_code=400, detail="지점명을 입력하세요.")

    try:
        result = parse_branch_csv(content)
    except ValueError as e:
        logger.warning("CSV 가져오기 실패 (%s): %s", csv_file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))

    info = branch_store.save_branch_data(branch_name, result.data)
    return {
        "branch":        info,
        "headers":       result.headers,
        "column_map":    result.column_map,
        "raw_row_count": result.raw_row_count,
    }


@router.get("/branches")
async def list_branches():
    return {
        "manifest": branch_store.load_manifest(),
        "stats":    branch_store.get_branch_storage_stats(),
    }


@router.get("/branches/search")
async def search_branches(q: str = "", limit: int = 20):
    return search_procedures_across_branches(q, limit)


@router.get("/branches/compare")
async def compare_branches(
    names: list[str] = Query(default=[]),
    branches: list[str] = Query(default=[]),
):
    if len(names) == 1 and not branches:
        return compare_procedure_across_branches(names[0])
    return compare_multiple_procedures(names, branches)


@router.get("/branches/{branch_name}/procedures")
async def branch_procedures(branch_name: str, query: str = "", category: str = ""):
    name = _require_branch(branch_name)
    return {
        "branch":     name,
        "categories": branch_store.extract_categories(branch_store.load_branch_data(name)),
        "procedures": branch_store.search_branch_procedures(name, query, category),
    }


@router.post("/branches/{branch_name}/activate")
async def activate_branch(branch_name: str):
    name = _require_branch(branch_name)
    branch_store.set_active_branch(name)
    return {"active_branch": name}


@router.delete("/branches/{branch_name}")
async def delete_branch(branch_name: str):
    name = _require_branch(branch_name)
    branch_store.delete_branch_data(name)
    return {"deleted": name, "active_branch": branch_store.get_active_branch()}
