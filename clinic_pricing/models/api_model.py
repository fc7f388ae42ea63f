from typing import Literal

from pydantic import BaseModel, Field

from clinic_pricing.models.package_model import Package, PackageSummary
from clinic_pricing.models.pricing_model import ItemResult, PricingItem, Procedure


class ParseRequest(BaseModel):
    text: str
    procedures: list[Procedure] = Field(default_factory=list)   # 라이브러리 자동 매칭용
    branch_name: str | None = None                               # 지점 수가 자동 매칭용


class PackageWithSummary(BaseModel):
    package: Package
    summary: PackageSummary


class ParseResponse(BaseModel):
    packages: list[PackageWithSummary]


class DiscountRequest(BaseModel):
    packages: list[Package]
    discount: float
    round_unit: int | None = None


class BranchMatchRequest(BaseModel):
    packages: list[Package]
    branch_name: str | None = None   # None → 활성 지점


class PricingRequest(BaseModel):
    items: list[PricingItem]
    round_unit: int | None = None


class PricingResponse(BaseModel):
    round_unit: int
    items: list[ItemResult]
    violations: list[str]


class TextExportRequest(BaseModel):
    format: Literal["kakao", "tsv"] = "kakao"
    items: list[PricingItem] = Field(default_factory=list)
    packages: list[Package] = Field(default_factory=list)
    round_unit: int | None = None


class ExcelExportRequest(BaseModel):
    items: list[PricingItem] = Field(default_factory=list)
    packages: list[Package] = Field(default_factory=list)
    round_unit: int | None = None
    clinic_name: str = "clinic"
