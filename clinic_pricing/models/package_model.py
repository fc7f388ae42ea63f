from enum import Enum

from pydantic import BaseModel, Field


class PriceSource(str, Enum):
    MANUAL = "manual"
    TRIAL  = "trial"
    EVENT  = "event"
    BRANCH = "branch"


class PackageItem(BaseModel):
    """
    패키지 구성 시술 1개.
    individual_price × quantity = 해당 시술의 정가 기여분.
    """
    procedure_name: str
    quantity: int = Field(default=1, ge=1)
    individual_price: int = Field(default=0, ge=0)     # 0 = 미입력
    price_source: PriceSource = PriceSource.MANUAL
    procedure_id: str | None = None                    # 시술 라이브러리 매칭 시
    branch_category: str | None = None                 # 지점 수가 매칭 시 대분류

    @property
    def item_total(self) -> int:
        return self.individual_price * self.quantity


class Package(BaseModel):
    """
    벌크 텍스트 파싱 또는 수동 입력으로 만든 패키지.
    편집 중에는 items가 비어 있을 수 있음.
    """
    id: str
    name: str
    package_price: int = Field(default=0, ge=0)
    memo: str | None = None
    items: list[PackageItem] = Field(default_factory=list)


class ItemBreakdown(BaseModel):
    """패키지가를 정가 비율로 배분한 시술별 결과."""
    name: str
    quantity: int
    original_price: int          # individual_price × quantity
    allocated_price: int         # 패키지가 × (original_price / 정가 합계)
    savings_percent: float


class PackageSummary(BaseModel):
    total_regular_price: int
    package_price: int
    savings_amount: int          # 음수 = 패키지가가 정가 합계보다 비쌈
    savings_percent: float
    per_item_breakdown: list[ItemBreakdown] = Field(default_factory=list)


class DiscountApplication(BaseModel):
    """목표 할인율 일괄 적용 결과 + 피드백."""
    discount: float
    round_unit: int
    packages: list[Package]
    changed_count: int
    total_count: int
    total_before: int
    total_after: int

    @property
    def diff(self) -> int:
        return self.total_before - self.total_after
