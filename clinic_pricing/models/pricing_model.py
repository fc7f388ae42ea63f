from enum import Enum

from pydantic import BaseModel, Field


class ProcedureType(str, Enum):
    SESSION = "session"   # 회차 기반 (1/3/5/10회)
    SHOT    = "shot"      # 샷수 기반 (100/300/600샷)
    MIXED   = "mixed"     # 혼합형 (N샷 × M회)


class RowType(str, Enum):
    TRIAL      = "trial"
    EVENT      = "event"
    OPTION     = "option"
    COMPETITOR = "competitor"


class Procedure(BaseModel):
    """시술 라이브러리 항목 (사용자가 관리하는 가격표)."""
    id: str
    name: str
    trial_price: int = Field(default=0, ge=0)
    event_price: int = Field(default=0, ge=0)


class PricingOption(BaseModel):
    id: str | None = None
    sessions: int | None = None   # None → 1회
    shots: int | None = None      # None → base_shots
    price: int = 0


class Competitor(BaseModel):
    enabled: bool = False
    name: str = ""
    price: int = 0
    sessions: int | None = None
    shots: int | None = None


class PricingItem(BaseModel):
    """
    가격을 책정할 시술 1개.
    체험가/이벤트가 + 다회차(또는 다샷) 옵션 + 경쟁사 비교.
    """
    id: str | None = None
    name: str = ""
    type: ProcedureType = ProcedureType.SESSION
    trial_price: int = 0
    event_price: int = 0
    base_shots: int | None = None  # shot/mixed 기준 샷수 (없으면 100)
    options: list[PricingOption] = Field(default_factory=list)
    competitor: Competitor | None = None


class Row(BaseModel):
    """
    가격 계산 결과 행. 저장하지 않고 매번 재계산.
    violation은 validation_service만 설정.
    """
    row_type: RowType
    label: str
    price: int
    sessions: int
    shots: int
    total_quantity: int
    unit_price: int
    discount_from_trial: float | None = None
    discount_from_event: float | None = None
    competitor_advantage: float | None = None
    violation: bool = False


class ValidationResult(BaseModel):
    rows: list[Row]
    violations: list[str] = Field(default_factory=list)


class ItemResult(BaseModel):
    """시술 1개의 계산 + 검증 결과 (내보내기/API 응답용)."""
    name: str
    type: ProcedureType
    unit_label: str
    rows: list[Row]
    violations: list[str] = Field(default_factory=list)

    @property
    def has_competitor(self) -> bool:
        return any(r.row_type == RowType.COMPETITOR for r in self.rows)
