from pydantic import BaseModel, Field


class BranchProcedure(BaseModel):
    """
    지점 수가표의 한 행 (CSV 가져오기 결과).
    """
    no: int = 0
    category: str = ""
    name: str
    standard_price: int = 0
    taxable: str = ""


class BranchInfo(BaseModel):
    name: str
    imported_at: str             # ISO format datetime
    row_count: int


class BranchManifest(BaseModel):
    branches: list[BranchInfo] = Field(default_factory=list)
    active_branch: str | None = None


class BranchComparison(BaseModel):
    """시술 1개에 대한 지점별 표준가격."""
    branch: str
    name: str
    standard_price: int
    category: str


class BranchPrice(BaseModel):
    branch: str
    price: int


class BranchSearchHit(BaseModel):
    """전 지점 자동완성 결과 (정규화 이름 기준 중복 제거)."""
    name: str
    category: str
    branches: list[BranchPrice] = Field(default_factory=list)


class ProcedurePriceMatrix(BaseModel):
    """여러 시술 동시 비교의 한 행: 지점명 → 표준가격."""
    name: str
    category: str
    prices: dict[str, int] = Field(default_factory=dict)


class ColumnMap(BaseModel):
    """CSV 헤더 → 표준 필드 인덱스 (-1 = 없음)."""
    no: int = -1
    category: int = -1
    name: int = -1
    standard_price: int = -1
    taxable: int = -1
    registered_date: int = -1


class CsvImportResult(BaseModel):
    headers: list[str]
    data: list[BranchProcedure]
    column_map: ColumnMap
    raw_row_count: int
