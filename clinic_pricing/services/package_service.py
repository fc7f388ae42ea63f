"""
package_service.py — 패키지 이벤트 계산.

  - 정가 합계 / 절약 금액 / 할인율
  - 패키지가를 시술별 정가 비율로 배분 (반올림 오차 보정 없음)
  - 목표 할인율로 패키지가 일괄 산정
"""
import logging

from clinic_pricing.models.package_model import (
    DiscountApplication,
    ItemBreakdown,
    Package,
    PackageSummary,
)
from clinic_pricing.services.pricing_service import round_price
from clinic_pricing.utils.amount_utils import round_half_up
from clinic_pricing.utils.id_provider import IdFactory, uuid_id_factory

logger = logging.getLogger(__name__)


def compute_package_summary(pkg: Package | None) -> PackageSummary:
    if pkg is None or not pkg.items:
        return PackageSummary(
            total_regular_price=0,
            package_price=pkg.package_price if pkg else 0,
            savings_amount=0,
            savings_percent=0,
        )

    total_regular = sum(item.item_total for item in pkg.items)
    package_price = pkg.package_price
    savings_amount = total_regular - package_price
    savings_percent = (
        round_half_up(savings_amount / total_regular * 100, 1) if total_regular > 0 else 0
    )

    breakdown: list[ItemBreakdown] = []
    for item in pkg.items:
        item_total = item.item_total
        proportion = item_total / total_regular if total_regular > 0 else 0
        allocated = int(round_half_up(package_price * proportion))
        breakdown.append(ItemBreakdown(
            name=item.procedure_name,
            quantity=item.quantity,
            original_price=item_total,
            allocated_price=allocated,
            savings_percent=(
                round_half_up((1 - allocated / item_total) * 100, 1) if item_total > 0 else 0
            ),
        ))

    return PackageSummary(
        total_regular_price=total_regular,
        package_price=package_price,
        savings_amount=savings_amount,
        savings_percent=savings_percent,
        per_item_breakdown=breakdown,
    )


def calc_package_price_from_discount(pkg: Package, discount: float, round_unit: int = 1000) -> int:
    """정가 합계에 할인율(%) 적용 후 round_unit 단위 반올림. 정가 합계가 없으면 0."""
    total_regular = sum(item.item_total for item in pkg.items)
    if total_regular <= 0:
        return 0
    return round_price(total_regular * (1 - discount / 100), round_unit)


def apply_target_discount(
    packages: list[Package],
    discount: float,
    round_unit: int = 1000,
) -> DiscountApplication:
    """
    전체 패키지에 목표 할인율 적용.
    정가 합계가 없는 패키지는 그대로 두고, 변경 전/후 합계를 피드백으로 반환.
    """
    if discount <= 0 or discount >= 100:
        raise ValueError("할인율은 1~99% 사이로 입력하세요")

    updated: list[Package] = []
    changed = 0
    total_before = 0
    total_after = 0

    for pkg in packages:
        new_price = calc_package_price_from_discount(pkg, discount, round_unit)
        if new_price <= 0:
            updated.append(pkg.model_copy(deep=True))
            continue
        total_before += pkg.package_price
        total_after += new_price
        if new_price != pkg.package_price:
            changed += 1
        updated.append(pkg.model_copy(update={"package_price": new_price}, deep=True))

    logger.info("목표 할인율 %s%% 적용: %d/%d개 변경 (반올림 %d원 단위)",
                discount, changed, len(packages), round_unit)
    return DiscountApplication(
        discount=discount,
        round_unit=round_unit,
        packages=updated,
        changed_count=changed,
        total_count=len(packages),
        total_before=total_before,
        total_after=total_after,
    )


def duplicate_package(pkg: Package, id_factory: IdFactory | None = None) -> Package:
    """패키지 복제: 새 id + 이름 뒤 "(복사)", 구성 시술은 깊은 복사."""
    new_id = (id_factory or uuid_id_factory)()
    return pkg.model_copy(update={"id": new_id, "name": f"{pkg.name} (복사)"}, deep=True)
