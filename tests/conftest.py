import pytest

from clinic_pricing.utils import branch_store


@pytest.fixture(autouse=True)
def clean_branch_store():
    """지점 저장소는 모듈 전역이므로 테스트마다 비움."""
    branch_store.delete_all_branch_data()
    yield
    branch_store.delete_all_branch_data()
