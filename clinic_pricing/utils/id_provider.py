"""
패키지/옵션 id 생성기.
파싱 로직은 id를 직접 만들지 않고 주입받은 factory를 호출 → 테스트에서 결정적 id 사용 가능.
"""
import itertools
import uuid
from typing import Callable

IdFactory = Callable[[], str]


def uuid_id_factory() -> str:
    return str(uuid.uuid4())


class SequentialIdFactory:
    """"pkg-1", "pkg-2", ... 순서대로 발급."""

    def __init__(self, prefix: str = "pkg", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
