import math
import re
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# 숫자 토큰: "5.5", "99,000", "690000" (런 하나당 매치 1번, 한 줄 선형 스캔)
_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
# 숫자 토큰 바로 뒤 단위
_UNIT_RE   = re.compile(r"\s*(만|원)")

# 정수부 자릿수 상한 (조 단위 이상은 가격으로 보지 않음)
MAX_PRICE_DIGITS = 15

TRIAL_LABEL = "1체"
EVENT_LABEL = "이벤트"

_TRIAL_RE = re.compile(rf"{TRIAL_LABEL}가?")
_EVENT_RE = re.compile(rf"{EVENT_LABEL}가?")


@dataclass(frozen=True)
class PriceTokens:
    """시술 1개에 붙은 가격 표현 해석 결과 (0 = 미기재)."""
    trial: int = 0
    event: int = 0


def round_half_up(value: float, digits: int = 0) -> float:
    """
    0.5를 항상 올림하는 반올림 (내장 round()의 은행가 반올림 대신).
    round_half_up(2.5) → 3, round_half_up(12.25, 1) → 12.3
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _tokenize(text: str) -> list[tuple[str, str]]:
    """"3회 99,000원" → [("3", ""), ("99,000", "원")]"""
    tokens: list[tuple[str, str]] = []
    for m in _NUMBER_RE.finditer(text):
        unit = _UNIT_RE.match(text, m.end())
        tokens.append((m.group(0), unit.group(1) if unit else ""))
    return tokens


def _to_won(number: str, unit: str) -> int:
    integer, _, fraction = number.replace(",", "").partition(".")
    if len(integer) > MAX_PRICE_DIGITS:
        logger.debug("가격 자릿수 초과 (%d자리) → 0", len(integer))
        return 0
    try:
        if unit == "만":
            return int(round_half_up(float(f"{integer}.{fraction or 0}") * 10000))
        return int(integer)
    except (ValueError, OverflowError):
        logger.debug("가격 변환 실패: %r", number)
        return 0


def parse_korean_price(text: str | None) -> int:
    """
    한국어 가격 문자열 → 원 단위 정수
    - 만 단위: "5.5만원" → 55000, "69만" → 690000
    - 원 단위: "99,000원" → 99000, "690,000" → 690000
    - "원"이 붙은 숫자를 앞쪽의 맨 숫자보다 우선: "3회 99,000원" → 99000
    - 빈 문자열/None/인식 불가/자릿수 초과 = 0 (예외 없음)
    """
    if not text or not isinstance(text, str):
        return 0

    tokens = _tokenize(text)
    if not tokens:
        return 0

    for wanted in ("만", "원"):
        for number, unit in tokens:
            if unit == wanted:
                return _to_won(number, unit)

    number, _ = tokens[0]
    return _to_won(number, "")


def _price_after(label_re: re.Pattern, other_re: re.Pattern, text: str) -> int:
    """
    라벨 뒤 첫 가격 표현. 다음 "/" 또는 다른 라벨 앞까지만 탐색.
    "이벤트 특가 12.9만원" → 129000
    """
    m = label_re.search(text)
    if not m:
        return 0

    start = m.end()
    end = len(text)
    other = other_re.search(text, start)
    if other:
        end = other.start()
    slash = text.find("/", start, end)
    if slash >= 0:
        end = slash
    return parse_korean_price(text[start:end])


def extract_prices(text: str | None) -> PriceTokens:
    """
    "1체 5.5만원 / 이벤트 12.9만원" → PriceTokens(trial=55000, event=129000)

    "1체"(체험가)와 "이벤트"(이벤트가) 라벨을 각각 독립적으로 탐색.
    라벨이 하나도 없고 가격만 있으면 이벤트가로 간주.
    """
    if not text:
        return PriceTokens()

    has_trial = TRIAL_LABEL in text
    has_event = EVENT_LABEL in text

    if not has_trial and not has_event:
        return PriceTokens(event=parse_korean_price(text))

    return PriceTokens(
        trial=_price_after(_TRIAL_RE, _EVENT_RE, text) if has_trial else 0,
        event=_price_after(_EVENT_RE, _TRIAL_RE, text) if has_event else 0,
    )


def format_number(num: int | float | None) -> str:
    """1234567 → "1,234,567" (None → "-")"""
    if num is None or (isinstance(num, float) and math.isnan(num)):
        return "-"
    if isinstance(num, float) and num.is_integer():
        num = int(num)
    return f"{num:,}"


def format_price(num: int | float | None) -> str:
    """1234567 → "1,234,567원" (None → "-")"""
    if num is None or (isinstance(num, float) and math.isnan(num)):
        return "-"
    return f"{format_number(num)}원"
