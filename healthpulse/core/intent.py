"""
Chat intent classification for Health Pulse.

Free-text questions are mapped to a small tagged union of intents by
an ordered list of rules. Each rule is a plain function that either
returns an intent or None, so rules can be tested one at a time. The
scoring engine never sees raw chat text; callers pass it the resolved
location name and horizon carried by the intent.
"""

import re
from datetime import date
from typing import Annotated, Callable, List, Literal, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .forecast import DEFAULT_MAX_HORIZON_DAYS
from .gazetteer import Gazetteer, default_gazetteer

Topic = Literal["dengue", "psi", "epidemic", "general"]

class _Intent(BaseModel):
    model_config = ConfigDict(frozen=True)

class LocationQuery(_Intent):
    """현재 위치 위험 조회"""
    kind: Literal["location_query"] = "location_query"
    location: Optional[str] = None

class TravelAdvice(_Intent):
    """방문 계획 조언"""
    kind: Literal["travel_advice"] = "travel_advice"
    location: Optional[str] = None
    prediction_context: bool = False

class PredictionRequest(_Intent):
    """N일 후 예측 요청"""
    kind: Literal["prediction_request"] = "prediction_request"
    location: Optional[str] = None
    horizon_days: int = 1

class Explanation(_Intent):
    """질병/대기질 설명 요청"""
    kind: Literal["explanation"] = "explanation"
    topic: Topic = "general"

class GeneralChat(_Intent):
    kind: Literal["general_chat"] = "general_chat"

Intent = Annotated[
    Union[LocationQuery, TravelAdvice, PredictionRequest, Explanation, GeneralChat],
    Field(discriminator="kind"),
]

intent_adapter: TypeAdapter = TypeAdapter(Intent)

# 패턴 목록
EXPLANATION_PATTERNS = (
    "what is", "what are", "explain", "tell me about", "how does", "why does",
    "prevention", "prevent", "measures", "precautions",
    "symptom", "signs", "treatment", "causes", "cure", "medicine",
    "protect", "avoid", "safety", "tips", "guidance",
    "first aid", "when to see doctor", "medical help", "emergency",
)
HEALTH_TOPIC_WORDS = (
    "dengue", "psi", "air quality", "covid", "mosquito", "fever",
    "pollution", "haze", "epidemic", "hospital",
)
TRAVEL_PATTERNS = (
    "going to", "traveling to", "travelling to", "visiting", "heading to", "trip to",
    "travel to", "planning to visit", "will be at", "going out to", "journey to", "moving to",
)
LOCATION_PATTERNS = (
    "risk in", "safe in", "conditions in", "situation in", "health in", "dangers in",
    "dengue in", "air quality in", "psi in", "cases in", "clusters in",
    "how is", "what about", "info about", "data for", "stats for",
)
PREDICTION_PATTERNS = (
    "predict", "forecast", "future", "tomorrow", "next week", "weekend", "upcoming",
    "will be", "expect", "outlook", "projection", "trend", "what will happen",
    "next day", "later this week", "anticipated", "projected",
)
TRAVEL_PREDICTION_WORDS = ("tomorrow", "next", "predict", "forecast", "will be", "expected")
HEALTH_CATCH_ALL = ("health", "medical", "hospital", "doctor")

TOPIC_KEYWORDS: Tuple[Tuple[Topic, Tuple[str, ...]], ...] = (
    ("dengue", ("dengue", "mosquito", "fever", "aedes")),
    ("psi", ("psi", "air quality", "pollution", "haze", "pm2.5", "smog")),
    ("epidemic", ("covid", "coronavirus", "pandemic", "virus", "epidemic", "flu")),
)

_DAYS_RE = re.compile(r"\b(?:in\s+)?(\d{1,3})\s*-?\s*days?\b")

class IntentContext(NamedTuple):
    """규칙 평가 입력"""
    text: str
    lowered: str
    location: Optional[str]
    today: date
    max_horizon_days: int = DEFAULT_MAX_HORIZON_DAYS

IntentRule = Callable[[IntentContext], Optional[_Intent]]

def _has_any(lowered: str, patterns) -> bool:
    return any(p in lowered for p in patterns)

def extract_topic(message: str) -> Topic:
    """메시지의 건강 주제를 추출합니다."""
    lowered = message.lower()
    for topic, words in TOPIC_KEYWORDS:
        if _has_any(lowered, words):
            return topic
    return "general"

def days_to_weekend(today: date) -> int:
    """다음 토요일까지 남은 일수 (토요일이면 일요일까지 1일)"""
    weekday = today.weekday()  # 월=0, 토=5, 일=6
    if weekday == 5:
        return 1
    return (5 - weekday) % 7

def extract_horizon(
    message: str,
    today: Optional[date] = None,
    max_days: int = DEFAULT_MAX_HORIZON_DAYS,
) -> int:
    """
    메시지에서 예측 기간을 추출합니다.

    "in N days" → N, tomorrow → 1, weekend → 토요일까지, week → 7, month → 30, 그 외 1.
    결과는 1 ~ max_days 범위로 제한합니다.
    """
    lowered = message.lower()
    today = today or date.today()
    return max(1, min(max_days, _raw_horizon(lowered, today)))

def _raw_horizon(lowered: str, today: date) -> int:
    m = _DAYS_RE.search(lowered)
    if m:
        return int(m.group(1))
    if "tomorrow" in lowered:
        return 1
    if "weekend" in lowered:
        return days_to_weekend(today)
    if "week" in lowered:
        return 7
    if "month" in lowered:
        return 30
    return 1

def _is_temporal(lowered: str) -> bool:
    return _has_any(lowered, PREDICTION_PATTERNS) or _DAYS_RE.search(lowered) is not None

# ---- 규칙 (순서대로 평가) ----

def explanation_rule(ctx: IntentContext) -> Optional[_Intent]:
    if not _has_any(ctx.lowered, EXPLANATION_PATTERNS):
        return None
    if _has_any(ctx.lowered, HEALTH_TOPIC_WORDS):
        return Explanation(topic=extract_topic(ctx.text))
    return Explanation(topic="general")

def travel_rule(ctx: IntentContext) -> Optional[_Intent]:
    if not _has_any(ctx.lowered, TRAVEL_PATTERNS):
        return None
    return TravelAdvice(
        location=ctx.location,
        prediction_context=_has_any(ctx.lowered, TRAVEL_PREDICTION_WORDS),
    )

def location_rule(ctx: IntentContext) -> Optional[_Intent]:
    if _has_any(ctx.lowered, LOCATION_PATTERNS) and not _is_temporal(ctx.lowered):
        return LocationQuery(location=ctx.location)
    if ctx.location is not None and not _is_temporal(ctx.lowered):
        return LocationQuery(location=ctx.location)
    return None

def prediction_rule(ctx: IntentContext) -> Optional[_Intent]:
    if not _is_temporal(ctx.lowered):
        return None
    return PredictionRequest(
        location=ctx.location,
        horizon_days=extract_horizon(ctx.lowered, ctx.today, ctx.max_horizon_days),
    )

def health_rule(ctx: IntentContext) -> Optional[_Intent]:
    if _has_any(ctx.lowered, HEALTH_CATCH_ALL):
        return Explanation(topic="general")
    return None

def general_chat_rule(ctx: IntentContext) -> Optional[_Intent]:
    return GeneralChat()

INTENT_RULES: List[IntentRule] = [
    explanation_rule,
    travel_rule,
    location_rule,
    prediction_rule,
    health_rule,
    general_chat_rule,
]

def classify_intent(
    message: str,
    gazetteer: Optional[Gazetteer] = None,
    today: Optional[date] = None,
    max_horizon_days: int = DEFAULT_MAX_HORIZON_DAYS,
):
    """
    메시지의 의도를 분류합니다.

    Args:
        message: 사용자 메시지
        gazetteer: 지명 사전 (None이면 내장 사전)
        today: 기준 날짜 (주말 계산용)
        max_horizon_days: 예측 기간 상한

    Returns:
        INTENT_RULES 중 처음 일치한 규칙의 의도
    """
    if gazetteer is None:
        gazetteer = default_gazetteer()
    resolved = gazetteer.resolve(message)
    ctx = IntentContext(
        text=message or "",
        lowered=(message or "").lower(),
        location=resolved.name if resolved else None,
        today=today or date.today(),
        max_horizon_days=max_horizon_days,
    )
    for rule in INTENT_RULES:
        intent = rule(ctx)
        if intent is not None:
            return intent
    return GeneralChat()
