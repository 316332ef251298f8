"""
intent 모듈 단위 테스트

이 모듈은 채팅 의도 분류 규칙과 예측 기간 추출을 테스트합니다.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from healthpulse.core.intent import (
    Explanation,
    GeneralChat,
    IntentContext,
    LocationQuery,
    PredictionRequest,
    TravelAdvice,
    classify_intent,
    days_to_weekend,
    explanation_rule,
    extract_horizon,
    extract_topic,
    intent_adapter,
    location_rule,
    prediction_rule,
    travel_rule,
)

# 2024-07-09 화요일
TUESDAY = date(2024, 7, 9)

def ctx(text: str, location=None) -> IntentContext:
    return IntentContext(text=text, lowered=text.lower(), location=location, today=TUESDAY)

class TestClassifyIntent:
    """의도 분류 테스트"""

    def test_location_query(self):
        intent = classify_intent("Is it safe in Tampines?", today=TUESDAY)
        assert intent == LocationQuery(location="tampines")

    def test_bare_place_name(self):
        assert classify_intent("Woodlands", today=TUESDAY) == LocationQuery(location="woodlands")

    def test_travel_with_prediction(self):
        intent = classify_intent("going to Orchard tomorrow", today=TUESDAY)
        assert isinstance(intent, TravelAdvice)
        assert intent.location == "orchard"
        assert intent.prediction_context is True

    def test_travel_without_prediction(self):
        intent = classify_intent("heading to Bedok", today=TUESDAY)
        assert intent == TravelAdvice(location="bedok", prediction_context=False)

    def test_prediction_request(self):
        intent = classify_intent("forecast for Bedok next week", today=TUESDAY)
        assert intent == PredictionRequest(location="bedok", horizon_days=7)

    def test_prediction_days(self):
        """시간 표현이 있으면 위치 패턴보다 예측이 우선"""
        intent = classify_intent("dengue in Yishun in 3 days", today=TUESDAY)
        assert intent == PredictionRequest(location="yishun", horizon_days=3)

    def test_explanation(self):
        assert classify_intent("what is dengue", today=TUESDAY) == Explanation(topic="dengue")
        assert classify_intent("explain the haze", today=TUESDAY) == Explanation(topic="psi")

    def test_health_catch_all(self):
        assert classify_intent("I need a doctor", today=TUESDAY) == Explanation(topic="general")

    def test_general_chat(self):
        assert classify_intent("hello there", today=TUESDAY) == GeneralChat()
        assert classify_intent("", today=TUESDAY) == GeneralChat()

class TestRules:
    """개별 규칙 테스트"""

    def test_explanation_rule(self):
        assert explanation_rule(ctx("how does covid spread")) == Explanation(topic="epidemic")
        assert explanation_rule(ctx("give me some tips")) == Explanation(topic="general")
        assert explanation_rule(ctx("tampines")) is None

    def test_travel_rule(self):
        assert travel_rule(ctx("visiting Sentosa", "sentosa")) == TravelAdvice(location="sentosa")
        assert travel_rule(ctx("sentosa", "sentosa")) is None

    def test_location_rule_skips_temporal(self):
        assert location_rule(ctx("risk in bedok", "bedok")) == LocationQuery(location="bedok")
        assert location_rule(ctx("risk in bedok tomorrow", "bedok")) is None

    def test_prediction_rule(self):
        assert prediction_rule(ctx("what is the outlook")) == PredictionRequest(horizon_days=1)
        assert prediction_rule(ctx("nothing here")) is None

class TestHorizon:
    """예측 기간 추출 테스트"""

    @pytest.mark.parametrize("message,days", [
        ("in 5 days", 5),
        ("3-day outlook", 3),
        ("tomorrow", 1),
        ("next week", 7),
        ("next month", 30),
        ("soon", 1),
    ])
    def test_extract(self, message, days):
        assert extract_horizon(message, TUESDAY) == days

    @pytest.mark.parametrize("message,days", [
        ("in 0 days", 1),
        ("in 90 days", 30),
        ("in 999 days", 30),
    ])
    def test_clamped_to_range(self, message, days):
        assert extract_horizon(message, TUESDAY) == days

    def test_custom_max(self):
        assert extract_horizon("in 10 days", TUESDAY, max_days=7) == 7
        intent = classify_intent("forecast Bedok in 10 days", today=TUESDAY, max_horizon_days=7)
        assert intent == PredictionRequest(location="bedok", horizon_days=7)

    def test_weekend(self):
        assert extract_horizon("this weekend", TUESDAY) == 4

    @pytest.mark.parametrize("today,days", [
        (date(2024, 7, 8), 5),   # 월
        (date(2024, 7, 12), 1),  # 금
        (date(2024, 7, 13), 1),  # 토
        (date(2024, 7, 14), 6),  # 일
    ])
    def test_days_to_weekend(self, today, days):
        assert days_to_weekend(today) == days

class TestTopic:
    """주제 추출 테스트"""

    @pytest.mark.parametrize("message,topic", [
        ("aedes mosquito bites", "dengue"),
        ("PM2.5 levels", "psi"),
        ("flu season", "epidemic"),
        ("weather", "general"),
    ])
    def test_extract_topic(self, message, topic):
        assert extract_topic(message) == topic

class TestIntentAdapter:
    """태그 유니온 검증 테스트"""

    def test_validate_by_kind(self):
        intent = intent_adapter.validate_python({"kind": "prediction_request", "horizon_days": 2})
        assert intent == PredictionRequest(horizon_days=2)

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            intent_adapter.validate_python({"kind": "smalltalk"})

    def test_frozen(self):
        intent = LocationQuery(location="bedok")
        with pytest.raises(ValidationError):
            intent.location = "tampines"
