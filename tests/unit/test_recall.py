"""
Unit tests for the recall model.

Run: pytest tests/unit/test_recall.py -v
"""
from datetime import datetime, timedelta, timezone

import pytest

from curtiz.errors import MalformedAnnotationError
from curtiz.recall import RecallModel, betaln, logsumexp


@pytest.fixture
def model(now):
    return RecallModel.create_default(0.25, 3.0, now)


class TestSpecialFunctions:
    def test_betaln_matches_closed_form(self):
        # B(1, 1) = 1, B(2, 3) = 1/12
        assert betaln(1, 1) == pytest.approx(0.0)
        assert betaln(2, 3) == pytest.approx(-2.4849066497880004)

    def test_signed_logsumexp(self):
        import math

        assert logsumexp([math.log(3), math.log(1)], [1, -1]) == pytest.approx(math.log(2))

    def test_signed_logsumexp_rejects_non_positive(self):
        with pytest.raises(ValueError):
            logsumexp([0.0, 0.0], [1, -1])


class TestPrediction:
    """Expected recall over time."""

    def test_recall_is_certain_right_after_review(self, model, now):
        assert model.predict(now) == pytest.approx(1.0)

    def test_recall_is_half_at_balanced_half_life(self, model, now):
        assert model.predict(now + timedelta(minutes=15)) == pytest.approx(0.5)

    def test_recall_decreases_with_time(self, model, now):
        probabilities = [model.predict(now + timedelta(hours=h)) for h in (0.1, 0.5, 1, 5, 50)]
        assert probabilities == sorted(probabilities, reverse=True)
        assert all(0 < p < 1 for p in probabilities)

    def test_prediction_before_last_review_is_clamped(self, model, now):
        assert model.predict(now - timedelta(hours=1)) == pytest.approx(1.0)

    def test_half_life_hours(self, model):
        assert model.half_life_hours() == pytest.approx(0.25, rel=1e-4)

    def test_naive_datetimes_are_utc(self, now):
        naive = RecallModel.create_default(0.25, 3.0, datetime(2019, 1, 1))
        assert naive.last_reviewed == now
        assert naive.predict(datetime(2019, 1, 1, 0, 15)) == pytest.approx(0.5)


class TestUpdate:
    """Bayesian and passive updates."""

    def test_success_lengthens_half_life(self, model, later):
        model.update(True, later)
        assert model.half_life_hours() > 0.25
        assert model.last_reviewed == later

    def test_failure_shortens_half_life(self, model, now):
        model.update(False, now + timedelta(minutes=10))
        assert model.half_life_hours() < 0.25

    def test_success_beats_failure(self, now, later):
        passed = RecallModel.create_default(0.25, 3.0, now)
        failed = RecallModel.create_default(0.25, 3.0, now)
        passed.update(True, later)
        failed.update(False, later)
        assert passed.predict(later + timedelta(hours=1)) > failed.predict(later + timedelta(hours=1))

    def test_success_after_a_long_absence(self, model, now):
        month = now + timedelta(days=30)
        model.update(True, month)
        assert model.alpha > 0 and model.beta > 0
        assert model.half_life_hours() > 0.25
        assert model.last_reviewed == month

    def test_update_at_review_time_is_finite(self, model, now):
        model.update(True, now)
        assert model.alpha > 0 and model.beta > 0 and model.half_life > 0

    def test_passive_update_only_moves_the_clock(self, model, later):
        before = model.params()
        model.passive_update(later)
        assert model.params() == before
        assert model.last_reviewed == later

    def test_last_reviewed_never_moves_backwards(self, model, now):
        model.passive_update(now - timedelta(days=1))
        assert model.last_reviewed == now

    def test_non_positive_parameters_rejected(self, now):
        with pytest.raises(ValueError):
            RecallModel(alpha=0, beta=3, half_life=0.25, last_reviewed=now)


class TestAnnotation:
    """Text form of a model."""

    def test_to_annotation(self, model):
        assert model.to_annotation() == "2019-01-01T00:00:00.000Z; 3.000e+00, 3.000e+00, 2.500e-01"

    def test_milliseconds_are_kept(self, now):
        model = RecallModel.create_default(0.25, 3.0, now + timedelta(milliseconds=123))
        assert model.to_annotation().startswith("2019-01-01T00:00:00.123Z;")

    def test_from_annotation(self, now):
        model = RecallModel.from_annotation("2019-01-01T00:00:00.000Z; 3.000e+00, 4.000e+00, 2.500e-01")
        assert model.params() == (3.0, 4.0, 0.25)
        assert model.last_reviewed == now

    def test_comma_after_date_accepted(self, now):
        model = RecallModel.from_annotation("2019-01-01T00:00:00.000Z, 3, 3, 0.25")
        assert model.params() == (3.0, 3.0, 0.25)
        assert model.last_reviewed.tzinfo is not None

    def test_annotation_round_trip(self, now):
        model = RecallModel(2.5, 3.5, 1.5, now + timedelta(hours=2))
        assert RecallModel.from_annotation(model.to_annotation()) == model

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "2019-01-01T00:00:00.000Z; 3, 3",
            "yesterday; 3, 3, 0.25",
            "2019-01-01T00:00:00.000Z; 3, three, 0.25",
            "2019-01-01T00:00:00.000Z; 3, -3, 0.25",
        ],
    )
    def test_malformed_annotation(self, text):
        with pytest.raises(MalformedAnnotationError):
            RecallModel.from_annotation(text)

    def test_utc_offset_normalized(self):
        model = RecallModel.from_annotation("2019-01-01T09:00:00.000+09:00; 3, 3, 0.25")
        assert model.last_reviewed == datetime(2019, 1, 1, tzinfo=timezone.utc)
