"""
Recall model - Bayesian forgetting curve.

Implements the Ebisu model:
- Recall probability at the model's half-life is Beta(alpha, beta) distributed
- Recall decays exponentially, so at elapsed time t the recall probability
  is that Beta variable raised to t / half_life
- A quiz result updates the Beta via the exact posterior moments, moment
  matched back to a Beta at a (possibly rebalanced) time horizon

Unlike upstream Ebisu's updateRecall, which always matches moments at the
quiz time and then rebalances, the first horizon here is the model's
half-life, or the elapsed time after a success past the half-life.

Based on:
- Fasih, "Ebisu: intelligent quiz scheduling"
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .errors import MalformedAnnotationError

SECONDS_PER_HOUR = 3600.0

# Elapsed time used when a review happens at (or before) the last review.
MIN_ELAPSED_HOURS = 1e-6

# Rebalance when alpha and beta drift further apart than this factor
REBALANCE_RATIO = 2.0


# =============================================================================
# Special functions
# =============================================================================


def betaln(a: float, b: float) -> float:
    """Log of the Beta function."""
    return math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)


def binomln(n: int, k: int) -> float:
    """Log of the binomial coefficient."""
    return -betaln(1 + n - k, 1 + k) - math.log(n + 1)


def logsumexp(values: list[float], signs: list[float]) -> float:
    """log(sum(sign * exp(value))); the signed sum must be positive."""
    top = max(values)
    total = sum(s * math.exp(v - top) for v, s in zip(values, signs))
    if total <= 0:
        raise ValueError("signed logsumexp of a non-positive sum")
    return math.log(total) + top


def _mean_var_to_beta(mean: float, var: float) -> tuple[float, float]:
    tmp = mean * (1 - mean) / var - 1
    return mean * tmp, (1 - mean) * tmp


# =============================================================================
# Model
# =============================================================================


def elapsed_hours(since: datetime, now: datetime) -> float:
    return (now - since).total_seconds() / SECONDS_PER_HOUR


def ensure_utc(moment: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RecallModel:
    """Memory state of one quiz."""

    alpha: float
    beta: float
    half_life: float  # hours
    last_reviewed: datetime

    def __post_init__(self):
        if not (self.alpha > 0 and self.beta > 0 and self.half_life > 0):
            raise ValueError(
                f"Recall model parameters must be positive: {self.alpha}, {self.beta}, {self.half_life}"
            )
        self.last_reviewed = ensure_utc(self.last_reviewed)

    # -------------------------------------------------------------------------
    # Prediction
    # -------------------------------------------------------------------------

    def log_predict(self, now: datetime) -> float:
        """Log of the expected recall probability at `now`."""
        elapsed = max(0.0, elapsed_hours(self.last_reviewed, ensure_utc(now)))
        delta = elapsed / self.half_life
        return betaln(self.alpha + delta, self.beta) - betaln(self.alpha, self.beta)

    def predict(self, now: datetime) -> float:
        """Expected recall probability (0-1) at `now`."""
        return math.exp(self.log_predict(now))

    def half_life_hours(self, percentile: float = 0.5, tolerance: float = 1e-6) -> float:
        """
        Hours after the last review at which predicted recall drops to `percentile`.

        Bisection on the decay factor, which predicted recall is strictly
        decreasing in.
        """
        target = math.log(percentile)
        base = betaln(self.alpha, self.beta)

        def log_recall(delta: float) -> float:
            return betaln(self.alpha + delta, self.beta) - base

        low, high = 0.0, 1.0
        while log_recall(high) > target:
            low, high = high, high * 2
        while high - low > tolerance * high:
            mid = (low + high) / 2
            if log_recall(mid) > target:
                low = mid
            else:
                high = mid
        return (low + high) / 2 * self.half_life

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def update(self, success: bool, now: datetime) -> None:
        """Bayesian update after an actual quiz, then mark reviewed at `now`."""
        now = ensure_utc(now)
        elapsed = max(MIN_ELAPSED_HOURS, elapsed_hours(self.last_reviewed, now))
        # Moments are matched near the posterior's half-life, which a late
        # success pushes out towards the elapsed time
        horizon = elapsed if success and elapsed > self.half_life else self.half_life
        alpha, beta, half_life = self._posterior(success, elapsed, horizon)
        if alpha > REBALANCE_RATIO * beta or beta > REBALANCE_RATIO * alpha:
            horizon = RecallModel(alpha, beta, half_life, now).half_life_hours()
            alpha, beta, half_life = self._posterior(success, elapsed, horizon)
        self.alpha, self.beta, self.half_life = alpha, beta, half_life
        self.last_reviewed = max(self.last_reviewed, now)

    def passive_update(self, now: datetime) -> None:
        """Mark reviewed at `now` without learning anything about recall."""
        self.last_reviewed = max(self.last_reviewed, ensure_utc(now))

    def _posterior(self, success: bool, elapsed: float, horizon: float) -> tuple[float, float, float]:
        """Posterior Beta at time `horizon` after one binary quiz at `elapsed`."""
        delta = elapsed / self.half_life
        # horizon / half_life, the exponent of the prior's recall at `horizon`
        scale = horizon / self.half_life
        successes = 1 if success else 0
        failures = 1 - successes

        coefficients = [binomln(failures, i) for i in range(failures + 1)]
        signs = [(-1.0) ** i for i in range(failures + 1)]

        def log_moment(m: int) -> float:
            values = [
                coefficients[i] + betaln(self.alpha + delta * (successes + i) + m * scale, self.beta)
                for i in range(failures + 1)
            ]
            return logsumexp(values, signs)

        log_denominator = log_moment(0)
        mean = math.exp(log_moment(1) - log_denominator)
        second = math.exp(log_moment(2) - log_denominator)
        var = second - mean * mean
        if not (0 < mean < 1) or var <= 0:
            raise ValueError(f"Degenerate recall posterior (mean={mean}, var={var})")
        alpha, beta = _mean_var_to_beta(mean, var)
        return alpha, beta, horizon

    # -------------------------------------------------------------------------
    # Construction and text form
    # -------------------------------------------------------------------------

    @classmethod
    def create_default(cls, half_life: float, confidence: float, now: datetime) -> "RecallModel":
        """Fresh model: recall at `half_life` is Beta(confidence, confidence)."""
        return cls(alpha=confidence, beta=confidence, half_life=half_life, last_reviewed=now)

    def params(self) -> tuple[float, float, float]:
        return (self.alpha, self.beta, self.half_life)

    def copy(self) -> "RecallModel":
        return RecallModel(self.alpha, self.beta, self.half_life, self.last_reviewed)

    def to_annotation(self, date_separator: str = ";", field_separator: str = ",") -> str:
        """`2019-01-01T00:00:00.000Z; 3.000e+00, 3.000e+00, 2.500e-01`"""
        stamp = self.last_reviewed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{self.last_reviewed.microsecond // 1000:03d}Z"
        numbers = f"{field_separator} ".join(f"{x:.3e}" for x in self.params())
        return f"{stamp}{date_separator} {numbers}"

    @classmethod
    def from_annotation(
        cls, text: str, date_separator: str = ";", field_separator: str = ","
    ) -> "RecallModel":
        """Parse `ISO; a, b, t`. A field separator after the date is accepted too."""
        text = text.strip()
        if date_separator in text:
            stamp, _, rest = text.partition(date_separator)
            chunks = [stamp] + rest.split(field_separator)
        else:
            chunks = text.split(field_separator)
        if len(chunks) != 4:
            raise MalformedAnnotationError(f"Expected a date and three numbers: {text!r}")
        try:
            last_reviewed = datetime.fromisoformat(chunks[0].strip().replace("Z", "+00:00"))
            alpha, beta, half_life = (float(c) for c in chunks[1:])
            return cls(alpha, beta, half_life, last_reviewed)
        except ValueError as e:
            raise MalformedAnnotationError(f"Bad recall model {text!r}: {e}") from e


def jittered(now: datetime, offset: timedelta) -> datetime:
    return ensure_utc(now) + offset
