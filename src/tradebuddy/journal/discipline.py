"""Process-discipline analytics: does following the plan pay?

Reads the self-reported process fields of closed trades (confidence,
execution quality, checklist completion, planned risk, trade number of
the day) and relates them to realised R:

* ``compute_correlations``              Pearson r of each rating against R
* ``compute_rule_impact``               R expectancy by checklist tier
* ``compute_risk_behavior``             planned-risk level, spread and reaction
* ``compute_trade_number_performance``  R expectancy by nth trade of the day
* ``compute_discipline_score``          0-100 composite of the above

Trades missing a field are left out of the statistic that needs it;
a missing rating is never read as 0.

Discipline score::

    score = 0.35 * risk_consistency
          + 0.35 * adherence            (50 + 20 * (high-tier R - low-tier R))
          + 0.30 * emotional_stability  (100 - losses tagged with an emotion)
          - overtrading_penalty         (10 per re-entry within 2h of two losses, max 30)

clamped to [0, 100].
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta, timezone
from itertools import groupby

from .record import NEUTRAL_EMOTION, NormalizedTrade, closed_trades
from .rolling import RollingMetricsResult
from .stats import mean, pearson

CHECKLIST_HIGH = 90.0
CHECKLIST_MEDIUM = 70.0

ADHERENCE_BASE = 50.0
ADHERENCE_POINTS_PER_R = 20.0
RAPID_REENTRY = timedelta(hours=2)
OVERTRADING_POINTS = 10
OVERTRADING_CAP = 30

# Ordinal mindset quality; unknown labels score as neutral.
EMOTION_SCORE: dict[str, float] = {
    "calm": 5,
    "confident": 5,
    "satisfied": 4,
    "excited": 3,
    "neutral": 3,
    "nervous": 2,
    "frustrated": 1,
    "fearful": 1,
    "greedy": 1,
    "fomo": 1,
    "disappointed": 1,
}
NEUTRAL_EMOTION_SCORE = 3.0


def _round_score(value: float) -> int:
    """Round half up and clamp to [0, 100]."""
    return max(0, min(100, math.floor(value + 0.5)))


@dataclass(frozen=True)
class OutcomeCorrelations:
    """Pearson r of each process rating against realised R (None if undefined)."""

    confidence_to_r: float | None = None
    execution_to_r: float | None = None
    checklist_to_r: float | None = None
    emotion_to_r: float | None = None
    confidence_samples: int = 0
    execution_samples: int = 0
    checklist_samples: int = 0


@dataclass(frozen=True)
class RuleTier:
    trades: int = 0
    expectancy_r: float | None = None


@dataclass(frozen=True)
class RuleImpact:
    """R expectancy by checklist completion: >= 90, 70-90, < 70."""

    high: RuleTier = field(default_factory=RuleTier)
    medium: RuleTier = field(default_factory=RuleTier)
    low: RuleTier = field(default_factory=RuleTier)

    @property
    def high_vs_low(self) -> float | None:
        if self.high.expectancy_r is None or self.low.expectancy_r is None:
            return None
        return self.high.expectancy_r - self.low.expectancy_r


@dataclass(frozen=True)
class RiskBehavior:
    average_risk_percent: float | None = None
    risk_variance: float | None = None  # population
    risk_after_loss: float | None = None
    risk_after_win: float | None = None
    risk_consistency_score: int = 0


@dataclass(frozen=True)
class TradeNumberPerformance:
    expectancy_r: dict[int, float] = field(default_factory=dict)
    trades: dict[int, int] = field(default_factory=dict)
    best: int | None = None
    worst: int | None = None


@dataclass(frozen=True)
class DisciplinePoint:
    index: int
    score: int


@dataclass(frozen=True)
class DisciplineScore:
    score: int | None = None
    risk_component: float = 0.0
    adherence_component: float = ADHERENCE_BASE
    emotional_stability: float = 100.0
    overtrading_penalty: int = 0
    rapid_reentries: int = 0
    trend: list[DisciplinePoint] = field(default_factory=list)


@dataclass(frozen=True)
class DisciplineReport:
    correlations: OutcomeCorrelations = field(default_factory=OutcomeCorrelations)
    rule_impact: RuleImpact = field(default_factory=RuleImpact)
    risk_behavior: RiskBehavior = field(default_factory=RiskBehavior)
    trade_numbers: TradeNumberPerformance = field(default_factory=TradeNumberPerformance)
    discipline: DisciplineScore = field(default_factory=DisciplineScore)


# ---------------------------------------------------------------------- #
# Correlations                                                             #
# ---------------------------------------------------------------------- #

def _paired(closed: list[NormalizedTrade], attr: str) -> tuple[list[float], list[float]]:
    xs: list[float] = []
    rs: list[float] = []
    for t in closed:
        value = getattr(t, attr)
        r = t.r_value
        if value is not None and r is not None:
            xs.append(value)
            rs.append(r)
    return xs, rs


def emotion_score(emotion: str) -> float:
    return float(EMOTION_SCORE.get(emotion.lower(), NEUTRAL_EMOTION_SCORE))


def compute_correlations(trades: list[NormalizedTrade]) -> OutcomeCorrelations:
    closed = closed_trades(trades)
    conf = _paired(closed, "confidence_level")
    exe = _paired(closed, "execution_quality")
    check = _paired(closed, "checklist_completion_percent")

    with_r = [t for t in closed if t.r_value is not None]
    emotion_to_r = pearson(
        [emotion_score(t.emotion) for t in with_r],
        [t.r_value for t in with_r],
    )

    return OutcomeCorrelations(
        confidence_to_r=pearson(*conf),
        execution_to_r=pearson(*exe),
        checklist_to_r=pearson(*check),
        emotion_to_r=emotion_to_r,
        confidence_samples=len(conf[0]),
        execution_samples=len(exe[0]),
        checklist_samples=len(check[0]),
    )


# ---------------------------------------------------------------------- #
# Rule impact                                                              #
# ---------------------------------------------------------------------- #

def _tier(trades: list[NormalizedTrade]) -> RuleTier:
    return RuleTier(
        trades=len(trades),
        expectancy_r=mean(t.r_value for t in trades if t.r_value is not None),
    )


def compute_rule_impact(trades: list[NormalizedTrade]) -> RuleImpact:
    """Split closed trades by checklist completion.  Unrecorded checklists are skipped."""
    high: list[NormalizedTrade] = []
    medium: list[NormalizedTrade] = []
    low: list[NormalizedTrade] = []
    for t in closed_trades(trades):
        pct = t.checklist_completion_percent
        if pct is None:
            continue
        if pct >= CHECKLIST_HIGH:
            high.append(t)
        elif pct >= CHECKLIST_MEDIUM:
            medium.append(t)
        else:
            low.append(t)
    return RuleImpact(high=_tier(high), medium=_tier(medium), low=_tier(low))


# ---------------------------------------------------------------------- #
# Risk behaviour                                                           #
# ---------------------------------------------------------------------- #

def compute_risk_behavior(trades: list[NormalizedTrade]) -> RiskBehavior:
    closed = closed_trades(trades)
    risks = [t.risk_percent for t in closed if t.risk_percent is not None]
    if not risks:
        return RiskBehavior()

    average = mean(risks)
    variance = mean((r - average) ** 2 for r in risks)

    after_loss: list[float] = []
    after_win: list[float] = []
    for prev, curr in zip(closed, closed[1:]):
        if curr.risk_percent is None:
            continue
        if prev.pnl < 0:
            after_loss.append(curr.risk_percent)
        elif prev.pnl > 0:
            after_win.append(curr.risk_percent)

    consistency = 0
    if average:
        cv = math.sqrt(variance) / average
        consistency = _round_score((1.0 - min(cv, 1.0)) * 100.0)

    return RiskBehavior(
        average_risk_percent=average,
        risk_variance=variance,
        risk_after_loss=mean(after_loss),
        risk_after_win=mean(after_win),
        risk_consistency_score=consistency,
    )


# ---------------------------------------------------------------------- #
# Trade number of the day                                                  #
# ---------------------------------------------------------------------- #

def _utc_day(trade: NormalizedTrade) -> date:
    return trade.entry_time.astimezone(timezone.utc).date()


def _trade_numbers(closed: list[NormalizedTrade]) -> list[int]:
    """Recorded trade number, else 1-based position among the UTC day's closed trades."""
    numbers: list[int] = []
    for _, day_trades in groupby(closed, key=_utc_day):
        for position, t in enumerate(day_trades, start=1):
            recorded = t.trade_number_of_day
            numbers.append(int(recorded) if recorded is not None else position)
    return numbers


def compute_trade_number_performance(trades: list[NormalizedTrade]) -> TradeNumberPerformance:
    closed = closed_trades(trades)
    by_number: dict[int, list[float]] = {}
    for number, t in zip(_trade_numbers(closed), closed):
        if t.r_value is not None:
            by_number.setdefault(number, []).append(t.r_value)
    if not by_number:
        return TradeNumberPerformance()

    expectancy = {n: mean(vals) for n, vals in sorted(by_number.items())}
    return TradeNumberPerformance(
        expectancy_r=expectancy,
        trades={n: len(vals) for n, vals in sorted(by_number.items())},
        best=max(expectancy, key=lambda n: (expectancy[n], -n)),
        worst=min(expectancy, key=lambda n: (expectancy[n], n)),
    )


# ---------------------------------------------------------------------- #
# Discipline score                                                         #
# ---------------------------------------------------------------------- #

def _rapid_reentries(closed: list[NormalizedTrade]) -> int:
    """Trades entered within RAPID_REENTRY of the second of two straight losses."""
    count = 0
    for i in range(2, len(closed)):
        if closed[i - 1].pnl < 0 and closed[i - 2].pnl < 0:
            if closed[i].entry_time - closed[i - 1].entry_time <= RAPID_REENTRY:
                count += 1
    return count


def compute_discipline_score(
    trades: list[NormalizedTrade],
    rule_impact: RuleImpact,
    risk: RiskBehavior,
    rolling: RollingMetricsResult | None = None,
) -> DisciplineScore:
    """Composite 0-100 score.  ``score`` is None with no closed trades."""
    closed = closed_trades(trades)
    if not closed:
        return DisciplineScore()

    tagged_losses = sum(1 for t in closed if t.pnl < 0 and t.emotion != NEUTRAL_EMOTION)
    stability = max(0.0, 100.0 - tagged_losses)

    gap = rule_impact.high_vs_low
    adherence = ADHERENCE_BASE
    if gap is not None:
        adherence = max(0.0, min(100.0, ADHERENCE_BASE + gap * ADHERENCE_POINTS_PER_R))

    reentries = _rapid_reentries(closed)
    penalty = min(OVERTRADING_CAP, reentries * OVERTRADING_POINTS)
    risk_component = float(risk.risk_consistency_score)

    raw = risk_component * 0.35 + adherence * 0.35 + stability * 0.3 - penalty

    trend: list[DisciplinePoint] = []
    if rolling is not None:
        for point in rolling.series:
            value = (
                risk_component * 0.4
                + ((point.expectancy_r or 0.0) + 1.0) * 20.0
                + point.win_rate * 0.2
            )
            trend.append(DisciplinePoint(index=point.index, score=_round_score(value)))

    return DisciplineScore(
        score=_round_score(raw),
        risk_component=risk_component,
        adherence_component=adherence,
        emotional_stability=stability,
        overtrading_penalty=penalty,
        rapid_reentries=reentries,
        trend=trend,
    )


def compute_discipline(
    trades: list[NormalizedTrade],
    rolling: RollingMetricsResult | None = None,
) -> DisciplineReport:
    """Run every discipline statistic over ``trades``."""
    rule_impact = compute_rule_impact(trades)
    risk = compute_risk_behavior(trades)
    return DisciplineReport(
        correlations=compute_correlations(trades),
        rule_impact=rule_impact,
        risk_behavior=risk,
        trade_numbers=compute_trade_number_performance(trades),
        discipline=compute_discipline_score(trades, rule_impact, risk, rolling),
    )
