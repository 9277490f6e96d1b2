"""Trade journal analytics: performance measurement from journal entries.

Turns raw journal entries into normalized trades and computes headline,
rolling, per-setup and behavioural performance metrics, assembled into
a single deterministic report.

Key components
--------------
**Input**

NormalizedTrade        Validated, sentinel-safe view of one journal entry
normalize_trades       Raw entries -> normalized trades + data-quality counts
apply_filters          Date / label / outcome / range pre-filter

**Core metrics**

compute_balance_curve       Running balance, peak and drawdown
compute_summary             Win rate, profit factor, expectancy, streaks
compute_rolling_metrics     Trailing-window metrics and trend
compute_setup_performance   Per-setup statistics and reliability
compute_post_loss_behavior  After-loss cohort shifts and warnings

**Supplementary analysis**

compute_emotion_performance  Per-emotion statistics
compute_time_performance     Hour / session / weekday breakdown
compute_discipline           Process ratings and risk habits against R
run_monte_carlo              Bootstrap equity projection and ruin odds
generate_insights            Plain-language hints

**Report & export**

assemble_report       Full pipeline -> Report
report_to_json        JSON export
balance_curve_to_csv  CSV export of the balance curve
"""

from .record import NormalizedTrade, NormalizationResult
from .normalizer import normalize, normalize_trades
from .filters import apply_filters
from .balance import BalanceCurve, BalanceCurvePoint, compute_balance_curve
from .summary import SummaryMetrics, compute_summary
from .rolling import RollingMetricsResult, RollingPoint, compute_rolling_metrics
from .setups import (
    EmotionPerformanceRow,
    SetupPerformanceRow,
    compute_emotion_performance,
    compute_setup_performance,
    rank_setups,
)
from .behavior import BehavioralWarning, PostLossBehaviorReport, compute_post_loss_behavior
from .session_analysis import TimePerformanceReport, compute_time_performance
from .discipline import DisciplineReport, compute_discipline
from .monte_carlo import MonteCarloSummary, run_monte_carlo
from .insights import generate_insights
from .report import DataQuality, Report, assemble_report
from .export import balance_curve_to_csv, report_to_json, to_dict

__all__ = [
    "NormalizedTrade",
    "NormalizationResult",
    "normalize",
    "normalize_trades",
    "apply_filters",
    "BalanceCurve",
    "BalanceCurvePoint",
    "compute_balance_curve",
    "SummaryMetrics",
    "compute_summary",
    "RollingMetricsResult",
    "RollingPoint",
    "compute_rolling_metrics",
    "SetupPerformanceRow",
    "EmotionPerformanceRow",
    "compute_setup_performance",
    "compute_emotion_performance",
    "rank_setups",
    "BehavioralWarning",
    "PostLossBehaviorReport",
    "compute_post_loss_behavior",
    "TimePerformanceReport",
    "compute_time_performance",
    "DisciplineReport",
    "compute_discipline",
    "MonteCarloSummary",
    "run_monte_carlo",
    "generate_insights",
    "DataQuality",
    "Report",
    "assemble_report",
    "report_to_json",
    "balance_curve_to_csv",
    "to_dict",
]
