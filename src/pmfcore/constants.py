"""Decision-table constants for the PMF scoring core.

Every cutoff used by the signal classifier, gate evaluator, uncertainty
ranker and scoring engine is defined here so the tables can be audited
and tested independently of the code that applies them.
"""

from __future__ import annotations

from typing import Final

# Signal classification
VIABLE_CPA_USD: Final = 15.0
RULE_MIN_STRONG_ORDERS: Final = 3
RULE_MIN_CLICKS_WITHOUT_MESSAGES: Final = 10
RULE_MIN_MESSAGES_WITHOUT_ORDERS: Final = 10
RULE_WEAK_CANCEL_RATE_PCT: Final = 40.0

PERMANENT_NOISE_METRICS: Final[tuple[str, ...]] = (
    "views",
    "impressions",
    "reach",
    "likes",
    "loves",
    "shares",
    "saves",
    "follower_count",
    "follower_growth",
    "profile_visits",
    "video_watch_time",
    "positive_comments",
    "story_views",
)

# Gates
GATE_CPA_MAX_USD: Final = 2.5
GATE_CTR_MIN_PCT: Final = 1.0
GATE_MESSAGE_ORDER_MIN_PCT: Final = 30.0
GATE_ORDERS_MIN: Final = 3
GATE_COUNT: Final = 4

# Foundation sub-score maxima
FOUNDATION_MAX: Final = 40
PAIN_MAX: Final = 10
CUSTOMER_MAX: Final = 10
SOLUTION_MAX: Final = 10
PRICE_MAX: Final = 5
CHANNEL_MAX: Final = 5

# Experiment sub-score
EXPERIMENT_MAX: Final = 30
PRIMARY_METRIC_MAX: Final = 10
GATES_SCORE_MAX: Final = 10
SIGNAL_QUALITY_MAX: Final = 5
INTEGRITY_MAX: Final = 5

GATES_SCORE_BY_PASS_COUNT: Final[dict[int, int]] = {4: 10, 3: 7, 2: 4}
PRIMARY_METRIC_TIERS: Final[tuple[tuple[float, int], ...]] = ((3, 10), (1, 7))
PRIMARY_METRIC_PARTIAL_SCORE: Final = 3
SIGNAL_QUALITY_TIERS: Final[tuple[tuple[float, int], ...]] = ((60, 5), (40, 3), (20, 1))

INTEGRITY_KILL_IGNORED: Final = 1
INTEGRITY_MANY_OVERRIDES: Final = 2
INTEGRITY_SOME_OVERRIDES: Final = 3
INTEGRITY_MANY_OVERRIDES_THRESHOLD: Final = 2

# Consistency sub-score
CONSISTENCY_MAX: Final = 30
CPA_STABILITY_MAX: Final = 8
NET_MARGIN_MAX: Final = 8
CANCEL_RATE_MAX: Final = 5
REPEAT_BUYERS_MAX: Final = 5
SEAN_ELLIS_MAX: Final = 4

CPA_STABILITY_TIERS: Final[tuple[tuple[float, int], ...]] = ((80, 8), (70, 5))
CPA_STABILITY_FLOOR_SCORE: Final = 2
NET_MARGIN_TIERS: Final[tuple[tuple[float, int], ...]] = ((30, 8), (20, 5), (15, 2))
CANCEL_RATE_TIERS: Final[tuple[tuple[float, int], ...]] = ((20, 5), (30, 3), (40, 1))
REPEAT_BUYER_TIERS: Final[tuple[tuple[float, int], ...]] = ((15, 5), (10, 3), (5, 1))
SEAN_ELLIS_TIERS: Final[tuple[tuple[float, int], ...]] = ((40, 4), (25, 2))

DEFAULT_CPA_STABILITY_PCT: Final = 100.0

# Penalties and modifiers
PENALTY_CAP: Final = 40.0
MODIFIER_CAP: Final = 15.0
ACCELERATING_SIGNALS_BONUS: Final = 5.0
HIGH_SIGNAL_QUALITY_BONUS: Final = 5.0
HIGH_SIGNAL_QUALITY_MIN: Final = 60.0
DECISION_PENALTY_FLOW: Final = 9

# Hard kills
HARD_KILL_MIN_NET_MARGIN_PCT: Final = 15.0
HARD_KILL_MAX_CANCEL_RATE_PCT: Final = 50.0
HARD_KILL_MAX_CPA_PRICE_RATIO: Final = 0.5
HARD_KILL_SCORE_CEILING: Final = 49.0

# Verdict thresholds
PMF_CONFIRMED_MIN: Final = 70.0
PMF_PARTIAL_MIN: Final = 50.0
SCORE_MIN: Final = 0.0
SCORE_MAX: Final = 100.0
