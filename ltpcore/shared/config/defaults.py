"""
Default configuration for the LTP scoring core.

Every weight, bucket edge and threshold used by the scorers lives here so
the scoring modules carry no magic numbers.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple


# Stop offset used by the trade parameter calculator: a flat 1% of price.
# This is a volatility heuristic, not an Average True Range.
HEURISTIC_VOLATILITY_PCT = 0.01


@dataclass(frozen=True)
class GammaWeights:
    """Maximum points per LTP 2.0 component."""
    cloud: float = 25.0
    vwap: float = 20.0
    gamma_wall: float = 20.0
    gamma_regime: float = 15.0
    patience: float = 10.0
    wall_penalty_floor: float = -20.0
    max_total: float = 90.0


@dataclass(frozen=True)
class GradeThresholds:
    """Sniper / Decent cut-offs on the smoothed score."""
    sniper: float = 75.0
    decent: float = 50.0
    buffer: float = 5.0


@dataclass(frozen=True)
class HysteresisConfig:
    smoothing_window: int = 3   # previous raw scores averaged with the current one
    history_length: int = 10    # raw scores retained in the caller-owned state


@dataclass(frozen=True)
class CloudBuckets:
    """
    EMA cloud spread buckets.

    Spreads are fractions of ema21 (0.005 == 0.5%).
    """
    neutral_spread: float = 0.001
    neutral_multiplier: float = 0.30
    # (min |spread|, multiplier, strength), checked top-down
    buckets: Tuple[Tuple[float, float, str], ...] = (
        (0.005, 1.00, 'strong'),
        (0.003, 0.85, 'moderate'),
        (0.0015, 0.70, 'weak'),
        (0.0, 0.50, 'weak'),
    )


@dataclass(frozen=True)
class VwapBuckets:
    """VWAP distance buckets in percent."""
    wrong_side_tolerance_pct: float = 0.1
    wrong_side_multiplier: float = 0.25
    buckets: Tuple[Tuple[float, float], ...] = (
        (0.5, 1.00),
        (0.3, 0.90),
        (0.15, 0.75),
        (0.05, 0.60),
        (0.0, 0.50),
    )


@dataclass(frozen=True)
class WallPenaltyBuckets:
    """Opposing gamma wall proximity penalty, by percent distance."""
    buckets: Tuple[Tuple[float, float], ...] = (
        (2.0, 0.0),
        (1.5, -5.0),
        (1.0, -10.0),
        (0.5, -15.0),
        (0.0, -20.0),
    )


@dataclass(frozen=True)
class PatienceQualityConfig:
    """Inside-bar quality classification and score multipliers."""
    high_body_ratio: float = 0.35
    high_compression: float = 0.5
    medium_body_ratio: float = 0.5
    medium_compression: float = 0.7
    level_proximity_pct: float = 0.3
    quality_multipliers: Dict[str, float] = field(default_factory=lambda: {
        'high': 1.0,
        'medium': 0.7,
        'low': 0.4,
    })
    at_level_multiplier: float = 1.0
    off_level_multiplier: float = 0.5


@dataclass(frozen=True)
class ConfidenceWeights:
    """Share of the 0-100 confidence each component can contribute."""
    cloud: float = 30.0
    vwap: float = 25.0
    gamma_wall: float = 20.0
    gamma_regime: float = 15.0
    patience: float = 10.0


DEFAULT_MTF_WEIGHTS: Dict[str, float] = {
    'weekly': 0.15,
    'daily': 0.20,
    '4h': 0.15,
    '1h': 0.20,
    '15m': 0.15,
    '5m': 0.10,
    '2m': 0.05,
}

UNKNOWN_TIMEFRAME_WEIGHT = 0.1


@dataclass(frozen=True)
class DetectionConfig:
    """
    Setup detection thresholds.

    Mirrors the settings-store shape:
        {
            "ltp_detection_thresholds": {
                "level_proximity_percent": 0.3,
                "patience_candle_max_size_percent": 0.5,
                "confluence_threshold": 50
            },
            "mtf_timeframes": {"enabled_timeframes": [...], "weights": {...}}
        }
    """
    level_proximity_percent: float = 0.3
    patience_candle_max_size_percent: float = 0.5
    confluence_threshold: float = 50.0
    ready_threshold: float = 70.0
    setup_expiry_minutes: int = 30
    min_level_bars: int = 10
    min_trend_bars: int = 5
    enabled_timeframes: Tuple[str, ...] = ('5m', '15m', '1h', '4h', 'daily')
    mtf_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_MTF_WEIGHTS))

    @classmethod
    def from_mapping(cls, settings: Optional[Mapping[str, Any]]) -> "DetectionConfig":
        """
        Build a config from a settings mapping, keeping defaults for any
        missing key.

        Args:
            settings: Mapping in the settings-store shape (may be None)

        Returns:
            DetectionConfig
        """
        config = cls()
        if not settings:
            return config

        thresholds = settings.get('ltp_detection_thresholds') or {}
        mtf = settings.get('mtf_timeframes') or {}

        overrides: Dict[str, Any] = {}
        for key in ('level_proximity_percent', 'patience_candle_max_size_percent',
                    'confluence_threshold', 'ready_threshold'):
            if thresholds.get(key) is not None:
                overrides[key] = float(thresholds[key])

        if mtf.get('enabled_timeframes'):
            overrides['enabled_timeframes'] = tuple(mtf['enabled_timeframes'])
        if mtf.get('weights'):
            overrides['mtf_weights'] = {str(tf): float(w) for tf, w in mtf['weights'].items()}

        return replace(config, **overrides)


@dataclass(frozen=True)
class LegacyWeights:
    """LTP v1 factor weights and letter-grade thresholds."""
    level: float = 0.35
    trend: float = 0.35
    patience: float = 0.30
    grade_a: float = 90.0
    grade_b: float = 80.0
    grade_c: float = 70.0
    grade_d: float = 60.0


@dataclass(frozen=True)
class ScoringConfig:
    """Bundle of everything the LTP 2.0 scorer needs."""
    weights: GammaWeights = field(default_factory=GammaWeights)
    grades: GradeThresholds = field(default_factory=GradeThresholds)
    hysteresis: HysteresisConfig = field(default_factory=HysteresisConfig)
    cloud: CloudBuckets = field(default_factory=CloudBuckets)
    vwap: VwapBuckets = field(default_factory=VwapBuckets)
    wall_penalty: WallPenaltyBuckets = field(default_factory=WallPenaltyBuckets)
    patience: PatienceQualityConfig = field(default_factory=PatienceQualityConfig)
    confidence: ConfidenceWeights = field(default_factory=ConfidenceWeights)


# Default instances
DEFAULT_GAMMA_WEIGHTS = GammaWeights()
DEFAULT_GRADE_THRESHOLDS = GradeThresholds()
DEFAULT_HYSTERESIS = HysteresisConfig()
DEFAULT_SCORING_CONFIG = ScoringConfig()
DEFAULT_DETECTION_CONFIG = DetectionConfig()
DEFAULT_LEGACY_WEIGHTS = LegacyWeights()
