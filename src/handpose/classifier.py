"""
Gesture classification from hand skeleton features.
Classifies each finger as extended / curled / neutral and recognizes the
Spider (index + little out) and Peace (V sign) poses.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Mapping, NamedTuple, Sequence, Tuple

from .config import ClassifierConfig
from .features import curl_ratio, index_middle_spread, pinch_distance, thumb_curl_ratio
from .skeleton import FINGERS, FINGER_IDS, THUMB_ID, THUMB_NAME, JointFrame


class Gesture(Enum):
    """Named hand poses."""
    SPIDER = "spider"
    PEACE = "peace"


@dataclass(frozen=True)
class FingerMetric:
    """Per-finger status for one tick."""
    id: str
    display_name: str
    curl_ratio: float
    is_pinching: bool = False
    is_extended: bool = False
    is_curled: bool = False


def default_finger_metrics() -> List[FingerMetric]:
    """Neutral metrics shown before any skeleton has been seen."""
    names = [THUMB_NAME] + [f.display_name for f in FINGERS]
    return [FingerMetric(fid, name, 1.0) for fid, name in zip(FINGER_IDS, names)]


def classify_finger(ratio: float, config: ClassifierConfig) -> Tuple[bool, bool]:
    """
    Classify a non-thumb curl ratio.

    Returns:
        (is_extended, is_curled). Both False inside the dead zone
        [curl_threshold, extend_threshold].
    """
    return ratio > config.extend_threshold, ratio < config.curl_threshold


def classify_thumb(ratio: float, config: ClassifierConfig) -> Tuple[bool, bool]:
    """Classify a palm-relative thumb ratio. Returns (is_extended, is_curled)."""
    return ratio > config.thumb_extend_threshold, ratio < config.thumb_curl_threshold


def finger_metrics(frame: JointFrame, config: ClassifierConfig) -> List[FingerMetric]:
    """Compute all five finger metrics, thumb first."""
    thumb_ratio = thumb_curl_ratio(frame, config.min_reference_distance)
    extended, curled = classify_thumb(thumb_ratio, config)
    metrics = [
        FingerMetric(
            id=THUMB_ID,
            display_name=THUMB_NAME,
            curl_ratio=thumb_ratio,
            is_extended=extended,
            is_curled=curled,
        )
    ]

    for finger in FINGERS:
        ratio = curl_ratio(
            frame, finger.tip, finger.knuckle,
            min_reference=config.min_reference_distance,
        )
        extended, curled = classify_finger(ratio, config)
        metrics.append(FingerMetric(
            id=finger.id,
            display_name=finger.display_name,
            curl_ratio=ratio,
            is_pinching=pinch_distance(frame, finger.tip) < config.pinch_distance,
            is_extended=extended,
            is_curled=curled,
        ))

    return metrics


def _by_id(metrics: Sequence[FingerMetric]) -> Dict[str, FingerMetric]:
    return {m.id: m for m in metrics}


def is_spider(metrics: Sequence[FingerMetric]) -> bool:
    """Index and little extended; thumb, middle and ring curled."""
    f = _by_id(metrics)
    return (
        f["thumb"].is_curled
        and f["index"].is_extended
        and f["middle"].is_curled
        and f["ring"].is_curled
        and f["little"].is_extended
    )


def is_peace(metrics: Sequence[FingerMetric], spread: float, config: ClassifierConfig) -> bool:
    """
    Index and middle extended and fanned apart; thumb, ring and little curled.

    Without the spread check two adjacent extended fingers held together
    would pass as a V sign.
    """
    f = _by_id(metrics)
    return (
        f["thumb"].is_curled
        and f["index"].is_extended
        and f["middle"].is_extended
        and f["ring"].is_curled
        and f["little"].is_curled
        and spread > config.spread_threshold
    )


class GestureFlags(NamedTuple):
    """Gesture booleans for one hand on one tick."""
    spider: bool = False
    peace: bool = False


@dataclass(frozen=True)
class HandReading:
    """Everything the classifier derives from one skeleton."""
    metrics: List[FingerMetric]
    spread: float
    flags: GestureFlags


def classify_gestures(frame: JointFrame, config: ClassifierConfig) -> HandReading:
    metrics = finger_metrics(frame, config)
    spread = index_middle_spread(frame)
    flags = GestureFlags(
        spider=is_spider(metrics),
        peace=is_peace(metrics, spread, config),
    )
    return HandReading(metrics=metrics, spread=spread, flags=flags)


def detect_activations(prev: GestureFlags, curr: GestureFlags) -> List[Gesture]:
    """Gestures that went from inactive to active between two ticks."""
    activated = []
    if curr.spider and not prev.spider:
        activated.append(Gesture.SPIDER)
    if curr.peace and not prev.peace:
        activated.append(Gesture.PEACE)
    return activated


def detect_pinch_edges(
    prev_pinching: Mapping[str, bool],
    metrics: Sequence[FingerMetric],
) -> List[str]:
    """Finger ids whose pinch just started."""
    return [
        m.id for m in metrics
        if m.is_pinching and not prev_pinching.get(m.id, False)
    ]


@dataclass
class GestureState:
    """
    Per-hand gesture flags.

    The prev_* fields only exist to derive activation edges and are
    overwritten on every ``update``.
    """
    spider_active: bool = False
    peace_active: bool = False
    prev_spider_active: bool = False
    prev_peace_active: bool = False

    @property
    def flags(self) -> GestureFlags:
        return GestureFlags(self.spider_active, self.peace_active)

    def update(self, flags: GestureFlags) -> List[Gesture]:
        """Store this tick's flags and return the gestures that just activated."""
        activated = detect_activations(self.flags, flags)
        self.prev_spider_active = self.spider_active
        self.prev_peace_active = self.peace_active
        self.spider_active = flags.spider
        self.peace_active = flags.peace
        return activated

    def snapshot(self) -> "GestureState":
        return replace(self)
