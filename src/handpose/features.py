"""
Geometric features of a hand skeleton.

Every function here is a pure function of a JointFrame: no retained state,
safe to call any number of times per tick.

Non-thumb fingers use the distance-ratio method: fingertip-to-wrist distance
divided by knuckle-to-wrist distance. The thumb rests far from the wrist even
when tucked in, so it is measured against the palm centre (middle knuckle)
instead.
"""
import numpy as np

from .skeleton import HandSide, Joint, JointFrame, Vector

NEUTRAL_RATIO = 1.0
DEFAULT_MIN_REFERENCE = 0.001  # 1 mm
DEFAULT_PINCH_THRESHOLD = 0.025  # 2.5 cm


def distance(a: Vector, b: Vector) -> float:
    """Euclidean distance between two 3D points."""
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def curl_ratio(
    frame: JointFrame,
    tip: Joint,
    knuckle: Joint,
    wrist: Joint = Joint.WRIST,
    min_reference: float = DEFAULT_MIN_REFERENCE,
) -> float:
    """
    Curl ratio of a non-thumb finger.

    Args:
        frame: Skeleton snapshot
        tip: Fingertip joint
        knuckle: Knuckle (MCP) joint of the same finger
        wrist: Reference joint
        min_reference: Knuckle-to-wrist distances below this return 1.0

    Returns:
        dist(tip, wrist) / dist(knuckle, wrist). Large when extended,
        small when curled.
    """
    wrist_pos = frame.position(wrist)
    knuckle_dist = distance(frame.position(knuckle), wrist_pos)
    if knuckle_dist < min_reference:
        return NEUTRAL_RATIO
    return distance(frame.position(tip), wrist_pos) / knuckle_dist


def thumb_curl_ratio(frame: JointFrame, min_reference: float = DEFAULT_MIN_REFERENCE) -> float:
    """
    Palm-relative thumb ratio: dist(thumb tip, palm) / dist(wrist, palm).

    Roughly 0.4-0.7 for a tucked thumb, 0.7-0.9 resting, above 0.9 when
    the thumb is spread away from the hand.
    """
    palm_center = frame.position(Joint.MIDDLE_KNUCKLE)
    hand_size = distance(frame.position(Joint.WRIST), palm_center)
    if hand_size < min_reference:
        return NEUTRAL_RATIO
    return distance(frame.position(Joint.THUMB_TIP), palm_center) / hand_size


def pinch_distance(frame: JointFrame, finger_tip: Joint) -> float:
    """Distance between the thumb tip and another fingertip."""
    return distance(frame.position(Joint.THUMB_TIP), frame.position(finger_tip))


def is_pinching(
    frame: JointFrame,
    finger_tip: Joint,
    threshold: float = DEFAULT_PINCH_THRESHOLD,
) -> bool:
    return pinch_distance(frame, finger_tip) < threshold


def index_middle_spread(frame: JointFrame) -> float:
    """Index-to-middle fingertip distance; wide for a V sign."""
    return distance(frame.position(Joint.INDEX_TIP), frame.position(Joint.MIDDLE_TIP))


def palm_normal(frame: JointFrame, side: HandSide) -> np.ndarray:
    """
    World-space unit normal pointing out of the palm.

    The cross product (wrist->index knuckle) x (wrist->little knuckle) points
    palm-inward for a right hand and dorsal for a left hand, so it is negated
    for the left. Returns the zero vector for a degenerate frame.
    """
    wrist = frame.world_position(Joint.WRIST)
    to_index = frame.world_position(Joint.INDEX_KNUCKLE) - wrist
    to_little = frame.world_position(Joint.LITTLE_KNUCKLE) - wrist
    normal = np.cross(to_index, to_little)
    length = np.linalg.norm(normal)
    if length < 1e-9:
        return np.zeros(3)
    normal = normal / length
    return -normal if side.is_left else normal


def orb_anchor(frame: JointFrame, side: HandSide, offset: float) -> np.ndarray:
    """
    World position of the orb held in front of the palm.

    Midway between the forearm-wrist joint and the middle metacarpal, pushed
    ``offset`` metres along the palm normal.
    """
    midpoint = (
        frame.world_position(Joint.FOREARM_WRIST)
        + frame.world_position(Joint.MIDDLE_METACARPAL)
    ) / 2.0
    return midpoint + palm_normal(frame, side) * offset
