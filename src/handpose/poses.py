"""
Synthetic hand skeletons.

Builds anatomically plausible 27-joint skeletons for a requested set of
finger states. Used by the scripted demo source and by the tests; the
geometry is chosen so each state lands well inside its classification
region (no borderline ratios).
"""
from typing import Dict, Optional

import numpy as np

from .skeleton import HandSide, Joint, JointFrame, Vector, translation_matrix

EXTENDED = "extended"
CURLED = "curled"
NEUTRAL = "neutral"

# Right-hand anchor space: wrist at the origin, fingers along +y, palm facing +z.
_WRIST = np.array([0.0, 0.0, 0.0])
_FOREARM_WRIST = np.array([0.0, -0.02, 0.0])
_FOREARM_ARM = np.array([0.0, -0.25, 0.0])
_THUMB_KNUCKLE = np.array([-0.03, 0.03, 0.01])

# finger -> (metacarpal, knuckle, extended length)
_FINGER_BASES = {
    "index": (np.array([-0.01, 0.03, 0.0]), np.array([-0.02, 0.09, 0.0]), 0.07),
    "middle": (np.array([0.0, 0.03, 0.0]), np.array([0.0, 0.095, 0.0]), 0.07),
    "ring": (np.array([0.01, 0.03, 0.0]), np.array([0.02, 0.09, 0.0]), 0.065),
    "little": (np.array([0.02, 0.03, 0.0]), np.array([0.04, 0.08, 0.0]), 0.055),
}

_FINGER_JOINTS = {
    "index": (Joint.INDEX_METACARPAL, Joint.INDEX_KNUCKLE, Joint.INDEX_INTERMEDIATE_BASE,
              Joint.INDEX_INTERMEDIATE_TIP, Joint.INDEX_TIP),
    "middle": (Joint.MIDDLE_METACARPAL, Joint.MIDDLE_KNUCKLE, Joint.MIDDLE_INTERMEDIATE_BASE,
               Joint.MIDDLE_INTERMEDIATE_TIP, Joint.MIDDLE_TIP),
    "ring": (Joint.RING_METACARPAL, Joint.RING_KNUCKLE, Joint.RING_INTERMEDIATE_BASE,
             Joint.RING_INTERMEDIATE_TIP, Joint.RING_TIP),
    "little": (Joint.LITTLE_METACARPAL, Joint.LITTLE_KNUCKLE, Joint.LITTLE_INTERMEDIATE_BASE,
               Joint.LITTLE_INTERMEDIATE_TIP, Joint.LITTLE_TIP),
}

# Thumb tips, chosen against the palm centre (middle knuckle)
_THUMB_TIPS = {
    CURLED: np.array([-0.008, 0.058, 0.03]),    # ratio ~0.51, resting on the middle finger
    NEUTRAL: np.array([-0.08075, 0.095, 0.0]),  # ratio 0.85
    EXTENDED: np.array([-0.09, 0.05, 0.0]),     # ratio ~1.06
}

DEFAULT_ORIGINS = {
    HandSide.LEFT: (-0.2, 1.2, -0.4),
    HandSide.RIGHT: (0.2, 1.2, -0.4),
}

POSES: Dict[str, Dict] = {
    "open": dict(thumb=EXTENDED, index=EXTENDED, middle=EXTENDED, ring=EXTENDED, little=EXTENDED),
    "fist": dict(thumb=CURLED, index=CURLED, middle=CURLED, ring=CURLED, little=CURLED),
    "spider": dict(thumb=CURLED, index=EXTENDED, middle=CURLED, ring=CURLED, little=EXTENDED),
    "peace": dict(thumb=CURLED, index=EXTENDED, middle=EXTENDED, ring=CURLED, little=CURLED,
                  fan=0.02),
    # Index and middle out but held together
    "peace_closed": dict(thumb=CURLED, index=EXTENDED, middle=EXTENDED, ring=CURLED,
                         little=CURLED),
    "relaxed": dict(thumb=NEUTRAL, index=NEUTRAL, middle=NEUTRAL, ring=NEUTRAL, little=NEUTRAL),
}


def _fingertip(knuckle: np.ndarray, length: float, state: str) -> np.ndarray:
    if state == EXTENDED:
        return knuckle + np.array([0.0, length, 0.0])
    if state == CURLED:
        # Folded back over the palm
        return knuckle + np.array([0.0, -0.03, 0.03])
    if state == NEUTRAL:
        # Straight out from the wrist at ratio 1.125, the middle of the dead zone
        return knuckle * 1.125
    raise ValueError(f"Unknown finger state: {state!r}")


def make_hand_frame(
    side: HandSide = HandSide.RIGHT,
    thumb: str = EXTENDED,
    index: str = EXTENDED,
    middle: str = EXTENDED,
    ring: str = EXTENDED,
    little: str = EXTENDED,
    fan: float = 0.0,
    origin: Optional[Vector] = None,
) -> JointFrame:
    """
    Build a skeleton with the given finger states.

    Args:
        side: Left hands are mirrored across the anchor's x axis.
        thumb, index, middle, ring, little: "extended", "curled" or "neutral"
        fan: Extra sideways spread (metres) applied to extended index and
            middle tips in opposite directions.
        origin: World translation of the anchor (or a 4x4 matrix).
            Defaults to a comfortable position in front of the user.
    """
    positions = {
        Joint.WRIST: _WRIST,
        Joint.FOREARM_WRIST: _FOREARM_WRIST,
        Joint.FOREARM_ARM: _FOREARM_ARM,
    }

    if thumb not in _THUMB_TIPS:
        raise ValueError(f"Unknown finger state: {thumb!r}")
    thumb_tip = _THUMB_TIPS[thumb]
    positions[Joint.THUMB_KNUCKLE] = _THUMB_KNUCKLE
    positions[Joint.THUMB_INTERMEDIATE_BASE] = _THUMB_KNUCKLE + (thumb_tip - _THUMB_KNUCKLE) / 3
    positions[Joint.THUMB_INTERMEDIATE_TIP] = _THUMB_KNUCKLE + (thumb_tip - _THUMB_KNUCKLE) * 2 / 3
    positions[Joint.THUMB_TIP] = thumb_tip

    states = {"index": index, "middle": middle, "ring": ring, "little": little}
    fan_dir = {"index": -1.0, "middle": 1.0}
    for name, state in states.items():
        metacarpal, knuckle, length = _FINGER_BASES[name]
        tip = _fingertip(knuckle, length, state)
        if state == EXTENDED and name in fan_dir:
            tip = tip + np.array([fan_dir[name] * fan, 0.0, 0.0])
        j_meta, j_knuckle, j_base, j_mid, j_tip = _FINGER_JOINTS[name]
        positions[j_meta] = metacarpal
        positions[j_knuckle] = knuckle
        positions[j_base] = knuckle + (tip - knuckle) / 3
        positions[j_mid] = knuckle + (tip - knuckle) * 2 / 3
        positions[j_tip] = tip

    if side.is_left:
        mirror = np.array([-1.0, 1.0, 1.0])
        positions = {joint: pos * mirror for joint, pos in positions.items()}

    if origin is None:
        origin = translation_matrix(DEFAULT_ORIGINS[side])
    return JointFrame.from_positions(positions, origin=origin)


def make_pose(name: str, side: HandSide = HandSide.RIGHT, origin: Optional[Vector] = None) -> JointFrame:
    """Build one of the named ``POSES``."""
    try:
        fingers = POSES[name]
    except KeyError:
        raise ValueError(f"Unknown pose {name!r}; choose from {sorted(POSES)}") from None
    return make_hand_frame(side=side, origin=origin, **fingers)
