"""
Hand skeleton data model.
A JointFrame is one tracking snapshot of a single hand: anchor-space joint
positions plus the anchor-to-world transform.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np


class HandSide(Enum):
    """Chirality of a tracked hand."""
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_left(self) -> bool:
        return self is HandSide.LEFT


class Joint(Enum):
    """The 27 joints of an XR hand skeleton."""
    WRIST = "wrist"

    THUMB_KNUCKLE = "thumb_knuckle"
    THUMB_INTERMEDIATE_BASE = "thumb_intermediate_base"
    THUMB_INTERMEDIATE_TIP = "thumb_intermediate_tip"
    THUMB_TIP = "thumb_tip"

    INDEX_METACARPAL = "index_metacarpal"
    INDEX_KNUCKLE = "index_knuckle"
    INDEX_INTERMEDIATE_BASE = "index_intermediate_base"
    INDEX_INTERMEDIATE_TIP = "index_intermediate_tip"
    INDEX_TIP = "index_tip"

    MIDDLE_METACARPAL = "middle_metacarpal"
    MIDDLE_KNUCKLE = "middle_knuckle"
    MIDDLE_INTERMEDIATE_BASE = "middle_intermediate_base"
    MIDDLE_INTERMEDIATE_TIP = "middle_intermediate_tip"
    MIDDLE_TIP = "middle_tip"

    RING_METACARPAL = "ring_metacarpal"
    RING_KNUCKLE = "ring_knuckle"
    RING_INTERMEDIATE_BASE = "ring_intermediate_base"
    RING_INTERMEDIATE_TIP = "ring_intermediate_tip"
    RING_TIP = "ring_tip"

    LITTLE_METACARPAL = "little_metacarpal"
    LITTLE_KNUCKLE = "little_knuckle"
    LITTLE_INTERMEDIATE_BASE = "little_intermediate_base"
    LITTLE_INTERMEDIATE_TIP = "little_intermediate_tip"
    LITTLE_TIP = "little_tip"

    FOREARM_WRIST = "forearm_wrist"
    FOREARM_ARM = "forearm_arm"


@dataclass(frozen=True)
class FingerDef:
    """Static description of a non-thumb finger."""
    id: str
    display_name: str
    tip: Joint
    knuckle: Joint


THUMB_ID = "thumb"
THUMB_NAME = "Thumb"

# Non-thumb fingers in display order
FINGERS: Tuple[FingerDef, ...] = (
    FingerDef("index", "Index", Joint.INDEX_TIP, Joint.INDEX_KNUCKLE),
    FingerDef("middle", "Middle", Joint.MIDDLE_TIP, Joint.MIDDLE_KNUCKLE),
    FingerDef("ring", "Ring", Joint.RING_TIP, Joint.RING_KNUCKLE),
    FingerDef("little", "Little", Joint.LITTLE_TIP, Joint.LITTLE_KNUCKLE),
)

FINGER_IDS: Tuple[str, ...] = (THUMB_ID,) + tuple(f.id for f in FINGERS)

Vector = Union[Sequence[float], np.ndarray]

_ORIGIN = np.zeros(3)
_ORIGIN.flags.writeable = False


def as_vector(value: Vector) -> np.ndarray:
    """Return a read-only float64 3-vector."""
    vec = np.array(value, dtype=float).reshape(3)
    vec.flags.writeable = False
    return vec


def translation_matrix(offset: Vector) -> np.ndarray:
    """4x4 homogeneous transform that only translates."""
    m = np.eye(4)
    m[:3, 3] = np.asarray(offset, dtype=float).reshape(3)
    return m


@dataclass(frozen=True, eq=False)
class JointFrame:
    """
    Immutable skeleton snapshot of one hand.

    Attributes:
        joints: Joint -> anchor-space position (metres)
        origin_from_anchor: 4x4 anchor-to-world transform
    """
    joints: Mapping[Joint, np.ndarray]
    origin_from_anchor: np.ndarray = field(default_factory=lambda: np.eye(4))

    @classmethod
    def from_positions(
        cls,
        positions: Mapping[Joint, Vector],
        origin: Optional[Vector] = None,
    ) -> "JointFrame":
        """
        Build a frame from plain sequences.

        Args:
            positions: Joint -> (x, y, z) in anchor space
            origin: Either a world translation (x, y, z) or a full 4x4 matrix.
        """
        joints = {joint: as_vector(pos) for joint, pos in positions.items()}
        if origin is None:
            transform = np.eye(4)
        else:
            arr = np.asarray(origin, dtype=float)
            transform = arr.copy() if arr.shape == (4, 4) else translation_matrix(arr)
        transform.flags.writeable = False
        return cls(joints=joints, origin_from_anchor=transform)

    def position(self, joint: Joint) -> np.ndarray:
        """Anchor-space position. Missing joints collapse onto the anchor origin."""
        return self.joints.get(joint, _ORIGIN)

    def world_position(self, joint: Joint) -> np.ndarray:
        """World-space position of a joint."""
        local = np.append(self.position(joint), 1.0)
        return (self.origin_from_anchor @ local)[:3]

    def __contains__(self, joint: Joint) -> bool:
        return joint in self.joints

    def to_dict(self) -> Dict[str, List]:
        """Plain-data form used by replay recordings."""
        return {
            "joints": {j.value: [float(c) for c in p] for j, p in self.joints.items()},
            "origin": [[float(c) for c in row] for row in self.origin_from_anchor],
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "JointFrame":
        """Inverse of ``to_dict``. Unknown joint names are ignored."""
        known = {j.value: j for j in Joint}
        positions = {
            known[name]: pos
            for name, pos in (data.get("joints") or {}).items()
            if name in known
        }
        return cls.from_positions(positions, origin=data.get("origin"))
