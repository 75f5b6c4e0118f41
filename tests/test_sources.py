import numpy as np
import pytest
from src.handpose.classifier import classify_gestures
from src.handpose.config import ClassifierConfig, Config
from src.handpose.engine import GestureEngine
from src.handpose.events import CueKind
from src.handpose.poses import POSES, make_hand_frame, make_pose
from src.handpose.skeleton import HandSide, Joint, JointFrame
from src.handpose.sources import (
    ReplaySource,
    ScriptedSource,
    ScriptStep,
    SkeletonSource,
    StaticSource,
    demo_script,
    record_frames,
)

RIGHT = HandSide.RIGHT
LEFT = HandSide.LEFT


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


def test_sources_satisfy_protocol():
    assert isinstance(StaticSource(), SkeletonSource)
    assert isinstance(ScriptedSource([]), SkeletonSource)
    assert isinstance(ReplaySource([]), SkeletonSource)


def test_static_source():
    frame = make_pose("open")
    source = StaticSource(right=frame)
    assert source.latest_skeleton(RIGHT) is frame
    assert source.latest_skeleton(LEFT) is None
    source.clear()
    assert source.latest_skeleton(RIGHT) is None


def test_every_named_pose_builds_all_joints():
    for name in POSES:
        frame = make_pose(name)
        assert all(joint in frame for joint in Joint)


def test_unknown_pose_rejected():
    with pytest.raises(ValueError):
        make_pose("thumbs_up")
    with pytest.raises(ValueError):
        make_hand_frame(index="wiggly")


def test_scripted_source_follows_timeline():
    steps = [
        ScriptStep(0.0, RIGHT, "open"),
        ScriptStep(1.0, RIGHT, "spider"),
        ScriptStep(2.0, RIGHT, None),
    ]
    source = ScriptedSource(steps)
    config = ClassifierConfig()

    assert source.frame_at(LEFT, 0.5) is None
    assert not classify_gestures(source.frame_at(RIGHT, 0.5), config).flags.spider
    assert classify_gestures(source.frame_at(RIGHT, 1.5), config).flags.spider
    assert source.frame_at(RIGHT, 2.5) is None
    # Past the end of the script
    assert source.duration == 3.0
    assert source.frame_at(RIGHT, 3.5) is None


def test_scripted_source_moves_wrist():
    steps = [ScriptStep(0.0, RIGHT, "spider", velocity=(0.0, 0.0, -2.0), origin=(0.0, 1.0, 0.0))]
    source = ScriptedSource(steps)
    frame = source.frame_at(RIGHT, 0.5)
    np.testing.assert_allclose(frame.world_position(Joint.WRIST), [0.0, 1.0, -1.0])


def test_scripted_source_uses_clock():
    clock = FakeClock(10.0)
    source = ScriptedSource([ScriptStep(0.0, RIGHT, "open"), ScriptStep(1.0, RIGHT, None)], clock=clock)
    source.restart()
    assert source.latest_skeleton(RIGHT) is not None
    clock.t = 11.5
    assert source.latest_skeleton(RIGHT) is None


def test_demo_script_throws_and_signs():
    clock = FakeClock()
    source = ScriptedSource(demo_script(), clock=clock)
    engine = GestureEngine(Config(), source, clock=clock)
    source.restart()

    cues = []
    step = 1.0 / 90.0
    for i in range(int(source.duration / step)):
        clock.t = i * step
        cues.extend(engine.tick().cues)

    throws = [c for c in cues if c.kind == CueKind.THROW]
    assert len(throws) == 2
    assert all(c.side == RIGHT for c in throws)
    activations = {(c.side, c.detail) for c in cues if c.kind == CueKind.GESTURE_ACTIVATED}
    assert (RIGHT, "spider") in activations
    assert (RIGHT, "peace") in activations
    assert (LEFT, "peace") in activations


def test_replay_lookup():
    frames = [
        {"time": 0.0, "left": None, "right": make_pose("open").to_dict()},
        {"time": 0.5, "left": make_pose("fist", side=LEFT).to_dict(), "right": None},
    ]
    source = ReplaySource(frames)

    assert len(source) == 2
    assert source.duration == 0.5
    assert source.frame_at(RIGHT, -0.1) is None
    assert source.frame_at(RIGHT, 0.2) is not None
    assert source.frame_at(LEFT, 0.2) is None
    assert source.frame_at(RIGHT, 0.7) is None
    assert source.frame_at(LEFT, 0.7) is not None


def test_frame_dict_round_trip():
    frame = make_pose("peace", side=LEFT)
    restored = JointFrame.from_dict(frame.to_dict())
    for joint in Joint:
        np.testing.assert_allclose(restored.world_position(joint), frame.world_position(joint))


def test_from_dict_ignores_unknown_joints():
    frame = JointFrame.from_dict({"joints": {"wrist": [1, 2, 3], "sixth_finger_tip": [0, 0, 0]}})
    assert Joint.WRIST in frame
    assert len(frame.joints) == 1


def test_record_and_replay(tmp_path):
    steps = [
        ScriptStep(0.0, RIGHT, "spider"),
        ScriptStep(0.0, LEFT, None),
        ScriptStep(0.5, LEFT, "peace"),
    ]
    scripted = ScriptedSource(steps, end=1.0)
    path = tmp_path / "recording.yaml"

    count = record_frames(scripted, path, rate_hz=10.0)
    assert count == 11

    replay = ReplaySource.from_file(path)
    assert len(replay) == 11
    assert replay.duration == pytest.approx(1.0)

    config = ClassifierConfig()
    assert classify_gestures(replay.frame_at(RIGHT, 0.3), config).flags.spider
    assert replay.frame_at(LEFT, 0.3) is None
    assert classify_gestures(replay.frame_at(LEFT, 0.7), config).flags.peace
