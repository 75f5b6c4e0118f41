import argparse
import signal
import sys
import threading

import pytest

import main
from handpose import Config, GestureEngine, HandSide, ReplaySource, ScriptedSource, StaticSource
from handpose.poses import make_pose
from handpose.sources import ScriptStep
from handpose.worker import GestureWorker


@pytest.fixture
def flick_source():
    # Spider pose thrown forward at 3 m/s from the first tick
    return ScriptedSource([ScriptStep(0.0, HandSide.RIGHT, "spider", velocity=(0.0, 0.0, -3.0))])


def test_worker_mode_ticks_off_main_thread(monkeypatch, flick_source):
    tick_on_main = []
    original_step = GestureWorker.step

    def step(self, now=None):
        tick_on_main.append(threading.current_thread() is threading.main_thread())
        return original_step(self, now)

    gestures = []
    throws = []
    monkeypatch.setattr(GestureWorker, "step", step)
    monkeypatch.setattr(main, "handle_gesture",
                        lambda cue: gestures.append((cue, threading.current_thread() is threading.main_thread())))
    monkeypatch.setattr(main, "handle_throw",
                        lambda cue: throws.append((cue, threading.current_thread() is threading.main_thread())))
    # Keep the test runner's own signal handlers
    monkeypatch.setattr(signal, "signal", lambda *args: None)

    result = main.run_worker_mode(Config(), flick_source, 0.5)

    assert result == 0
    assert tick_on_main
    assert not any(tick_on_main)

    # Queued handlers were delivered to the main thread before the loop exited
    assert [cue.detail for cue, _ in gestures] == ["spider"]
    assert len(throws) == 1
    assert all(on_main for _, on_main in gestures + throws)


def test_describe_tracked_and_missing_hands():
    source = StaticSource(right=make_pose("spider"))
    engine = GestureEngine(Config(), source, clock=lambda: 1.5)
    line = main.describe(engine.tick())

    assert line.startswith("t=  1.500")
    assert "right: t0.51" in line
    assert "SPIDER" in line
    assert "left: --" in line
    assert line.endswith("projectiles=0")


def test_build_source_defaults_to_demo():
    source = main.build_source(argparse.Namespace(replay=None))
    assert isinstance(source, ScriptedSource)
    assert source.duration > 4.0


def test_record_then_replay(monkeypatch, tmp_path, capsys):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("engine:\n  tick_rate_hz: 10\n")
    recording = tmp_path / "demo.yaml"
    monkeypatch.setattr(sys, "argv", ["main.py", "--config", str(config_path), "--record", str(recording)])

    assert main.main() == 0
    assert recording.exists()
    assert "Wrote 49 frames" in capsys.readouterr().out

    source = main.build_source(argparse.Namespace(replay=recording))
    assert isinstance(source, ReplaySource)
    assert len(source) == 49


def test_run_debug_prints_ticks(capsys):
    source = ScriptedSource([ScriptStep(0.0, HandSide.LEFT, "peace")])

    assert main.run_debug(Config(), source, 0.05) == 0

    out = capsys.readouterr().out
    assert "Starting debug mode" in out
    assert "PEACE" in out
    assert ">> left gesture_activated (peace)" in out
