"""
Hand Pose Gesture Engine

Entry point for the demo application.
"""
import argparse
import logging
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

logger = logging.getLogger("handpose")


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Hand Pose Gesture Engine - Spider / Peace gestures and throws",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: config.yaml)",
    )

    parser.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="Play back a YAML recording instead of the scripted demo",
    )

    parser.add_argument(
        "--record",
        type=Path,
        default=None,
        help="Write the scripted demo as a YAML recording and exit",
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: length of the input)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run headless in the main thread and print every tick",
    )

    return parser.parse_args()


def setup_logging(config, debug=False):
    level = logging.DEBUG if debug else getattr(logging, config.logging.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=config.logging.format)


def build_source(args):
    """Scripted demo by default, or a recording with --replay."""
    from handpose import ReplaySource, ScriptedSource, demo_script

    if args.replay:
        return ReplaySource.from_file(args.replay)
    return ScriptedSource(demo_script())


def describe(result):
    """One status line per tick for debug mode."""
    from handpose import HandSide

    parts = [f"t={result.timestamp:7.3f}"]
    for side in HandSide:
        report = result.hands[side]
        if not report.tracked:
            parts.append(f"{side.value}: --")
            continue
        curls = " ".join(f"{m.id[0]}{m.curl_ratio:.2f}" for m in report.finger_metrics)
        flags = []
        if report.gesture_state.spider_active:
            flags.append("SPIDER")
        if report.gesture_state.peace_active:
            flags.append("PEACE")
        parts.append(f"{side.value}: {curls} {'/'.join(flags) or '-'}")
    parts.append(f"projectiles={len(result.projectiles)}")
    return " | ".join(parts)


def run_debug(config, source, duration):
    """
    Run the engine in the main thread without Qt.
    Useful for tuning thresholds against a recording.
    """
    from handpose import GestureEngine, LoggingFeedback

    engine = GestureEngine(config, source, feedback=LoggingFeedback())
    interval = 1.0 / config.engine.tick_rate_hz

    print("Starting debug mode...")
    print("Press Ctrl+C to quit")
    print("-" * 40)

    source.restart()
    started = time.perf_counter()
    try:
        while time.perf_counter() - started < duration:
            loop_start = time.perf_counter()
            result = engine.tick()
            print(describe(result))
            for cue in result.cues:
                print(f"  >> {cue}")

            sleep_time = interval - (time.perf_counter() - loop_start)
            if sleep_time > 0:
                time.sleep(sleep_time)
    except KeyboardInterrupt:
        print("\nInterrupted")

    return 0


def handle_gesture(cue):
    """Gesture activation from the worker (runs in the main thread)."""
    print(f"Gesture: {cue}")


def handle_throw(cue):
    print(f"Throw: {cue}")


def handle_projectiles(views):
    for view in views:
        x, y, z = view.position
        logger.debug("projectile %d at (%.2f, %.2f, %.2f) scale %.2f", view.id, x, y, z, view.scale)


def handle_hand_lost(side):
    print(f"Hand lost: {side.value}")


def run_worker_mode(config, source, duration):
    """Run the engine in a background QThread (Multithreaded)."""
    import signal
    import atexit
    from PyQt5.QtCore import QCoreApplication, QThread, QTimer, Qt
    from handpose import GestureEngine, GestureWorker, LoggingFeedback

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)

    engine = GestureEngine(config, source, feedback=LoggingFeedback())

    # Setup background worker and thread
    thread = QThread()
    worker = GestureWorker(engine, tick_rate_hz=config.engine.tick_rate_hz, duration=duration)
    worker.moveToThread(thread)

    def cleanup():
        """Stop the tick loop and join the worker thread."""
        logger.info("Stopping gesture worker...")
        worker.stop_process()
        thread.quit()
        thread.wait(2000)

    atexit.register(cleanup)

    def signal_handler(signum, frame):
        """Handle Ctrl+C and kill signals gracefully."""
        print(f"\nReceived signal {signum}, shutting down...")
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Let the Python interpreter run so signal handlers fire
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(200)

    # Connect signals (Use QueuedConnection so handlers run in the main thread)
    source.restart()
    thread.started.connect(worker.start_process)
    worker.finished.connect(thread.quit, Qt.DirectConnection)
    worker.gesture_activated.connect(handle_gesture, Qt.QueuedConnection)
    worker.throw_detected.connect(handle_throw, Qt.QueuedConnection)
    worker.projectiles_updated.connect(handle_projectiles, Qt.QueuedConnection)
    worker.hand_lost.connect(handle_hand_lost, Qt.QueuedConnection)
    worker.error.connect(lambda msg: print(f"WORKER ERROR: {msg}"), Qt.QueuedConnection)
    thread.finished.connect(app.quit, Qt.QueuedConnection)

    # Start thread
    thread.start()

    try:
        result = app.exec_()
    finally:
        heartbeat.stop()
        cleanup()
        atexit.unregister(cleanup)  # Avoid double cleanup

    return result


def main():
    """Main entry point."""
    args = parse_args()

    # Load config
    from handpose import load_config
    config = load_config(args.config)
    setup_logging(config, args.debug)

    if args.record:
        from handpose import ScriptedSource, demo_script, record_frames
        count = record_frames(ScriptedSource(demo_script()), args.record, config.engine.tick_rate_hz)
        print(f"Wrote {count} frames to {args.record}")
        return 0

    source = build_source(args)
    duration = args.duration if args.duration is not None else source.duration + 1.0

    print("Hand Pose Gesture Engine starting...")
    print(f"  Input: {args.replay or 'scripted demo'}")
    print(f"  Duration: {duration:.1f}s")
    print(f"  Debug: {args.debug}")
    print()

    if args.debug:
        return run_debug(config, source, duration)
    return run_worker_mode(config, source, duration)


if __name__ == "__main__":
    sys.exit(main())
