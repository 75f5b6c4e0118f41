"""
Hand Pose Gesture Engine

Finger curl classification, Spider / Peace pose recognition, wrist-flick
throw detection and projectile simulation from 3D hand skeletons.
"""
from .config import Config, load_config
from .skeleton import HandSide, Joint, JointFrame
from .classifier import FingerMetric, Gesture, GestureState, classify_gestures
from .throw_detector import ThrowDetector, ThrowResult
from .projectile import Projectile, ProjectileSimulator, ProjectileView
from .events import Cue, CueKind, FeedbackSink, LoggingFeedback
from .sources import ReplaySource, ScriptedSource, SkeletonSource, StaticSource, demo_script, record_frames
from .engine import FrameResult, GestureEngine, HandReport, HandState
from .worker import GestureWorker

__all__ = [
    'Config',
    'load_config',
    'HandSide',
    'Joint',
    'JointFrame',
    'FingerMetric',
    'Gesture',
    'GestureState',
    'classify_gestures',
    'ThrowDetector',
    'ThrowResult',
    'Projectile',
    'ProjectileSimulator',
    'ProjectileView',
    'Cue',
    'CueKind',
    'FeedbackSink',
    'LoggingFeedback',
    'ReplaySource',
    'ScriptedSource',
    'SkeletonSource',
    'StaticSource',
    'demo_script',
    'record_frames',
    'FrameResult',
    'GestureEngine',
    'HandReport',
    'HandState',
    'GestureWorker',
]
