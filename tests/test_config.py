import logging

import pytest
from src.handpose.config import (
    ClassifierConfig,
    Config,
    ProjectileConfig,
    ThrowConfig,
    load_config,
)


def test_defaults():
    config = Config()
    assert config.classifier.extend_threshold == 1.15
    assert config.classifier.curl_threshold == 1.10
    assert config.classifier.thumb_extend_threshold == 0.95
    assert config.classifier.thumb_curl_threshold == 0.75
    assert config.classifier.pinch_distance == 0.025
    assert config.classifier.spread_threshold == 0.04
    assert config.throw.buffer_size == 15
    assert config.throw.min_samples == 5
    assert config.throw.speed_threshold == 1.5
    assert config.throw.cooldown == 0.5
    assert config.projectile.gravity == [0.0, -4.0, 0.0]
    assert config.projectile.lifetime == 3.0
    assert config.engine.tick_rate_hz == 90.0


def test_missing_file_returns_defaults(tmp_path):
    config = load_config(tmp_path / "does_not_exist.yaml")
    assert config == Config()


def test_empty_file_returns_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path) == Config()


def test_partial_override(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "throw:\n"
        "  speed_threshold: 2.0\n"
        "  cooldown: 0.25\n"
        "display:\n"
        "  show_joints: false\n"
    )
    config = load_config(path)
    assert config.throw.speed_threshold == 2.0
    assert config.throw.cooldown == 0.25
    assert config.throw.buffer_size == 15
    assert config.display.show_joints is False
    assert config.classifier == ClassifierConfig()


def test_unknown_keys_are_ignored(tmp_path, caplog):
    path = tmp_path / "config.yaml"
    path.write_text(
        "classifier:\n"
        "  pinch_distance: 0.03\n"
        "  colour: blue\n"
        "audio:\n"
        "  volume: 11\n"
    )
    with caplog.at_level(logging.WARNING, logger="src.handpose.config"):
        config = load_config(path)
    assert config.classifier.pinch_distance == 0.03
    assert "colour" in caplog.text
    assert "audio" in caplog.text


def test_repo_config_matches_defaults():
    # config.yaml at the project root ships the default values
    assert load_config() == Config()


def test_inverted_finger_thresholds_rejected():
    with pytest.raises(ValueError, match="curl_threshold"):
        ClassifierConfig(extend_threshold=1.0, curl_threshold=1.2)


def test_inverted_thumb_thresholds_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "classifier:\n"
        "  thumb_extend_threshold: 0.7\n"
        "  thumb_curl_threshold: 0.8\n"
    )
    with pytest.raises(ValueError, match="thumb_curl_threshold"):
        load_config(path)


def test_equal_thresholds_allowed():
    # An empty dead zone is still a consistent configuration
    config = ClassifierConfig(extend_threshold=1.1, curl_threshold=1.1)
    assert config.extend_threshold == config.curl_threshold


def test_throw_window_must_fit_buffer():
    with pytest.raises(ValueError):
        ThrowConfig(buffer_size=4, min_samples=5)
    with pytest.raises(ValueError):
        ThrowConfig(min_samples=1)


def test_projectile_validation():
    with pytest.raises(ValueError):
        ProjectileConfig(lifetime=0)
    with pytest.raises(ValueError):
        ProjectileConfig(gravity=[0.0, -9.8])


def test_section_must_be_a_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("throw: fast\n")
    with pytest.raises(ValueError, match="throw"):
        load_config(path)


def test_file_must_be_a_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- classifier\n- throw\n")
    with pytest.raises(ValueError):
        load_config(path)
