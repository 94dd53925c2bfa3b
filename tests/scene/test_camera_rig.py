"""Tests for the hand-following camera rig."""

import math

import pytest

from arborlight.config import RigConfig
from arborlight.gesture.classifier import HandPosition
from arborlight.scene.camera_rig import CameraRig


def test_centred_hand_is_neutral():
    rig = CameraRig(HandPosition())
    assert rig.target() == (0.0, 0.0)
    assert rig.tick(1 / 60) == (0.0, 0.0)


def test_target_from_hand_edges():
    rig = CameraRig(HandPosition(1.0, 1.0))
    yaw, pitch = rig.target()
    assert yaw == pytest.approx(0.75 * math.pi)
    assert pitch == pytest.approx(-0.2 * math.pi)


def test_follows_at_follow_rate():
    hand = HandPosition(1.0, 0.5)
    rig = CameraRig(hand)
    rig.tick(1 / 60)
    assert rig.yaw == pytest.approx(0.75 * math.pi * 5.0 / 60)
    rig.tick(10.0)  # factor clamps to 1
    assert rig.yaw == pytest.approx(0.75 * math.pi)


def test_resets_when_gesture_disabled():
    rig = CameraRig(HandPosition(0.0, 0.0), RigConfig(reset_rate=3.0))
    rig.tick(1.0)
    assert rig.yaw == pytest.approx(-0.75 * math.pi)
    rig.tick(0.1, gesture_enabled=False)
    assert rig.yaw == pytest.approx(-0.75 * math.pi * 0.7)
    rig.tick(5.0, gesture_enabled=False)
    assert rig.yaw == pytest.approx(0.0)
    assert rig.pitch == pytest.approx(0.0)


def test_reads_hand_updates():
    hand = HandPosition()
    rig = CameraRig(hand)
    hand.set(0.75, 0.5)
    rig.tick(1.0)
    assert rig.yaw == pytest.approx(0.25 * math.pi * 1.5)
