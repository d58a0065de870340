from __future__ import annotations

import unittest

from posturecheck.metrics.features import MetricKind
from posturecheck.profiles import (
    METRICS_PER_PROFILE,
    PROFILES,
    AngleProfile,
    CameraAngle,
    FeatureDefinition,
    get_profile,
    normalize_angle,
)


class ProfileTableTests(unittest.TestCase):
    def test_every_angle_has_four_metrics(self) -> None:
        self.assertEqual(set(PROFILES), set(CameraAngle))
        for angle, profile in PROFILES.items():
            self.assertEqual(profile.angle, angle)
            self.assertEqual(len(profile.metrics), METRICS_PER_PROFILE)
            self.assertTrue(all(m.weight > 0 for m in profile.metrics))

    def test_front_profile_metrics_and_weights(self) -> None:
        front = PROFILES[CameraAngle.FRONT]
        self.assertEqual(
            [(m.kind, m.weight) for m in front.metrics],
            [
                (MetricKind.SHOULDER_TILT, 1.0),
                (MetricKind.HEAD_FORWARD_Z, 0.6),
                (MetricKind.LATERAL_LEAN, 1.0),
                (MetricKind.HEAD_DROP, 0.8),
            ],
        )
        self.assertEqual(front.critical_ids, frozenset({0, 7, 8, 11, 12}))

    def test_side_views_highlight_their_own_side(self) -> None:
        self.assertEqual(PROFILES[CameraAngle.SIDE_LEFT].critical_ids, frozenset({0, 7, 11, 23}))
        self.assertEqual(PROFILES[CameraAngle.SIDE_RIGHT].critical_ids, frozenset({0, 8, 12, 24}))

    def test_profile_with_wrong_metric_count_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            AngleProfile(
                angle=CameraAngle.FRONT,
                label="Broken",
                metrics=(FeatureDefinition("Shoulder Tilt", MetricKind.SHOULDER_TILT, 1.0),),
                critical_ids=frozenset(),
            )


class AngleLookupTests(unittest.TestCase):
    def test_normalize_accepts_loose_spellings(self) -> None:
        self.assertEqual(normalize_angle("front_left"), CameraAngle.FRONT_LEFT)
        self.assertEqual(normalize_angle(" Side Right "), CameraAngle.SIDE_RIGHT)
        self.assertEqual(normalize_angle(CameraAngle.FRONT), CameraAngle.FRONT)

    def test_unknown_angle_raises(self) -> None:
        with self.assertRaises(ValueError):
            normalize_angle("overhead")

    def test_get_profile_by_name(self) -> None:
        self.assertEqual(get_profile("side-left").label, "Left side view")


if __name__ == "__main__":
    unittest.main()
