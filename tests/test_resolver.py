"""Tests for PointerResolver."""

import math

import numpy as np
import pytest

from helpers import make_pose
from posepointer.config import PointerConfig
from posepointer.resolver import PointerResolver, PoseEnrichment, raw_position
from posepointer.result import MALFORMED_POSE, NO_CONFIDENT_EAR, Indeterminate
from posepointer.types import HeadAngles, PointedAt, Pose, Size
from posepointer.viewport import Viewport

SURFACE = Size(600, 500)


def _resolver(width=1000, height=800, **config):
    return PointerResolver(PointerConfig(**config), Viewport(width, height))


class TestRawPosition:
    def test_mirrors_left_edge_to_right(self):
        x, y = raw_position(0.0, 0.0, Size(640, 480), Size(640, 480))
        assert x == 640.0
        assert y == 0.0

    def test_scales_to_viewport(self):
        x, y = raw_position(300.0, 250.0, SURFACE, Size(1000, 800))
        assert x == pytest.approx(500.0)
        assert y == pytest.approx(400.0)


class TestEndToEnd:
    def test_frontal_face_points_at_center(self):
        """Centered frontal face on 600x500 -> viewport center of 1000x800."""
        resolver = _resolver()
        [e] = resolver.resolve([make_pose()], SURFACE)

        assert e.ok
        assert e.angles == HeadAngles(yaw=0.0, pitch=0.0)
        assert e.raw == pytest.approx((500.0, 400.0))
        # First sample: smoothed equals raw exactly
        assert e.pointed_at.x == e.raw[0]
        assert e.pointed_at.y == e.raw[1]
        assert e.pointed_at.z == pytest.approx(800000 / 300)

    def test_mirroring_at_edge(self):
        resolver = _resolver(600, 500)
        pose = make_pose(
            nose=(0, 250),
            left_eye=(30, 240),
            right_eye=(-30, 240),
        )
        [e] = resolver.resolve([pose], Size(600, 500))
        assert e.raw[0] == 600.0

    def test_yaw_shifts_x(self):
        resolver = _resolver()
        pose = make_pose(left_eye=(340, 240), right_eye=(280, 240))
        [e] = resolver.resolve([pose], SURFACE)
        assert e.angles.yaw == pytest.approx(math.pi / 4)
        assert e.raw[0] == pytest.approx(500.0 + math.pi / 4 * 500)
        assert e.raw[1] == pytest.approx(400.0)

    def test_pitch_shifts_y(self):
        resolver = _resolver()
        pose = make_pose(left_ear=(360, 220, 0.9), right_ear=(240, 220, 0.9))
        [e] = resolver.resolve([pose], SURFACE)
        assert e.raw[1] == pytest.approx(400.0 + math.pi / 4 * 400)

    def test_depth_uses_unshifted_keypoints(self):
        """Depth ignores the orientation offset and smoothing."""
        resolver = _resolver()
        pose = make_pose(left_ear=(360, 220, 0.9), right_ear=(240, 220, 0.9))
        [e] = resolver.resolve([pose], SURFACE)
        assert e.pointed_at.z == pytest.approx(800000 / 300)

    def test_to_dict(self):
        [e] = _resolver().resolve([make_pose()], SURFACE)
        d = e.to_dict()
        assert set(d) == {"pointedAt", "angles"}
        assert d["pointedAt"]["x"] == pytest.approx(500.0)
        assert d["angles"] == {"yaw": 0.0, "pitch": 0.0}


class TestSmoothingAcrossFrames:
    def test_average_over_frames(self):
        resolver = _resolver(600, 500)
        surface = Size(600, 500)
        resolver.resolve([make_pose(nose=(300, 250))], surface)
        [e] = resolver.resolve(
            [make_pose(nose=(200, 250), left_eye=(230, 240), right_eye=(170, 240))],
            surface,
        )
        # raw x: 300 then 400
        assert e.raw[0] == pytest.approx(400.0)
        assert e.pointed_at.x == pytest.approx(350.0)

    def test_history_bounded_by_stack_size(self):
        resolver = _resolver(600, 500, pose_stack_size=2)
        surface = Size(600, 500)
        for nose_x in (100, 200, 300):
            [e] = resolver.resolve(
                [make_pose(nose=(nose_x, 250), left_eye=(nose_x + 30, 240), right_eye=(nose_x - 30, 240))],
                surface,
            )
        # raw x values 500, 400, 300 -> last two averaged
        assert e.pointed_at.x == pytest.approx(350.0)
        assert len(resolver.tracks.get(0)) == 2

    def test_tracks_do_not_interfere(self):
        resolver = _resolver(600, 500)
        surface = Size(600, 500)
        left = make_pose(nose=(100, 250), left_eye=(130, 240), right_eye=(70, 240))
        right = make_pose(nose=(500, 250), left_eye=(530, 240), right_eye=(470, 240))
        for _ in range(3):
            a, b = resolver.resolve([left, right], surface)
        assert a.pointed_at.x == pytest.approx(500.0)
        assert b.pointed_at.x == pytest.approx(100.0)
        assert (a.track, b.track) == (0, 1)

    def test_stale_track_dropped(self):
        resolver = _resolver(track_ttl_frames=1)
        resolver.resolve([make_pose(), make_pose()], SURFACE)
        resolver.resolve([make_pose()], SURFACE)
        assert 1 in resolver.tracks
        resolver.resolve([make_pose()], SURFACE)
        assert 1 not in resolver.tracks

    def test_reset(self):
        resolver = _resolver()
        resolver.resolve([make_pose()], SURFACE)
        resolver.reset()
        assert len(resolver.tracks) == 0


class TestDegenerateGeometry:
    def test_no_ears_reports_none_pitch(self):
        resolver = _resolver()
        pose = make_pose(left_ear=(360, 220, 0.1), right_ear=(240, 220, 0.1))
        [e] = resolver.resolve([pose], SURFACE)
        assert e.ok
        assert e.angles.pitch is None
        assert isinstance(e.pitch, Indeterminate)
        assert e.pitch.reason == NO_CONFIDENT_EAR
        assert e.raw[1] == pytest.approx(400.0)

    def test_no_ears_propagates_nan_in_compat_mode(self):
        resolver = _resolver(propagate_nan=True)
        pose = make_pose(left_ear=(360, 220, 0.1), right_ear=(240, 220, 0.1))
        [e] = resolver.resolve([pose], SURFACE)
        assert math.isnan(e.angles.pitch)
        assert math.isnan(e.pointed_at.y)
        assert not math.isnan(e.pointed_at.x)

    def test_nan_stays_out_of_history_by_default(self):
        resolver = _resolver()
        bad = make_pose(left_ear=(360, 220, 0.1), right_ear=(240, 220, 0.1))
        resolver.resolve([bad], SURFACE)
        [e] = resolver.resolve([make_pose()], SURFACE)
        assert math.isfinite(e.pointed_at.y)

    def test_degenerate_triangle_z_none(self):
        resolver = _resolver()
        [e] = resolver.resolve([make_pose(nose=(300, 240))], SURFACE)
        assert e.pointed_at.z is None
        assert e.depth.is_indeterminate

    def test_degenerate_triangle_inf_in_compat_mode(self):
        resolver = _resolver(propagate_nan=True)
        [e] = resolver.resolve([make_pose(nose=(300, 240))], SURFACE)
        assert e.pointed_at.z == math.inf


class TestFailureIsolation:
    def test_malformed_pose_does_not_abort_batch(self):
        resolver = _resolver()
        broken = Pose(keypoints=np.zeros((3, 3)))
        a, b, c = resolver.resolve([make_pose(), broken, make_pose()], SURFACE)
        assert a.ok and c.ok
        assert not b.ok
        assert b.pointed_at is None
        assert b.yaw.reason == MALFORMED_POSE
        assert 1 not in resolver.tracks

    def test_non_pose_entry(self):
        resolver = _resolver()
        a, b = resolver.resolve([None, make_pose()], SURFACE)
        assert not a.ok
        assert b.ok

    def test_non_finite_nose_skipped(self):
        resolver = _resolver()
        [e] = resolver.resolve([make_pose(nose=(np.nan, 250))], SURFACE)
        assert not e.ok
        assert 0 not in resolver.tracks

    def test_invalid_surface_raises(self):
        with pytest.raises(ValueError):
            _resolver().resolve([make_pose()], Size(0, 500))


class TestViewport:
    def test_resize_changes_depth_normalization(self):
        viewport = Viewport(1000, 800)
        resolver = PointerResolver(PointerConfig(), viewport)
        [before] = resolver.resolve([make_pose()], SURFACE)
        viewport.resize(2000, 800)
        [after] = resolver.resolve([make_pose()], SURFACE)
        assert after.pointed_at.z == pytest.approx(2 * before.pointed_at.z)

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            Viewport(-1, 10)


class TestPoseEnrichment:
    def test_with_enrichment_returns_new_pose(self):
        pose = make_pose()
        [e] = _resolver().resolve([pose], SURFACE)
        enriched = pose.with_enrichment(e)
        assert enriched is not pose
        assert pose.pointed_at is None
        assert isinstance(enriched.pointed_at, PointedAt)
        assert enriched.angles == e.angles
        assert enriched.keypoints is pose.keypoints

    def test_failed(self):
        e = PoseEnrichment.failed(2, "boom")
        assert e.track == 2
        assert e.error == "boom"
        assert e.to_dict() == {"pointedAt": None, "angles": {"yaw": None, "pitch": None}}
