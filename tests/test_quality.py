"""
Sharpness scoring, closed-eye estimation and the combined quality result.
"""
import pytest

from conftest import encode, fake_raw, flat, gradient, noise
from pc_app.core.errors import DecodeFailure, PreviewNotFound
from pc_app.core.imaging import PixelGrid
from pc_app.modules.quality.eyes import EyeStateEstimator, Face
from pc_app.modules.quality.schemas import QualitySettings
from pc_app.modules.quality.service import QualityService, overall_quality, should_auto_select
from pc_app.modules.quality.sharpness import SharpnessScorer


class FixedFaces:
    """Landmark detector stand-in returning canned faces."""

    def __init__(self, faces):
        self.faces = faces

    def detect(self, grid):
        return self.faces


class BrokenDetector:
    def detect(self, grid):
        raise RuntimeError("model not loaded")


FACE = Face(x=20, y=20, width=80, height=60, eyes=((40, 40), (80, 40)))


class TestSharpness:
    def test_flat_image_scores_zero(self):
        assert SharpnessScorer().score(flat(), 64, 48) == 0.0

    def test_noise_scores_high(self):
        assert SharpnessScorer().score(noise(), 120, 100) > 100

    def test_smooth_gradient_scores_low(self):
        assert 0 < SharpnessScorer().score(gradient(), 90, 80) < 10

    def test_stride_one_samples_every_pixel(self):
        assert SharpnessScorer(stride=1).score(noise(), 120, 100) > 100

    def test_large_images_are_bounded_first(self):
        scorer = SharpnessScorer(max_side=50)
        assert scorer.score(flat(400, 300), 400, 300) == 0.0

    def test_too_small_to_sample(self):
        assert SharpnessScorer().score(flat(2, 2), 2, 2) == 0.0

    def test_size_mismatch(self):
        with pytest.raises(DecodeFailure):
            SharpnessScorer().score(flat(64, 48), 48, 64)

    def test_rejects_bad_stride(self):
        with pytest.raises(ValueError):
            SharpnessScorer(stride=0)


class TestEyes:
    def test_unavailable_without_detector(self):
        assert EyeStateEstimator().estimate(PixelGrid(noise())).state == "unavailable"

    def test_detector_failure_is_unavailable(self):
        report = EyeStateEstimator(BrokenDetector()).estimate(PixelGrid(noise()))
        assert report.state == "unavailable"

    def test_no_faces(self):
        assert EyeStateEstimator(FixedFaces([])).estimate(PixelGrid(noise())).state == "no_faces"

    def test_textureless_eye_regions_read_as_closed(self):
        report = EyeStateEstimator(FixedFaces([FACE])).estimate(PixelGrid(flat(120, 100)))
        assert report.state == "closed"
        assert report.face_count == 1

    def test_textured_eye_regions_read_as_open(self):
        report = EyeStateEstimator(FixedFaces([FACE])).estimate(PixelGrid(noise()))
        assert report.state == "open"
        assert report.openness > 8.0

    def test_face_without_both_eyes_is_unavailable(self):
        one_eye = Face(x=20, y=20, width=80, height=60, eyes=((40, 40),))
        report = EyeStateEstimator(FixedFaces([one_eye])).estimate(PixelGrid(noise()))
        assert report.state == "unavailable"
        assert report.face_count == 1


class TestQualityService:
    def test_blurry_below_threshold(self):
        result = QualityService().analyze(PixelGrid(gradient()), QualitySettings(blur_threshold=100))
        assert result.is_blurry is True
        assert result.eyes == "unavailable"

    def test_sharp_image_not_blurry(self):
        result = QualityService().analyze(PixelGrid(noise()), QualitySettings(blur_threshold=100))
        assert result.is_blurry is False
        assert result.quality_score == 100

    def test_blur_detection_disabled(self):
        result = QualityService().analyze(
            PixelGrid(flat()), QualitySettings(enable_blur_detection=False)
        )
        assert result.blur_score is None
        assert result.is_blurry is False

    def test_closed_eyes_halve_quality(self):
        svc = QualityService(detector=FixedFaces([FACE]))
        grid = PixelGrid(flat(120, 100))
        result = svc.analyze(grid, QualitySettings(enable_closed_eye_detection=True))
        assert result.has_closed_eyes
        assert result.quality_score == 0

    def test_overall_quality(self):
        assert overall_quality(250.0, False) == 100
        assert overall_quality(60.0, True) == 30
        assert overall_quality(None, False) == 0

    def test_auto_select_rules(self):
        svc = QualityService()
        blurry = svc.analyze(PixelGrid(flat()), QualitySettings())
        assert should_auto_select(blurry, QualitySettings()) is False
        assert should_auto_select(blurry, QualitySettings(auto_select_blurry=True)) is True

    def test_score_file_jpeg(self, tmp_path):
        path = tmp_path / "a.png"
        path.write_bytes(encode(noise()))
        resp = QualityService().score_file(path, QualitySettings())
        assert (resp.width, resp.height) == (120, 100)
        assert resp.result.is_blurry is False

    def test_score_file_raw_uses_preview(self, tmp_path):
        path = tmp_path / "a.nef"
        path.write_bytes(fake_raw(encode(gradient(160, 120), "JPEG", quality=95)))
        resp = QualityService().score_file(path, QualitySettings())
        assert (resp.width, resp.height) == (160, 120)

    def test_score_file_raw_without_preview(self, tmp_path):
        path = tmp_path / "b.nef"
        path.write_bytes(fake_raw(None))
        with pytest.raises(PreviewNotFound):
            QualityService().score_file(path, QualitySettings())
