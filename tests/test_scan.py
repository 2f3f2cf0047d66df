"""
Enumeration, RAW/JPEG pairing and the end-to-end scan pipeline.
"""
import threading
from pathlib import Path

import pytest
from PIL import Image

from conftest import encode, fake_raw, gradient, noise
from pc_app.core.errors import BadRequest, DecodeFailure, ScanAlreadyInProgress
from pc_app.core.imaging import PillowDecoder
from pc_app.modules.scan.files import build_record, iter_photo_files
from pc_app.modules.scan.pairing import pair_raw_jpeg, reuses_pair
from pc_app.modules.scan.service import ScanPipeline, checksum_fingerprint


def by_name(outcome):
    """filename -> analysis"""
    names = {r.id: r.filename for r in outcome.records}
    return {names[a.photo_id]: a for a in outcome.result.analyses}


class TestEnumeration:
    def test_finds_supported_files_recursively(self, project):
        for rel in ["a.jpg", "b.PNG", "sub/c.nef", "sub/deeper/d.heic", "notes.txt"]:
            (project / rel).parent.mkdir(parents=True, exist_ok=True)
            (project / rel).write_bytes(b"x")
        found = [p.relative_to(project).as_posix() for p in iter_photo_files(project)]
        assert found == ["a.jpg", "b.PNG", "sub/c.nef", "sub/deeper/d.heic"]

    def test_skips_hidden_and_cache_dirs(self, project):
        for rel in [".trash/1_a.jpg", "_thumbnails/thumb_1.jpg", ".git/x.jpg", "keep/a.jpg"]:
            (project / rel).parent.mkdir(parents=True, exist_ok=True)
            (project / rel).write_bytes(b"x")
        found = [p.relative_to(project).as_posix() for p in iter_photo_files(project)]
        assert found == ["keep/a.jpg"]

    def test_build_record(self, project):
        path = project / "IMG_1.CR2"
        path.write_bytes(b"12345")
        rec = build_record(path)
        assert rec.filename == "IMG_1.CR2"
        assert rec.format == "cr2"
        assert rec.is_raw is True
        assert rec.size == 5
        assert len(rec.id) == 32


class TestPairing:
    def _records(self, project, names):
        recs = []
        for n in names:
            (project / n).parent.mkdir(parents=True, exist_ok=True)
            (project / n).write_bytes(b"x")
            recs.append(build_record(project / n))
        return recs

    def test_pairs_same_stem_same_folder(self, project):
        recs = pair_raw_jpeg(self._records(project, ["IMG_1.NEF", "img_1.jpg", "IMG_2.jpg"]))
        raw, jpg, other = recs
        assert raw.pair_id == jpg.id
        assert jpg.pair_id == raw.id
        assert other.pair_id is None

    def test_different_folders_do_not_pair(self, project):
        recs = pair_raw_jpeg(self._records(project, ["a/IMG_1.NEF", "b/IMG_1.jpg"]))
        assert all(r.pair_id is None for r in recs)

    def test_png_never_pairs(self, project):
        recs = pair_raw_jpeg(self._records(project, ["IMG_1.NEF", "IMG_1.png"]))
        assert all(r.pair_id is None for r in recs)

    def test_only_raw_side_reuses(self, project):
        raw, jpg = pair_raw_jpeg(self._records(project, ["IMG_1.dng", "IMG_1.jpeg"]))
        by_id = {raw.id: raw, jpg.id: jpg}
        assert reuses_pair(raw, by_id) is True
        assert reuses_pair(jpg, by_id) is False


class TestPipeline:
    def test_identical_copies_group_at_every_threshold(self, pipeline, write_image, project):
        original = write_image("a.png", noise(seed=1))
        copy = write_image("copy/a.png", noise(seed=1))
        write_image("other.png", gradient())

        outcome = pipeline.run(project)
        ids = {Path(r.path): r.id for r in outcome.records}
        first, second = ids[original.resolve()], ids[copy.resolve()]
        for t in range(1, 101):
            groups = {a.photo_id: a.duplicate_group for a in pipeline.recluster(outcome.result, t).analyses}
            assert groups[first] is not None
            assert groups[first] == groups[second]

    def test_default_threshold_and_flags(self, pipeline, write_image, project):
        write_image("a.png", noise(seed=1))
        write_image("b.png", noise(seed=1))
        write_image("smooth.png", gradient())

        outcome = pipeline.run(project)
        result = outcome.result
        named = by_name(outcome)

        assert result.threshold == 85
        assert len(result.groups) == 1
        assert named["a.png"].is_duplicate and named["b.png"].is_duplicate
        assert named["a.png"].duplicate_group == "dup_group_1"
        assert not named["smooth.png"].is_duplicate
        assert named["smooth.png"].is_blurry is True
        assert named["a.png"].is_blurry is False
        assert named["a.png"].fingerprint_source == "dhash"
        assert result.processed == 3
        assert result.failures == []

    def test_group_order_follows_scan_order(self, pipeline, write_image, project):
        for n in range(6):
            write_image(f"IMG_{n}.png", noise(seed=7))
        outcome = pipeline.run(project)
        assert list(outcome.result.groups[0].photo_ids) == [r.id for r in outcome.records]

    def test_thumbnails_written_and_not_rescanned(self, pipeline, write_image, project):
        write_image("a.png", noise(200, 100))
        outcome = pipeline.run(project)
        thumb = Path(outcome.result.analyses[0].thumbnail_path)
        assert thumb == project.resolve() / "_thumbnails" / f"thumb_{outcome.records[0].id}.jpg"
        assert thumb.exists()

        again = pipeline.run(project)
        assert [r.filename for r in again.records] == ["a.png"]

    def test_records_carry_analysis_fields(self, pipeline, write_image, project):
        write_image("a.png", noise(120, 100))
        outcome = pipeline.run(project, 90)

        record = outcome.records[0]
        analysis = outcome.result.analyses[0]
        assert (record.width, record.height) == (120, 100)
        assert (analysis.width, analysis.height) == (120, 100)
        assert record.fingerprint == analysis.fingerprint
        assert record.thumbnail_path == analysis.thumbnail_path is not None

    def test_undecodable_files_fall_back_to_checksum(self, pipeline, project):
        junk = b"definitely not an image " * 40
        (project / "broken.jpg").write_bytes(junk)
        (project / "broken_copy.jpg").write_bytes(junk)

        outcome = pipeline.run(project)
        named = by_name(outcome)
        assert named["broken.jpg"].fingerprint_source == "checksum"
        assert named["broken.jpg"].fingerprint == checksum_fingerprint(junk)
        assert named["broken.jpg"].duplicate_group == named["broken_copy.jpg"].duplicate_group
        assert named["broken.jpg"].duplicate_group is not None
        assert outcome.result.fallback_count == 2

    def test_oversized_image_is_a_decode_failure(self, pipeline, write_image, project, monkeypatch):
        path = write_image("huge.png", noise(120, 100))
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        with pytest.raises(DecodeFailure):
            PillowDecoder().decode(path.read_bytes())

        outcome = pipeline.run(project)
        assert outcome.result.failures == []
        assert outcome.result.analyses[0].fingerprint_source == "checksum"

    def test_paired_raw_follows_its_jpeg(self, pipeline, project):
        jpeg = encode(noise(seed=4), "JPEG", quality=95)
        (project / "IMG_1.jpg").write_bytes(jpeg)
        (project / "IMG_1.NEF").write_bytes(fake_raw(None))
        (project / "IMG_2.jpg").write_bytes(jpeg)

        outcome = pipeline.run(project)
        named = by_name(outcome)
        raw, jpg = named["IMG_1.NEF"], named["IMG_1.jpg"]

        assert raw.paired_with == jpg.photo_id
        assert raw.fingerprint == jpg.fingerprint
        assert raw.duplicate_group == jpg.duplicate_group == named["IMG_2.jpg"].duplicate_group
        assert raw.photo_id not in outcome.result.groups[0].photo_ids
        assert outcome.result.processed == 2

    def test_lone_raw_uses_embedded_preview(self, pipeline, project):
        (project / "DSC_1.ARW").write_bytes(fake_raw(encode(noise(seed=5), "JPEG", quality=95)))
        analysis = pipeline.run(project).result.analyses[0]
        assert analysis.has_preview is True
        assert analysis.fingerprint_source == "dhash"
        assert (analysis.width, analysis.height) == (120, 100)

    def test_raw_without_preview_gets_placeholder(self, pipeline, project):
        (project / "DSC_2.CR2").write_bytes(fake_raw(None))
        analysis = pipeline.run(project).result.analyses[0]
        assert analysis.has_preview is False
        assert analysis.fingerprint_source == "checksum"
        assert Path(analysis.thumbnail_path).exists()

    def test_per_file_errors_do_not_stop_the_batch(self, settings, write_image, project):
        class Exploding(PillowDecoder):
            def decode(self, data):
                if data.startswith(b"BOOM"):
                    raise RuntimeError("decoder crashed")
                return super().decode(data)

        write_image("ok.png", noise())
        (project / "boom.png").write_bytes(b"BOOM")
        outcome = ScanPipeline(settings, decoder=Exploding()).run(project)

        assert [f.reason for f in outcome.result.failures] == ["decoder crashed"]
        assert len(outcome.result.analyses) == 1
        assert outcome.result.processed == 1

    def test_progress_after_run(self, pipeline, write_image, project):
        write_image("a.png", noise())
        write_image("b.png", gradient())
        pipeline.run(project)
        progress = pipeline.progress()
        assert progress.phase == "complete"
        assert progress.processed_files == progress.total_files == 2

    def test_recluster_returns_new_result(self, pipeline, write_image, project):
        write_image("a.png", noise(seed=1))
        write_image("b.png", noise(seed=1))
        result = pipeline.run(project).result
        strict = pipeline.recluster(result, 100)
        assert strict.threshold == 100
        assert result.threshold == 85
        assert len(strict.groups) == 1

    def test_not_a_directory(self, pipeline, project):
        with pytest.raises(BadRequest):
            pipeline.scan(project / "missing")

    def test_invalid_threshold(self, pipeline, project):
        with pytest.raises(BadRequest):
            pipeline.run(project, threshold=150)

    def test_concurrent_scan_is_rejected(self, settings, project):
        started, release = threading.Event(), threading.Event()

        def slow_enumerator(root):
            started.set()
            release.wait(5)
            return []

        pipeline = ScanPipeline(settings, enumerator=slow_enumerator)
        worker = threading.Thread(target=pipeline.scan, args=(project,))
        worker.start()
        try:
            assert started.wait(5)
            assert pipeline.busy
            with pytest.raises(ScanAlreadyInProgress):
                pipeline.scan(project)
        finally:
            release.set()
            worker.join(5)
        assert not pipeline.busy
        assert pipeline.scan(project) == []
