"""
HTTP surface: every module router mounted under /api by create_app.
"""
import pytest
from fastapi.testclient import TestClient

from conftest import encode, fake_raw, gradient, noise
from pc_app.api.main import create_app
from pc_app.modules.scan.service import ScanPipeline


@pytest.fixture
def client(settings) -> TestClient:
    app = create_app(settings, ScanPipeline(settings))
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "scanning": False}


class TestScanRoutes:
    def test_scan_lists_photos(self, client, write_image, project):
        write_image("a.png", noise())
        (project / "readme.txt").write_text("skip me")
        resp = client.post("/api/scan", json={"root": str(project)})
        assert resp.status_code == 200
        body = resp.json()
        assert body["photos_found"] == 1
        assert body["photos"][0]["filename"] == "a.png"

    def test_scan_missing_root_is_422(self, client, project):
        resp = client.post("/api/scan", json={"root": str(project / "nope")})
        assert resp.status_code == 422

    def test_analyze(self, client, write_image, project):
        write_image("a.png", noise(seed=1))
        write_image("b.png", noise(seed=1))
        write_image("c.png", gradient())
        resp = client.post("/api/scan/analyze", json={"root": str(project), "threshold": 90})
        assert resp.status_code == 200
        body = resp.json()
        assert body["duplicates_count"] == 1
        assert body["blurry_count"] == 1
        assert body["result"]["threshold"] == 90
        assert body["result"]["groups"][0]["id"] == "dup_group_1"

    def test_progress(self, client, write_image, project):
        assert client.get("/api/scan/progress").json()["phase"] == "idle"
        write_image("a.png", noise())
        client.post("/api/scan/analyze", json={"root": str(project)})
        assert client.get("/api/scan/progress").json()["phase"] == "complete"


class TestDedupRoutes:
    def test_cluster(self, client):
        resp = client.post(
            "/api/dedup/cluster",
            json={
                "fingerprints": {"a": "FFFFFFFFFFFFFFFF", "b": "ffffffffffffffff", "c": "0000000000000000"},
                "threshold": 85,
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["groups_count"] == 1
        assert body["groups"][0]["photo_ids"] == ["a", "b"]

    def test_cluster_rejects_bad_fingerprint(self, client):
        resp = client.post("/api/dedup/cluster", json={"fingerprints": {"a": "xyz"}})
        assert resp.status_code == 422

    def test_similarity(self, client):
        resp = client.get(
            "/api/dedup/similarity",
            params={"a": "0000000000000000", "b": "000000000000ffff"},
        )
        assert resp.json() == {"distance": 16, "similarity": 75.0}


class TestPreviewAndQualityRoutes:
    def test_extract_preview(self, client, tmp_path):
        raw = tmp_path / "DSC_1.NEF"
        raw.write_bytes(fake_raw(encode(noise(), "JPEG", quality=90)))
        resp = client.post("/api/preview/extract", json={"path": str(raw)})
        body = resp.json()
        assert resp.status_code == 200
        assert body["found"] is True
        assert body["manufacturer"] == "Nikon"
        assert (body["width"], body["height"]) == (120, 100)

    def test_score(self, client, write_image):
        path = write_image("a.png", gradient())
        resp = client.post("/api/quality/score", json={"path": str(path)})
        assert resp.status_code == 200
        assert resp.json()["result"]["is_blurry"] is True

    def test_score_raw_without_preview_is_404(self, client, tmp_path):
        raw = tmp_path / "x.cr2"
        raw.write_bytes(fake_raw(None))
        resp = client.post("/api/quality/score", json={"path": str(raw)})
        assert resp.status_code == 404


class TestTrashRoutes:
    def test_move_status_restore_empty(self, client, project):
        (project / "a.jpg").write_bytes(b"a")
        (project / "b.jpg").write_bytes(b"bb")
        root = str(project)

        moved = client.post(
            "/api/trash/move",
            json={
                "root": root,
                "items": [
                    {"id": "1", "path": str(project / "a.jpg")},
                    {"id": "2", "path": str(project / "b.jpg")},
                    {"id": "3", "path": str(project / "missing.jpg")},
                ],
            },
        ).json()
        assert len(moved["succeeded"]) == 2
        assert moved["succeeded"][0]["originalPath"].endswith("a.jpg")
        assert [f["id"] for f in moved["failed"]] == ["3"]

        status = client.get("/api/trash/status", params={"root": root}).json()
        assert (status["file_count"], status["total_size"]) == (2, 3)

        restored = client.post("/api/trash/restore", json={"root": root, "ids": ["1"]}).json()
        assert len(restored["succeeded"]) == 1
        assert (project / "a.jpg").read_bytes() == b"a"

        purged = client.delete("/api/trash", params={"root": root}).json()
        assert purged["deleted_count"] == 1
        assert not (project / "b.jpg").exists()
