import json

from killernodes_installer.services.manifest import ManifestService


class RecordingLogger:
    def __init__(self):
        self.warnings = []

    def warning(self, message, *_args, **_kwargs):
        self.warnings.append(message)


def test_manifest_service_writes_run_metadata(tmp_path):
    manifest_file = tmp_path / "install-manifest.json"
    service = ManifestService(str(manifest_file), logger=RecordingLogger())

    service.start_run("run-123", {"app_dir": "/srv/KILLER_NODES"})
    service.update_metadata(domain="example.com")
    service.step_started("check_requirements")
    service.step_finished("check_requirements", "success")
    service.step_started("install_dependencies")
    service.step_finished("install_dependencies", "failed", error="apt exploded")
    service.add_artifact("env_file", "/srv/KILLER_NODES/.env")
    service.finalize("failed", error="apt exploded")

    data = json.loads(manifest_file.read_text(encoding="utf-8"))

    assert data["run_id"] == "run-123"
    assert data["status"] == "failed"
    assert data["metadata"] == {"app_dir": "/srv/KILLER_NODES", "domain": "example.com"}
    assert data["artifacts"]["env_file"] == "/srv/KILLER_NODES/.env"
    assert [step["status"] for step in data["steps"]] == ["success", "failed"]
    assert data["steps"][1]["error"] == "apt exploded"
    assert data["duration_seconds"] >= 0


def test_manifest_write_failure_only_warns(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    logger = RecordingLogger()
    service = ManifestService(str(blocker / "install-manifest.json"), logger=logger)

    service.start_run("run-123", {})

    assert logger.warnings


def test_manifest_deferred_run_is_written_only_after_persist(tmp_path):
    manifest_file = tmp_path / "install-manifest.json"
    service = ManifestService(str(manifest_file), logger=RecordingLogger())

    service.start_run("run-456", {"app_dir": "/srv/KILLER_NODES"}, persist=False)
    service.step_started("check_requirements")
    service.step_finished("check_requirements", "success")

    assert not manifest_file.exists()

    service.persist()

    data = json.loads(manifest_file.read_text(encoding="utf-8"))
    assert data["run_id"] == "run-456"
    assert data["steps"][0]["name"] == "check_requirements"


def test_manifest_deferred_run_failing_early_leaves_no_file(tmp_path):
    manifest_file = tmp_path / "install-manifest.json"
    service = ManifestService(str(manifest_file), logger=RecordingLogger())

    service.start_run("run-789", {}, persist=False)
    service.finalize("failed", error="Minimum 2GB RAM required")

    assert not manifest_file.exists()
    assert service.manifest["status"] == "failed"
