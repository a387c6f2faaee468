"""Tests for malscan_sdk.models."""

import pytest

from malscan_sdk.models import (
    CandidateFile,
    HealthCheckResult,
    ScanPhase,
    ScanResult,
    ScanSession,
    ValidationResult,
)


class TestCandidateFile:
    def test_from_bytes_guesses_type(self):
        f = CandidateFile.from_bytes(b"abc", "notes.txt")
        assert f.size == 3
        assert f.content_type == "text/plain"
        assert f.data == b"abc"

    def test_from_bytes_unknown_type(self):
        assert CandidateFile.from_bytes(b"", "blob").content_type == ""

    def test_explicit_type_wins(self):
        f = CandidateFile.from_bytes(b"abc", "notes.txt", "application/pdf")
        assert f.content_type == "application/pdf"

    def test_from_path(self, tmp_path):
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.4")
        f = CandidateFile.from_path(path)
        assert f.name == "report.pdf"
        assert f.size == 8
        assert f.content_type == "application/pdf"

    def test_from_path_missing(self):
        with pytest.raises(FileNotFoundError):
            CandidateFile.from_path("/nonexistent/report.pdf")

    def test_frozen(self):
        f = CandidateFile(name="a.txt", content_type="text/plain", size=1)
        with pytest.raises(AttributeError):
            f.size = 2  # type: ignore[misc]


class TestScanResult:
    def test_defaults(self):
        r = ScanResult(status="clean")
        assert dict(r.meta) == {}
        assert r.signature is None
        assert r.message is None
        assert r.scanned_at is None
        assert r.is_clean

    def test_meta_properties(self):
        r = ScanResult(status="infected", meta={"originalName": "x.zip", "size": 5, "mimetype": "application/zip"})
        assert r.original_name == "x.zip"
        assert r.size == 5
        assert r.mimetype == "application/zip"
        assert r.is_infected

    def test_frozen(self):
        r = ScanResult(status="clean")
        with pytest.raises(AttributeError):
            r.status = "infected"  # type: ignore[misc]


class TestScanSession:
    def test_initial_state(self):
        s = ScanSession()
        assert s.phase is ScanPhase.IDLE
        assert s.progress_percent == 0
        assert s.poll_attempt == 0
        assert not s.is_active
        assert not s.is_terminal

    @pytest.mark.parametrize("phase", [ScanPhase.UPLOADING, ScanPhase.SCANNING])
    def test_active(self, phase):
        assert ScanSession(phase=phase).is_active

    @pytest.mark.parametrize("phase", [ScanPhase.COMPLETED, ScanPhase.FAILED])
    def test_terminal(self, phase):
        assert ScanSession(phase=phase).is_terminal

    def test_copy_is_independent(self):
        s = ScanSession(phase=ScanPhase.SCANNING, scan_id="s-1")
        c = s.copy()
        c.poll_attempt = 5
        assert s.poll_attempt == 0
        assert c == ScanSession(phase=ScanPhase.SCANNING, scan_id="s-1", poll_attempt=5)

    def test_phase_values(self):
        assert ScanPhase("completed") is ScanPhase.COMPLETED
        assert ScanPhase.FAILED == "failed"


def test_validation_result():
    r = ValidationResult(is_valid=False, errors=("No file provided",))
    assert r.errors[0] == "No file provided"


def test_health_check_result():
    r = HealthCheckResult(healthy=True, message="ok")
    assert r.healthy is True
    assert r.details == {}
