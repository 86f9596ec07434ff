"""
Tests for the convert/identify subprocess wrappers
"""

import subprocess

import pytest

from api.exceptions import ExternalProcessFailedException, SourceProbeFailedException
from core.image_magick import ImageMagick, parse_dimensions
from schemas.iiif import SourceDimensions


class FakeRun:
    """Records subprocess.run calls and replays a canned result"""

    def __init__(self, stdout=b"", stderr=b"", returncode=0, raises=None):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.raises = raises
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((argv, kwargs))
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(argv, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def magick():
    return ImageMagick(convert_binary="convert", identify_binary="identify", timeout_seconds=5)


class TestParseDimensions:
    def test_single_line(self):
        assert parse_dimensions("640,480\n") == SourceDimensions(width=640, height=480)

    def test_first_frame_wins(self):
        assert parse_dimensions("100,50\n200,80\n") == SourceDimensions(width=100, height=50)

    @pytest.mark.parametrize("output", ["", "\n", "640x480", "640,480,3", "a,b"])
    def test_garbage(self, output):
        with pytest.raises(ValueError):
            parse_dimensions(output)


class TestTransform:
    """Test convert invocation"""

    def test_success(self, magick, monkeypatch):
        fake = FakeRun(stdout=b"\xff\xd8jpeg")
        monkeypatch.setattr(subprocess, "run", fake)

        data = magick.transform(["-rotate", "90", "/images/cat.jpg", "jpg:-"])

        assert data == b"\xff\xd8jpeg"
        argv, kwargs = fake.calls[0]
        assert argv == ["convert", "-rotate", "90", "/images/cat.jpg", "jpg:-"]
        assert kwargs["timeout"] == 5
        assert kwargs.get("shell", False) is False

    def test_non_zero_exit(self, magick, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run", FakeRun(returncode=1, stderr=b"convert: unable to open image")
        )

        with pytest.raises(ExternalProcessFailedException) as exc_info:
            magick.transform(["/images/cat.jpg", "jpg:-"])

        assert exc_info.value.status_code == 502
        assert exc_info.value.returncode == 1
        assert "unable to open image" in exc_info.value.detail

    def test_timeout(self, magick, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run", FakeRun(raises=subprocess.TimeoutExpired(cmd="convert", timeout=5))
        )

        with pytest.raises(ExternalProcessFailedException) as exc_info:
            magick.transform(["/images/cat.jpg", "jpg:-"])

        assert "timed out" in exc_info.value.detail

    def test_missing_binary(self, magick, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(raises=FileNotFoundError("convert")))

        with pytest.raises(ExternalProcessFailedException):
            magick.transform(["/images/cat.jpg", "jpg:-"])

    def test_empty_output(self, magick, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(stdout=b""))

        with pytest.raises(ExternalProcessFailedException):
            magick.transform(["/images/cat.jpg", "jpg:-"])


class TestProbe:
    """Test identify invocation"""

    def test_success(self, magick, monkeypatch):
        fake = FakeRun(stdout=b"640,480\n")
        monkeypatch.setattr(subprocess, "run", fake)

        dims = magick.probe("/images/cat.jpg")

        assert dims == SourceDimensions(width=640, height=480)
        argv, _ = fake.calls[0]
        assert argv == ["identify", "-ping", "-format", "%w,%h\n", "/images/cat.jpg"]

    def test_process_failure_is_probe_failure(self, magick, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(returncode=1, stderr=b"no decode delegate"))

        with pytest.raises(SourceProbeFailedException) as exc_info:
            magick.probe("/images/cat.jpg")

        assert exc_info.value.status_code == 500

    def test_garbage_output_is_probe_failure(self, magick, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(stdout=b"what"))

        with pytest.raises(SourceProbeFailedException):
            magick.probe("/images/cat.jpg")
