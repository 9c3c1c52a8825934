from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from safeshrink.main import EXIT_OK, EXIT_REJECTED, EXIT_THREAT, EXIT_TRANSCODE_FAILED, main
from safeshrink.processor.processor import AdmissionPipeline
from safeshrink.transcode.exceptions import SourceDecodeError


def _write(tmp_path: Path, name: str, data: bytes) -> Path:
    path = tmp_path / name
    path.write_bytes(data)
    return path


class TestMain:
    def test_writes_compressed_file(
        self, tmp_path: Path, png_bytes: bytes, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = _write(tmp_path, "photo.png", png_bytes)
        out_dir = tmp_path / "out"
        code = main([str(path), "--output-dir", str(out_dir), "--quality", "50"])
        assert code == EXIT_OK
        outputs = list(out_dir.glob("compressed_*.png"))
        assert len(outputs) == 1
        stdout = capsys.readouterr().out
        assert "[complete] 100%" in stdout
        assert "Suitable for:" in stdout

    def test_rejected_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "tiny.png", b"\x89PNG\r\n\x1a\n")
        assert main([str(path), "--output-dir", str(tmp_path)]) == EXIT_REJECTED

    def test_missing_file(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "nope.png")]) == EXIT_REJECTED

    def test_threat(self, tmp_path: Path, png_bytes: bytes) -> None:
        path = _write(tmp_path, "photo.png", png_bytes + b"<script>alert(1)</script>")
        assert main([str(path), "--output-dir", str(tmp_path / "out")]) == EXIT_THREAT
        assert not (tmp_path / "out").exists()

    def test_declined_warning(
        self, tmp_path: Path, png_bytes: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write(tmp_path, "report.pdf.png", png_bytes)
        monkeypatch.setattr("builtins.input", lambda _prompt: "n")
        assert main([str(path), "--output-dir", str(tmp_path / "out")]) == EXIT_REJECTED

    def test_accepted_warning(
        self, tmp_path: Path, png_bytes: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write(tmp_path, "report.pdf.png", png_bytes)
        monkeypatch.setattr("builtins.input", lambda _prompt: "y")
        assert main([str(path), "--output-dir", str(tmp_path / "out")]) == EXIT_OK

    def test_yes_skips_prompt(self, tmp_path: Path, png_bytes: bytes) -> None:
        path = _write(tmp_path, "report.pdf.png", png_bytes)
        with patch("builtins.input") as mock_input:
            code = main([str(path), "--output-dir", str(tmp_path / "out"), "--yes"])
        assert code == EXIT_OK
        mock_input.assert_not_called()

    def test_transcode_failure(self, tmp_path: Path, png_bytes: bytes) -> None:
        path = _write(tmp_path, "photo.png", png_bytes)
        pipeline = MagicMock(spec=AdmissionPipeline)
        pipeline.process.side_effect = SourceDecodeError("Image could not be decoded")
        with patch("safeshrink.main.build_pipeline", return_value=pipeline):
            assert main([str(path)]) == EXIT_TRANSCODE_FAILED

    def test_quality_out_of_range_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main([str(tmp_path / "x.png"), "--quality", "5"])
