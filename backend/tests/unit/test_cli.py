"""
Tests for the wp-modernization-audit command line.
"""
import json

import pytest

from wpaudit.cli import EXIT_FAILED, EXIT_OK, EXIT_USAGE, build_parser, main
from wpaudit.core.exceptions import ValidationError
from wpaudit.pipeline.audit import AuditAborted


def _fake_run_audit(outcome=None, error=None, seen=None):
    async def fake(config):
        if seen is not None:
            seen.append(config)
        if error is not None:
            raise error
        return outcome
    return fake


class TestArgumentParsing:
    """Test argument defaults and validation."""

    def test_defaults(self):
        args = build_parser().parse_args(["--url", "https://example.com"])

        assert args.pages == ["/"]
        assert args.auto_pages is False
        assert args.max_pages == 10
        assert args.format == "md"
        assert args.out is None
        assert args.strategy == "mobile"
        assert args.verbose is False

    def test_multiple_pages(self):
        args = build_parser().parse_args(["--url", "https://example.com", "--pages", "/", "/about/"])

        assert args.pages == ["/", "/about/"]

    @pytest.mark.parametrize("argv", [
        [],
        ["--url", "https://example.com", "--format", "pdf"],
        ["--url", "https://example.com", "--max-pages", "0"],
        ["--url", "https://example.com", "--strategy", "tablet"],
    ])
    def test_invalid_arguments_exit_with_usage_code(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(argv)

        assert exc_info.value.code == EXIT_USAGE


class TestMain:
    """Test exit codes and report output."""

    def test_success_writes_report(self, sample_report, tmp_path, monkeypatch, capsys):
        seen = []
        monkeypatch.setattr("wpaudit.cli.run_audit", _fake_run_audit(sample_report, seen=seen))
        out = tmp_path / "report.json"

        code = main([
            "--url", "https://www.example.com", "--pages", "/", "/about/",
            "--format", "json", "--out", str(out),
        ])

        assert code == EXIT_OK
        assert seen[0].pages == ["/", "/about/"]
        assert json.loads(out.read_text(encoding="utf-8"))["scores"]["overall"] == 100
        stdout = capsys.readouterr().out
        assert "Overall Score: 100/100" in stdout
        assert "Pages skipped: /gone/" in stdout
        assert f"Report saved to: {out}" in stdout

    def test_aborted_audit(self, monkeypatch, capsys):
        aborted = AuditAborted(reason="No pages could be successfully audited", failed_paths=["/", "/about/"])
        monkeypatch.setattr("wpaudit.cli.run_audit", _fake_run_audit(aborted))

        code = main(["--url", "https://example.com"])

        assert code == EXIT_FAILED
        stderr = capsys.readouterr().err
        assert "Audit aborted: No pages could be successfully audited" in stderr
        assert "Failed pages: /, /about/" in stderr

    def test_invalid_url(self, monkeypatch, capsys):
        monkeypatch.setattr(
            "wpaudit.cli.run_audit",
            _fake_run_audit(error=ValidationError("Invalid URL", detail="not a url")),
        )

        code = main(["--url", "not a url"])

        assert code == EXIT_USAGE
        assert "Invalid URL" in capsys.readouterr().err

    def test_unwritable_output(self, sample_report, tmp_path, monkeypatch):
        monkeypatch.setattr("wpaudit.cli.run_audit", _fake_run_audit(sample_report))
        blocker = tmp_path / "file"
        blocker.write_text("x")

        code = main(["--url", "https://www.example.com", "--out", str(blocker / "report.md")])

        assert code == EXIT_FAILED
