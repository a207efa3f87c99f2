"""Tests for the command-line interface."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from rich.console import Console

from webcapture.cli import create_parser, default_image_path, load_config, main, write_result
from webcapture.errors import FetchError
from webcapture.models import BrowserEngine, OutputFormat


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("BROWSER_ENGINE", raising=False)


def _mock_capturer(result=None, error=None):
    capturer = MagicMock()
    capturer.capture = AsyncMock(return_value=result, side_effect=error)
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = capturer
    factory.return_value.__aexit__.return_value = False
    return factory, capturer


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test default argument values."""
        args = create_parser().parse_args([])

        assert args.url is None
        assert args.format == "html"
        assert args.output is None
        assert args.engine is None
        assert not args.serve
        assert args.port is None

    def test_short_flags(self):
        """Test short option aliases."""
        args = create_parser().parse_args(["example.com", "-f", "png", "-o", "out.png", "-e", "pw", "-v"])

        assert args.url == "example.com"
        assert args.format == "png"
        assert args.output == Path("out.png")
        assert args.engine == "pw"
        assert args.verbose

    def test_serve_flags(self):
        """Test server options."""
        args = create_parser().parse_args(["--serve", "--port", "8080", "--host", "127.0.0.1"])

        assert args.serve
        assert args.port == 8080
        assert args.host == "127.0.0.1"


class TestLoadConfig:
    """Tests for configuration precedence."""

    def test_defaults(self):
        """Test that no flags yields the defaults."""
        config = load_config(create_parser().parse_args([]))

        assert config.server.port == 3000
        assert config.browser.engine is BrowserEngine.PUPPETEER
        assert config.log_level == "INFO"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test that environment variables beat the config file."""
        pytest.importorskip("yaml")
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 9000\nbrowser:\n  engine: playwright\n")
        monkeypatch.setenv("PORT", "8123")

        config = load_config(create_parser().parse_args(["--config", str(path)]))

        assert config.server.port == 8123
        assert config.browser.engine is BrowserEngine.PLAYWRIGHT

    def test_flags_override_env(self, monkeypatch):
        """Test that command line flags beat environment variables."""
        monkeypatch.setenv("PORT", "8123")
        monkeypatch.setenv("BROWSER_ENGINE", "playwright")

        config = load_config(create_parser().parse_args(["--port", "7000", "--engine", "puppeteer"]))

        assert config.server.port == 7000
        assert config.browser.engine is BrowserEngine.PUPPETEER

    def test_verbosity(self):
        """Test that -v and -q set the log level."""
        assert load_config(create_parser().parse_args(["-v"])).log_level == "DEBUG"
        assert load_config(create_parser().parse_args(["-q"])).log_level == "ERROR"


class TestWriteResult:
    """Tests for result output."""

    def test_default_image_path(self):
        """Test screenshot file naming."""
        path = default_image_path("https://www.example.com/page", timestamp_ms=1700000000000)

        assert path == Path("www_example_com_1700000000000.png")

    def test_image_to_file(self, tmp_path):
        """Test that image bytes are written to the output path."""
        output = tmp_path / "shot.png"

        written = write_result(b"\x89PNG", OutputFormat.IMAGE, "https://example.com", output, Console(quiet=True))

        assert written == output
        assert output.read_bytes() == b"\x89PNG"

    def test_image_default_name(self, tmp_path, monkeypatch):
        """Test that images without an output path get a generated name."""
        monkeypatch.chdir(tmp_path)

        written = write_result(b"\x89PNG", OutputFormat.IMAGE, "https://example.com", None, Console(quiet=True))

        assert written.name.startswith("example_com_")
        assert (tmp_path / written).exists()

    def test_text_to_stdout(self, capsys):
        """Test that text goes to stdout without an output path."""
        written = write_result("# Title\n", OutputFormat.MARKDOWN, "https://example.com", None, Console(quiet=True))

        assert written is None
        assert capsys.readouterr().out == "# Title\n"

    def test_text_to_file(self, tmp_path):
        """Test that text is written as UTF-8."""
        output = tmp_path / "page.html"

        write_result("<p>café</p>", OutputFormat.HTML, "https://example.com", output, Console(quiet=True))

        assert output.read_text(encoding="utf-8") == "<p>café</p>"


class TestMain:
    """Tests for main()."""

    def test_missing_url(self, capsys):
        """Test that running without a URL or --serve fails."""
        assert main([]) == 1
        assert "Missing URL" in capsys.readouterr().err

    def test_invalid_format(self):
        """Test that unknown formats fail before capturing."""
        factory, _ = _mock_capturer()

        with patch("webcapture.cli.Capturer", factory):
            assert main(["example.com", "--format", "pdf"]) == 1

        factory.assert_not_called()

    def test_capture_to_stdout(self, capsys):
        """Test a Markdown capture printed to stdout."""
        factory, capturer = _mock_capturer(result="# Example\n")

        with patch("webcapture.cli.Capturer", factory):
            code = main(["example.com", "-f", "md", "-q"])

        assert code == 0
        assert capsys.readouterr().out == "# Example\n"
        capturer.capture.assert_awaited_once_with("https://example.com", OutputFormat.MARKDOWN, BrowserEngine.PUPPETEER)

    def test_capture_with_engine(self, tmp_path):
        """Test that the engine flag reaches the capturer."""
        factory, capturer = _mock_capturer(result=b"\x89PNG")
        output = tmp_path / "shot.png"

        with patch("webcapture.cli.Capturer", factory):
            code = main(["example.com", "-f", "png", "-e", "playwright", "-o", str(output), "-q"])

        assert code == 0
        assert output.read_bytes() == b"\x89PNG"
        assert capturer.capture.await_args.args[2] is BrowserEngine.PLAYWRIGHT

    def test_capture_failure(self, capsys):
        """Test that capture errors exit with status 1."""
        factory, _ = _mock_capturer(error=FetchError("upstream refused"))

        with patch("webcapture.cli.Capturer", factory):
            code = main(["example.com", "-q"])

        assert code == 1
        assert "upstream refused" in capsys.readouterr().err

    def test_serve(self):
        """Test that --serve starts the server with the effective config."""
        with patch("webcapture.server.run_server") as run_server:
            code = main(["--serve", "--port", "8080", "-q"])

        assert code == 0
        config = run_server.call_args.args[0]
        assert config.server.port == 8080

    def test_serve_bind_failure(self):
        """Test that a port already in use exits with status 1."""
        with patch("webcapture.server.run_server", side_effect=OSError("address in use")):
            assert main(["--serve", "-q"]) == 1

    def test_doctor(self):
        """Test that --doctor runs diagnostics."""
        with patch("webcapture.doctor.run_doctor", return_value=0) as run_doctor:
            assert main(["--doctor"]) == 0

        run_doctor.assert_called_once_with(output_dir=None)
