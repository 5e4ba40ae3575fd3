"""Tests for console progress output."""

import io

import pytest

from hopscp.modules.progress import ProgressDisplay, ProgressStage


@pytest.fixture
def output():
    return io.StringIO()


class TestProgressDisplay:
    """Test progress lines."""

    def test_file_line_format(self, output):
        """Each copied file is printed as 'source >> destination'"""
        progress = ProgressDisplay(output_file=output)
        progress.file_transferred("/a/b/x.txt", "/out/x.txt")

        assert "/a/b/x.txt >> /out/x.txt" in output.getvalue()

    def test_phase_uses_symbol(self, output):
        ProgressDisplay(output_file=output).start_phase("Connecting to 10.0.0.5:22")

        assert output.getvalue() == "► Connecting to 10.0.0.5:22\n"

    def test_ascii_symbols(self, output):
        progress = ProgressDisplay(use_unicode=False, output_file=output)
        progress.complete(success=False, message="Transferred 0 files before failure")

        assert output.getvalue().startswith("FAIL Transferred 0 files before failure (")

    def test_complete_includes_elapsed_time(self, output):
        progress = ProgressDisplay(output_file=output)
        progress.complete(success=True, message="Transferred 2 files")

        line = output.getvalue()
        assert line.startswith("✓ Transferred 2 files (")
        assert line.rstrip().endswith("s)")

    def test_default_messages(self, output):
        progress = ProgressDisplay(output_file=output)
        progress.complete(success=True)
        progress.complete(success=False)

        assert "Done" in output.getvalue()
        assert "Failed" in output.getvalue()

    def test_records_updates_in_order(self, output):
        progress = ProgressDisplay(output_file=output)
        progress.start_phase("Uploading 1 files ...")
        progress.file_transferred("/a/x.txt", "/out/x.txt")
        progress.complete()

        stages = [update.stage for update in progress.get_updates()]
        assert stages == [ProgressStage.STARTED, ProgressStage.FILE, ProgressStage.COMPLETED]

    def test_get_updates_returns_copy(self, output):
        progress = ProgressDisplay(output_file=output)
        progress.start_phase("x")

        progress.get_updates().clear()

        assert len(progress.get_updates()) == 1


class TestFormatDuration:
    """Test elapsed time formatting."""

    @pytest.mark.parametrize(
        ("seconds", "text"),
        [
            (4.23, "4.2s"),
            (0, "0.0s"),
            (150, "2m 30s"),
            (3900, "1h 5m"),
        ],
    )
    def test_format(self, seconds, text):
        assert ProgressDisplay.format_duration(seconds) == text
