"""Tests for slash-command argument parsing."""

import pytest

from session_guard.commands.args import parse_clean_args, parse_quota_args, parse_scan_args


class TestParseScanArgs:
    @pytest.mark.parametrize("args", [None, "", "   "])
    def test_empty_means_scan(self, args):
        parsed = parse_scan_args(args)
        assert parsed.is_scan_command
        assert parsed.sort == "size"
        assert parsed.error is None

    def test_sort_lru(self):
        parsed = parse_scan_args("scan --sort lru")
        assert parsed.sort == "lru"
        assert parsed.error is None

    def test_other_command(self):
        assert not parse_scan_args("clean").is_scan_command

    def test_invalid_sort(self):
        parsed = parse_scan_args("scan --sort name")
        assert parsed.is_scan_command
        assert parsed.error == "Invalid --sort value: name. Supported: size | lru"

    def test_missing_sort_value(self):
        assert parse_scan_args("scan --sort").error.startswith("Missing value for --sort")

    def test_unknown_option(self):
        assert parse_scan_args("scan --fast").error.startswith("Unknown option: --fast")

    def test_unknown_argument(self):
        assert parse_scan_args("scan all").error.startswith("Unknown argument: all")


class TestParseCleanArgs:
    def test_clean(self):
        parsed = parse_clean_args("clean")
        assert parsed.is_clean_command
        assert parsed.error is None

    def test_extra_tokens(self):
        parsed = parse_clean_args("clean --all")
        assert parsed.is_clean_command
        assert parsed.error.startswith("Unknown option: --all")

    @pytest.mark.parametrize("args", [None, "", "scan", "cleanup"])
    def test_not_clean(self, args):
        assert not parse_clean_args(args).is_clean_command


class TestParseQuotaArgs:
    def test_set(self):
        parsed = parse_quota_args("quota set 10GB")
        assert parsed.is_quota_command
        assert parsed.size_bytes == 10 * 1024**3

    def test_size_with_space(self):
        assert parse_quota_args("quota set 512 MB").size_bytes == 512 * 1024**2

    @pytest.mark.parametrize("size", ["abc", "-5MB", "0GB"])
    def test_invalid_size(self, size):
        parsed = parse_quota_args(f"quota set {size}")
        assert parsed.is_quota_command
        assert parsed.size_bytes is None
        assert parsed.error.startswith(f"Invalid size: {size}")

    def test_missing_size(self):
        assert parse_quota_args("quota set").error.startswith("Missing size")

    def test_unknown_subcommand(self):
        parsed = parse_quota_args("quota show")
        assert parsed.is_quota_command
        assert "quota set <size>" in parsed.error

    def test_not_quota(self):
        assert not parse_quota_args("scan").is_quota_command
