"""Tests for the tutorscout command line interface."""

import csv

from click.testing import CliRunner

from tutorscout.cli import cli
from tutorscout.common.response_cache import cache_key


def test_targets_lists_every_pair():
    runner = CliRunner()

    result = runner.invoke(
        cli, ["targets", "--base-url", "https://t.example/"]
    )

    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 50
    assert lines[0].split() == [
        "Melbourne",
        "Biology",
        "https://t.example/regions/melbourne/biology/?Page=1",
    ]
    assert lines[-1].split()[:2] == ["Adelaide", "Physics"]


def test_clear_cache(tmp_path):
    cache_dir = tmp_path / "html_cache"
    cache_dir.mkdir()
    for n in range(3):
        (cache_dir / cache_key(f"https://t.example/{n}")).write_text("x")

    result = CliRunner().invoke(
        cli, ["clear-cache", "--cache-dir", str(cache_dir)]
    )

    assert result.exit_code == 0
    assert f"Removed 3 cached responses from {cache_dir}" in result.output
    assert list(cache_dir.iterdir()) == []


def test_run_writes_csv(tmp_path, tutor_site):
    output = tmp_path / "tutors.csv"
    result = CliRunner().invoke(
        cli,
        [
            "run",
            "--base-url",
            tutor_site.url,
            "-l",
            "melbourne",
            "-s",
            "physics",
            "--cache-dir",
            str(tmp_path / "cache"),
            "-o",
            str(output),
            "--delay",
            "0",
            "--backoff",
            "0",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Pairs:   1" in result.output
    assert f"Wrote 3 records to {output}" in result.output
    with open(output, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [row["Name"] for row in rows] == [
        "Alice Nguyen",
        "Bob Smith",
        "Chloé Martin",
    ]
    assert {row["Location"] for row in rows} == {"Melbourne"}


def test_run_rejects_invalid_concurrency(tmp_path):
    result = CliRunner().invoke(
        cli,
        [
            "run",
            "--concurrency",
            "0",
            "--cache-dir",
            str(tmp_path / "cache"),
        ],
    )

    assert result.exit_code == 2
    assert "concurrency must be at least 1" in result.output


def test_run_unwritable_cache(tmp_path):
    blocker = tmp_path / "cache"
    blocker.write_text("")

    result = CliRunner().invoke(
        cli,
        [
            "run",
            "-l",
            "perth",
            "-s",
            "physics",
            "--cache-dir",
            str(blocker),
            "-o",
            str(tmp_path / "out.csv"),
        ],
    )

    assert result.exit_code == 1
    assert "Response cache directory is not writable" in result.output
