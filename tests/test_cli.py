"""End-to-end tests for the command-line driver."""

import json
import logging
from unittest.mock import patch

import pytest

from catalog_assets import cli

from conftest import FakeResponse, FakeSession


@pytest.fixture
def catalog_file(tmp_path, catalog_items):
    path = tmp_path / "products.json"
    path.write_text(json.dumps(catalog_items), encoding="utf-8")
    return path


def _run(argv, session):
    with patch("catalog_assets.downloader.build_session", return_value=session):
        return cli.run(cli.parse_args(argv))


@pytest.mark.parametrize("argv", [[], ["a.json", "b.json"]])
def test_wrong_arity_exits_with_usage(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(argv)

    assert excinfo.value.code != 0
    assert "usage:" in capsys.readouterr().err


def test_full_run_writes_images_and_catalog(tmp_path, catalog_file):
    images = tmp_path / "out"
    session = FakeSession()

    argv = [str(catalog_file), "--images-dir", str(images), "--base-url", "https://cdn.example.com"]
    code = _run(argv, session)

    assert code == 0
    assert (images / "ray_ban" / "a1.jpg").exists()
    assert (images / "oneill" / "abc123.jpg").exists()
    output = tmp_path / "products-modified-w-embedded-imgs.json"
    written = json.loads(output.read_text(encoding="utf-8"))
    assert written[0]["$iFrame_IMAGE"] == "https://cdn.example.com/images/ray_ban/a1.jpg"


def test_failed_fetch_still_succeeds_and_records_url(tmp_path, catalog_file):
    images = tmp_path / "out"
    failing = "https://cdn.example.com/images/ray_ban/a1.jpg"
    session = FakeSession(routes={failing: FakeResponse(status_code=404)})
    output = tmp_path / "result.json"

    code = _run(
        [
            str(catalog_file),
            "--images-dir",
            str(images),
            "--base-url",
            "https://cdn.example.com",
            "--output",
            str(output),
        ],
        session,
    )

    assert code == 0
    assert not (images / "ray_ban" / "a1.jpg").exists()
    assert json.loads(output.read_text(encoding="utf-8"))[0]["$iFrame_IMAGE"] == failing


def test_rerun_is_idempotent(tmp_path, catalog_file):
    images = tmp_path / "out"
    argv = [str(catalog_file), "--images-dir", str(images)]
    _run(argv, FakeSession())
    output = tmp_path / "products-modified-w-embedded-imgs.json"
    first = output.read_bytes()

    second_session = FakeSession()
    assert _run(argv, second_session) == 0

    assert second_session.calls == []
    assert output.read_bytes() == first


def test_missing_catalog_exits_nonzero_without_output(tmp_path):
    missing = tmp_path / "missing.json"

    code = _run([str(missing), "--images-dir", str(tmp_path / "out")], FakeSession())

    assert code == 1
    assert not (tmp_path / "missing-modified-w-embedded-imgs.json").exists()


def test_workers_must_be_positive(catalog_file):
    with pytest.raises(SystemExit):
        cli.parse_args([str(catalog_file), "--workers", "0"])


def test_verbose_run_reports_each_failure_once(tmp_path, catalog_file, caplog):
    caplog.set_level(logging.DEBUG)
    failing = "https://cdn.example.com/images/ray_ban/a1.jpg"
    session = FakeSession(routes={failing: FakeResponse(status_code=404)})
    argv = [
        str(catalog_file),
        "--images-dir",
        str(tmp_path / "out"),
        "--base-url",
        "https://cdn.example.com",
        "--verbose",
    ]

    assert _run(argv, session) == 0

    mentions = [r for r in caplog.records if failing in r.getMessage()]
    assert len(mentions) == 1
    assert mentions[0].getMessage().startswith("Failed")
