"""Unit tests for the queue-drain command line."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from queue_drain import cli
from queue_drain.errors import RemoteServiceError

SOURCE = "https://sqs.us-east-1.amazonaws.com/123456789012/source"
DEST = "https://sqs.us-east-1.amazonaws.com/123456789012/dest"


@pytest.fixture(autouse=True)
def configure_logging():
    """Keep pytest's log capture handlers installed."""
    with patch.object(cli, "configure_logging") as configure:
        yield configure


@pytest.fixture
def pipeline_cls():
    with patch.object(cli, "DrainPipeline") as pipeline_cls:
        yield pipeline_cls


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--dest", DEST],
        ["--src", SOURCE],
        ["--src", "", "--bucket", "archive"],
    ],
)
def test_missing_required_flags_print_usage(argv, pipeline_cls, capsys) -> None:
    assert cli.main(argv) == 1

    err = capsys.readouterr().err
    assert "usage: queue-drain" in err
    pipeline_cls.from_config.assert_not_called()


def test_flags_reach_config(pipeline_cls) -> None:
    assert cli.main(["--src", SOURCE, "--dest", DEST, "--bucket", "archive", "--strict"]) == 0

    config = pipeline_cls.from_config.call_args.args[0]
    assert config.source_queue == SOURCE
    assert config.dest_queue == DEST
    assert config.bucket == "archive"
    assert config.strict_delivery is True
    pipeline_cls.from_config.return_value.run_once.assert_called_once_with()


def test_strict_flag_absent_keeps_config_value(pipeline_cls, monkeypatch) -> None:
    monkeypatch.setenv("DRAIN_STRICT_DELIVERY", "true")

    cli.main(["--src", SOURCE, "--bucket", "archive"])

    assert pipeline_cls.from_config.call_args.args[0].strict_delivery is True


def test_region_and_endpoint_flags(pipeline_cls) -> None:
    cli.main(
        [
            "--src",
            SOURCE,
            "--bucket",
            "archive",
            "--region",
            "eu-west-1",
            "--endpoint-url",
            "http://localhost:4566",
        ]
    )

    config = pipeline_cls.from_config.call_args.args[0]
    assert config.aws_region == "eu-west-1"
    assert config.localstack_endpoint == "http://localhost:4566"


def test_source_from_env(pipeline_cls, monkeypatch) -> None:
    monkeypatch.setenv("DRAIN_SOURCE_QUEUE", SOURCE)
    assert cli.main(["--dest", DEST]) == 0


def test_remote_failure_exits_non_zero(pipeline_cls) -> None:
    err = RemoteServiceError("receive_message", SOURCE, "AccessDenied")
    pipeline_cls.from_config.return_value.run_once.side_effect = err

    assert cli.main(["--src", SOURCE, "--dest", DEST]) == 1


def test_failure_report_is_logged(pipeline_cls, caplog) -> None:
    err = RemoteServiceError("put_object", "s3://archive/k", "AccessDenied")
    err.report = MagicMock()
    err.report.summary.return_value = "state=failed pulled=3"
    pipeline_cls.from_config.return_value.run_once.side_effect = err

    with caplog.at_level(logging.ERROR, logger="queue_drain.cli"):
        assert cli.main(["--src", SOURCE, "--bucket", "archive"]) == 1

    assert "state=failed pulled=3" in caplog.text


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])
    assert exc_info.value.code == 0
    assert "queue-drain" in capsys.readouterr().out


def test_verbose_flag(pipeline_cls, configure_logging) -> None:
    cli.main(["--src", SOURCE, "--dest", DEST, "-v"])

    configure_logging.assert_called_once_with("INFO", verbose=True)
