import json
import sys

import pytest
from loguru import logger

from server.app.core.logging import configure_logging


@pytest.fixture()
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_file_sink_writes_structured_lines(make_settings, tmp_path, restore_logger):
    log_file = tmp_path / "logs" / "server.log"
    configure_logging(make_settings(app_env="production", log_file=log_file))

    logger.bind(service_name="server", event="server_listening", port=8080).info("")
    logger.complete()

    (line,) = log_file.read_text().splitlines()
    record = json.loads(line)["record"]
    assert record["level"]["name"] == "INFO"
    assert record["extra"] == {"service_name": "server", "event": "server_listening", "port": 8080}
    assert "timestamp" in record["time"]


def test_console_mirror_only_outside_production(make_settings, capsys, restore_logger):
    configure_logging(make_settings(app_env="development"))
    logger.bind(event="config_source_absent").warning("")
    assert "config_source_absent" in capsys.readouterr().err

    configure_logging(make_settings(app_env="production", log_file=None))
    logger.bind(event="startup_failed").error("")
    captured = capsys.readouterr()
    assert captured.err == ""
    assert json.loads(captured.out)["record"]["extra"]["event"] == "startup_failed"
