"""Tests for deployment history and logging setup."""
from datetime import datetime

from loguru import logger

from appdeploy.deploy.models import DeviceRecord
from appdeploy.storage import CSVHandler, setup_logging


def test_csv_handler_creates_header(tmp_path):
    csv_file = tmp_path / "history" / "deployments.csv"
    CSVHandler(csv_file)
    assert csv_file.read_text().splitlines()[0] == "timestamp,operation,device,ip,package,status,details"


def test_csv_handler_appends_rows(tmp_path):
    handler = CSVHandler(tmp_path / "deployments.csv")
    device = DeviceRecord(index=0, name="Lumia 950", ip="10.0.0.5", guid="aaaa-0001")
    started = datetime(2026, 3, 1, 12, 30, 0)

    handler.write_result("install", device, "App.appx", "success", timestamp=started)
    handler.write_result("uninstall", device, "MyApp", "failure", "exit code 1")

    rows = handler.read_results()
    assert len(rows) == 2
    assert rows[0]["timestamp"] == "2026-03-01T12:30:00"
    assert rows[0]["device"] == "Lumia 950"
    assert rows[0]["ip"] == "10.0.0.5"
    assert rows[1]["status"] == "failure"
    assert rows[1]["details"] == "exit code 1"


def test_setup_logging_writes_log_files(tmp_path):
    setup_logging(tmp_path, verbose=True)
    try:
        logger.info("hello from tests")
        logger.error("something failed")
    finally:
        logger.remove()

    assert "hello from tests" in (tmp_path / "appdeploy.log").read_text()
    errors = (tmp_path / "appdeploy_errors.log").read_text()
    assert "something failed" in errors
    assert "hello from tests" not in errors
