import json
import logging

from thermoscan.utils.structured_logger import request_error, stage_end, stage_error, stage_start


def _payloads(caplog):
    return [json.loads(record.getMessage()) for record in caplog.records]


def test_stage_events(caplog):
    caplog.set_level(logging.INFO, logger="thermoscan.utils.structured_logger")

    start_time = stage_start("analysis", 4)
    stage_end("analysis", 4, start_time)
    stage_error("enrichment", 4, start_time, "boom")

    start, end, error = _payloads(caplog)
    assert start == {"event": "stage_start", "stage": "analysis", "run_sequence": 4}
    assert end["event"] == "stage_end"
    assert end["duration_ms"] >= 0
    assert error["error"] == "boom"
    assert caplog.records[2].levelno == logging.ERROR


def test_request_error_level_follows_status(caplog):
    caplog.set_level(logging.INFO, logger="thermoscan.utils.structured_logger")

    request_error("/api/analyses", 0.0, http_status=415, error="not an image")
    request_error("/api/analyses", 0.0, error="crash")

    assert [record.levelno for record in caplog.records] == [logging.WARNING, logging.ERROR]
    assert _payloads(caplog)[0]["http_status"] == 415
