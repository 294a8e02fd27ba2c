import json
import logging
import time
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


def request_start(endpoint: str, **additional_fields: Any) -> float:
    """
    Emit a structured request_start log and return the start_time (epoch seconds) for duration calculation.
    """
    start_time = time.time()
    payload: Dict[str, Any] = {"event": "request_start", "endpoint": endpoint}
    if additional_fields:
        payload.update(additional_fields)
    logger.info(json.dumps(payload))
    return start_time


def request_end(endpoint: str, start_time: float, http_status: int = 200, **additional_fields: Any) -> None:
    """
    Emit a structured request_end log with response_time_ms.
    """
    payload: Dict[str, Any] = {
        "event": "request_end",
        "endpoint": endpoint,
        "http_status": http_status,
        "response_time_ms": _elapsed_ms(start_time),
    }
    if additional_fields:
        payload.update(additional_fields)
    logger.info(json.dumps(payload))


def request_error(endpoint: str, start_time: float, http_status: int = 500, error: Optional[str] = None, **additional_fields: Any) -> None:
    """
    Emit a structured request_error log with response_time_ms and error message.
    """
    payload: Dict[str, Any] = {
        "event": "request_error",
        "endpoint": endpoint,
        "http_status": http_status,
        "response_time_ms": _elapsed_ms(start_time),
    }
    if error is not None:
        payload["error"] = error
    if additional_fields:
        payload.update(additional_fields)
    # Use warning for 4xx, error for 5xx
    if 400 <= http_status < 500:
        logger.warning(json.dumps(payload))
    else:
        logger.error(json.dumps(payload))


def stage_start(stage: str, run_sequence: int, **additional_fields: Any) -> float:
    """
    Emit a structured stage_start log for a pipeline stage and return its start_time.
    """
    start_time = time.time()
    payload: Dict[str, Any] = {
        "event": "stage_start",
        "stage": stage,
        "run_sequence": run_sequence,
    }
    if additional_fields:
        payload.update(additional_fields)
    logger.info(json.dumps(payload))
    return start_time


def stage_end(stage: str, run_sequence: int, start_time: float, **additional_fields: Any) -> None:
    payload: Dict[str, Any] = {
        "event": "stage_end",
        "stage": stage,
        "run_sequence": run_sequence,
        "duration_ms": _elapsed_ms(start_time),
    }
    if additional_fields:
        payload.update(additional_fields)
    logger.info(json.dumps(payload))


def stage_error(stage: str, run_sequence: int, start_time: float, error: str, **additional_fields: Any) -> None:
    payload: Dict[str, Any] = {
        "event": "stage_error",
        "stage": stage,
        "run_sequence": run_sequence,
        "duration_ms": _elapsed_ms(start_time),
        "error": error,
    }
    if additional_fields:
        payload.update(additional_fields)
    logger.error(json.dumps(payload))
