import logging
import os
import sys

from articlegen.utils import configure_logging, log_event


def test_configure_logging_idempotent(tmp_path, monkeypatch):
    log_file = tmp_path / "app.log"
    monkeypatch.setenv("AG_LOG_LEVEL", "INFO")
    monkeypatch.setenv("AG_LOG_FILE", str(log_file))

    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        root.handlers = []
        configure_logging("articlegen.worker")
        configure_logging("articlegen.worker")

        stream_handlers = [
            handler
            for handler in root.handlers
            if isinstance(handler, logging.StreamHandler)
            and not isinstance(handler, logging.FileHandler)
        ]
        file_handlers = [
            handler for handler in root.handlers if isinstance(handler, logging.FileHandler)
        ]

        assert len(stream_handlers) == 1
        assert stream_handlers[0].stream is sys.stdout
        assert len(file_handlers) == 1
        assert os.path.abspath(file_handlers[0].baseFilename) == os.path.abspath(
            str(log_file)
        )
    finally:
        for handler in root.handlers:
            if handler not in original_handlers:
                handler.close()
        root.handlers = original_handlers
        root.setLevel(original_level)


def test_log_event_formats_key_values(caplog):
    logger = logging.getLogger("articlegen.test")
    with caplog.at_level(logging.INFO, logger="articlegen.test"):
        log_event(logger, logging.INFO, "job_claimed", job_id="job_1", topic="rates")
    assert "event=job_claimed job_id=job_1 topic=rates" in caplog.text
