"""Unit tests for the LogStorageHandler logging adapter."""

import logging

import pytest

from runmetrics.adapters.logging import LogStorageHandler, configure_logging
from runmetrics.adapters.logging_context import log_context
from runmetrics.adapters.storage.in_memory import InMemoryLogStorage
from runmetrics.core.models import LogEntry


def make_record(
    msg: str = "test message",
    level: int = logging.INFO,
    name: str = "runmetrics.recorder",
    **extra: object,
) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="/app/recorder.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
        func="record",
    )
    record.__dict__.update(extra)
    return record


@pytest.mark.core
class TestLogStorageHandler:
    """Tests for LogStorageHandler."""

    def test_handler_is_logging_handler(self) -> None:
        assert isinstance(LogStorageHandler(InMemoryLogStorage()), logging.Handler)

    def test_emit_writes_log_entry(self) -> None:
        storage = InMemoryLogStorage()
        LogStorageHandler(storage).emit(make_record())
        (entry,) = storage.read()
        assert entry.message == "test message"
        assert entry.level == "INFO"

    def test_default_attributes(self) -> None:
        """module, funcName and lineno are extracted by default."""
        storage = InMemoryLogStorage()
        LogStorageHandler(storage).emit(make_record())
        (entry,) = storage.read()
        assert entry.attributes == {
            "module": "runmetrics.recorder",
            "funcName": "record",
            "lineno": 42,
        }

    def test_custom_include_attrs(self) -> None:
        storage = InMemoryLogStorage()
        LogStorageHandler(storage, include_attrs=["pathname"]).emit(make_record())
        (entry,) = storage.read()
        assert entry.attributes == {"pathname": "/app/recorder.py"}

    def test_includes_extra_attributes(self) -> None:
        """Scalar extras are kept; other values are dropped."""
        storage = InMemoryLogStorage()
        record = make_record(monitor="builds", attempt=2, payload={"a": 1})
        LogStorageHandler(storage, include_attrs=[]).emit(record)
        (entry,) = storage.read()
        assert entry.attributes["monitor"] == "builds"
        assert entry.attributes["attempt"] == 2
        assert "payload" not in entry.attributes

    def test_log_context_fields_are_attached(self) -> None:
        storage = InMemoryLogStorage()
        handler = LogStorageHandler(storage, include_attrs=[])
        with log_context(run="build-abc12", namespace="ci"):
            handler.emit(make_record())
        (entry,) = storage.read()
        assert entry.attributes == {"run": "build-abc12", "namespace": "ci"}

    def test_extras_override_context(self) -> None:
        storage = InMemoryLogStorage()
        handler = LogStorageHandler(storage, include_attrs=[])
        with log_context(monitor="from-context"):
            handler.emit(make_record(monitor="from-call"))
        (entry,) = storage.read()
        assert entry.attributes["monitor"] == "from-call"

    def test_exception_info(self) -> None:
        storage = InMemoryLogStorage()
        logger = logging.getLogger("runmetrics.test.exc")
        logger.addHandler(LogStorageHandler(storage))
        logger.propagate = False
        try:
            try:
                raise ValueError("boom")
            except ValueError:
                logger.exception("failed")
        finally:
            logger.handlers.clear()
            logger.propagate = True
        (entry,) = storage.read()
        assert entry.level == "ERROR"
        assert entry.attributes["exc_type"] == "ValueError"
        assert entry.attributes["exc_message"] == "boom"
        assert "Traceback" in str(entry.attributes["exc_traceback"])

    def test_storage_failure_is_handled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A failing storage goes through handleError instead of raising."""

        class BrokenStorage(InMemoryLogStorage):
            def write(self, entry: LogEntry) -> None:
                raise OSError("disk full")

        handled: list[logging.LogRecord] = []
        handler = LogStorageHandler(BrokenStorage())
        monkeypatch.setattr(handler, "handleError", handled.append)
        record = make_record()
        handler.emit(record)
        assert handled == [record]

    def test_handler_level(self) -> None:
        storage = InMemoryLogStorage()
        logger = logging.getLogger("runmetrics.test.level")
        logger.setLevel(logging.DEBUG)
        logger.addHandler(LogStorageHandler(storage, level=logging.WARNING))
        try:
            logger.info("quiet")
            logger.warning("loud")
        finally:
            logger.handlers.clear()
        assert [e.message for e in storage.read()] == ["loud"]


@pytest.mark.core
class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_attaches_handler(self) -> None:
        storage = InMemoryLogStorage()
        logger = logging.getLogger("runmetrics.test.configure")
        handler = configure_logging(storage, logger_name="runmetrics.test.configure")
        try:
            assert handler in logger.handlers
            assert logger.level == logging.INFO
            logger.info("hello")
        finally:
            logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
        assert [e.message for e in storage.read()] == ["hello"]
