"""Unit tests for the Engine façade — filtering, lifecycle and faults."""

from __future__ import annotations

import io
import threading
from pathlib import Path

import pytest

from scrivener.core.engine import Engine, EngineFaultedError, EngineStoppedError
from scrivener.core.queue import QueueFullError
from scrivener.models import Record, Severity
from scrivener.routing.syslog_adapter import SyslogState


def _record(severity: Severity | str, text: str = "") -> Record:
    return Record(severity=severity, text=text)


# ---------------------------------------------------------------------------
# Test: construction and settings
# ---------------------------------------------------------------------------


class TestEngineConstruction:
    def test_overrides_apply_on_top_of_settings(self, make_engine):
        engine = make_engine(app_name="billing", min_level="warn", queue_capacity=3)
        assert engine.app_name == "billing"
        assert engine.min_level is Severity.WARN
        assert engine.settings.queue_capacity == 3

    def test_invalid_override_rejected(self):
        with pytest.raises(ValueError):
            Engine(queue_capacity=0)

    def test_syslog_enabled_setting(self, make_engine):
        engine = make_engine(syslog_enabled=True)
        assert engine.syslog_state is SyslogState.ENABLED


# ---------------------------------------------------------------------------
# Test: threshold filtering
# ---------------------------------------------------------------------------


class TestMinimumLevel:
    """Records below the threshold never occupy a queue slot."""

    def test_below_threshold_dropped_at_write(self, make_engine):
        engine = make_engine(min_level="warn")
        engine.write(_record(Severity.INFO, "dropped"))
        assert engine.pending == 0

    def test_at_threshold_is_queued(self, make_engine):
        engine = make_engine(min_level="warn")
        engine.write(_record(Severity.WARN, "kept"))
        assert engine.pending == 1

    def test_set_min_level_accepts_names(self, make_engine):
        engine = make_engine()
        engine.set_min_level("error")
        assert engine.get_min_level() is Severity.ERROR
        engine.min_level = Severity.DEBUG
        assert engine.min_level is Severity.DEBUG

    def test_raising_threshold_keeps_already_queued_records(self, make_engine, stream):
        engine = make_engine(min_level="trace")
        engine.add_output(stream)
        engine.write(_record(Severity.DEBUG, "queued early"))
        engine.set_min_level("error")
        engine.write(_record(Severity.DEBUG, "filtered late"))
        engine.shutdown()
        assert stream.getvalue() == "test | DEBUG | queued early\n"

    def test_example_capacity_four_min_warn(self, make_engine, stream):
        engine = make_engine(queue_capacity=4, min_level="warn")
        engine.add_output(stream)
        for severity, text in [
            (Severity.INFO, "i"),
            (Severity.WARN, "w1"),
            (Severity.ERROR, "e"),
            (Severity.WARN, "w2"),
            (Severity.FATAL, "f"),
        ]:
            engine.write(_record(severity, text), timeout=1.0)

        assert engine.pending == 4
        engine.shutdown()
        assert stream.getvalue().splitlines() == [
            "test | WARN | w1",
            "test | ERROR | e",
            "test | WARN | w2",
            "test | FATAL | f",
        ]


# ---------------------------------------------------------------------------
# Test: backpressure and lifecycle
# ---------------------------------------------------------------------------


class TestBackpressure:
    """A full queue blocks writers until the writer thread frees a slot."""

    def test_capacity_writes_do_not_block(self, make_engine):
        engine = make_engine(queue_capacity=3)
        for i in range(3):
            engine.write(_record(Severity.INFO, str(i)), timeout=0.5)
        assert engine.pending == 3

    def test_extra_write_times_out_when_full(self, make_engine):
        engine = make_engine(queue_capacity=1)
        engine.write(_record(Severity.INFO, "a"))
        with pytest.raises(QueueFullError):
            engine.write(_record(Severity.INFO, "b"), timeout=0.05)

    def test_extra_write_blocks_until_consumer_runs(self, make_engine, stream):
        engine = make_engine(queue_capacity=2)
        engine.add_output(stream)
        engine.write(_record(Severity.INFO, "a"))
        engine.write(_record(Severity.INFO, "b"))

        done = threading.Event()

        def producer() -> None:
            engine.write(_record(Severity.INFO, "c"))
            done.set()

        thread = threading.Thread(target=producer)
        thread.start()
        assert not done.wait(0.1)
        assert engine.pending == 2

        engine.start()
        assert done.wait(5.0)
        thread.join(5.0)
        engine.shutdown()
        assert stream.getvalue().splitlines() == [
            "test | INFO | a",
            "test | INFO | b",
            "test | INFO | c",
        ]


class TestLifecycle:
    def test_context_manager_starts_and_drains(self, fake_syslog, stream):
        with Engine(syslog_backend=fake_syslog, app_name="ctx", min_level="trace") as engine:
            engine.add_output(stream)
            assert engine.is_running
            engine.write(_record(Severity.NOTIFY, "inside"))
        assert not engine.is_running
        assert stream.getvalue() == "ctx | NOTIFY | inside\n"

    def test_shutdown_drains_without_start(self, make_engine, stream):
        engine = make_engine()
        engine.add_output(stream)
        for i in range(10):
            engine.write(_record(Severity.INFO, f"r{i}"))
        assert engine.shutdown(timeout=5.0) is True
        assert len(stream.getvalue().splitlines()) == 10
        assert engine.dispatched == 10

    def test_shutdown_is_idempotent(self, make_engine):
        engine = make_engine().start()
        assert engine.shutdown(timeout=5.0) is True
        assert engine.shutdown(timeout=5.0) is True

    def test_write_after_shutdown_raises(self, make_engine):
        engine = make_engine()
        engine.shutdown(timeout=5.0)
        with pytest.raises(EngineStoppedError):
            engine.write(_record(Severity.ERROR, "late"))

    def test_below_threshold_after_shutdown_is_still_dropped(self, make_engine):
        engine = make_engine(min_level="error")
        engine.shutdown(timeout=5.0)
        engine.write(_record(Severity.INFO, "ignored"))

    def test_add_output_after_shutdown_raises(self, make_engine, stream):
        engine = make_engine()
        engine.shutdown(timeout=5.0)
        with pytest.raises(EngineStoppedError):
            engine.add_output(stream)

    def test_start_after_shutdown_raises(self, make_engine):
        engine = make_engine()
        engine.shutdown(timeout=5.0)
        with pytest.raises(EngineStoppedError):
            engine.start()

    def test_shutdown_closes_managed_files(self, make_engine, tmp_path: Path):
        engine = make_engine()
        path = tmp_path / "app.log"
        assert engine.add_output(path) is True
        sink = engine.registry.file_sink(path)
        engine.start()
        engine.shutdown(timeout=5.0)
        assert sink.closed


# ---------------------------------------------------------------------------
# Test: outputs
# ---------------------------------------------------------------------------


class TestOutputs:
    def test_stream_form_returns_none(self, make_engine, stream):
        assert make_engine().add_output(stream) is None

    def test_path_form_reports_open_failure(self, make_engine, tmp_path: Path):
        engine = make_engine()
        assert engine.add_output(tmp_path / "nope" / "app.log") is False
        assert engine.add_output(str(tmp_path / "app.log")) is True

    def test_unopenable_path_name_returns_false(self, make_engine, tmp_path: Path):
        engine = make_engine()
        assert engine.add_output(str(tmp_path / "bad\0name.log")) is False
        assert engine.registry.sinks_for(Severity.ERROR) == []

    def test_single_level_without_collection(self, make_engine, stream):
        engine = make_engine()
        engine.add_output(stream, "warn")
        engine.write(_record(Severity.INFO, "hidden"))
        engine.write(_record(Severity.WARN, "shown"))
        engine.shutdown(timeout=5.0)
        assert stream.getvalue() == "test | WARN | shown\n"

    def test_level_subscriptions(self, make_engine, tmp_path: Path):
        engine = make_engine()
        errors = io.StringIO()
        everything = io.StringIO()
        engine.add_output(errors, [Severity.ERROR, Severity.FATAL])
        engine.add_output(everything)
        engine.write(_record(Severity.INFO, "info"))
        engine.write(_record(Severity.ERROR, "error"))
        engine.shutdown(timeout=5.0)
        assert errors.getvalue() == "test | ERROR | error\n"
        assert everything.getvalue().splitlines() == [
            "test | INFO | info",
            "test | ERROR | error",
        ]

    def test_remove_output_stream(self, make_engine, stream):
        engine = make_engine()
        engine.add_output(stream)
        engine.remove_output(stream, ["info"])
        engine.write(_record(Severity.INFO, "hidden"))
        engine.write(_record(Severity.WARN, "shown"))
        engine.shutdown(timeout=5.0)
        assert stream.getvalue() == "test | WARN | shown\n"

    def test_same_path_twice_writes_once(self, make_engine, tmp_path: Path):
        engine = make_engine()
        path = tmp_path / "app.log"
        engine.add_output(path)
        engine.add_output(path)
        engine.write(_record(Severity.NOTIFY, "once"))
        engine.shutdown(timeout=5.0)
        assert path.read_text(encoding="utf-8") == "test | NOTIFY | once\n"

    def test_remove_file_closes_it(self, make_engine, tmp_path: Path):
        engine = make_engine()
        path = tmp_path / "app.log"
        engine.add_output(path)
        sink = engine.registry.file_sink(path)
        engine.remove_output(path)
        engine.write(_record(Severity.NOTIFY, "not in file"))
        engine.shutdown(timeout=5.0)
        assert sink.closed
        assert path.read_text(encoding="utf-8") == ""


# ---------------------------------------------------------------------------
# Test: syslog and app name
# ---------------------------------------------------------------------------


class TestSyslogControl:
    def test_enable_opens_lazily_with_app_name(self, make_engine, fake_syslog):
        engine = make_engine(app_name="svc")
        engine.enable_syslog()
        assert fake_syslog.calls == []
        engine.write(_record(Severity.FATAL, "bad"))
        engine.shutdown(timeout=5.0)
        assert fake_syslog.calls == [
            ("openlog", "svc"),
            ("syslog", 2, "bad"),
            ("closelog",),
        ]

    def test_rename_reopens_on_next_record(self, make_engine, fake_syslog, wait_until):
        engine = make_engine(app_name="first")
        engine.enable_syslog()
        engine.start()
        engine.write(_record(Severity.ERROR, "one"))
        assert wait_until(lambda: engine.dispatched == 1)

        engine.set_app_name("second")
        assert fake_syslog.names() == ["openlog", "syslog"]
        engine.write(_record(Severity.ERROR, "two"))
        engine.shutdown(timeout=5.0)

        assert fake_syslog.calls == [
            ("openlog", "first"),
            ("syslog", 3, "one"),
            ("closelog",),
            ("openlog", "second"),
            ("syslog", 3, "two"),
            ("closelog",),
        ]

    def test_disable_closes_on_next_record(self, make_engine, fake_syslog, wait_until):
        engine = make_engine()
        engine.enable_syslog()
        engine.start()
        engine.write(_record(Severity.ERROR, "one"))
        assert wait_until(lambda: engine.dispatched == 1)

        engine.disable_syslog()
        engine.write(_record(Severity.ERROR, "two"))
        engine.shutdown(timeout=5.0)
        assert fake_syslog.names() == ["openlog", "syslog", "closelog"]

    def test_app_name_property(self, make_engine, stream):
        engine = make_engine()
        engine.add_output(stream)
        engine.app_name = "renamed"
        engine.write(_record(Severity.INFO, "x"))
        engine.shutdown(timeout=5.0)
        assert stream.getvalue() == "renamed | INFO | x\n"


# ---------------------------------------------------------------------------
# Test: fault state
# ---------------------------------------------------------------------------


class TestFaultState:
    """After a writer failure every public call surfaces the fault."""

    @pytest.fixture
    def faulted(self, make_engine, failing_stream, wait_until) -> Engine:
        engine = make_engine()
        engine.add_output(failing_stream)
        engine.start()
        engine.write(_record(Severity.ERROR, "breaks the sink"))
        assert wait_until(lambda: engine.is_faulted)
        return engine

    def test_fault_is_captured(self, faulted, failing_stream):
        assert isinstance(faulted.fault, OSError)
        assert failing_stream.attempts == 1
        assert not faulted.is_running

    def test_write_raises_with_cause(self, faulted):
        with pytest.raises(EngineFaultedError) as info:
            faulted.write(_record(Severity.ERROR, "after"))
        assert info.value.fault is faulted.fault
        assert info.value.__cause__ is faulted.fault

    def test_even_filtered_writes_raise(self, faulted):
        with pytest.raises(EngineFaultedError):
            faulted.write(_record(Severity.TRACE, "below any threshold"))

    @pytest.mark.parametrize(
        "call",
        [
            lambda e: e.set_min_level("info"),
            lambda e: e.get_min_level(),
            lambda e: e.set_app_name("x"),
            lambda e: e.add_output(io.StringIO()),
            lambda e: e.remove_output(io.StringIO()),
            lambda e: e.enable_syslog(),
            lambda e: e.disable_syslog(),
            lambda e: e.start(),
        ],
    )
    def test_configuration_raises(self, faulted, call):
        with pytest.raises(EngineFaultedError):
            call(faulted)

    def test_first_fault_sticks(self, faulted):
        first = faulted.fault
        faulted._record_fault(RuntimeError("second"))
        assert faulted.fault is first

    def test_shutdown_after_fault_does_not_raise(self, faulted):
        assert faulted.shutdown(timeout=5.0) is True
