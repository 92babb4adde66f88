"""Unit tests for tool call tracing"""

import pytest

from mercadopago_mcp.telemetry import ToolTelemetry


class RecordingInstrument:
    def __init__(self):
        self.values = []

    def add(self, value, attributes=None):
        self.values.append((value, attributes))

    def record(self, value, attributes=None):
        self.values.append((value, attributes))


@pytest.fixture
def telemetry():
    telemetry = ToolTelemetry()
    telemetry.call_counter = RecordingInstrument()
    telemetry.error_counter = RecordingInstrument()
    telemetry.latency_histogram = RecordingInstrument()
    return telemetry


def test_successful_call_is_counted(telemetry):
    with telemetry.trace_tool_call("get_payment") as call:
        pass

    assert call.success is True
    assert call.latency_ms >= 0
    assert telemetry.call_counter.values == [(1, {"tool.name": "get_payment", "tool.type": "mcp"})]
    assert telemetry.error_counter.values == []
    assert len(telemetry.latency_histogram.values) == 1


def test_failed_call_records_error_and_reraises(telemetry):
    with pytest.raises(ValueError):
        with telemetry.trace_tool_call("cancel_payment") as call:
            raise ValueError("Cannot cancel payment with status: approved")

    assert call.success is False
    assert call.error == "Cannot cancel payment with status: approved"
    assert len(telemetry.error_counter.values) == 1
    assert len(telemetry.call_counter.values) == 1


def test_shutdown_without_sdk_is_a_no_op():
    ToolTelemetry(enable_otel=False).shutdown()
