"""
Observability
=============
Structured logging and OpenTelemetry instrumentation for tool calls.

All output goes to stderr: stdout is reserved for the MCP stdio stream.
"""

import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

# Structured logging
import structlog

# OpenTelemetry
from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.trace import Status, StatusCode


SERVICE_NAME = "mercado-pago-mcp"
METRIC_EXPORT_INTERVAL_MS = 60000


def configure_logging(level: str = "INFO") -> None:
    """Route structlog through stdlib logging as JSON lines on stderr."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ============================================================================
# Tool call tracing
# ============================================================================

@dataclass
class ToolCallMetrics:
    """Metrics for one tool invocation."""
    tool_name: str
    tool_type: str = "mcp"
    success: bool = True
    latency_ms: float = 0
    error: Optional[str] = None


class ToolTelemetry:
    """
    Spans, counters and a latency histogram around every tool call.

    With ``enable_otel=False`` the OpenTelemetry API's no-op providers are
    used, so instrumentation costs nothing and exports nowhere.

    Usage:
        telemetry = ToolTelemetry(environment="sandbox")

        with telemetry.trace_tool_call("get_payment") as call:
            result = await handler(args)
    """

    def __init__(
        self,
        service_name: str = SERVICE_NAME,
        environment: str = "sandbox",
        enable_otel: bool = False,
    ):
        self.service_name = service_name
        self.environment = environment
        self.logger = structlog.get_logger(__name__)
        self._providers: list = []

        if enable_otel:
            self._init_opentelemetry()
            self.tracer = trace.get_tracer(service_name)
            self.meter = metrics.get_meter(service_name)
        else:
            self.tracer = trace.NoOpTracer()
            self.meter = metrics.NoOpMeter(service_name)

        self._create_metrics()

        self.logger.info(
            "telemetry_initialized",
            service_name=service_name,
            environment=environment,
            otel_enabled=enable_otel,
        )

    def _init_opentelemetry(self):
        """Install SDK providers exporting spans and metrics to stderr."""
        resource = Resource.create({
            ResourceAttributes.SERVICE_NAME: self.service_name,
            ResourceAttributes.DEPLOYMENT_ENVIRONMENT: self.environment,
        })

        trace_provider = TracerProvider(resource=resource)
        trace_provider.add_span_processor(
            BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
        )
        trace.set_tracer_provider(trace_provider)

        metric_reader = PeriodicExportingMetricReader(
            ConsoleMetricExporter(out=sys.stderr),
            export_interval_millis=METRIC_EXPORT_INTERVAL_MS
        )
        metric_provider = MeterProvider(
            resource=resource,
            metric_readers=[metric_reader]
        )
        metrics.set_meter_provider(metric_provider)

        self._providers = [trace_provider, metric_provider]

    def _create_metrics(self):
        self.call_counter = self.meter.create_counter(
            "mcp.tool_calls.total",
            unit="calls",
            description="Total tool calls"
        )

        self.error_counter = self.meter.create_counter(
            "mcp.tool_errors.total",
            unit="errors",
            description="Tool calls that raised"
        )

        self.latency_histogram = self.meter.create_histogram(
            "mcp.tool_calls.duration",
            unit="ms",
            description="Tool call latency distribution"
        )

    @contextmanager
    def trace_tool_call(self, tool_name: str, tool_type: str = "mcp"):
        """Context manager for tracing tool calls."""
        tool_metrics = ToolCallMetrics(tool_name=tool_name, tool_type=tool_type)
        attributes = {"tool.name": tool_name, "tool.type": tool_type}
        start_time = time.perf_counter()

        with self.tracer.start_as_current_span(f"tool_call.{tool_name}", attributes=attributes) as span:
            try:
                yield tool_metrics
            except Exception as e:
                tool_metrics.success = False
                tool_metrics.error = str(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                self.error_counter.add(1, attributes)
                raise
            finally:
                tool_metrics.latency_ms = (time.perf_counter() - start_time) * 1000
                self.call_counter.add(1, attributes)
                self.latency_histogram.record(tool_metrics.latency_ms, attributes)

                self.logger.info(
                    "tool_call",
                    tool_name=tool_name,
                    tool_type=tool_type,
                    success=tool_metrics.success,
                    latency_ms=round(tool_metrics.latency_ms, 2),
                    error=tool_metrics.error,
                )

    def shutdown(self) -> None:
        """Flush and stop any SDK providers this instance installed."""
        for provider in self._providers:
            provider.shutdown()
        self._providers = []
