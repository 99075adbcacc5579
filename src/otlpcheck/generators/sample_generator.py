"""
Generate realistic OTLP/JSON sample payloads with the OpenTelemetry SDK.

Each sample is produced by real SDK providers wired to the OTLP/JSON
exporters, so samples double as an end-to-end check that SDK output is
accepted by the validator. Providers are local to each call; no global
OpenTelemetry state is modified.
"""

import logging
from typing import Any

from opentelemetry.metrics import CallbackOptions, Observation
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import SimpleLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.metrics.view import ExponentialBucketHistogramAggregation, View
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.trace import Link, SpanKind, Status, StatusCode

from .. import __version__
from ..exporters.otlp_json import (
    OtlpJsonLogExporter,
    OtlpJsonMetricExporter,
    OtlpJsonSpanExporter,
    merge_requests,
)
from ..result import PayloadType

SCOPE_NAME = "otlpcheck.samples"
# Periodic export is not used; samples are collected with force_flush.
_EXPORT_INTERVAL_MS = 3_600_000


class SampleGenerator:
    """Produce one sample export request per signal."""

    def __init__(self, service_name: str = "otlpcheck-sample"):
        self.resource = Resource.create(
            {
                "service.name": service_name,
                "service.version": __version__,
                "deployment.environment.name": "sample",
            }
        )

    def generate(self, payload_type: PayloadType) -> dict[str, Any]:
        if payload_type is PayloadType.TRACES:
            return self.traces()
        if payload_type is PayloadType.LOGS:
            return self.logs()
        return self.metrics()

    def traces(self) -> dict[str, Any]:
        """A checkout request: server span, client child span, and a linked consumer span."""
        exporter = OtlpJsonSpanExporter()
        provider = TracerProvider(resource=self.resource)
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        tracer = provider.get_tracer(SCOPE_NAME, __version__)

        with tracer.start_as_current_span("POST /checkout", kind=SpanKind.SERVER) as server:
            server.set_attribute("http.request.method", "POST")
            server.set_attribute("http.route", "/checkout")
            server.add_event("cart.loaded", {"cart.items": 3})
            with tracer.start_as_current_span("charge card", kind=SpanKind.CLIENT) as client:
                client.set_attribute("server.address", "payments.internal")
                client.set_attribute("payment.amounts", (19.99, 5.0))
            with tracer.start_as_current_span(
                "enqueue receipt", kind=SpanKind.PRODUCER
            ) as producer:
                producer_context = producer.get_span_context()
            server.set_status(Status(StatusCode.OK))

        with tracer.start_as_current_span(
            "send receipt",
            kind=SpanKind.CONSUMER,
            links=[Link(producer_context, {"messaging.operation": "receive"})],
        ) as consumer:
            consumer.set_attribute("messaging.system", "kafka")
            consumer.set_status(Status(StatusCode.ERROR, "smtp timeout"))

        provider.force_flush()
        request = merge_requests(exporter.requests)
        provider.shutdown()
        return request

    def logs(self) -> dict[str, Any]:
        """Application logs at several severities, correlated with an active span."""
        exporter = OtlpJsonLogExporter()
        provider = LoggerProvider(resource=self.resource)
        provider.add_log_record_processor(SimpleLogRecordProcessor(exporter))
        handler = LoggingHandler(level=logging.DEBUG, logger_provider=provider)

        sample_logger = logging.getLogger(SCOPE_NAME)
        sample_logger.setLevel(logging.DEBUG)
        sample_logger.propagate = False
        sample_logger.addHandler(handler)

        tracer_provider = TracerProvider(resource=self.resource)
        tracer = tracer_provider.get_tracer(SCOPE_NAME, __version__)
        try:
            sample_logger.debug("cache warmed", extra={"cache.entries": 128})
            with tracer.start_as_current_span("POST /checkout"):
                sample_logger.info("order accepted", extra={"order.id": "A-1001"})
                sample_logger.warning("inventory low", extra={"sku": "SKU-42", "remaining": 2})
                sample_logger.error("payment declined", extra={"retryable": False})
            provider.force_flush()
        finally:
            sample_logger.removeHandler(handler)
            tracer_provider.shutdown()

        request = merge_requests(exporter.requests)
        provider.shutdown()
        return request

    def metrics(self) -> dict[str, Any]:
        """A counter, an up/down counter, explicit and exponential histograms, and a gauge."""
        exporter = OtlpJsonMetricExporter()
        reader = PeriodicExportingMetricReader(exporter, export_interval_millis=_EXPORT_INTERVAL_MS)
        provider = MeterProvider(
            resource=self.resource,
            metric_readers=[reader],
            views=[
                View(
                    instrument_name="payload.size",
                    aggregation=ExponentialBucketHistogramAggregation(),
                )
            ],
        )
        meter = provider.get_meter(SCOPE_NAME, __version__)

        def observe_queue_depth(options: CallbackOptions):
            yield Observation(7, {"queue": "receipts"})

        requests = meter.create_counter("http.server.requests", unit="{request}")
        in_flight = meter.create_up_down_counter("http.server.active_requests", unit="{request}")
        duration = meter.create_histogram(
            "http.server.request.duration", unit="s", description="Request duration"
        )
        payload_size = meter.create_histogram("payload.size", unit="By")
        meter.create_observable_gauge("queue.depth", callbacks=[observe_queue_depth])

        for route, seconds in (("/checkout", 0.120), ("/checkout", 0.340), ("/cart", 0.015)):
            attrs = {"http.route": route}
            requests.add(1, attrs)
            in_flight.add(1, attrs)
            duration.record(seconds, attrs)
            payload_size.record(512 if route == "/cart" else 2048, attrs)
            in_flight.add(-1, attrs)

        provider.force_flush()
        request = merge_requests(exporter.requests)
        provider.shutdown()
        return request
