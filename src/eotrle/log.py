"""log.py - the backbone. logger and tracer.

every message is printed, recorded as an event on the current span,
and forwarded to the sink if one is registered. encode and decode run
inside spans so sizes and flags travel with the trace.
"""

import sys
from datetime import datetime
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    SimpleSpanProcessor,
    ConsoleSpanExporter,
)

# ============================================================
# TRACER SETUP
# ============================================================

_provider = TracerProvider()
_tracer = _provider.get_tracer("eotrle", "0.1.0")
_console_export = False


def enable_console_export():
    """turn on span export to stderr."""
    global _console_export
    if not _console_export:
        _provider.add_span_processor(
            SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
        )
        _console_export = True


def add_exporter(exporter):
    """add a custom span exporter (OTLP, in-memory, etc)."""
    _provider.add_span_processor(SimpleSpanProcessor(exporter))


def get_tracer():
    """get the eotrle tracer for custom instrumentation."""
    return _tracer


# ============================================================
# LOGGER
# ============================================================

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}

_level = LEVELS["info"]
_sink = None
_flush = None


def set_level(level: str):
    """minimum level printed to the console. the sink and spans see everything."""
    global _level
    if level not in LEVELS:
        raise ValueError(f"unknown level '{level}'. have: {list(LEVELS)}")
    _level = LEVELS[level]


def set_sink(fn, flush_fn=None):
    """register where logs go besides console. fn(subsystem, level, message, attrs).
    optional flush_fn is called to commit buffered entries."""
    global _sink, _flush
    _sink = fn
    _flush = flush_fn


def flush_sink():
    """flush the log sink. call on exit."""
    if _flush is not None:
        try:
            _flush()
        except Exception:
            pass


def log(subsystem: str, level: str, message: str, **attrs):
    """log to console, record as span event, forward to sink."""
    if LEVELS.get(level, LEVELS["info"]) >= _level:
        ts = datetime.now().strftime("%H:%M:%S")
        prefix = f"[{ts} eotrle:{subsystem}]"
        dest = sys.stderr if level in ("warn", "error") else sys.stdout
        print(f"{prefix} {message}", file=dest)

    span = trace.get_current_span()
    if span and span.is_recording():
        span.add_event(
            f"eotrle.{subsystem}.{level}",
            attributes={"message": message, "subsystem": subsystem,
                        **{k: str(v) for k, v in attrs.items()}},
        )

    if _sink is not None:
        try:
            _sink(subsystem, level, message, attrs if attrs else None)
        except Exception:
            pass  # sink errors never block the caller


def debug(subsystem: str, message: str, **attrs):
    log(subsystem, "debug", message, **attrs)


def info(subsystem: str, message: str, **attrs):
    log(subsystem, "info", message, **attrs)


def warn(subsystem: str, message: str, **attrs):
    log(subsystem, "warn", message, **attrs)


def error(subsystem: str, message: str, **attrs):
    log(subsystem, "error", message, **attrs)


# ============================================================
# SPAN CONTEXT MANAGERS
# ============================================================

@contextmanager
def span(name: str, subsystem: str = "eotrle", **attrs):
    """Create a traced span. Everything inside is connected.

    Usage:
        with span("encode_file", subsystem="io", path="a.bin"):
            data = path.read_bytes()
            # any logs inside here are span events
            # any nested spans are children
    """
    with _tracer.start_as_current_span(
        f"eotrle.{subsystem}.{name}",
        attributes={f"eotrle.{k}": str(v) for k, v in attrs.items()},
    ) as s:
        s.set_attribute("eotrle.subsystem", subsystem)
        yield s


@contextmanager
def codec_span(operation: str, input_size: int = 0, **attrs):
    """Span for one encode or decode call. Sizes are first-class attributes."""
    with span(operation, subsystem="codec", **attrs) as s:
        s.set_attribute("eotrle.input_size", input_size)
        yield s
