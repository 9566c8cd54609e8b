"""Application metrics collection using Prometheus."""

from prometheus_client import Counter, Gauge, Histogram, Info

from docchat.config import settings

# Request metrics
requests_total = Counter(
    "docchat_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

request_duration_seconds = Histogram(
    "docchat_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
)

active_requests = Gauge(
    "docchat_active_requests",
    "Number of active HTTP requests",
)

rate_limited_requests_total = Counter(
    "docchat_rate_limited_requests_total",
    "Requests rejected by the rate limiter",
    ["endpoint"],
)

# Chat metrics
chat_turns_total = Counter(
    "docchat_chat_turns_total",
    "Total chat turns handled",
    ["route", "platform"],
)

citations_generated_total = Counter(
    "docchat_citations_generated_total",
    "Total inline citations resolved",
)

citation_fallbacks_total = Counter(
    "docchat_citation_fallbacks_total",
    "Turns with sources that fell back to a plain source list",
)

retrieval_duration_seconds = Histogram(
    "docchat_retrieval_duration_seconds",
    "Full-text retrieval duration in seconds",
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0),
)

generation_duration_seconds = Histogram(
    "docchat_generation_duration_seconds",
    "Answer generation duration in seconds",
    ["mode"],
    buckets=(1.0, 5.0, 10.0, 20.0, 30.0, 60.0),
)

agent_tool_calls_total = Counter(
    "docchat_agent_tool_calls_total",
    "Tool calls executed by the document agent",
    ["tool"],
)

# Webhook metrics
webhook_events_total = Counter(
    "docchat_webhook_events_total",
    "Messaging webhook events by outcome",
    ["outcome"],
)

# Application info
app_info = Info("docchat_app", "Application information")
app_info.info({"version": settings.VERSION, "environment": settings.ENVIRONMENT})
