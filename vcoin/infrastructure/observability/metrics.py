"""Prometheus metrics for monitoring logins, throttling and simulated investments"""

from prometheus_client import Counter, Histogram, Gauge

# Login metrics
login_attempt_counter = Counter(
    "vcoin_student_login_total",
    "Student login attempts",
    ["outcome"],  # success | failure
)

# Throttle metrics
throttle_delay_histogram = Histogram(
    "vcoin_login_throttle_delay_seconds",
    "Delay applied to failed logins",
    buckets=[1.0, 2.0, 4.0, 8.0, 16.0, 30.0],
)

throttle_tracked_gauge = Gauge(
    "vcoin_login_throttle_tracked_identifiers",
    "Identifiers currently tracked by the login throttle",
)

throttle_evictions_counter = Counter(
    "vcoin_login_throttle_evictions_total",
    "Entries removed by emergency cleanup",
)

throttle_memory_protection_counter = Counter(
    "vcoin_login_throttle_memory_protection_total",
    "Failed logins throttled at max delay because the table was full",
)

throttle_max_attempts_counter = Counter(
    "vcoin_login_throttle_max_attempts_total",
    "Failed logins at or beyond the attempt count where backoff plateaus",
)

# Investment metrics
investment_created_counter = Counter(
    "vcoin_investment_created_total",
    "Investments registered",
)

investment_amount_bucket_counter = Counter(
    "vcoin_investment_amount_bucket",
    "Investments registered by amount bucket",
    ["bucket"],  # <100, 100-1000, 1000-10000, 10000+
)

achievement_unlocked_counter = Counter(
    "vcoin_achievement_unlocked_total",
    "Achievements unlocked automatically",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_login(success: bool) -> None:
    login_attempt_counter.labels(outcome="success" if success else "failure").inc()


def record_investment(monto: float, unlocked: int) -> None:
    """Record investment metrics for monitoring amount distribution"""
    investment_created_counter.inc()

    if monto < 100:
        bucket = "<100"
    elif monto < 1000:
        bucket = "100-1000"
    elif monto < 10000:
        bucket = "1000-10000"
    else:
        bucket = "10000+"

    investment_amount_bucket_counter.labels(bucket=bucket).inc()
    if unlocked:
        achievement_unlocked_counter.inc(unlocked)
