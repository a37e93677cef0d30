"""
Prometheus metrics for the booking and certification workflow.
Exposed at /metrics.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'learnit_booking_attempts_total',
    'Booking submissions by outcome',
    ['status']  # success, conflict, ineligible, error
)

booking_latency = Histogram(
    'learnit_booking_latency_seconds',
    'Reserve-if-free latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_transitions = Counter(
    'learnit_booking_transitions_total',
    'Booking status transitions',
    ['to_status']
)

# Slot admission gate
admission_requests = Counter(
    'learnit_admission_requests_total',
    'Slot admission decisions',
    ['result']  # admitted, rejected
)

# Quiz / certification
quiz_submissions = Counter(
    'learnit_quiz_submissions_total',
    'Quiz submissions',
    ['result']  # passed, failed
)

certification_grants = Counter(
    'learnit_certification_grants_total',
    'Certification grant calls',
    ['result']  # granted, existing
)

# Cache metrics
cache_operations = Counter(
    'learnit_cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'learnit_redis_errors_total',
    'Redis errors that degraded to the database path'
)


def metrics_endpoint() -> Response:
    """Prometheus scrape endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Status: success, conflict, ineligible, error"""
    booking_attempts.labels(status=status).inc()


def record_booking_transition(to_status: str):
    booking_transitions.labels(to_status=to_status).inc()


def record_admission(admitted: bool):
    result = "admitted" if admitted else "rejected"
    admission_requests.labels(result=result).inc()


def record_quiz_submission(passed: bool):
    quiz_submissions.labels(result="passed" if passed else "failed").inc()


def record_certification_grant(created: bool):
    certification_grants.labels(result="granted" if created else "existing").inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
