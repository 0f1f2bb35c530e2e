"""Prometheus metrics for monitoring score distribution, factor coverage and latency"""

from prometheus_client import Counter, Histogram

from branq_scoring.domain.models import ScoreReport

# Score metrics
score_counter = Counter(
    "branq_scores_total",
    "Total wallet scores produced",
    ["band"],  # Excellent | Good | Fair | Poor | No Data
)

credit_score_histogram = Histogram(
    "branq_credit_score",
    "Distribution of issued credit scores",
    buckets=[350, 400, 450, 520, 600, 685, 750, 795, 850],
)

factor_no_data_counter = Counter(
    "branq_factor_no_data_total",
    "Factors that could not be scored",
    ["factor"],
)

scoring_duration_histogram = Histogram(
    "branq_scoring_duration_seconds",
    "Time spent in one scoring pass",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(report: ScoreReport, duration_seconds: float) -> None:
    """Record band, credit score and factor coverage for one report"""
    score_counter.labels(band=report.aggregate.band).inc()
    if report.aggregate.factors_used:
        credit_score_histogram.observe(report.aggregate.credit_score)

    for factor in report.factors:
        if not factor.has_data:
            factor_no_data_counter.labels(factor=factor.name).inc()

    scoring_duration_histogram.observe(duration_seconds)
