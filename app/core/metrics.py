"""
Prometheus metrics for prop-edge-api.

Metrics exposed:
- External provider request success/failure counters
- Fallback/synthetic row counters (provenance of what was written)
- Edge opportunities emitted per category
- LLM gateway request outcomes
- Database connection pool and scheduler gauges
"""
from prometheus_client import Counter, Gauge

# External Provider Metrics
provider_requests_success_total = Counter(
    "provider_requests_success_total",
    "Total successful third-party data provider requests",
    ["provider"]
)

provider_requests_failure_total = Counter(
    "provider_requests_failure_total",
    "Total failed third-party data provider requests",
    ["provider", "error_type"]
)

rows_upserted_total = Counter(
    "rows_upserted_total",
    "Rows written by fetchers, labelled by table and provenance",
    ["table", "provenance"]
)

# Edge Analyzer Metrics
edge_opportunities_total = Counter(
    "edge_opportunities_total",
    "Edge opportunities emitted by the analyzer before filtering",
    ["category"]
)

# LLM Metrics
llm_requests_total = Counter(
    "llm_requests_total",
    "LLM gateway chat completion requests",
    ["outcome"]
)

assistant_tool_calls_total = Counter(
    "assistant_tool_calls_total",
    "Assistant tool invocations",
    ["tool", "outcome"]
)

# Database Metrics
db_pool_connections = Gauge(
    "db_pool_connections",
    "Number of database connections in the pool"
)

db_pool_connections_checked_out = Gauge(
    "db_pool_connections_checked_out",
    "Number of checked out database connections"
)

# Scheduler Metrics
scheduler_running = Gauge(
    "scheduler_running",
    "Whether the automation scheduler is running (1=running, 0=stopped)"
)

scheduler_jobs_total = Gauge(
    "scheduler_jobs_total",
    "Total number of scheduled jobs"
)


def update_db_pool_metrics():
    """Refresh pool gauges from the SQLAlchemy engine (QueuePool only)."""
    from app.core.database import engine

    pool = engine.pool
    size = getattr(pool, "size", None)
    checked_out = getattr(pool, "checkedout", None)
    if callable(size) and callable(checked_out):
        db_pool_connections.set(size())
        db_pool_connections_checked_out.set(checked_out())


def update_scheduler_metrics():
    """Refresh scheduler gauges."""
    from app.core.scheduler import get_scheduler

    scheduler = get_scheduler()
    if scheduler and scheduler.running:
        scheduler_running.set(1)
        if scheduler.scheduler:
            scheduler_jobs_total.set(len(scheduler.scheduler.get_jobs()))
    else:
        scheduler_running.set(0)
        scheduler_jobs_total.set(0)


def record_provider_success(provider: str):
    """Record a successful provider request."""
    provider_requests_success_total.labels(provider=provider).inc()


def record_provider_failure(provider: str, error_type: str = "unknown"):
    """Record a failed provider request."""
    provider_requests_failure_total.labels(provider=provider, error_type=error_type).inc()


def record_rows_upserted(table: str, provenance: str, count: int):
    """Record rows written by a fetcher."""
    if count:
        rows_upserted_total.labels(table=table, provenance=provenance).inc(count)


def record_opportunity(category: str):
    """Record an opportunity emitted by a category heuristic."""
    edge_opportunities_total.labels(category=category).inc()


def record_llm_request(outcome: str):
    """Record an LLM request outcome (ok, rate_limited, quota_exhausted, error)."""
    llm_requests_total.labels(outcome=outcome).inc()


def record_tool_call(tool: str, outcome: str):
    """Record an assistant tool invocation outcome (ok, error, unknown)."""
    assistant_tool_calls_total.labels(tool=tool, outcome=outcome).inc()
