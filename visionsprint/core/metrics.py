"""
Prometheus metrics configuration
"""
import os

from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram, Info,
                               generate_latest)
from prometheus_client.multiprocess import MultiProcessCollector
from prometheus_client.registry import REGISTRY, CollectorRegistry

from visionsprint import __version__

_registry = REGISTRY
if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
    _registry = CollectorRegistry()
    MultiProcessCollector(_registry)

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

# ============================================================================
# Database Metrics
# ============================================================================

db_queries_total = Counter(
    'db_queries_total',
    'Total number of database queries',
    ['operation']  # operation: 'select', 'insert', 'update', 'delete'
)

db_query_duration_seconds = Histogram(
    'db_query_duration_seconds',
    'Database query duration in seconds',
    ['operation'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

# ============================================================================
# Hackathon Activity Metrics
# ============================================================================

votes_total = Counter(
    'visionsprint_votes_total',
    'Votes cast or withdrawn',
    ['action']  # action: 'cast', 'withdrawn'
)

joins_total = Counter(
    'visionsprint_joins_total',
    'Project join toggles',
    ['action']  # action: 'joined', 'left'
)

reactions_total = Counter(
    'visionsprint_reactions_total',
    'Showcase reaction toggles',
    ['reaction_type', 'action']  # action: 'added', 'removed'
)

submissions_total = Counter(
    'visionsprint_submissions_total',
    'Demo video submissions',
    ['action']  # action: 'created', 'updated'
)

stage_gate_rejections_total = Counter(
    'visionsprint_stage_gate_rejections_total',
    'Requests rejected because the current stage does not allow them',
    ['operation', 'stage']
)

drive_checks_total = Counter(
    'visionsprint_drive_checks_total',
    'Google Drive video duration checks',
    ['outcome']  # outcome: 'valid', 'too_long', 'unknown'
)

# ============================================================================
# System Info
# ============================================================================

app_info = Info('app_info', 'Application information')

try:
    from visionsprint.core.config import get_settings

    _settings = get_settings()
    app_info.info({
        'app_name': _settings.app_name,
        'app_env': _settings.app_env,
        'version': __version__,
    })
except Exception:
    pass  # Settings may not be available during import


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format"""
    return generate_latest(_registry)


def get_metrics_content_type() -> str:
    """Get content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST
