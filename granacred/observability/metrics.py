"""
Gateway Metrics Snapshot
------------------------
Lightweight Redis counters/timers for remote actions (check/status/withdraw)
and one snapshot function consumed by /admin/metrics. Writes are best-effort:
a Redis outage must never change the outcome of a workflow step.
"""
from __future__ import annotations
import time
from typing import Dict, List, Tuple

from redis.exceptions import RedisError

from granacred.store.redis_conn import get_redis
from granacred.settings import settings
from granacred.observability.logging import log

ACTIONS = ("check", "status", "withdraw")

# Keys (stable across restarts)
K_ATT = "metrics:gateway:{action}:attempts"        # INCR
K_OK = "metrics:gateway:{action}:ok"               # INCR
K_FAIL = "metrics:gateway:{action}:failed"         # INCR
K_LAT = "metrics:gateway:{action}:latencies"       # LPUSH ms
K_OUTCOME = "metrics:gateway:outcome:{status}"     # INCR per remote status
K_STALE = "metrics:workflow:stale_dropped"         # INCR

_MAX_SAMPLES = 500

def _percentile(data: List[float], p: float) -> float:
    """Deterministic percentile (nearest-rank on sorted data)."""
    if not data:
        return 0.0
    d = sorted(data)
    k = max(1, int(round(p * len(d))))
    return float(d[k - 1])

def _p50_p95(latencies_ms: List[float]) -> Tuple[float, float]:
    if not latencies_ms:
        return 0.0, 0.0
    return _percentile(latencies_ms, 0.50), _percentile(latencies_ms, 0.95)

def _incr(key: str) -> None:
    if not settings.ENABLE_METRICS:
        return
    try:
        get_redis().incr(key, 1)
    except RedisError as e:
        log(event="metrics_write_failed", key=key, error=str(e)[:200])

def increment_attempt(action: str) -> None:
    _incr(K_ATT.format(action=action))

def increment_ok(action: str) -> None:
    _incr(K_OK.format(action=action))

def increment_failed(action: str) -> None:
    _incr(K_FAIL.format(action=action))

def increment_outcome(status: str) -> None:
    _incr(K_OUTCOME.format(status=status))

def increment_stale_dropped() -> None:
    _incr(K_STALE)

def record_latency(action: str, ms: int) -> None:
    if not settings.ENABLE_METRICS:
        return
    key = K_LAT.format(action=action)
    try:
        r = get_redis()
        r.lpush(key, int(ms))
        r.ltrim(key, 0, _MAX_SAMPLES - 1)
    except RedisError as e:
        log(event="metrics_write_failed", key=key, error=str(e)[:200])

def _read_latencies(r, action: str) -> List[float]:
    out: List[float] = []
    for x in r.lrange(K_LAT.format(action=action), 0, _MAX_SAMPLES - 1) or []:
        try:
            out.append(float(x))
        except (TypeError, ValueError):
            continue
    return out

def get_gateway_snapshot() -> dict:
    """
    Per-action attempts/ok/failed, success rate and latency percentiles (ms),
    plus remote status outcome counts.
    """
    r = get_redis()
    actions: Dict[str, dict] = {}
    for action in ACTIONS:
        att = int(r.get(K_ATT.format(action=action)) or 0)
        ok = int(r.get(K_OK.format(action=action)) or 0)
        failed = int(r.get(K_FAIL.format(action=action)) or 0)
        p50, p95 = _p50_p95(_read_latencies(r, action))
        actions[action] = {
            "attempts": att,
            "ok": ok,
            "failed": failed,
            "success_rate": round((ok / att) * 100.0, 3) if att > 0 else 0.0,
            "p50_latency_ms": round(p50, 3),
            "p95_latency_ms": round(p95, 3),
        }

    outcomes = {}
    for status in ("eligible", "pending_authorization", "not_eligible", "error", "unknown"):
        outcomes[status] = int(r.get(K_OUTCOME.format(status=status)) or 0)

    return {
        "actions": actions,
        "outcomes": outcomes,
        "stale_dropped": int(r.get(K_STALE) or 0),
        "snapshot_at": int(time.time()),
    }
