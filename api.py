"""
REST API for Host Monitor.

Provides read-only HTTP endpoints exposing the live host status,
latency statistics, and availability totals.
"""

from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from formatter import format_report
from models import HostSnapshot, HostStatus
from scheduler import ProbeScheduler


class HostResponse(BaseModel):
    """Schema for a single host's status."""
    index: int
    url: str
    status: str
    uptime_pct: float
    total_downtime_s: float
    down_for_s: Optional[float] = None
    probe_count: int
    last_ms: float
    mean_ms: float
    p99_ms: float
    p90_ms: float
    p75_ms: float
    recent_ms: List[float]
    last_error: Optional[str] = None


class StatsResponse(BaseModel):
    """Schema for aggregate availability."""
    hosts: int
    up: int
    down: int
    unknown: int
    avg_uptime_pct: float
    rounds: int


def _to_response(index: int, s: HostSnapshot) -> HostResponse:
    return HostResponse(
        index=index,
        url=s.url,
        status=s.status.value,
        uptime_pct=round(s.uptime_fraction * 100, 3),
        total_downtime_s=round(s.total_downtime, 3),
        down_for_s=round(s.down_for, 3) if s.down_for is not None else None,
        probe_count=s.probe_count,
        last_ms=round(s.last * 1000, 2),
        mean_ms=round(s.mean * 1000, 2),
        p99_ms=round(s.p99 * 1000, 2),
        p90_ms=round(s.p90 * 1000, 2),
        p75_ms=round(s.p75 * 1000, 2),
        recent_ms=[round(v * 1000, 2) for v in s.recent],
        last_error=s.last_error,
    )


def create_app(scheduler: ProbeScheduler) -> FastAPI:
    """Build the status API around a running scheduler."""
    app = FastAPI(
        title="Host Monitor API",
        description="Read-only status of monitored hosts",
        version="1.0.0",
    )

    @app.get("/api/hosts", response_model=List[HostResponse])
    async def list_hosts():
        """List all hosts with their current status."""
        return [_to_response(i, s) for i, s in enumerate(scheduler.snapshots())]

    @app.get("/api/hosts/{index}", response_model=HostResponse)
    async def get_host(index: int):
        """Get a single host by its position in the configuration."""
        hosts = scheduler.hosts
        if not 0 <= index < len(hosts):
            raise HTTPException(status_code=404, detail="Host not found")
        return _to_response(index, hosts[index].snapshot())

    @app.get("/api/status")
    async def get_status():
        """Get the plain-text status display."""
        return {"lines": format_report(scheduler.snapshots(), color=False)}

    @app.get("/api/stats", response_model=StatsResponse)
    async def get_stats():
        """Get availability totals across all hosts."""
        snapshots = scheduler.snapshots()
        avg_uptime = (
            sum(s.uptime_fraction for s in snapshots) / len(snapshots) * 100
            if snapshots
            else 0.0
        )
        return StatsResponse(
            hosts=len(snapshots),
            up=sum(1 for s in snapshots if s.status == HostStatus.UP),
            down=sum(1 for s in snapshots if s.status == HostStatus.DOWN),
            unknown=sum(1 for s in snapshots if s.status == HostStatus.UNKNOWN),
            avg_uptime_pct=round(avg_uptime, 3),
            rounds=scheduler.rounds,
        )

    return app
