import resource
import sys
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from reva.core.deps import MonitorDep

router = APIRouter(prefix="/api", tags=["health"])


def memory_usage() -> dict[str, int]:
    """Peak resident set size and CPU times of this process."""
    usage = resource.getrusage(resource.RUSAGE_SELF)
    # ru_maxrss is KiB on Linux, bytes on macOS
    max_rss = usage.ru_maxrss if sys.platform == "darwin" else usage.ru_maxrss * 1024
    return {
        "maxRss": max_rss,
        "userCpuMs": int(usage.ru_utime * 1000),
        "systemCpuMs": int(usage.ru_stime * 1000),
    }


@router.get("/health")
async def health_check(request: Request, monitor: MonitorDep) -> dict:
    """
    Service health with a summary of the most recent requests.

    performance covers the last N requests held by the monitor
    (N = METRICS_CAPACITY), not a fixed time window.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "memory": memory_usage(),
        "performance": monitor.summary(),
    }
