"""In-process request metrics."""
from collections import deque
from typing import Any

RESPONSE_TIME_SAMPLES = 100


class PerformanceMonitor:
    """
    Approximate request counters for this process.

    Only the most recent response times are kept. Counters are not
    synchronized; concurrent updates may occasionally be lost.
    """

    def __init__(self, samples: int = RESPONSE_TIME_SAMPLES) -> None:
        self.requests = 0
        self.errors = 0
        self.response_times: deque[float] = deque(maxlen=samples)

    def record_request(self) -> None:
        self.requests += 1

    def record_response_time(self, elapsed_ms: float) -> None:
        self.response_times.append(elapsed_ms)

    def record_error(self) -> None:
        self.errors += 1

    def snapshot(self) -> dict[str, Any]:
        """Current metrics as a JSON-serializable dict."""
        times = list(self.response_times)
        avg = sum(times) / len(times) if times else 0.0
        return {
            "requests": self.requests,
            "errors": self.errors,
            "avgResponseTime": round(avg, 3),
            "errorRate": self.errors / self.requests if self.requests else 0.0,
            "responseTimeSamples": len(times),
        }
