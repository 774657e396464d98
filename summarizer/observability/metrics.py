import threading
from typing import List


# Latency samples kept for percentile calculation
_MAX_LATENCY_SAMPLES = 1000


class MetricsTracker:
    """
    Process-local request and session counters.

    Sessions live in memory only, so the counters are not persisted either.
    """

    def __init__(self):

        self._lock = threading.Lock()

        self.reset()


    def reset(self):

        with self._lock:

            self._metrics = {

                "total_requests": 0,
                "successful_requests": 0,
                "failed_requests": 0,

                "total_latency": 0.0,
                "avg_latency": 0.0,

                "sessions_created": 0,
                "sessions_evicted": 0,

            }

            self._latencies: List[float] = []


    def record_success(self, latency: float):

        with self._lock:

            self._metrics["total_requests"] += 1

            self._metrics["successful_requests"] += 1

            self._metrics["total_latency"] += latency

            self._metrics["avg_latency"] = (
                self._metrics["total_latency"]
                / self._metrics["successful_requests"]
            )

            self._latencies.append(latency)

            if len(self._latencies) > _MAX_LATENCY_SAMPLES:
                self._latencies.pop(0)


    def record_failure(self):

        with self._lock:

            self._metrics["total_requests"] += 1

            self._metrics["failed_requests"] += 1


    def record_session_created(self):

        with self._lock:
            self._metrics["sessions_created"] += 1


    def record_sessions_evicted(self, count: int):

        with self._lock:
            self._metrics["sessions_evicted"] += count


    def get_metrics(self) -> dict:

        with self._lock:
            snapshot = dict(self._metrics)

        snapshot["p95_latency"] = self.get_latency_percentile(95)

        return snapshot


    def get_latency_percentile(self, percentile: float) -> float:

        with self._lock:
            latencies = list(self._latencies)

        if not latencies:
            return 0.0

        sorted_latencies = sorted(latencies)

        index = int(len(sorted_latencies) * percentile / 100)

        index = min(index, len(sorted_latencies) - 1)

        return sorted_latencies[index]


metrics_tracker = MetricsTracker()
