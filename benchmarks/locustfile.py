"""
LinkTrace HTTP Load Test — Locust
=================================
Exercises the full visit path over HTTP: POST /generate, GET /track/{id},
POST /location, then GET /get-tracking/{id}.

Usage (headless, 200 concurrent users, 60-second run):

    locust -f benchmarks/locustfile.py \\
           --headless -u 200 -r 20 --run-time 60s \\
           --host http://localhost:3000

    # Interactive web UI (browse to http://localhost:8089):
    locust -f benchmarks/locustfile.py --host http://localhost:3000

Run the server with LINKTRACE_GEOCODING_ENABLED=false unless you intend to
load the public Nominatim instance (its usage policy forbids that).

Key stats emitted at test end
------------------------------
  - Total requests / failure count / error rate (%)
  - P50 / P95 / P99 HTTP latency (ms)
  - Requests per second (RPS) at steady state
  - Mean CPU utilisation (%) + peak CPU (%) sampled via psutil
"""

from __future__ import annotations

import random
import threading
import time
from collections import deque
from datetime import datetime, timezone

import psutil
from locust import HttpUser, between, events, task

# ---------------------------------------------------------------------------
# CPU utilisation sampler — runs in a background thread during the test
# ---------------------------------------------------------------------------

_cpu_samples: deque[float] = deque()
_cpu_sampler_stop = threading.Event()


def _sample_cpu() -> None:
    """Collect system-wide CPU% every second until signalled to stop."""
    while not _cpu_sampler_stop.is_set():
        _cpu_samples.append(psutil.cpu_percent(interval=None))
        time.sleep(1.0)


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Start the CPU sampler thread and prime the psutil baseline reading."""
    _cpu_samples.clear()
    _cpu_sampler_stop.clear()
    # Prime psutil — first call always returns 0.0
    psutil.cpu_percent(interval=None)
    t = threading.Thread(target=_sample_cpu, daemon=True, name="cpu-sampler")
    t.start()
    print("\n[linktrace-load-test] CPU sampler started.")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Stop the CPU sampler and print a consolidated results summary."""
    _cpu_sampler_stop.set()

    stats = environment.runner.stats.total
    req_count = stats.num_requests
    fail_count = stats.num_failures
    error_rate = (fail_count / req_count * 100) if req_count > 0 else 0.0

    p50 = stats.get_response_time_percentile(0.50) or 0
    p95 = stats.get_response_time_percentile(0.95) or 0
    p99 = stats.get_response_time_percentile(0.99) or 0
    rps = stats.current_rps

    cpu_list = list(_cpu_samples)
    mean_cpu = sum(cpu_list) / len(cpu_list) if cpu_list else 0.0
    peak_cpu = max(cpu_list) if cpu_list else 0.0

    print("\n" + "=" * 60)
    print("  LinkTrace Load Test Results")
    print("=" * 60)
    print(f"  Requests        : {req_count:>8,}")
    print(f"  Failures        : {fail_count:>8,}")
    print(f"  Error rate      : {error_rate:>7.2f}%")
    print(f"  RPS (current)   : {rps:>7.1f}")
    print(f"  P50 latency     : {p50:>7} ms")
    print(f"  P95 latency     : {p95:>7} ms")
    print(f"  P99 latency     : {p99:>7} ms")
    print(f"  CPU mean        : {mean_cpu:>7.1f}%")
    print(f"  CPU peak        : {peak_cpu:>7.1f}%")
    print("=" * 60 + "\n")


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

def _device_info(with_location: bool) -> dict:
    """Telemetry as the landing page would report it."""
    return {
        "userAgent": "Mozilla/5.0 (Linux; Android 14) Mobile Safari/537.36",
        "screenWidth": random.choice([390, 412, 1366, 1920]),
        "screenHeight": random.choice([844, 915, 768, 1080]),
        "batteryLevel": random.randint(5, 100),
        "latitude": round(random.uniform(-60, 60), 5) if with_location else None,
        "longitude": round(random.uniform(-170, 170), 5) if with_location else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------------------------------------------------------
# Locust user
# ---------------------------------------------------------------------------

class TrackingUser(HttpUser):
    """
    Simulates an operator creating links and visitors opening them.

    Task weighting:
      - 6 visits (track page + telemetry report) per link created
      - 2 operator reads of collected clicks
      - 1 status poll

    Wait time: 0.1–0.5 s between requests per user.
    """

    wait_time = between(0.1, 0.5)

    def on_start(self):
        """Verify the API is healthy and create a link to visit."""
        with self.client.get("/health", catch_response=True) as resp:
            if resp.status_code != 200:
                resp.failure(f"Health check failed: HTTP {resp.status_code}")
        self.page_ids: list[str] = []
        self.generate_link()

    @task(1)
    def generate_link(self):
        """Create a tracking link and remember its id."""
        with self.client.post(
            "/generate",
            json={"target_url": "https://example.com/"},
            name="POST /generate",
            catch_response=True,
        ) as response:
            if response.status_code != 200:
                response.failure(f"Unexpected HTTP {response.status_code}")
                return
            tracking_url = response.json().get("trackingUrl", "")
            self.page_ids.append(tracking_url.rsplit("/", 1)[-1])

    @task(6)
    def visit(self):
        """Open the landing page, then report telemetry like the browser does."""
        if not self.page_ids:
            return
        page_id = random.choice(self.page_ids)
        with self.client.get(
            f"/track/{page_id}", name="GET /track/[id]", catch_response=True
        ) as page:
            if page.status_code != 200:
                page.failure(f"Landing page HTTP {page.status_code}")
                return

        with self.client.post(
            "/location",
            json={"pageID": page_id, "deviceInfo": _device_info(random.random() < 0.3)},
            name="POST /location",
            catch_response=True,
        ) as response:
            if response.status_code != 200 or response.json().get("success") is not True:
                response.failure(f"Telemetry rejected: {response.text[:200]}")

    @task(2)
    def read_clicks(self):
        """Operator view of collected clicks."""
        if not self.page_ids:
            return
        page_id = random.choice(self.page_ids)
        self.client.get(f"/get-tracking/{page_id}", name="GET /get-tracking/[id]")

    @task(1)
    def status(self):
        self.client.get("/status", name="GET /status")
