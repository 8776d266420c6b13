"""Example: see what would be sent to CloudWatch without paying for it.

Run with: python examples/dry_run_example.py
"""

import logging
import random
import time

from cloudwatchpy import (
    CloudWatchReporter,
    InMemoryTransport,
    MetricsRegistry,
    ReporterConfig,
    StaticDimensionAdder,
    TimeUnit,
)

logging.basicConfig(level=logging.INFO)

registry = MetricsRegistry()
requests = registry.timer("app.requests")
errors = registry.counter("app.errors")
queue_depth = registry.gauge("app.queue_depth", lambda: random.randint(0, 50))

config = ReporterConfig(
    namespace="example",
    duration_unit=TimeUnit.MILLISECONDS,
    timer_summary=True,
    dimension_adders=[StaticDimensionAdder("Stage", "dev")],
    send_enabled=False,
)
reporter = CloudWatchReporter(config, InMemoryTransport(), registry)

for _ in range(200):
    with requests.time():
        time.sleep(random.uniform(0, 0.002))
    if random.random() < 0.05:
        errors.inc()

result = reporter.report()
print(f"{result.datapoints_delivered} datapoints in {result.batches_delivered} batches")
