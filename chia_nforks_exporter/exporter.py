#!/usr/bin/env python3
"""
Scrape Orchestrator
Fans every scrape out over all coins and metric groups and encodes the result
"""

import time
import logging
import concurrent.futures
from typing import Dict, Iterable, Iterator, List

from prometheus_client.core import GaugeMetricFamily, Metric

from .models import MetricSample
from .registry import CoinRegistry
from .sink import SampleSink

logger = logging.getLogger(__name__)


FAMILY_TYPES = {
    "gauge": GaugeMetricFamily,
}


def to_metric_families(samples: Iterable[MetricSample]) -> List[Metric]:
    """Group samples into one family per metric name, typed by the sample kind"""
    families: Dict[str, Metric] = {}
    for sample in samples:
        family = families.get(sample.name)
        if family is None:
            family_type = FAMILY_TYPES.get(sample.kind)
            if family_type is None:
                raise ValueError(f"unsupported metric kind '{sample.kind}' for {sample.name}")
            family = family_type(sample.name, sample.help, labels=sample.label_names)
            families[sample.name] = family
        family.add_metric(sample.label_values, sample.value)
    return list(families.values())


class ScrapeOrchestrator:
    """
    prometheus_client collector backed by a CoinRegistry.

    No describe() is provided: a registry created with auto_describe=True
    declares the exported shape by running one collection pass.
    """

    def __init__(self, registry: CoinRegistry):
        self.registry = registry

    def scrape(self) -> List[MetricSample]:
        """Run every enabled group task of every coin concurrently and wait for all"""
        tasks = [
            (collector.name, group_name, task)
            for collector in self.registry
            for group_name, task in collector.group_tasks()
        ]
        if not tasks:
            return []

        sink = SampleSink()
        start_time = time.time()

        with concurrent.futures.ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="scrape") as executor:
            future_to_task = {
                executor.submit(task, sink): (coin_name, group_name)
                for coin_name, group_name, task in tasks
            }
            done, _ = concurrent.futures.wait(future_to_task)

            for future in done:
                coin_name, group_name = future_to_task[future]
                error = future.exception()
                if error is not None:
                    logger.error(f"[{coin_name}] {group_name} task failed: {error}", exc_info=error)

        samples = sink.drain()
        logger.debug(f"Scrape complete: {len(samples)} samples from {len(tasks)} tasks in {time.time() - start_time:.3f}s")
        return samples

    def collect(self) -> Iterator[Metric]:
        yield from to_metric_families(self.scrape())
