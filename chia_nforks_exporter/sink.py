#!/usr/bin/env python3
"""
Sample Sink
Append-only buffer shared by the concurrent group tasks of one scrape
"""

import threading
from typing import Iterable, List

from .models import MetricSample


class SampleSink:
    """Thread-safe collection point for the samples of a single scrape"""

    def __init__(self):
        self._samples: List[MetricSample] = []
        self._lock = threading.Lock()

    def emit(self, sample: MetricSample) -> None:
        with self._lock:
            self._samples.append(sample)

    def extend(self, samples: Iterable[MetricSample]) -> None:
        batch = list(samples)
        with self._lock:
            self._samples.extend(batch)

    def drain(self) -> List[MetricSample]:
        """Return everything emitted so far and empty the sink"""
        with self._lock:
            samples, self._samples = self._samples, []
        return samples

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
