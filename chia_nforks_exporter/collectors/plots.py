#!/usr/bin/env python3
"""
Plots Collector
Plot file counts from the harvester's get_plots
"""

from typing import Any, Dict, List

from ..models import MetricGroup, MetricSample, items
from ..sink import SampleSink
from .base import GroupCollector, gauge


def translate_plots(coin: str, payload: Dict[str, Any]) -> List[MetricSample]:
    return [
        gauge(coin, "plots_failed_to_open", "Number of plots files failed to open.",
              len(items(payload, "failed_to_open_filenames"))),
        gauge(coin, "plots_not_found", "Number of plots files not found.",
              len(items(payload, "not_found_filenames"))),
        gauge(coin, "plots", "Number of plots currently using.",
              len(items(payload, "plots"))),
    ]


class PlotsCollector(GroupCollector):
    """Plots group, harvester endpoint"""

    name = "plots"
    endpoint = "harvester"
    groups = frozenset({MetricGroup.PLOTS})

    def collect(self, sink: SampleSink) -> None:
        sink.extend(self.fetch_samples("get_plots", translate_plots))
