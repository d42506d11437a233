from winmix.metrics.aggregator import aggregate
