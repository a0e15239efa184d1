"""
hwstats Sampler Module - Interval-driven CPU/GPU polling.
"""

from hwstats.sampler.sampler import TelemetrySampler, DEFAULT_INTERVAL_MS
from hwstats.sampler.channel import EventChannel
from hwstats.sampler.ticker import Ticker

__all__ = ["TelemetrySampler", "DEFAULT_INTERVAL_MS", "EventChannel", "Ticker"]
