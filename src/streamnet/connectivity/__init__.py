"""Connectivity: process-wide view of network reachability."""

from streamnet.connectivity.monitor import ConnectivityMonitor, classify_quality

__all__ = ["ConnectivityMonitor", "classify_quality"]
