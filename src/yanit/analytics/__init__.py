"""Query metrics and external analytics sinks."""

from yanit.analytics.metrics import MetricsRecorder
from yanit.analytics.mixpanel import MixpanelSink

__all__ = ["MetricsRecorder", "MixpanelSink"]
