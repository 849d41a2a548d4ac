"""Event pipeline (dedup + delta + forward)."""

from pnl_listener.services.pipeline.event_pipeline import EventPipeline

__all__ = ["EventPipeline"]
