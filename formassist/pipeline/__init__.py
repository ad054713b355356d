"""
Pipeline module for FormAssist.
"""

from .query_pipeline import QueryPipeline, StateListener

__all__ = ["QueryPipeline", "StateListener"]
