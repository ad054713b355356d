"""
FormAssist HTTP API.

Thin FastAPI shell around formassist.pipeline.QueryPipeline.
"""
