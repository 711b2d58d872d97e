"""
AI news & events aggregation backend
Multi-source ingestion, deduplication and translation pipeline
"""

__version__ = "1.0.0"
