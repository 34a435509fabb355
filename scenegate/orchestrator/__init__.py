"""Pipeline orchestration"""

from .pipeline import GatedWritingPipeline, run_gated_pipeline

__all__ = [
    "GatedWritingPipeline",
    "run_gated_pipeline",
]
