"""
Conversion package: output naming and the per-track pipeline
"""

from .naming import resolve_canonical_name, build_output_path
from .pipeline import ConversionPipeline

__all__ = [
    'resolve_canonical_name',
    'build_output_path',
    'ConversionPipeline',
]
