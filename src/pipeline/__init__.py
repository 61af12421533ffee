"""
End-to-end document scanning pipeline (segment -> detect -> scale -> rectify).
"""

from src.pipeline.cancellation import CancellationToken, LatestFrameGate
from src.pipeline.full_pipeline import DocumentScanPipeline, ScanResult

__all__ = [
    "DocumentScanPipeline",
    "ScanResult",
    "CancellationToken",
    "LatestFrameGate",
]
