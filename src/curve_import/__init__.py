"""Import pipeline package.

This package detects the format of import payloads, repairs their objects
and points, and converts them in cancellable batches.
"""

from .cancellation import CancellationToken
from .config import PRESETS, ImportConfig
from .detect import DetectedPayload, FormatError, detect_format
from .pipeline import (
    ImportBatch,
    ImportPipeline,
    ImportProgress,
    ImportResult,
    SkippedShape,
    import_payload,
)
from .repair import ValidationRepaired, repair_object, repair_point

__version__ = "0.1.0"
__all__ = [
    "CancellationToken", "PRESETS", "ImportConfig",
    "DetectedPayload", "FormatError", "detect_format",
    "ImportBatch", "ImportPipeline", "ImportProgress", "ImportResult", "SkippedShape", "import_payload",
    "ValidationRepaired", "repair_object", "repair_point",
]
