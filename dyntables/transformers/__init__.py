from .base_transformer import BaseStage, StageResult
from .header_normalizer import HeaderNormalizer, normalize_headers
from .type_inference import TypeInference, detect_type, infer_schema
from .deduplicator import Deduplicator, DedupResult, dedup
from .value_coercer import ValueCoercer, coerce_cell, coerce_record
from .record_validator import RecordValidator, ValidationOutcome, apply_defaults, validate, validate_and_coerce
from .pipeline import ImportPipeline

__all__ = [
    "BaseStage",
    "StageResult",
    "HeaderNormalizer",
    "normalize_headers",
    "TypeInference",
    "detect_type",
    "infer_schema",
    "Deduplicator",
    "DedupResult",
    "dedup",
    "ValueCoercer",
    "coerce_cell",
    "coerce_record",
    "RecordValidator",
    "ValidationOutcome",
    "apply_defaults",
    "validate",
    "validate_and_coerce",
    "ImportPipeline",
]
