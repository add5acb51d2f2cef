"""
Product export -> Matrixify (Shopify bulk import) normalizer.

This package provides modular building blocks for:
- Decoding JSON / CSV / XLSX product exports
- Resolving variable column names through alias tables
- Building handles, Body (HTML) and tags
- Expanding products into image rows and emitting the fixed Matrixify CSV

Public API:
- pipeline.process_json, pipeline.process_csv, pipeline.process_records
- pipeline.process_extracted, pipeline.process_raw_text
- pipeline.process_export, pipeline.process_export_records, pipeline.run
- normalize.slugify, normalize.slugify_cjk
- mapping.resolve_field, mapping.product_from_record
- transform.HEADERS, transform.expand_product, transform.forward_fill
- io.project_rows, io.write_matrixify_csv
"""

from . import io, mapping, normalize, describe, transform, pipeline  # re-export modules
from .errors import (
    EmptyInputError,
    ExtractionError,
    MalformedInputError,
    NoProcessableRecordsError,
    PipelineError,
)
from .pipeline import Mode, run
from .settings import PipelineOptions

__version__ = "0.1.0"

__all__ = [
    "io",
    "mapping",
    "normalize",
    "describe",
    "transform",
    "pipeline",
    "Mode",
    "run",
    "PipelineOptions",
    "PipelineError",
    "MalformedInputError",
    "EmptyInputError",
    "NoProcessableRecordsError",
    "ExtractionError",
]
