"""Domain models for the spreadsheet -> document generator.

Sheets flow through the pipeline as SheetTable -> ClassifiedSheet -> TaggedRow; the
assembler emits DocumentDescriptors collected into a GenerationResult.
"""

from .classified_sheet import Catalog, ClassifiedSheet, SheetRole
from .document import DocumentDescriptor, GenerationResult
from .error_record import ErrorRecord
from .sheet_table import RawRow, SheetTable
from .tagged_row import TaggedRow
from .template_spec import GenerationStrategy, RowPolicy, TemplateSpec
from .upload import SUPPORTED_EXTENSIONS, UploadedFile

__all__ = [
    # Ingestion models
    "RawRow",
    "SheetTable",
    "SheetRole",
    "ClassifiedSheet",
    "Catalog",
    "TaggedRow",
    "UploadedFile",
    "SUPPORTED_EXTENSIONS",
    # Template models
    "GenerationStrategy",
    "RowPolicy",
    "TemplateSpec",
    # Output models
    "DocumentDescriptor",
    "GenerationResult",
    "ErrorRecord",
]
