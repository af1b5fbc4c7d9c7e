from src.core.documents.number_generator import (
    DocumentNumberGenerator,
    DocumentPrefix,
    format_document_number,
)

__all__ = ["DocumentNumberGenerator", "DocumentPrefix", "format_document_number"]
