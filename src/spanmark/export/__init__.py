"""Export of decorated documents to static formats."""

from spanmark.export.html import render_document_as_styled_markup

__all__ = ["render_document_as_styled_markup"]
