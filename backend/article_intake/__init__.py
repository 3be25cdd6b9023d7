"""Research article intake (document extraction, summarization, DOI lookup).

This package provides:
- Text extraction from uploaded PDF/DOCX documents
- A remote summarizer with a deterministic extractive fallback
- Crossref DOI resolution normalized into article fields
- The article record store and the ingestion flows used by the FastAPI backend
"""
