"""
PDF Rule Checker — evidence-backed rule verification for short PDF documents.

Architecture: Extract → Prompt → LLM Judge → Deterministic Overrides → Result
Philosophy:  Let the model read. Let code count.
"""

__version__ = "1.0.0"
