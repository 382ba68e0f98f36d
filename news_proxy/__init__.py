"""News headline relay and article summarization proxy.

This package provides:
- A relay for the news provider's top-headlines endpoint that keeps the API key server-side
- Article fetching, HTML-to-text extraction and summarization through a hosted model
- An extractive fallback summarizer and a TTL cache for finished summaries
"""
