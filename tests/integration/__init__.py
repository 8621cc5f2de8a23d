"""Integration tests for the HTTP API.

These run the FastAPI app in-process with a fake upstream transport:
    pytest tests/integration/ -v
"""
