"""
API module - FastAPI application and routes.

Run with: uvicorn collabdocs.api.main:app --reload
"""
