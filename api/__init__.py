"""
API module - FastAPI routers
"""
