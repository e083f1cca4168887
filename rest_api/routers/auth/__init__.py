"""
Authentication routers - /api/auth/*
Handles login, logout, session checks and password management.
"""

from .routes import router

__all__ = ["router"]
