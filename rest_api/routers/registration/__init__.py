"""
Registration routers - /api/plans, /api/register/*, /api/webpay/*
"""

from .routes import router

__all__ = ["router"]
