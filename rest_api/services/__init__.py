"""
Services module for business logic.

CLEAN ARCHITECTURE:
- domain/: Application services (business logic) - USE THESE
- crud/: Repository pattern, soft delete, cascade delete
- base_service.py: BaseService / BaseCRUDService the domain services extend

Usage:
    from rest_api.services.domain import MenuService
    service = MenuService(db)
    menus = service.list_detailed(restaurant_id)
"""
