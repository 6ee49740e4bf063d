"""
Admin routes, mounted under /api/admin. Every endpoint requires the admin role.
"""
from fastapi import APIRouter

from picks_api.api.routes.admin import blog, predictions, users

router = APIRouter(prefix="/admin")
router.include_router(users.router)
router.include_router(predictions.router)
router.include_router(blog.router)
