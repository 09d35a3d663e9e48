from fastapi import APIRouter

from omondi.api import auth, characters, generation

router = APIRouter()
router.include_router(auth.router)
router.include_router(characters.router)
router.include_router(generation.router)

__all__ = ["router"]
