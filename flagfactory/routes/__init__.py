from .flags import router as flags_router

__all__ = ["flags_router"]
