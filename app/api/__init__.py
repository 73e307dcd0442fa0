from .camera_view import router

__all__ = ["router"]
