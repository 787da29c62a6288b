from ._router import router


__all__ = ["router"]
