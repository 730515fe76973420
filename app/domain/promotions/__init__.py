from .router import router, special_price_router

__all__ = ["router", "special_price_router"]
