from .routes import subscription_router, token_router

__all__ = ["token_router", "subscription_router"]
