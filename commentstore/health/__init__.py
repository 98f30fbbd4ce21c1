from commentstore.health.router import router


__all__ = ["router"]
