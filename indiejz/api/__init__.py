from .auth import router as auth_router
from .checkout import router as checkout_router
from .purchases import router as purchases_router
from .store import router as store_router
from .support import router as support_router

__all__ = ["auth_router", "checkout_router", "purchases_router", "store_router", "support_router"]
