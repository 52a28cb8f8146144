from .availability import router as availability_router
from .healthcheck import router as healthcheck_router
from .reservation import router as reservation_router

__all__ = [
    'availability_router',
    'reservation_router',
    'healthcheck_router',
]

routers = [
    availability_router,
    reservation_router,
    healthcheck_router,
]
