from fastapi import APIRouter
from mcp_factory.api.routes_health import router as health_router
from mcp_factory.api.routes_jobs import router as jobs_router
from mcp_factory.api.routes_servers import router as servers_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(jobs_router, tags=["jobs"])
router.include_router(servers_router, tags=["servers"])
