from pathlib import Path
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from mcp_factory.api.deps import get_services
from mcp_factory.core.services import Services
from mcp_factory.schemas.jobs import ValidateRequest
from mcp_factory.schemas.spec import validate_spec

router = APIRouter()


@router.get("/servers")
def list_servers(
    name: Optional[str] = None,
    version: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    services: Services = Depends(get_services),
):
    servers = services.registry.enumerate(name=name, version=version, limit=limit)
    return {"servers": servers, "count": len(servers)}


@router.get("/servers/{name}")
def get_server(name: str, version: Optional[str] = None, services: Services = Depends(get_services)):
    server = services.registry.find(name, version)
    if not server:
        raise HTTPException(status_code=404, detail="Server not found")
    return server


@router.delete("/servers/{name}")
def delete_server(name: str, services: Services = Depends(get_services)):
    if not services.registry.remove(name):
        raise HTTPException(status_code=404, detail="Server not found")
    return {"success": True, "name": name}


@router.post("/validate")
async def validate(req: ValidateRequest, services: Services = Depends(get_services)):
    if not req.server_dir and not req.spec:
        raise HTTPException(status_code=400, detail="Provide either server_dir or spec")

    if req.server_dir:
        result = await services.validator.validate(Path(req.server_dir))
        return result.to_dict()

    errors = validate_spec(req.spec)
    return {"valid": not errors, "errors": errors, "warnings": []}
