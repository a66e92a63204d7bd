from fastapi import APIRouter, Depends, HTTPException, Query
from mcp_factory.api.deps import get_services
from mcp_factory.core.errors import InputError
from mcp_factory.core.services import Services
from mcp_factory.schemas.jobs import (
    GenerateRequest,
    GenerateResponse,
    JobListResponse,
    JobResponse,
    JobSummary,
)

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest, services: Services = Depends(get_services)):
    options = {"docker": req.docker}
    if req.runtime:
        options["runtime"] = req.runtime
    try:
        job_id = await services.engine.submit(req.description, options)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return GenerateResponse(job_id=job_id, status="processing")


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: str, services: Services = Depends(get_services)):
    job = services.engine.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse.from_record(job)


@router.get("/jobs", response_model=JobListResponse)
def list_jobs(limit: int = Query(50, ge=1, le=1000), services: Services = Depends(get_services)):
    jobs = [JobSummary(**job.summary()) for job in services.engine.list(limit)]
    return JobListResponse(jobs=jobs, count=len(jobs))
