"""
Shared FastAPI dependencies
"""

from fastapi import HTTPException, Request

from ..runtime import ConciergeRuntime


def get_runtime(request: Request) -> ConciergeRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return runtime
