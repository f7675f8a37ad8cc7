from __future__ import annotations

from fastapi import FastAPI

from ipm_packager.api.endpoints import health, packages
from ipm_packager.api.endpoints import metrics as metrics_ep
from ipm_packager.api.middleware.request_context import RequestContextMiddleware, SafeErrorMiddleware

app = FastAPI(
    title="IPM Packager API",
    version="0.1.0",
)

# Starlette reverses add_middleware order: the LAST call is the OUTERMOST wrapper.
# Runtime order: SafeErrorMiddleware -> RequestContextMiddleware -> handler
app.add_middleware(RequestContextMiddleware)
app.add_middleware(SafeErrorMiddleware)

app.include_router(health.router)
app.include_router(metrics_ep.router)
app.include_router(packages.router)
