import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradelists.constants import APP_TITLE

from .routes import contracts, correlations, exports, files, metrics, portfolio, remote, selection, series, upload
from .services.session_store import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=APP_TITLE, version="0.1.0", docs_url="/docs")

cors_origins = settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[cors_origins] if cors_origins != "*" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["health"])
async def health() -> JSONResponse:
    return JSONResponse({"status": "ok"})


app.include_router(upload.router)
app.include_router(files.router)
app.include_router(metrics.router)
app.include_router(contracts.router)
app.include_router(selection.router)
app.include_router(portfolio.router)
app.include_router(series.router)
app.include_router(correlations.router)
app.include_router(exports.router)
app.include_router(remote.router)
