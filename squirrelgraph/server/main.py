"""
squirrelgraph FastAPI server: compiles graphs sent by the editor.

Start with:
    python -m squirrelgraph.server.main

Or via uvicorn directly:
    uvicorn squirrelgraph.server.main:app --port 3001 --reload
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from squirrelgraph import __version__
from squirrelgraph.config import configure_logging, load_settings
from squirrelgraph.server.routes.compile_routes import router

settings = load_settings()

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="squirrelgraph API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run(
        "squirrelgraph.server.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
