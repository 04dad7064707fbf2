"""
Main application entry point.
"""

from fastapi import FastAPI
from search_scorer import __version__
from search_scorer.api.v1.report_endpoints import router as report_router

app = FastAPI(
    title="Search Scorer API",
    description="Relevancy evaluation and comparison of package search backends.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Include API routers
app.include_router(report_router, prefix="/api/v1", tags=["reports"])

@app.get("/")
def read_root():
    """Root endpoint."""
    return {
        "message": "Welcome to the Search Scorer API",
        "docs": "/docs",
        "health": "/api/v1/health"
    }

if __name__ == "__main__":
    import logging
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    uvicorn.run("search_scorer.main:app", host="0.0.0.0", port=8000, reload=True)
