"""
Diet Planner generation service - Main Entry Point

AI-assisted weekly meal plan generation, meal regeneration and
nutrition insights for the diet planner backend.
"""
import os
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from diet_planner.core.config import settings
from diet_planner.core.logger import logger
from diet_planner.core.limiter import limiter
from diet_planner.routes import plans, insights


# Validate configuration on startup
try:
    settings.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise


# Create FastAPI app
app = FastAPI(
    title="Diet Planner Generation Service",
    description="AI-assisted weekly diet plan generation with validated output and static fallbacks",
    version="1.0.0"
)

# Attach rate limiter and its error handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


app.include_router(plans.router, tags=["Plans"])
app.include_router(insights.router, tags=["Insights"])


@app.get("/")
@limiter.limit("60/minute")
def root(request: Request):
    """Health check endpoint."""
    return {"message": "Diet Planner generation service running"}


@app.get("/health")
def health():
    """
    Detailed health status.
    Returns 'degraded' if required environment variables are missing.
    """
    required_vars = ["OPENAI_API_KEY", "INTERNAL_API_SECRET"]
    missing = [v for v in required_vars if not os.environ.get(v)]

    if missing:
        return JSONResponse(
            status_code=200,
            content={
                "status": "degraded",
                "service": "diet-planner",
                "version": "1.0.0",
                "missing_config": missing,
                "message": f"Missing required environment variables: {', '.join(missing)}"
            }
        )

    return {
        "status": "healthy",
        "service": "diet-planner",
        "version": "1.0.0",
        "strategy": settings.GENERATION_STRATEGY,
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "diet_planner.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False
    )
