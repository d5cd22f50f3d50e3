# main.py - Application factory wiring routers, error handlers and the overdue sweeper
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from config import Base, engine, CORS_ORIGINS, IS_PRODUCTION, SWEEP_ENABLED
import tables.users, tables.stores, tables.reservations, tables.reviews
from routes import users, stores, reservations, reviews
from services.sweeper import OverdueSweeper
from utils.errors import TablePlannerError

logger = logging.getLogger(__name__)

sweeper = OverdueSweeper()

@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
    except Exception:
        logger.exception("Database connection failed")
        raise

    Base.metadata.create_all(bind=engine)

    if SWEEP_ENABLED:
        sweeper.start()

    yield

    await sweeper.stop()
    logger.info("Shutdown complete")

app = FastAPI(
    title="Table Planner API",
    version="1.0.0",
    description="Store reservations with partner approval, confirmation numbers and reviews",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(TablePlannerError)
async def handle_table_planner_error(request: Request, exc: TablePlannerError):
    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred"})

app.include_router(users.auth_router)
app.include_router(users.router)
app.include_router(stores.router)
app.include_router(reservations.router)
app.include_router(reviews.router)

@app.get("/health", tags=["Health"])
def health():
    """
    Health check endpoint
    """
    return {
        "status": "healthy",
        "production": IS_PRODUCTION,
        "version": "1.0.0"
    }

@app.get("/", tags=["Root"])
def read_root():
    """
    Welcome endpoint that provides basic API information
    """
    return {
        "message": "Table Planner API",
        "version": "1.0.0",
        "status": "running",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_schema": "/openapi.json"
        },
    }
