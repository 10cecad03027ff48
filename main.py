import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from database import connect, ensure_indexes
from errors import InventoryError, StoreUnavailable, ValidationFailed
from logging_config import configure_logging
from oauth import GitHubOAuth
from routers import auth, products, suppliers, users

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = None
    if app.state.db is None:
        client, app.state.db = connect()
    try:
        await ensure_indexes(app.state.db)
    except PyMongoError as e:
        logger.error("index_setup_failed", error=str(e)[:200])
    yield
    if client is not None:
        await client.close()
        logger.info("database_client_closed")


def create_app(db=None, oauth=None) -> FastAPI:
    configure_logging()

    app = FastAPI(title="Inventory Management API", version="1.0.0", lifespan=lifespan)
    app.state.db = db
    app.state.oauth = oauth or GitHubOAuth()

    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        if isinstance(exc, StoreUnavailable):
            logger.error("store_unavailable", path=request.url.path)
        content = {"detail": exc.detail}
        if isinstance(exc, ValidationFailed):
            content["errors"] = [e.model_dump() for e in exc.errors]
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            loc = [str(p) for p in err.get("loc", ()) if p != "body"]
            errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
        return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})

    @app.exception_handler(PyMongoError)
    async def store_error_handler(request: Request, exc: PyMongoError):
        logger.error("store_error", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("unhandled_error", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/")
    def read_root():
        return {
            "message": "Welcome to the Inventory Management API",
            "documentation": "/docs",
            "endpoints": {
                "products": "/api/products",
                "suppliers": "/api/suppliers",
                "auth": "/api/auth",
                "users": "/api/users",
            },
            "version": app.version,
            "environment": os.getenv("ENVIRONMENT", "development"),
        }

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/test")
    async def test_database(request: Request):
        """Test endpoint to check if database is available and accessible"""
        db = request.app.state.db
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
            "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
            "connection_status": "Not Connected",
            "collections": [],
        }
        try:
            if db is not None:
                response["collections"] = (await db.list_collection_names())[:10]
                response["database"] = "✅ Connected & Working"
                response["connection_status"] = "Connected"
        except PyMongoError as e:
            response["database"] = f"⚠️ {str(e)[:80]}"
        return response

    app.include_router(products.router)
    app.include_router(suppliers.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
