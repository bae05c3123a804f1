import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware  # CORS
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.models.database import build_engine, create_db_and_tables
from app.routers import (
    admin,
    auth,
    inbound,
    lots,
    outbound,
    product_categories,
    products,
)
from app.utils.getenv import get_bool_env, get_list_env, get_required_env
from app.utils.identity import IdentityProvider

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("app")


# El engine y el cliente del proveedor de identidad se crean al arrancar y se
# guardan en app.state; las rutas los reciben por dependencias.
@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = build_engine(
        get_required_env("DATABASE_URL"), echo=get_bool_env("DB_ECHO")
    )
    create_db_and_tables(engine)
    identity_provider = IdentityProvider(
        base_url=get_required_env("SUPABASE_URL"),
        service_key=get_required_env("SUPABASE_SERVICE_ROLE_KEY"),
        anon_key=os.getenv("SUPABASE_ANON_KEY"),
        timeout=float(os.getenv("IDENTITY_TIMEOUT", 10)),
    )
    app.state.engine = engine
    app.state.identity_provider = identity_provider
    logger.info("API de inventario iniciada")
    yield
    identity_provider.close()
    engine.dispose()


app = FastAPI(title="Inventario API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_list_env("CORS_ORIGINS", "*"),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(
        "%s %s - Status: %s - Time: %.4fs",
        request.method,
        request.url.path,
        response.status_code,
        process_time,
    )
    return response


### FORMATO DE ERRORES: {"error": "..."} ###
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    mensajes = []
    for error in exc.errors():
        campo = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        mensajes.append(f"{campo}: {error.get('msg')}" if campo else error.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Datos inválidos: " + "; ".join(mensajes)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Error interno del servidor"},
    )


# Incluir routers
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(product_categories.router)
app.include_router(products.router)
app.include_router(lots.router)
app.include_router(inbound.router)
app.include_router(outbound.router)


@app.get("/health")
def health():
    return {
        "status": "Backend funcionando correctamente",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
