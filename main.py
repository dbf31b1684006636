import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from buildmart.core.config import CORS_ORIGINS, HTTPS_ONLY, SESSION_MAX_AGE, SESSION_SECRET
from buildmart.database import Base, engine

# import models so they are registered on the metadata
import buildmart.models  # noqa: F401

from buildmart.routes.ads import router as ads_router
from buildmart.routes.articles import router as articles_router
from buildmart.routes.auth import router as auth_router
from buildmart.routes.companies import router as companies_router
from buildmart.routes.jobs import router as jobs_router
from buildmart.routes.listings import router as listings_router
from buildmart.routes.lookups import router as lookups_router
from buildmart.routes.products import router as products_router
from buildmart.routes.search import router as search_router
from buildmart.routes.system import router as system_router
from buildmart.routes.tenders import router as tenders_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="BuildMart API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)

# Cookie session holding the logged-in user's id
app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET,
    max_age=SESSION_MAX_AGE,
    same_site="lax",
    https_only=HTTPS_ONLY,
)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Structured details are sent as the body itself
    body = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "type": "validation_error",
            "validation_details": jsonable_errors(exc),
            "suggestion": "Please check your data format and required fields"
        },
    )


# Create tables (after models are imported)
Base.metadata.create_all(bind=engine)

app.include_router(auth_router, prefix="/api")
app.include_router(products_router, prefix="/api/products")
app.include_router(companies_router, prefix="/api/companies")
app.include_router(jobs_router, prefix="/api/jobs")
app.include_router(tenders_router, prefix="/api/tenders")
app.include_router(articles_router, prefix="/api/articles")
app.include_router(ads_router, prefix="/api/ads")
app.include_router(lookups_router, prefix="/api")
app.include_router(search_router, prefix="/api")
app.include_router(listings_router, prefix="/api")
app.include_router(system_router, prefix="/api")


@app.get("/")
def read_root():
    return {"status": "ok"}
