import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Routers
from routers.health import router as health_router
from routers.models import router as models_router
from routers.problems import router as problems_router
from routers.submissions import router as submissions_router
from store import StoreError

logger = logging.getLogger("wordmath")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Word Problem Tutor API")

# Allow calls from the Next.js dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "x-generator",
        "x-topic",
        "x-model",
        "x-difficulty",
        "x-probtype",
        "x-feedback-model",
        "x-feedback-band",
        "x-solution-model",
    ],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": f"store_error: {exc}"})


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(problems_router)  # /generate, /hint
app.include_router(submissions_router)  # /submit, /score
app.include_router(models_router)  # /models
app.include_router(health_router)  # /health/...
