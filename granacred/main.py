from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from granacred.api.routes import router
from granacred.api.admin_routes import router as admin_router
from granacred.errors import InputValidationError, InvalidTransition
from granacred.observability.logging import log
from granacred.settings import settings

app = FastAPI(title="GranaCred Workflow API")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "GranaCred workflow API is running. See GET /workflow.",
    }


@app.get("/health")
def health():
    return {"status": "ok"}


# Local validation failures: nothing was sent to the gateway
@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    log(event="api_input_rejected", path=request.url.path, field=exc.field)
    return JSONResponse(
        status_code=422,
        content={"error": exc.code, "field": exc.field, "message": exc.message},
    )


# Trigger not legal in the current state; the workflow is unchanged
@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    log(event="api_transition_rejected", path=request.url.path,
        trigger=exc.trigger, state=getattr(exc.state, "value", str(exc.state)))
    return JSONResponse(
        status_code=409,
        content={"error": exc.code, "trigger": exc.trigger, "message": exc.message},
    )
