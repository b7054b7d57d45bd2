import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shiftboard.core.config import settings
from shiftboard.api.routes import blackouts, me, schedule, shifts, time_off_requests
from shiftboard.services.scheduling.errors import SchedulingError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Shiftboard API", version="0.1.0")

app.include_router(shifts.router, prefix="/api/v1")
app.include_router(schedule.router, prefix="/api/v1")
app.include_router(time_off_requests.router, prefix="/api/v1")
app.include_router(blackouts.router, prefix="/api/v1")
app.include_router(me.router, prefix="/api/v1")


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    # overridable conflicts carry the flag name the client should resend
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.get("/health")
def health_check():
    return {"status": "ok"}
