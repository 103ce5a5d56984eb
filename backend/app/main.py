"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.database import Base, engine

# Import routers
from app.routers import approvals, availability, bookings, events, notifications, performances, users

# Import all models so Base.metadata knows about them
from app.models.user import User                                  # noqa: F401
from app.models.profile import Artist, Venue                       # noqa: F401
from app.models.event import Event, EventArtist                    # noqa: F401
from app.models.performance import Performance                     # noqa: F401
from app.models.booking import Booking, ArtistUnavailability       # noqa: F401
from app.models.notification import Notification                   # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Venue Booking",
    description="Venue/artist booking workflows: event approvals, performances, bookings and notifications",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(performances.router, prefix="/api/performances", tags=["Performances"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(availability.router, prefix="/api/availability", tags=["Availability"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(approvals.router, prefix="/api/approvals", tags=["Approvals"])


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Opaque 500 for anything the services did not anticipate; details stay in the log."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
