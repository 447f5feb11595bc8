from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import CORS_ORIGINS
from app.core.logging_config import configure_logging
from app.database.db import Base, engine
from app.models import events, hubs, notifications, registrations  # noqa: F401
from app.routes import events as event_routes
from app.routes import hubs as hub_routes
from app.routes import notifications as notification_routes
from app.routes import registrations as registration_routes
from app.routes import users as user_routes

configure_logging()

app = FastAPI(title="Femella Event Registration Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(hub_routes.router)
app.include_router(event_routes.router)
app.include_router(registration_routes.router)
app.include_router(user_routes.router)
app.include_router(notification_routes.router)
