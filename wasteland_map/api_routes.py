"""
HTTP API for Wasteland Map.

JSON endpoints consumed by the map UI. Public routes serve the published
map; everything under the admin router requires an admin session
established through POST /api/admin/verify.

Errors are converted at this boundary:
ValidationError -> 400, AuthError -> 401, NotFoundError -> 404,
PersistenceError -> 500 (generic message, no internal detail).
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wasteland_map.auth.middleware import (
    grant_admin_session,
    is_admin_session,
    require_admin,
    revoke_admin_session,
)
from wasteland_map.errors import (
    AuthError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    field_errors_from_pydantic,
)
from wasteland_map.map_manager import MapManager
from wasteland_map.models import (
    AdminCodeRequest,
    LocationEditor,
    RoadInput,
    RoadUpdate,
    SettingsUpdate,
)

logger = logging.getLogger(__name__)


def get_manager(request: Request) -> MapManager:
    """Dependency returning the MapManager installed on the app."""
    return request.app.state.map_manager


def _settings_to_wire(settings: Dict[str, str]) -> Dict[str, str]:
    wire = {"appName": settings["app_name"], "version": settings["version"]}
    if "admin_code" in settings:
        wire["adminCode"] = settings["admin_code"]
    return wire


# --- Public routes ---

public_router = APIRouter(prefix="/api")


@public_router.get("/map/public")
def get_public_map(manager: MapManager = Depends(get_manager)):
    return manager.assembler.get_published_map_data().to_wire()


@public_router.get("/settings")
def get_public_settings(manager: MapManager = Depends(get_manager)):
    return _settings_to_wire(manager.get_settings())


@public_router.post("/admin/verify")
def verify_admin(body: AdminCodeRequest, request: Request, manager: MapManager = Depends(get_manager)):
    if not body.code or not body.code.strip():
        raise ValidationError.for_field("code", "Admin code is required")

    is_valid = manager.guard.verify(body.code)
    if is_valid:
        grant_admin_session(request)
    return {"isValid": is_valid}


@public_router.post("/admin/logout")
def logout_admin(request: Request):
    revoke_admin_session(request)
    return {"message": "Logged out"}


@public_router.get("/admin/session")
def get_admin_session(request: Request):
    return {"isAdmin": is_admin_session(request)}


# --- Admin routes ---

admin_router = APIRouter(prefix="/api", dependencies=[Depends(require_admin)])


@admin_router.get("/map/admin")
def get_admin_map(manager: MapManager = Depends(get_manager)):
    return manager.assembler.get_admin_map_data().to_wire()


@admin_router.post("/admin/publish")
def publish_all_changes(manager: MapManager = Depends(get_manager)):
    state = manager.publisher.publish_all_changes()
    return {
        "message": "All changes published successfully",
        "lastPublishedAt": state.to_wire()["lastPublishedAt"],
    }


@admin_router.get("/admin/settings")
def get_admin_settings(manager: MapManager = Depends(get_manager)):
    return _settings_to_wire(manager.get_settings(include_admin_code=True))


@admin_router.post("/admin/settings")
def update_admin_settings(body: SettingsUpdate, manager: MapManager = Depends(get_manager)):
    return _settings_to_wire(manager.update_settings(body))


@admin_router.get("/locations")
def list_locations(manager: MapManager = Depends(get_manager)):
    return [location.to_wire() for location in manager.storage.get_locations()]


@admin_router.get("/locations/{location_id}")
def get_location(location_id: str, manager: MapManager = Depends(get_manager)):
    location = manager.storage.get_location(location_id)
    if location is None:
        raise NotFoundError("location", location_id)
    return location.to_wire()


@admin_router.post("/locations", status_code=201)
def create_location(body: LocationEditor, manager: MapManager = Depends(get_manager)):
    return manager.create_location_with_vendors(body).to_wire()


@admin_router.put("/locations/{location_id}")
def replace_location(location_id: str, body: LocationEditor, manager: MapManager = Depends(get_manager)):
    return manager.replace_location(location_id, body).to_wire()


@admin_router.delete("/locations/{location_id}")
def delete_location(location_id: str, manager: MapManager = Depends(get_manager)):
    manager.storage.delete_location(location_id)
    return {"message": "Location deleted successfully"}


@admin_router.post("/locations/{location_id}/publish")
def publish_location(location_id: str, manager: MapManager = Depends(get_manager)):
    return manager.publisher.publish_location(location_id).to_wire()


@admin_router.post("/locations/{location_id}/unpublish")
def unpublish_location(location_id: str, manager: MapManager = Depends(get_manager)):
    return manager.publisher.unpublish_location(location_id).to_wire()


@admin_router.get("/roads")
def list_roads(manager: MapManager = Depends(get_manager)):
    return [road.to_wire() for road in manager.storage.get_roads()]


@admin_router.post("/roads", status_code=201)
def create_road(body: RoadInput, manager: MapManager = Depends(get_manager)):
    return manager.create_road(body).to_wire()


@admin_router.put("/roads/{road_id}")
def update_road(road_id: str, body: RoadUpdate, manager: MapManager = Depends(get_manager)):
    return manager.storage.update_road(road_id, body).to_wire()


@admin_router.delete("/roads/{road_id}")
def delete_road(road_id: str, manager: MapManager = Depends(get_manager)):
    manager.storage.delete_road(road_id)
    return {"message": "Road deleted successfully"}


@admin_router.post("/roads/{road_id}/publish")
def publish_road(road_id: str, manager: MapManager = Depends(get_manager)):
    return manager.publisher.publish_road(road_id).to_wire()


@admin_router.post("/roads/{road_id}/unpublish")
def unpublish_road(road_id: str, manager: MapManager = Depends(get_manager)):
    return manager.publisher.unpublish_road(road_id).to_wire()


# --- Error translation ---

async def _validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"message": exc.message, "errors": exc.errors})


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": field_errors_from_pydantic(exc.errors())},
    )


async def _auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=401, content={"message": str(exc)})


async def _not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"message": f"{exc.kind.capitalize()} not found"})


async def _persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Internal storage error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(AuthError, _auth_error_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(PersistenceError, _persistence_error_handler)


def install_api(app: FastAPI, manager: MapManager) -> None:
    """
    Attach the API to an app.

    The app must carry a session middleware (NiceGUI adds one when
    ui.run() gets a storage_secret; tests add Starlette's SessionMiddleware).
    """
    app.state.map_manager = manager
    register_exception_handlers(app)
    app.include_router(public_router)
    app.include_router(admin_router)
