"""
SQL Storage Backend for Wasteland Map.

Implements the MapStorage protocol on a relational database through
SQLAlchemy. Works with SQLite (default, file next to the app) and
PostgreSQL (set DATABASE_URL).

Tables:
- locations
- vendors (location_id -> locations.id)
- roads (from_location_id, to_location_id -> locations.id)
- map_state (single row, id='singleton')

Every public method runs in one transaction; multi-row operations
(cascade delete, vendor replacement, publish all) commit or roll back
as a unit.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    delete,
    event,
    or_,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from wasteland_map.config import DEFAULT_ADMIN_CODE
from wasteland_map.errors import NotFoundError, PersistenceError
from wasteland_map.models import (
    MAP_STATE_ID,
    Location,
    LocationInput,
    LocationUpdate,
    LocationWithVendors,
    MapData,
    MapState,
    Road,
    RoadInput,
    RoadUpdate,
    Vendor,
    VendorInput,
    VendorUpdate,
    changes_of,
)
from wasteland_map.storage.defaults import (
    PathGenerator,
    build_location,
    build_road,
    build_vendor,
    missing_endpoints_error,
)

logger = logging.getLogger(__name__)

Base = declarative_base()


class LocationRow(Base):
    __tablename__ = "locations"
    id = Column(String, primary_key=True)
    name = Column(Text, nullable=False)
    type = Column(String, nullable=False)
    description = Column(Text)
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    icon = Column(String, default="map-pin")
    safety_rating = Column(Integer, default=3)
    is_published = Column(Boolean, default=False, nullable=False)


class VendorRow(Base):
    __tablename__ = "vendors"
    id = Column(String, primary_key=True)
    location_id = Column(String, ForeignKey("locations.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    hours = Column(Text, default="Unknown")
    services = Column(JSON, nullable=False, default=list)


class RoadRow(Base):
    __tablename__ = "roads"
    id = Column(String, primary_key=True)
    from_location_id = Column(String, ForeignKey("locations.id"), nullable=False, index=True)
    to_location_id = Column(String, ForeignKey("locations.id"), nullable=False, index=True)
    path_data = Column(Text, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)


class MapStateRow(Base):
    __tablename__ = "map_state"
    id = Column(String, primary_key=True, default=MAP_STATE_ID)
    last_published_at = Column(String)  # ISO-8601
    admin_code = Column(Text, nullable=False, default=DEFAULT_ADMIN_CODE)


def _configure_sqlite(engine: Engine) -> None:
    """
    Turn on foreign keys and real transactions for SQLite.

    pysqlite only emits BEGIN before writes, so reads inside a session are
    not isolated from concurrent commits. SQLAlchemy now emits BEGIN itself.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN")


# --- Row <-> model conversion ---

def _location_from_row(row: LocationRow) -> Location:
    return Location(
        id=row.id,
        name=row.name,
        type=row.type,
        description=row.description,
        x=row.x,
        y=row.y,
        icon=row.icon,
        safety_rating=row.safety_rating or 3,
        is_published=bool(row.is_published),
    )


def _vendor_from_row(row: VendorRow) -> Vendor:
    return Vendor(
        id=row.id,
        location_id=row.location_id,
        name=row.name,
        description=row.description,
        hours=row.hours or "Unknown",
        services=list(row.services or []),
    )


def _road_from_row(row: RoadRow) -> Road:
    return Road(
        id=row.id,
        from_location_id=row.from_location_id,
        to_location_id=row.to_location_id,
        path_data=row.path_data,
        is_published=bool(row.is_published),
    )


def _map_state_from_row(row: MapStateRow) -> MapState:
    return MapState(
        id=row.id,
        last_published_at=datetime.fromisoformat(row.last_published_at) if row.last_published_at else None,
        admin_code=row.admin_code,
    )


def _location_row(location: Location) -> LocationRow:
    return LocationRow(
        id=location.id,
        name=location.name,
        type=location.type.value,
        description=location.description,
        x=location.x,
        y=location.y,
        icon=location.icon,
        safety_rating=location.safety_rating,
        is_published=location.is_published,
    )


def _vendor_row(vendor: Vendor) -> VendorRow:
    return VendorRow(
        id=vendor.id,
        location_id=vendor.location_id,
        name=vendor.name,
        description=vendor.description,
        hours=vendor.hours,
        services=list(vendor.services),
    )


def _road_row(road: Road) -> RoadRow:
    return RoadRow(
        id=road.id,
        from_location_id=road.from_location_id,
        to_location_id=road.to_location_id,
        path_data=road.path_data,
        is_published=road.is_published,
    )


class SqlBackend:
    """
    Relational storage backend.

    Args:
        database_url: SQLAlchemy URL, e.g. 'sqlite:///db/wasteland.db'
        engine: Pre-built engine (overrides database_url)
        initial_admin_code: Admin code written when map_state is first created
        path_generator: Road path function (defaults to generate_road_path)
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[Engine] = None,
        initial_admin_code: str = DEFAULT_ADMIN_CODE,
        path_generator: Optional[PathGenerator] = None,
    ):
        if engine is None:
            if not database_url:
                raise ValueError("SqlBackend requires a database_url or an engine")
            connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
            engine = create_engine(database_url, connect_args=connect_args)
        self.engine = engine
        _configure_sqlite(self.engine)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._initial_admin_code = initial_admin_code
        self._path_generator = path_generator
        logger.info(f"[DB] Using {self.engine.dialect.name} database")

    @property
    def backend_type(self) -> str:
        return "sql"

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        """Run a unit of work; SQLAlchemy failures become PersistenceError after rollback."""
        try:
            with self.Session.begin() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"[DB] Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    # --- Helpers ---

    @staticmethod
    def _require(session: Session, row_type, entity_id: str, kind: str):
        row = session.get(row_type, entity_id)
        if row is None:
            raise NotFoundError(kind, entity_id)
        return row

    @staticmethod
    def _apply(row, fields: dict) -> None:
        for key, value in fields.items():
            if key == "type" and value is not None:
                value = getattr(value, "value", value)
            setattr(row, key, value)

    def _compose(self, session: Session, location_rows: List[LocationRow]) -> List[LocationWithVendors]:
        if not location_rows:
            return []
        ids = [row.id for row in location_rows]
        vendor_rows = session.scalars(
            select(VendorRow).where(VendorRow.location_id.in_(ids)).order_by(VendorRow.name, VendorRow.id)
        ).all()
        by_location = {location_id: [] for location_id in ids}
        for vendor_row in vendor_rows:
            by_location[vendor_row.location_id].append(_vendor_from_row(vendor_row))
        return [
            LocationWithVendors.compose(_location_from_row(row), by_location[row.id])
            for row in location_rows
        ]

    def _load_locations(self, session: Session, published_only: bool) -> List[LocationWithVendors]:
        query = select(LocationRow).order_by(LocationRow.name, LocationRow.id)
        if published_only:
            query = query.where(LocationRow.is_published.is_(True))
        return self._compose(session, list(session.scalars(query).all()))

    def _load_roads(self, session: Session, published_only: bool) -> List[Road]:
        query = select(RoadRow).order_by(RoadRow.id)
        if published_only:
            query = query.where(RoadRow.is_published.is_(True))
        return [_road_from_row(row) for row in session.scalars(query).all()]

    def _ensure_map_state(self, session: Session) -> MapStateRow:
        row = session.get(MapStateRow, MAP_STATE_ID)
        if row is None:
            row = MapStateRow(id=MAP_STATE_ID, last_published_at=None, admin_code=self._initial_admin_code)
            session.add(row)
            session.flush()
            logger.info("[DB] Created map_state singleton")
        return row

    def _set_published(self, row_type, entity_id: str, kind: str, published: bool):
        with self._transaction(f"set {kind} {entity_id} published={published}") as session:
            row = self._require(session, row_type, entity_id, kind)
            row.is_published = published
            session.flush()
            return _location_from_row(row) if row_type is LocationRow else _road_from_row(row)

    # --- Locations ---

    def get_locations(self) -> List[LocationWithVendors]:
        with self._transaction("load locations") as session:
            return self._load_locations(session, published_only=False)

    def get_published_locations(self) -> List[LocationWithVendors]:
        with self._transaction("load published locations") as session:
            return self._load_locations(session, published_only=True)

    def get_location(self, location_id: str) -> Optional[LocationWithVendors]:
        with self._transaction(f"load location {location_id}") as session:
            row = session.get(LocationRow, location_id)
            if row is None:
                return None
            return self._compose(session, [row])[0]

    def create_location(self, data: LocationInput, location_id: Optional[str] = None) -> Location:
        location = build_location(data, location_id)
        with self._transaction("create location") as session:
            session.add(_location_row(location))
        logger.info(f"Created location {location.id} ({location.name})")
        return location

    def update_location(self, location_id: str, changes: LocationUpdate) -> Location:
        with self._transaction(f"update location {location_id}") as session:
            row = self._require(session, LocationRow, location_id, "location")
            self._apply(row, changes_of(changes))
            session.flush()
            return _location_from_row(row)

    def update_location_with_vendors(
        self, location_id: str, changes: LocationUpdate, vendors: List[VendorInput]
    ) -> LocationWithVendors:
        created = [build_vendor(location_id, data) for data in vendors]
        with self._transaction(f"replace location {location_id}") as session:
            row = self._require(session, LocationRow, location_id, "location")
            self._apply(row, changes_of(changes))
            session.execute(delete(VendorRow).where(VendorRow.location_id == location_id))
            session.add_all([_vendor_row(vendor) for vendor in created])
            session.flush()
            return self._compose(session, [row])[0]

    def delete_location(self, location_id: str) -> None:
        with self._transaction(f"delete location {location_id}") as session:
            self._require(session, LocationRow, location_id, "location")
            vendors = session.execute(delete(VendorRow).where(VendorRow.location_id == location_id))
            roads = session.execute(
                delete(RoadRow).where(
                    or_(RoadRow.from_location_id == location_id, RoadRow.to_location_id == location_id)
                )
            )
            session.execute(delete(LocationRow).where(LocationRow.id == location_id))
        logger.info(
            f"Deleted location {location_id} with {vendors.rowcount} vendors and {roads.rowcount} roads"
        )

    def publish_location(self, location_id: str) -> Location:
        return self._set_published(LocationRow, location_id, "location", True)

    def unpublish_location(self, location_id: str) -> Location:
        return self._set_published(LocationRow, location_id, "location", False)

    # --- Vendors ---

    def get_vendors_by_location(self, location_id: str) -> List[Vendor]:
        with self._transaction(f"load vendors of {location_id}") as session:
            rows = session.scalars(
                select(VendorRow).where(VendorRow.location_id == location_id).order_by(VendorRow.name, VendorRow.id)
            ).all()
            return [_vendor_from_row(row) for row in rows]

    def create_vendor(self, location_id: str, data: VendorInput) -> Vendor:
        vendor = build_vendor(location_id, data)
        with self._transaction("create vendor") as session:
            self._require(session, LocationRow, location_id, "location")
            session.add(_vendor_row(vendor))
        return vendor

    def update_vendor(self, vendor_id: str, changes: VendorUpdate) -> Vendor:
        with self._transaction(f"update vendor {vendor_id}") as session:
            row = self._require(session, VendorRow, vendor_id, "vendor")
            self._apply(row, changes_of(changes))
            session.flush()
            return _vendor_from_row(row)

    def delete_vendor(self, vendor_id: str) -> None:
        with self._transaction(f"delete vendor {vendor_id}") as session:
            row = self._require(session, VendorRow, vendor_id, "vendor")
            session.delete(row)

    def replace_vendors(self, location_id: str, vendors: List[VendorInput]) -> List[Vendor]:
        created = [build_vendor(location_id, data) for data in vendors]
        with self._transaction(f"replace vendors of {location_id}") as session:
            self._require(session, LocationRow, location_id, "location")
            session.execute(delete(VendorRow).where(VendorRow.location_id == location_id))
            session.add_all([_vendor_row(vendor) for vendor in created])
        return created

    # --- Roads ---

    def get_roads(self) -> List[Road]:
        with self._transaction("load roads") as session:
            return self._load_roads(session, published_only=False)

    def get_published_roads(self) -> List[Road]:
        with self._transaction("load published roads") as session:
            return self._load_roads(session, published_only=True)

    def get_road(self, road_id: str) -> Optional[Road]:
        with self._transaction(f"load road {road_id}") as session:
            row = session.get(RoadRow, road_id)
            return _road_from_row(row) if row is not None else None

    def _endpoints(self, session: Session, from_id: str, to_id: str):
        start = session.get(LocationRow, from_id)
        end = session.get(LocationRow, to_id)
        if start is None or end is None:
            raise missing_endpoints_error(
                None if start is not None else from_id,
                None if end is not None else to_id,
            )
        return start, end

    def create_road(self, data: RoadInput) -> Road:
        with self._transaction("create road") as session:
            start, end = self._endpoints(session, data.from_location_id, data.to_location_id)
            road = build_road(data, start, end, self._path_generator)
            session.add(_road_row(road))
        logger.info(f"Created road {road.id} ({road.from_location_id} -> {road.to_location_id})")
        return road

    def update_road(self, road_id: str, changes: RoadUpdate) -> Road:
        with self._transaction(f"update road {road_id}") as session:
            row = self._require(session, RoadRow, road_id, "road")
            fields = changes_of(changes)
            from_id = fields.get("from_location_id", row.from_location_id)
            to_id = fields.get("to_location_id", row.to_location_id)
            start, end = self._endpoints(session, from_id, to_id)
            endpoints_moved = (from_id, to_id) != (row.from_location_id, row.to_location_id)
            if endpoints_moved and "path_data" not in fields:
                fields["path_data"] = build_road(
                    RoadInput(from_location_id=from_id, to_location_id=to_id),
                    start, end, self._path_generator,
                ).path_data
            self._apply(row, fields)
            session.flush()
            return _road_from_row(row)

    def delete_road(self, road_id: str) -> None:
        with self._transaction(f"delete road {road_id}") as session:
            row = self._require(session, RoadRow, road_id, "road")
            session.delete(row)

    def publish_road(self, road_id: str) -> Road:
        return self._set_published(RoadRow, road_id, "road", True)

    def unpublish_road(self, road_id: str) -> Road:
        return self._set_published(RoadRow, road_id, "road", False)

    # --- Map State ---

    def get_map_data(self, published_only: bool = False) -> MapData:
        with self._transaction("load map data") as session:
            state = session.get(MapStateRow, MAP_STATE_ID)
            return MapData(
                locations=self._load_locations(session, published_only),
                roads=self._load_roads(session, published_only),
                last_published_at=_map_state_from_row(state).last_published_at if state else None,
            )

    def get_map_state(self) -> MapState:
        with self._transaction("load map state") as session:
            return _map_state_from_row(self._ensure_map_state(session))

    def update_admin_code(self, code: str) -> MapState:
        with self._transaction("update admin code") as session:
            row = self._ensure_map_state(session)
            row.admin_code = code
            session.flush()
            return _map_state_from_row(row)

    def publish_all(self, published_at: datetime) -> MapState:
        with self._transaction("publish all changes") as session:
            session.execute(update(LocationRow).values(is_published=True))
            session.execute(update(RoadRow).values(is_published=True))
            row = self._ensure_map_state(session)
            row.last_published_at = published_at.isoformat()
            session.flush()
            return _map_state_from_row(row)
