# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from datetime import datetime, time, timedelta, timezone
from fastapi.testclient import TestClient
from unittest.mock import Mock
from typing import Generator, Optional

from main import create_app
from dependencies.auth import CurrentUser, get_current_user
from dependencies.services import get_approval_service
from models.enums import RoomType, UserRole
from models.equipment import Equipment
from models.profile import Actor
from models.room import RoomRead
from models.school_class import ClassRead
from services.approvals import ApprovalService
from services.inventory import InventoryAdjuster


NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


# ------------------------------------------------------------------
# In-memory storage (same interface as the Supabase implementations)
# ------------------------------------------------------------------
class InMemoryRequestStore:

    def __init__(self):
        self.rows = {}

    def fetch_request(self, request_id):
        return self.rows.get(request_id)

    def persist_request(self, request, expected_status=None):
        if expected_status is None:
            self.rows[request.id] = request
            return True
        current = self.rows.get(request.id)
        if current is None or current.status != expected_status:
            return False
        self.rows[request.id] = request
        return True

    def list_all(self):
        return sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True)

    def list_by_status(self, status):
        return [r for r in self.list_all() if r.status == status]

    def list_by_user(self, user_id):
        return [r for r in self.list_all() if r.user_id == user_id]


class InMemoryEquipmentRepository:

    def __init__(self, *items: Equipment):
        self.items = {item.id: item for item in items}
        self.lost_writes = 0  # number of upcoming writes that lose a race
        self.writes = 0

    def fetch_equipment(self, equipment_id) -> Optional[Equipment]:
        return self.items.get(equipment_id)

    def persist_equipment(self, equipment, expected_available):
        self.writes += 1
        if self.lost_writes:
            self.lost_writes -= 1
            return False
        current = self.items.get(equipment.id)
        if current is None or current.available_quantity != expected_available:
            return False
        self.items[equipment.id] = equipment
        return True


class InMemoryCatalog:

    def __init__(self, rooms=(), classes=()):
        self.rooms = {room.id: room for room in rooms}
        self.classes = {c.id: c for c in classes}

    def fetch_room(self, room_id):
        return self.rooms.get(room_id)

    def fetch_class(self, class_id):
        return self.classes.get(class_id)


# ------------------------------------------------------------------
# Seed data
# ------------------------------------------------------------------
@pytest.fixture
def equipment_repository():
    return InMemoryEquipmentRepository(
        Equipment(id="eq-projector", name="Projector", category="av", total_quantity=10, available_quantity=10),
        Equipment(id="eq-laptop", name="Laptop", category="it", total_quantity=3, available_quantity=1),
    )


@pytest.fixture
def catalog():
    return InMemoryCatalog(
        rooms=[
            RoomRead(id="room-101", name="Lab 101", type=RoomType.classroom, capacity=30, is_available=True),
            RoomRead(id="room-closed", name="Range B", type=RoomType.weapons_room, capacity=12, is_available=False),
        ],
        classes=[
            ClassRead(id="class-a", name="Cohort A", department_id="dept-1", student_count=24),
        ],
    )


@pytest.fixture
def request_store():
    return InMemoryRequestStore()


@pytest.fixture
def inventory(equipment_repository):
    return InventoryAdjuster(equipment_repository, max_attempts=3)


@pytest.fixture
def service(request_store, inventory, catalog):
    return ApprovalService(request_store, inventory, catalog, clock=lambda: NOW)


@pytest.fixture
def today():
    return TODAY


# ------------------------------------------------------------------
# Actors
# ------------------------------------------------------------------
@pytest.fixture
def teacher():
    return Actor(user_id="teacher-1", user_name="Ada Teacher", role=UserRole.teacher)


@pytest.fixture
def other_teacher():
    return Actor(user_id="teacher-2", user_name="Bo Teacher", role=UserRole.teacher)


@pytest.fixture
def admin():
    return Actor(user_id="admin-1", user_name="Cy Admin", role=UserRole.admin)


@pytest.fixture
def supervisor():
    return Actor(user_id="super-1", user_name="Di Supervisor", role=UserRole.supervisor)


# ------------------------------------------------------------------
# Submissions
# ------------------------------------------------------------------
@pytest.fixture
def equipment_payload():
    return {
        "type": "equipment",
        "equipment_id": "eq-projector",
        "quantity": 5,
        "class_id": "class-a",
        "date": (TODAY + timedelta(days=2)).isoformat(),
        "notes": "Exam week",
        "signature": "data:image/png;base64,AAAA",
    }


@pytest.fixture
def room_payload():
    return {
        "type": "room",
        "room_id": "room-101",
        "start_time": time(10, 0).isoformat(),
        "end_time": time(12, 0).isoformat(),
        "class_id": "class-a",
        "date": TODAY.isoformat(),
        "signature": "data:image/png;base64,AAAA",
    }


# ------------------------------------------------------------------
# FastAPI app + client
# ------------------------------------------------------------------
@pytest.fixture(scope="function")
def app(service):
    """Test app whose workflow routes run against the in-memory service."""
    application = create_app()
    application.dependency_overrides[get_approval_service] = lambda: service
    yield application
    application.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(app):
    """login("admin") makes every following call authenticate as that role."""

    def _login(role: str, user_id: Optional[str] = None) -> CurrentUser:
        user = CurrentUser(
            id=user_id or f"{role}-1",
            email=f"{role}@example.edu",
            role=role,
            full_name=f"Test {role.title()}",
        )
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _login


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = Mock()
    mock_table = Mock()
    mock_client.table.return_value = mock_table
    return mock_client
