from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text, UniqueConstraint, func
from .database import Base


class Taruf(Base):
    __tablename__ = "tarufs"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    status = Column(Integer, nullable=False, default=1)
    event_date = Column(String(32), nullable=True)
    start_time = Column(String(32), nullable=True)
    end_time = Column(String(32), nullable=True)
    location_name = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(String(64), primary_key=True)
    taruf_id = Column(Integer, nullable=False, index=True)
    its_number = Column(String(32), nullable=False)
    name = Column(String(200), nullable=True)
    badge_no = Column(Integer, nullable=True)
    gender = Column(String(16), nullable=True)
    date_of_birth = Column(String(32), nullable=True)
    current_city = Column(String(120), nullable=True)
    photo1_url = Column(String(500), nullable=True)
    counsellor = Column(String(200), nullable=True)
    group_name = Column(String(64), nullable=True)
    password_hash = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("taruf_id", "its_number", name="uq_registration_taruf_its"),
    )


class Round1Selection(Base):
    __tablename__ = "round1_selected"

    id = Column(Integer, primary_key=True, autoincrement=True)
    taruf_id = Column(Integer, nullable=False)
    selector_registration_id = Column(String(64), nullable=False)
    selector_its = Column(String(32), nullable=True)
    selector_name = Column(String(200), nullable=True)
    selector_counsellor = Column(String(200), nullable=True)
    selected_registration_id = Column(String(64), nullable=False)
    selected_its = Column(String(32), nullable=True)
    selected_name = Column(String(200), nullable=True)
    selected_photo1url = Column(String(500), nullable=True)
    selected_date_of_birth = Column(String(32), nullable=True)
    first_choice = Column(String(32), nullable=True)
    room_no = Column(String(16), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("taruf_id", "selector_registration_id", "selected_registration_id", name="uq_round1_pair"),
        Index("idx_round1_selected_taruf", "taruf_id"),
    )


class Round2Selection(Base):
    __tablename__ = "round2_selected"

    id = Column(Integer, primary_key=True, autoincrement=True)
    taruf_id = Column(Integer, nullable=False)
    selector_registration_id = Column(String(64), nullable=False)
    selector_its = Column(String(32), nullable=True)
    selector_name = Column(String(200), nullable=True)
    selected_registration_id = Column(String(64), nullable=False)
    selected_its = Column(String(32), nullable=True)
    selected_name = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("taruf_id", "selector_registration_id", name="uq_round2_selector"),
    )


class Round1Slot(Base):
    __tablename__ = "round1_slot"

    id = Column(Integer, primary_key=True, autoincrement=True)
    taruf_id = Column(Integer, nullable=False)
    selector_registration_id = Column(String(64), nullable=False)
    selected_registration_id = Column(String(64), nullable=False)
    candidate_its = Column(String(32), nullable=True)
    slot = Column(Integer, nullable=False, default=0)
    room_no = Column(String(16), nullable=True)
    timings = Column(String(64), nullable=True)
    is_perfect_match = Column(Boolean, nullable=False, default=False)
    is_first_choice = Column(Boolean, nullable=False, default=False)
    admin_note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_round1_slot_taruf_slot", "taruf_id", "slot"),
    )


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=True)
    email = Column(String(254), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="admin")
    status = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AssignmentEvent(Base):
    __tablename__ = "assignment_event"

    id = Column(Integer, primary_key=True, autoincrement=True)
    taruf_id = Column(Integer, nullable=False, index=True)
    event_type = Column(String(64), nullable=False)
    actor_id = Column(String(64), nullable=True)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
