"""
Machine model.

Ids are strings: "1".."6" are the core machines seeded at startup
("5" Safety Cabinet, "6" Safety Course); admin-created machines take the
next free integer, never below 7.
"""

import enum

from sqlalchemy import Column, String, Boolean, Text, CheckConstraint

from learnit.db.base import Base, TimestampMixin


class MachineStatus(str, enum.Enum):
    AVAILABLE = "Available"
    MAINTENANCE = "Maintenance"
    IN_USE = "In Use"


class MachineType(str, enum.Enum):
    MACHINE = "Machine"
    SAFETY_CABINET = "Safety Cabinet"
    SAFETY_COURSE = "Safety Course"
    EQUIPMENT = "Equipment"


class Machine(Base, TimestampMixin):
    __tablename__ = "machines"

    id = Column(String(50), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, default=MachineType.MACHINE.value)
    description = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default=MachineStatus.AVAILABLE.value)
    maintenance_note = Column(String(1000), nullable=True)
    requires_certification = Column(Boolean, nullable=False, default=True)
    linked_course_id = Column(String(50), nullable=True)
    linked_quiz_id = Column(String(50), nullable=True)
    difficulty = Column(String(50), nullable=True)
    image_url = Column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('Available', 'Maintenance', 'In Use')",
            name="check_machine_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Machine(id={self.id}, name={self.name}, status={self.status})>"
