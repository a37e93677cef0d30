"""
Startup seeding of the core catalogue and the bootstrap administrator.

Only missing rows are inserted, so running this on every start is safe and
never overwrites admin edits to the core machines, courses or quizzes.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.config import get_settings
from learnit.core.logging import get_logger
from learnit.core.security import hash_password
from learnit.models.certification import Certification
from learnit.models.course import Course
from learnit.models.machine import Machine, MachineType
from learnit.models.quiz import Quiz
from learnit.models.user import User
from learnit.services.auth_service import find_user_by_email

logger = get_logger(__name__)

CORE_MACHINES = (
    {
        "id": "1",
        "name": "Laser Cutter",
        "type": MachineType.MACHINE.value,
        "description": "Precision laser cutting machine for detailed work on various materials.",
        "requires_certification": True,
        "difficulty": "Advanced",
    },
    {
        "id": "2",
        "name": "Ultimaker",
        "type": MachineType.MACHINE.value,
        "description": "FDM 3D printing for rapid prototyping and model creation.",
        "requires_certification": True,
        "difficulty": "Intermediate",
    },
    {
        "id": "3",
        "name": "X1 E Carbon 3D Printer",
        "type": MachineType.MACHINE.value,
        "description": "Carbon fiber 3D printer for high-strength parts.",
        "requires_certification": True,
        "difficulty": "Advanced",
    },
    {
        "id": "4",
        "name": "Bambu Lab X1 E",
        "type": MachineType.MACHINE.value,
        "description": "Next-generation 3D printing technology with advanced features.",
        "requires_certification": True,
        "difficulty": "Intermediate",
    },
    {
        "id": "5",
        "name": "Safety Cabinet",
        "type": MachineType.SAFETY_CABINET.value,
        "description": "Store hazardous materials safely.",
        "requires_certification": False,
        "difficulty": "Beginner",
    },
    {
        "id": "6",
        "name": "Safety Course",
        "type": MachineType.SAFETY_COURSE.value,
        "description": "Basic safety training for the makerspace.",
        "requires_certification": False,
        "difficulty": "Beginner",
    },
)

CORE_COURSES = (
    ("1", "Laser Cutter Training", "Learn how to safely operate the lab's laser cutter", "Equipment", "Intermediate"),
    ("2", "Ultimaker 3D Printer Training", "Learn how to use the Ultimaker 3D printer effectively", "Equipment", "Beginner"),
    ("3", "X1 E Carbon 3D Printer", "Advanced training for carbon fiber composite printing", "Equipment", "Advanced"),
    ("4", "Bambu Lab 3D Printer", "Learn to use the Bambu Lab printer for high-quality prints", "Equipment", "Intermediate"),
    ("5", "Safety Cabinet Usage", "Learn how to properly use and store materials in the safety cabinet", "Safety", "Beginner"),
    ("6", "Machine Safety Fundamentals", "Essential safety training required for all makerspace users", "Safety", "Beginner"),
)


def _q(question: str, options: list[str], correct_answer: int, explanation: str) -> dict:
    return {
        "question": question,
        "options": options,
        "correct_answer": correct_answer,
        "explanation": explanation,
    }


CORE_QUIZZES = {
    "1": ("Laser Cutter Quiz", "Equipment", [
        _q("What should you never leave unattended when operating?",
           ["The computer", "The laser cutter", "Your notebook", "Your phone"], 1,
           "Never leave the laser cutter unattended while it is operating to prevent fire hazards."),
        _q("What material should NEVER be cut in the laser cutter?",
           ["Wood", "Paper", "PVC", "Acrylic"], 2,
           "PVC releases toxic chlorine gas when cut and can damage the machine."),
        _q("What must be running before you start a cut?",
           ["The exhaust fan", "The room lights", "A timer on your phone", "Nothing"], 0,
           "Fumes must be extracted for the whole job."),
    ]),
    "2": ("Ultimaker 3D Printer Quiz", "Equipment", [
        _q("What is the first thing you should check before starting a print?",
           ["The color of the filament", "The bed leveling", "The print time", "The file name"], 1,
           "Always ensure the print bed is properly leveled before starting a print."),
        _q("What material is generally easiest to print with?",
           ["ABS", "Nylon", "PLA", "TPU"], 2,
           "PLA is the most forgiving material for 3D printing and has the widest temperature range."),
        _q("When is it safe to touch the nozzle?",
           ["Any time", "After it has cooled down", "While printing", "Right after a print ends"], 1,
           "The nozzle stays above 200 degrees for minutes after a print."),
    ]),
    "3": ("X1 E Carbon 3D Printer Quiz", "Equipment", [
        _q("What special property does carbon fiber filament have?",
           ["It's flexible", "It's stronger and stiffer", "It's transparent", "It's magnetic"], 1,
           "Carbon fiber filaments provide added strength and stiffness to printed parts."),
        _q("What type of nozzle is recommended for carbon fiber filaments?",
           ["Brass", "Stainless steel", "Hardened steel", "Any standard nozzle"], 2,
           "Hardened steel nozzles are required because carbon fiber filaments are highly abrasive."),
        _q("Why keep the enclosure closed during a print?",
           ["To hide the print", "To keep temperature stable and contain particles", "It is optional", "To save power"], 1,
           "The enclosure keeps the chamber warm and holds back fibre dust."),
    ]),
    "4": ("Bambu Lab 3D Printer Quiz", "Equipment", [
        _q("What is a unique feature of the Bambu Lab printer?",
           ["Water cooling", "High print speeds", "Built-in camera", "All of the above"], 3,
           "The Bambu Lab printer features all of these advanced capabilities."),
        _q("What should you check before starting a high-speed print?",
           ["That the printer is firmly placed on a stable surface", "That the filament is properly loaded",
            "That the print cooling fans are working", "All of the above"], 3,
           "All of these checks are important before starting a high-speed print."),
        _q("What do you do if the first layer does not stick?",
           ["Keep printing", "Stop the print and clean the plate", "Turn up the speed", "Leave"], 1,
           "A failed first layer only gets worse; stop and clean the build plate."),
    ]),
    "5": ("Safety Cabinet Quiz", "Safety", [
        _q("What should never be stored together?",
           ["Flammable and combustible materials", "Acids and bases", "Dry and wet materials", "New and old materials"], 1,
           "Acids and bases can react violently if mixed and should be stored separately."),
        _q("What information must be visible on all containers in the safety cabinet?",
           ["Purchase date", "Price", "Chemical name and hazards", "Manufacturer name"], 2,
           "All containers must be clearly labeled with the chemical name and hazard information."),
        _q("How should the cabinet doors be left?",
           ["Propped open", "Closed and latched", "Unlocked and ajar", "It does not matter"], 1,
           "The fire rating only holds with the doors closed."),
    ]),
    "6": ("Machine Safety Fundamentals Quiz", "Safety", [
        _q("What should you do first in case of a fire?",
           ["Call the instructor", "Try to put it out yourself", "Activate the fire alarm", "Save your project files"], 2,
           "Always activate the fire alarm first to alert everyone in the building."),
        _q("When should you wear safety glasses?",
           ["Only when working with wood", "Only when the instructor is watching",
            "Whenever operating machinery", "Only when working with metal"], 2,
           "Safety glasses should be worn any time you are operating or near operating machinery."),
        _q("What do you do with a machine that behaves unexpectedly?",
           ["Keep working", "Stop it and report it", "Fix it yourself", "Ignore it"], 1,
           "Stop the machine and tell staff so it can be marked for maintenance."),
    ]),
}


async def _existing_ids(db: AsyncSession, model) -> set[str]:
    result = await db.execute(select(model.id))
    return set(result.scalars().all())


async def seed_machines(db: AsyncSession) -> int:
    existing = await _existing_ids(db, Machine)
    added = 0
    for template in CORE_MACHINES:
        if template["id"] in existing:
            continue
        db.add(Machine(
            **template,
            linked_course_id=template["id"],
            linked_quiz_id=template["id"],
        ))
        added += 1
    return added


async def seed_courses(db: AsyncSession) -> int:
    existing = await _existing_ids(db, Course)
    added = 0
    for course_id, title, description, category, difficulty in CORE_COURSES:
        if course_id in existing:
            continue
        db.add(Course(
            id=course_id,
            title=title,
            description=description,
            category=category,
            content=f"{title}\n\n{description}.",
            related_machine_ids=[course_id],
            quiz_id=course_id,
            difficulty=difficulty,
        ))
        added += 1
    return added


async def seed_quizzes(db: AsyncSession) -> int:
    settings = get_settings()
    existing = await _existing_ids(db, Quiz)
    added = 0
    for quiz_id, (title, category, questions) in CORE_QUIZZES.items():
        if quiz_id in existing:
            continue
        db.add(Quiz(
            id=quiz_id,
            title=title,
            description=f"Test your knowledge before using: {title.removesuffix(' Quiz')}",
            category=category,
            questions=questions,
            passing_score=settings.QUIZ_PASSING_SCORE,
            related_machine_ids=[quiz_id],
            related_course_id=quiz_id,
        ))
        added += 1
    return added


async def seed_admin(db: AsyncSession) -> User:
    """Create the bootstrap admin if absent and make sure it holds every core certification."""
    settings = get_settings()
    email = settings.ADMIN_EMAIL.lower()

    admin = await find_user_by_email(db, email)
    if admin is None:
        admin = User(
            name="Admin User",
            email=email,
            hashed_password=hash_password(settings.ADMIN_PASSWORD),
            is_admin=True,
        )
        db.add(admin)
        await db.flush()
        logger.info("admin_seeded", user_id=admin.id, email=email)

    held = await db.execute(
        select(Certification.machine_id).where(Certification.user_id == admin.id)
    )
    held_ids = set(held.scalars().all())
    for template in CORE_MACHINES:
        if template["id"] not in held_ids:
            db.add(Certification(user_id=admin.id, machine_id=template["id"]))
    return admin


async def seed_defaults(db: AsyncSession) -> None:
    machines = await seed_machines(db)
    courses = await seed_courses(db)
    quizzes = await seed_quizzes(db)
    # Certifications reference machines
    await db.flush()
    await seed_admin(db)
    await db.flush()

    logger.info("seed_complete", machines=machines, courses=courses, quizzes=quizzes)
