"""
String id allocation for machines, courses and quizzes.

Core content uses small numeric ids ("1".."6"). New records take the
highest numeric id + 1, never below the reserved floor.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

RESERVED_ID_FLOOR = 7


async def next_numeric_id(db: AsyncSession, model, floor: int = RESERVED_ID_FLOOR) -> str:
    result = await db.execute(select(model.id))
    numeric = [int(value) for value in result.scalars().all() if str(value).isdigit()]
    highest = max(numeric, default=floor - 1)
    return str(max(highest + 1, floor))
