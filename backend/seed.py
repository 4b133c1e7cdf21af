import asyncio
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from golf_league.config import LEAGUE_FORMAT
from golf_league.db import get_database_url
from golf_league.models import Team
from golf_league.services.rosters import default_team_names
from golf_league.time_utils import utcnow

logger = logging.getLogger("seed")


async def main():
    engine = create_async_engine(get_database_url(), echo=False, pool_pre_ping=True)
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with Session() as s:
        existing = {
            name.lower()
            for name in (await s.execute(select(Team.name))).scalars().all()
        }
        created = 0
        for name in default_team_names(LEAGUE_FORMAT.team_count):
            if name.lower() not in existing:
                s.add(Team(id=uuid.uuid4().hex, name=name, created_at=utcnow()))
                created += 1
        await s.commit()
        logger.info("Seeded %d teams", created)

    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
