from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from bracket_bot.config import Config
from bracket_bot.constants import TournamentStatusConstants
from bracket_bot.data_models.bracket import Player
from bracket_bot.database.models import Base, Tournament, TournamentPlayer, TournamentRound
from bracket_bot.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = None
        self.async_session = None

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        # Convert sqlite URL to async if needed
        database_url = self.database_url
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')

        engine_kwargs = {'echo': Config.DEBUG, 'future': True}
        if ':memory:' in database_url:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs['poolclass'] = StaticPool
        self.engine = create_async_engine(database_url, **engine_kwargs)

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Create all tables
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context are committed together on success,
        or rolled back together on failure. Exceptions must be allowed to
        propagate out of the context for rollback to occur.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Tournament operations
    async def create_tournament(self, tournament_id: str, name: str, game_type: str = None,
                                venue: str = None, status: str = None,
                                start_date: datetime = None) -> Tournament:
        """Create a new tournament"""
        async with self.get_session() as session:
            tournament = Tournament(
                id=tournament_id,
                name=name,
                game_type=game_type,
                venue=venue,
                status=(status or TournamentStatusConstants.DEFAULT_STATUS).lower(),
                start_date=start_date
            )
            session.add(tournament)
            await session.commit()
            await session.refresh(tournament)
            self.logger.info(f"Created tournament {tournament_id} ('{name}')")
            return tournament

    async def get_tournament(self, tournament_id: str) -> Optional[Tournament]:
        """Get a tournament by id"""
        async with self.get_session() as session:
            result = await session.execute(
                select(Tournament).where(Tournament.id == tournament_id)
            )
            return result.scalar_one_or_none()

    async def start_tournament(self, tournament_id: str) -> Optional[str]:
        """Mark a tournament as started and return its new status.

        Returns None when the tournament does not exist.
        """
        async with self.transaction() as session:
            tournament = await session.get(Tournament, tournament_id)
            if not tournament:
                return None
            if tournament.status != TournamentStatusConstants.STARTED:
                tournament.status = TournamentStatusConstants.STARTED
                tournament.started_at = func.now()
                self.logger.info(f"Tournament {tournament_id} started")
            return tournament.status

    # Player operations
    async def register_player(self, tournament_id: str, name: str, email: str = None,
                              skill_level: str = None, profile_pic: str = None) -> TournamentPlayer:
        """Register a player for a tournament"""
        async with self.get_session() as session:
            registration = TournamentPlayer(
                tournament_id=tournament_id,
                name=name,
                email=email,
                skill_level=skill_level or Config.DEFAULT_SKILL_LEVEL,
                profile_pic=profile_pic
            )
            session.add(registration)
            await session.commit()
            await session.refresh(registration)
            return registration

    async def get_tournament_players(self, tournament_id: str) -> List[Player]:
        """Get the registered players of a tournament as fresh bracket players"""
        async with self.get_session() as session:
            result = await session.execute(
                select(TournamentPlayer)
                .where(TournamentPlayer.tournament_id == tournament_id)
                .order_by(TournamentPlayer.id)
            )
            return [
                Player(
                    id=f"player_{row.id}",
                    name=row.name,
                    email=row.email or '',
                    skill=row.skill_level or Config.DEFAULT_SKILL_LEVEL,
                    profile_pic=row.profile_pic or Config.DEFAULT_PROFILE_PIC
                )
                for row in result.scalars().all()
            ]

    # Round operations
    async def create_round(self, tournament_id: str, round_meta: Dict[str, Any]) -> TournamentRound:
        """Store round metadata, replacing an earlier round in the same slot"""
        async with self.transaction() as session:
            result = await session.execute(
                select(TournamentRound).where(
                    TournamentRound.tournament_id == tournament_id,
                    TournamentRound.round_number == round_meta['round_number']
                )
            )
            round_row = result.scalar_one_or_none()
            if round_row is None:
                round_row = TournamentRound(
                    tournament_id=tournament_id,
                    round_number=round_meta['round_number']
                )
                session.add(round_row)

            round_row.round_name = round_meta['round_name']
            round_row.display_name = round_meta['display_name']
            round_row.status = round_meta.get('status', 'pending')
            round_row.is_frozen = round_meta.get('is_frozen', False)
            await session.flush()
            self.logger.info(
                f"Stored round {round_row.round_number} ('{round_row.display_name}') for tournament {tournament_id}"
            )
            return round_row

    async def get_rounds(self, tournament_id: str) -> List[TournamentRound]:
        async with self.get_session() as session:
            result = await session.execute(
                select(TournamentRound)
                .where(TournamentRound.tournament_id == tournament_id)
                .order_by(TournamentRound.round_number)
            )
            return list(result.scalars().all())

    async def update_round_status(self, tournament_id: str, round_number: int, status: str,
                                  is_frozen: Optional[bool] = None) -> bool:
        """Update a stored round's status. Returns False if the round is unknown."""
        async with self.transaction() as session:
            result = await session.execute(
                select(TournamentRound).where(
                    TournamentRound.tournament_id == tournament_id,
                    TournamentRound.round_number == round_number
                )
            )
            round_row = result.scalar_one_or_none()
            if round_row is None:
                return False
            round_row.status = status
            if is_frozen is not None:
                round_row.is_frozen = is_frozen
            return True

    async def delete_round(self, tournament_id: str, round_number: int) -> bool:
        async with self.transaction() as session:
            result = await session.execute(
                delete(TournamentRound).where(
                    TournamentRound.tournament_id == tournament_id,
                    TournamentRound.round_number == round_number
                )
            )
            return result.rowcount > 0
