from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from bracket_bot.config import Config
from bracket_bot.constants import TournamentStatusConstants

Base = declarative_base()

class Tournament(Base):
    __tablename__ = 'tournaments'

    id = Column(String(64), primary_key=True)  # Opaque id from the organizer
    name = Column(String(200), nullable=False)
    game_type = Column(String(100))
    venue = Column(String(200))

    # Lowercase status string as reported to the dashboard
    status = Column(String(30), nullable=False, default=TournamentStatusConstants.DEFAULT_STATUS)
    start_date = Column(DateTime)
    started_at = Column(DateTime)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    # Relationships
    players = relationship("TournamentPlayer", back_populates="tournament", order_by="TournamentPlayer.id")
    rounds = relationship("TournamentRound", back_populates="tournament", order_by="TournamentRound.round_number")

    def __repr__(self):
        return f"<Tournament(id='{self.id}', name='{self.name}', status='{self.status}')>"

class TournamentPlayer(Base):
    __tablename__ = 'tournament_players'

    id = Column(Integer, primary_key=True)
    tournament_id = Column(String(64), ForeignKey('tournaments.id'), nullable=False, index=True)

    # Registration details
    name = Column(String(100), nullable=False)
    email = Column(String(200))  # Unique per tournament when given
    skill_level = Column(String(30), default=Config.DEFAULT_SKILL_LEVEL)
    profile_pic = Column(String(500))

    registered_at = Column(DateTime, default=func.now())

    # Relationships
    tournament = relationship("Tournament", back_populates="players")

    __table_args__ = (
        UniqueConstraint('tournament_id', 'email', name='uq_tournament_player_email'),
    )

    def __repr__(self):
        return f"<TournamentPlayer(id={self.id}, name='{self.name}', tournament='{self.tournament_id}')>"

class TournamentRound(Base):
    __tablename__ = 'tournament_rounds'

    id = Column(Integer, primary_key=True)
    tournament_id = Column(String(64), ForeignKey('tournaments.id'), nullable=False, index=True)

    round_number = Column(Integer, nullable=False)
    round_name = Column(String(50), nullable=False)     # Slot label, e.g. "Round 3"
    display_name = Column(String(100), nullable=False)  # Organizer label, e.g. "Third Round"
    status = Column(String(20), nullable=False, default='pending')
    is_frozen = Column(Boolean, default=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    tournament = relationship("Tournament", back_populates="rounds")

    __table_args__ = (
        UniqueConstraint('tournament_id', 'round_number', name='uq_tournament_round_number'),
    )

    def __repr__(self):
        return f"<TournamentRound(tournament='{self.tournament_id}', number={self.round_number}, display_name='{self.display_name}')>"
