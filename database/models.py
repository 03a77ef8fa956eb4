"""
Database Models for the trivia backend.

Contains all SQLAlchemy model definitions for the game.
Pure data models with no business logic.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime, JSON, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship, declarative_base

# Create the base class for models
Base = declarative_base()

def _new_id() -> str:
    return str(uuid.uuid4())

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _isoformat(value):
    return value.isoformat() if value else None

class Question(Base):
    """A trivia question authored by the admin."""

    __tablename__ = 'questions'

    id = Column(String(36), primary_key=True, default=_new_id)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False, default='freeform')  # freeform, multiple_choice
    options = Column(JSON, nullable=True)  # Only for multiple_choice
    correct_answer = Column(Text, nullable=True)  # Null until revealed
    points = Column(Integer, nullable=False, default=10)

    # State flags
    is_active = Column(Boolean, nullable=False, default=True)
    is_revealed = Column(Boolean, nullable=False, default=False)
    question_order = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    answers = relationship('Answer', back_populates='question', cascade='all, delete-orphan',
                           passive_deletes=True)

    # Indexes
    __table_args__ = (
        Index('idx_question_active_order', 'is_active', 'question_order'),
        Index('idx_question_revealed_order', 'is_revealed', 'question_order'),
    )

    def __repr__(self):
        return f"<Question(order={self.question_order}, revealed={self.is_revealed})>"

    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'question_text': self.question_text,
            'question_type': self.question_type,
            'options': list(self.options) if self.options is not None else None,
            'correct_answer': self.correct_answer,
            'points': self.points,
            'is_active': self.is_active,
            'is_revealed': self.is_revealed,
            'question_order': self.question_order,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at)
        }

class Player(Base):
    """A player who joined the game."""

    __tablename__ = 'players'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    join_code = Column(String(20), unique=True, nullable=False, index=True)
    total_score = Column(Integer, nullable=False, default=0)  # Written by the scoring engine only

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    # Relationships
    answers = relationship('Answer', back_populates='player', cascade='all, delete-orphan',
                           passive_deletes=True)

    # Indexes
    __table_args__ = (
        Index('idx_player_score', 'total_score', 'created_at'),
    )

    def __repr__(self):
        return f"<Player(name='{self.name}', total_score={self.total_score})>"

    def to_dict(self, include_join_code: bool = True):
        """Convert to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'name': self.name,
            'total_score': self.total_score,
            'created_at': _isoformat(self.created_at)
        }
        # Join codes double as credentials; keep them off public views
        if include_join_code:
            data['join_code'] = self.join_code
        return data

class Answer(Base):
    """A player's answer to a question. One row per (player, question)."""

    __tablename__ = 'answers'

    id = Column(String(36), primary_key=True, default=_new_id)
    answer_text = Column(Text, nullable=False)

    # Grading
    is_correct = Column(Boolean, nullable=True)  # Null until evaluated
    points_earned = Column(Integer, nullable=False, default=0)

    # Timestamps
    submitted_at = Column(DateTime(timezone=True), default=_utcnow)

    # Foreign keys
    player_id = Column(String(36), ForeignKey('players.id', ondelete='CASCADE'), nullable=False)
    question_id = Column(String(36), ForeignKey('questions.id', ondelete='CASCADE'), nullable=False)

    # Relationships
    player = relationship('Player', back_populates='answers')
    question = relationship('Question', back_populates='answers')

    # Indexes
    __table_args__ = (
        UniqueConstraint('player_id', 'question_id', name='uq_answer_player_question'),
        Index('idx_answer_question', 'question_id'),
        Index('idx_answer_player', 'player_id'),
    )

    def __repr__(self):
        return f"<Answer(player_id='{self.player_id}', is_correct={self.is_correct})>"

    def to_dict(self, include_player: bool = False):
        """Convert to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'player_id': self.player_id,
            'question_id': self.question_id,
            'answer_text': self.answer_text,
            'is_correct': self.is_correct,
            'points_earned': self.points_earned,
            'submitted_at': _isoformat(self.submitted_at)
        }
        if include_player:
            data['player'] = self.player.to_dict() if self.player else None
        return data

class GameSetting(Base):
    """Key/value configuration consumed by the join and admin login flows."""

    __tablename__ = 'game_settings'

    id = Column(String(36), primary_key=True, default=_new_id)
    setting_key = Column(String(50), unique=True, nullable=False, index=True)
    setting_value = Column(Text, nullable=False)

    def __repr__(self):
        return f"<GameSetting(key='{self.setting_key}')>"
