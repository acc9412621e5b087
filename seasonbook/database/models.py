"""SQLAlchemy database models for the athlete season journal.

This file defines the schema for the season lifecycle and statistics engine
using SQLAlchemy ORM (Object-Relational Mapping).

For beginners:

SQLAlchemy ORM: A Python toolkit that lets you work with databases using Python classes
instead of raw SQL. Each class represents a database table, and instances represent rows.

Model Categories:
1. Ownership: Athlete (the root of everything), Season (an organizational period)
2. Activity records: Game, Practice, VideoClip, Tournament
3. Statistics: GameStatistics (per game), AthleteStatistics (all-time, one per athlete),
   SeasonStatistics (snapshot taken when a season is archived)

Relationship Layout:
- Athlete -> Season is a plain one-to-many keyed by seasons.athlete_id.
- Athlete -> activity records is stored twice:
    * the back-reference: games.athlete_id (and the same column on the other kinds)
    * the forward collection: the athlete_games association table (and friends)
  The two sides are written independently, so they can drift apart. The
  consistency repair service (seasonbook.repair) detects and heals that drift.
- Activity record -> Season is a single nullable foreign key (season_id). It is a
  weak link: deleting a season must never delete the records, only unlink them.

Invariant enforced at the database level:
- At most one active season per athlete, through a partial unique index on
  seasons(athlete_id) WHERE is_active.
"""

from sqlalchemy import Boolean  # True/False values (is_active, is_complete)
from sqlalchemy import Column  # Defines table columns with types and constraints
from sqlalchemy import DateTime  # Full timestamp values (start_date, created_at)
from sqlalchemy import Float  # Derived rates (batting average, OBP, SLG)
from sqlalchemy import ForeignKey  # References to other tables' primary keys
from sqlalchemy import Index  # Database indexes for query performance
from sqlalchemy import Integer  # Whole numbers (id, at-bats, hits)
from sqlalchemy import String  # Text fields with length limits (name, sport)
from sqlalchemy import Table  # Association tables for forward collections
from sqlalchemy import Text  # Free-text notes
from sqlalchemy import text  # Raw SQL fragments for partial index predicates
from sqlalchemy.orm import declarative_base  # Base class for all models
from sqlalchemy.orm import declared_attr  # Per-class columns defined on mixins
from sqlalchemy.orm import relationship  # Defines how tables are related
from sqlalchemy.sql import func  # SQL functions like now()

# Base class for all database models
Base = declarative_base()

# Counting fields shared by every statistics table, in display order
COUNT_FIELDS = (
    "at_bats",
    "hits",
    "singles",
    "doubles",
    "triples",
    "home_runs",
    "runs",
    "rbis",
    "walks",
    "strikeouts",
)

# Extra counters that only exist on aggregate (athlete/season) statistics
AGGREGATE_ONLY_FIELDS = ("ground_outs", "fly_outs", "total_games")

RATE_FIELDS = ("batting_average", "on_base_percentage", "slugging_percentage", "ops")


def _forward_table(name: str, record_table: str) -> Table:
    """Build the association table behind one of Athlete's forward collections."""
    return Table(
        name,
        Base.metadata,
        Column("athlete_id", Integer, ForeignKey("athletes.id"), primary_key=True),
        Column("record_id", Integer, ForeignKey(f"{record_table}.id"), primary_key=True),
    )


athlete_games = _forward_table("athlete_games", "games")
athlete_practices = _forward_table("athlete_practices", "practices")
athlete_video_clips = _forward_table("athlete_video_clips", "video_clips")
athlete_tournaments = _forward_table("athlete_tournaments", "tournaments")


class Athlete(Base):
    """Athlete model, the root entity that owns all tracked activity.

    An athlete owns its seasons, its activity records and exactly one
    AthleteStatistics row (created lazily on first aggregation).

    Design Decisions:
    - Forward collections (games, practices, video_clips, tournaments) live in
      association tables, independent of each record's athlete_id.
    - seasons_migrated_at marks that the one-off season inference has finished
      for this athlete, so it is never run twice.

    For beginners:

    relationship(secondary=...): A many-to-many style link that goes through
    a separate table. Here it is used for a one-to-many list that is stored
    separately from the child's own foreign key.
    """

    __tablename__ = "athletes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)

    # Set once season inference has run to completion for this athlete
    seasons_migrated_at = Column(DateTime, nullable=True)

    seasons = relationship("Season", back_populates="athlete", order_by="Season.start_date")

    # Forward collections, stored apart from each record's athlete_id
    games = relationship(
        "Game", secondary=athlete_games, back_populates="listed_by", order_by="Game.id"
    )
    practices = relationship(
        "Practice", secondary=athlete_practices, back_populates="listed_by", order_by="Practice.id"
    )
    video_clips = relationship(
        "VideoClip",
        secondary=athlete_video_clips,
        back_populates="listed_by",
        order_by="VideoClip.id",
    )
    tournaments = relationship(
        "Tournament",
        secondary=athlete_tournaments,
        back_populates="listed_by",
        order_by="Tournament.id",
    )

    statistics = relationship(
        "AthleteStatistics", back_populates="athlete", uselist=False, cascade="all, delete-orphan"
    )

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    @property
    def active_season(self) -> "Season | None":
        """The athlete's active season, or None between archive and activation."""
        for season in self.seasons:
            if season.is_active:
                return season
        return None

    def __repr__(self) -> str:
        return f"<Athlete id={self.id} name={self.name!r}>"


class Season(Base):
    """Season model, a bounded organizational period for one athlete.

    Lifecycle:
        created -> active -> archived -> (optionally) reactivated -> archived ...

    - is_active is True for at most one season per athlete.
    - end_date is None while active and set when archived.
    - statistics holds the SeasonStatistics snapshot written by the latest
      archive; reactivating and archiving again overwrites it.
    - inferred marks seasons created by the migration engine rather than by
      the user; it lets an interrupted migration resume.

    Records link to a season through their own season_id column, so
    season.games, season.practices etc. are always consistent with the records.
    """

    __tablename__ = "seasons"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id"), nullable=False, index=True)

    name = Column(String(100), nullable=False)  # "Spring 2026"
    sport = Column(String(20), nullable=False, default="baseball")  # "baseball" or "softball"
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)  # None while active
    is_active = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=False, default="")
    inferred = Column(Boolean, nullable=False, default=False)  # Created by migration

    athlete = relationship("Athlete", back_populates="seasons")

    # Weak links: deleting a season nulls season_id on these, never deletes them
    games = relationship("Game", back_populates="season", order_by="Game.date")
    practices = relationship("Practice", back_populates="season", order_by="Practice.date")
    video_clips = relationship("VideoClip", back_populates="season", order_by="VideoClip.date")
    tournaments = relationship("Tournament", back_populates="season", order_by="Tournament.date")

    statistics = relationship(
        "SeasonStatistics", back_populates="season", uselist=False, cascade="all, delete-orphan"
    )

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        # At most one active season per athlete
        Index(
            "uq_season_one_active_per_athlete",
            "athlete_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index("idx_season_athlete_name", "athlete_id", "name"),
    )

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def is_archived(self) -> bool:
        return not self.is_active

    @property
    def total_games(self) -> int:
        """Number of completed games linked to this season."""
        return sum(1 for game in self.games if game.is_complete)

    @property
    def highlights(self) -> list["VideoClip"]:
        return [clip for clip in self.video_clips if clip.is_highlight]

    def __repr__(self) -> str:
        return f"<Season id={self.id} name={self.name!r} active={self.is_active}>"


class LeafRecordMixin:
    """Columns and relationships shared by every activity record kind.

    Each kind sets __forward_table__ (its association table on Athlete) and
    __season_collection__ (the matching list attribute on Season).
    """

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime, nullable=True, index=True)  # When the activity happened
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    @declared_attr
    def athlete_id(cls):
        # Back-reference to the owning athlete
        return Column(Integer, ForeignKey("athletes.id"), nullable=True, index=True)

    @declared_attr
    def season_id(cls):
        return Column(Integer, ForeignKey("seasons.id"), nullable=True, index=True)

    @declared_attr
    def athlete(cls):
        return relationship("Athlete")

    @declared_attr
    def season(cls):
        return relationship("Season", back_populates=cls.__season_collection__)

    @declared_attr
    def listed_by(cls):
        # Athletes whose forward collection contains this record (normally exactly one)
        return relationship(
            "Athlete", secondary=cls.__forward_table__, back_populates=cls.__tablename__
        )


class Tournament(LeafRecordMixin, Base):
    """A tournament the athlete played in; games can be grouped under it."""

    __tablename__ = "tournaments"
    __forward_table__ = athlete_tournaments
    __season_collection__ = "tournaments"

    name = Column(String(100), nullable=False, default="")
    location = Column(String(100), nullable=False, default="")
    info = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=False)

    games = relationship("Game", back_populates="tournament")


class Game(LeafRecordMixin, Base):
    """A single game for one athlete.

    Game Lifecycle:
    - created (optionally live) -> live -> ended (is_complete = True)
    - Ending a game folds its GameStatistics into the athlete's cumulative
      statistics exactly once. aggregated_at records that the fold happened,
      which is what makes a repeated "game ended" event harmless.
    """

    __tablename__ = "games"
    __forward_table__ = athlete_games
    __season_collection__ = "games"

    opponent = Column(String(100), nullable=False, default="")
    is_live = Column(Boolean, nullable=False, default=False)
    is_complete = Column(Boolean, nullable=False, default=False)
    aggregated_at = Column(DateTime, nullable=True)  # Set when folded into cumulative stats

    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=True, index=True)
    tournament = relationship("Tournament", back_populates="games")

    statistics = relationship(
        "GameStatistics", back_populates="game", uselist=False, cascade="all, delete-orphan"
    )
    video_clips = relationship("VideoClip", back_populates="game")

    __table_args__ = (Index("idx_game_athlete_date", "athlete_id", "date"),)


class Practice(LeafRecordMixin, Base):
    """A practice session."""

    __tablename__ = "practices"
    __forward_table__ = athlete_practices
    __season_collection__ = "practices"

    notes = Column(Text, nullable=False, default="")

    video_clips = relationship("VideoClip", back_populates="practice")


class VideoClip(LeafRecordMixin, Base):
    """A recorded or imported video clip.

    The file itself is handled outside this package; only the metadata that
    matters for seasons and statistics is stored here. play_result holds a
    PlayResultType value (see seasonbook.stats.play_results) when the clip was
    tagged with the outcome of an at-bat.
    """

    __tablename__ = "video_clips"
    __forward_table__ = athlete_video_clips
    __season_collection__ = "video_clips"

    file_name = Column(String(255), nullable=False, default="")
    is_highlight = Column(Boolean, nullable=False, default=False)
    play_result = Column(String(20), nullable=True)

    game_id = Column(Integer, ForeignKey("games.id"), nullable=True, index=True)
    practice_id = Column(Integer, ForeignKey("practices.id"), nullable=True, index=True)
    game = relationship("Game", back_populates="video_clips")
    practice = relationship("Practice", back_populates="video_clips")


class BattingCountsMixin:
    """Counting columns shared by all statistics tables.

    Python-side defaults only apply on INSERT, so the constructor fills in
    zeros; aggregation can then add to a freshly created row before flush.
    """

    at_bats = Column(Integer, nullable=False, default=0)
    hits = Column(Integer, nullable=False, default=0)
    singles = Column(Integer, nullable=False, default=0)
    doubles = Column(Integer, nullable=False, default=0)
    triples = Column(Integer, nullable=False, default=0)
    home_runs = Column(Integer, nullable=False, default=0)
    runs = Column(Integer, nullable=False, default=0)
    rbis = Column(Integer, nullable=False, default=0)
    walks = Column(Integer, nullable=False, default=0)
    strikeouts = Column(Integer, nullable=False, default=0)

    _zero_fields = COUNT_FIELDS

    def __init__(self, **kwargs):
        for field in self._zero_fields:
            kwargs.setdefault(field, 0)
        super().__init__(**kwargs)

    @property
    def total_bases(self) -> int:
        return self.singles + 2 * self.doubles + 3 * self.triples + 4 * self.home_runs


class AggregateStatsMixin(BattingCountsMixin):
    """Counters and stored rates for roll-ups over many games."""

    ground_outs = Column(Integer, nullable=False, default=0)
    fly_outs = Column(Integer, nullable=False, default=0)
    total_games = Column(Integer, nullable=False, default=0)

    # Derived rates, recomputed by the aggregator whenever counts change
    batting_average = Column(Float, nullable=False, default=0.0)
    on_base_percentage = Column(Float, nullable=False, default=0.0)
    slugging_percentage = Column(Float, nullable=False, default=0.0)
    ops = Column(Float, nullable=False, default=0.0)

    _zero_fields = COUNT_FIELDS + AGGREGATE_ONLY_FIELDS + RATE_FIELDS


class GameStatistics(BattingCountsMixin, Base):
    """Batting line for one game."""

    __tablename__ = "game_statistics"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False, unique=True)
    game = relationship("Game", back_populates="statistics")

    created_at = Column(DateTime, default=func.now())


class AthleteStatistics(AggregateStatsMixin, Base):
    """All-time cumulative statistics, one row per athlete.

    Every completed game is folded in exactly once (see Game.aggregated_at).
    """

    __tablename__ = "athlete_statistics"

    id = Column(Integer, primary_key=True, index=True)
    athlete_id = Column(Integer, ForeignKey("athletes.id"), nullable=False, unique=True)
    athlete = relationship("Athlete", back_populates="statistics")

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class SeasonStatistics(AggregateStatsMixin, Base):
    """Statistics snapshot of a season, written each time it is archived.

    This is a record of the season at its last archive, not a live view:
    editing a game while the season stays archived does not change it.
    """

    __tablename__ = "season_statistics"

    id = Column(Integer, primary_key=True, index=True)
    season_id = Column(Integer, ForeignKey("seasons.id"), nullable=False, unique=True)
    season = relationship("Season", back_populates="statistics")

    computed_at = Column(DateTime, default=func.now())
