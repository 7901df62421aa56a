"""SQLAlchemy-backed media repository.

Persists items in the ``media_items`` table (see
:class:`~humane_logistics.core.models.media.MediaRecord`).  Each repository
instance owns one logical *partition* of the table, identified by its label,
so a federation of repositories can share one database.

Counts, averages and the damage histogram are computed in SQL.  Daily trends
are folded in Python from rows ordered by ``id`` because the pairwise
running-average recurrence depends on insertion order and has no portable
SQL aggregate.

Usage::

    repo = await SqlMediaRepository.connect(
        "postgresql+asyncpg://user:pw@localhost/humane_logistics",
        partition="News",
    )
    await repo.create_schema()
    await repo.save(item)
"""

from __future__ import annotations

from datetime import date

import structlog
from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from humane_logistics.core.database import build_engine, build_session_factory, verify_connection
from humane_logistics.core.exceptions import PersistenceError, RepositoryUnavailableError
from humane_logistics.core.media import UNANALYZED_SENTIMENT, DamageCategory, MediaItem
from humane_logistics.core.models.base import Base
from humane_logistics.core.models.media import MediaRecord
from humane_logistics.storage.aggregation import accumulate_daily_trends
from humane_logistics.storage.base import DEFAULT_PENDING_PAGE_SIZE, MediaRepository

logger = structlog.get_logger(__name__)

_UNKNOWN_CODE = DamageCategory.UNKNOWN.value
_CLASSIFIED_CODES = tuple(
    category.value for category in DamageCategory if category is not DamageCategory.UNKNOWN
)


class SqlMediaRepository(MediaRepository):
    """Media repository over an async SQLAlchemy engine.

    Args:
        engine: Async engine to use.  The repository disposes it on
            :meth:`close` only when ``owns_engine`` is True.
        partition: Repository label stored in the ``partition`` column.
        owns_engine: Whether :meth:`close` should dispose the engine.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        partition: str = "default",
        owns_engine: bool = False,
    ) -> None:
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = build_session_factory(engine)
        self.partition = partition
        self._owns_engine = owns_engine

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    async def connect(cls, database_url: str, partition: str = "default") -> SqlMediaRepository:
        """Open an engine for *database_url* and verify it is reachable.

        Raises:
            RepositoryUnavailableError: If the database cannot be reached.
                This is a fatal resource-acquisition failure.
        """
        try:
            engine = build_engine(database_url)
            await verify_connection(engine)
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "sql_repository: database unreachable",
                partition=partition,
                error=str(exc),
            )
            raise RepositoryUnavailableError(
                f"Cannot open document store for partition '{partition}': {exc}"
            ) from exc
        return cls(engine, partition=partition, owns_engine=True)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_schema(self) -> None:
        """Create the ``media_items`` table if it does not exist.

        Raises:
            RepositoryUnavailableError: If the schema cannot be created.
        """
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "sql_repository: schema creation failed",
                partition=self.partition,
                error=str(exc),
            )
            raise RepositoryUnavailableError(
                f"Cannot create schema for partition '{self.partition}': {exc}"
            ) from exc

    async def close(self) -> None:
        if self._owns_engine:
            await self._engine.dispose()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save(self, item: MediaItem) -> bool:
        try:
            async with self._session_factory() as session:
                existing = await session.scalar(
                    select(MediaRecord.id)
                    .where(
                        MediaRecord.partition == self.partition,
                        MediaRecord.content == item.content_key(),
                    )
                    .limit(1)
                )
                if existing is not None:
                    return False
                session.add(MediaRecord.from_item(item, self.partition))
                await session.commit()
                return True
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"save failed: {exc}", repository=self.partition
            ) from exc

    async def update_analysis(self, item: MediaItem) -> bool:
        stmt = (
            update(MediaRecord)
            .where(
                MediaRecord.partition == self.partition,
                MediaRecord.content == item.content_key(),
            )
            .values(
                sentiment=float(item.sentiment),
                damage_type=DamageCategory.parse(item.damage_type).value,
            )
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
                return bool(result.rowcount)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"update_analysis failed: {exc}", repository=self.partition
            ) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_pending_by_topic(
        self,
        topic: str,
        limit: int = DEFAULT_PENDING_PAGE_SIZE,
        offset: int = 0,
    ) -> list[MediaItem]:
        # The SQL filter is a superset of the pending rows; needs_analysis() on
        # the read-back item decides.
        to_skip = max(0, offset)
        chunk = max(limit, DEFAULT_PENDING_PAGE_SIZE)
        pending: list[MediaItem] = []
        last_id = 0
        async with self._session_factory() as session:
            while len(pending) < limit:
                rows = (await session.scalars(self._pending_candidates(topic, last_id, chunk))).all()
                if not rows:
                    break
                last_id = rows[-1].id
                for row in rows:
                    item = row.to_item()
                    if not item.needs_analysis():
                        continue
                    if to_skip:
                        to_skip -= 1
                        continue
                    pending.append(item)
                    if len(pending) >= limit:
                        break
        return pending

    def _pending_candidates(self, topic: str, after_id: int, chunk: int) -> Select:
        return (
            select(MediaRecord)
            .where(
                MediaRecord.partition == self.partition,
                MediaRecord.topic == topic,
                MediaRecord.id > after_id,
                or_(
                    MediaRecord.sentiment == UNANALYZED_SENTIMENT,
                    MediaRecord.damage_type.is_(None),
                    MediaRecord.damage_type.not_in(_CLASSIFIED_CODES),
                ),
            )
            .order_by(MediaRecord.id)
            .limit(chunk)
        )

    async def count_by_topic(self, topic: str) -> int:
        stmt = select(func.count(MediaRecord.id)).where(
            MediaRecord.partition == self.partition,
            MediaRecord.topic == topic,
        )
        async with self._session_factory() as session:
            return int(await session.scalar(stmt) or 0)

    async def average_sentiment(self, topic: str) -> float:
        stmt = select(func.avg(MediaRecord.sentiment)).where(
            MediaRecord.partition == self.partition,
            MediaRecord.topic == topic,
            MediaRecord.sentiment != UNANALYZED_SENTIMENT,
        )
        async with self._session_factory() as session:
            value = await session.scalar(stmt)
        return float(value) if value is not None else 0.0

    async def damage_distribution(self, topic: str) -> dict[str, int]:
        stmt = (
            select(MediaRecord.damage_type, func.count(MediaRecord.id))
            .where(
                MediaRecord.partition == self.partition,
                MediaRecord.topic == topic,
                MediaRecord.damage_type != _UNKNOWN_CODE,
                MediaRecord.damage_type.is_not(None),
            )
            .group_by(MediaRecord.damage_type)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()

        distribution: dict[str, int] = {}
        for code, count in rows:
            category = DamageCategory.parse(code)
            # Unrecognised codes read back as UNKNOWN and stay pending.
            if category is DamageCategory.UNKNOWN:
                continue
            name = category.display_name
            distribution[name] = distribution.get(name, 0) + int(count)
        return distribution

    async def daily_sentiment_trends(self, topic: str) -> dict[str, dict[date, float]]:
        stmt = (
            select(MediaRecord.kind, MediaRecord.timestamp, MediaRecord.sentiment)
            .where(
                MediaRecord.partition == self.partition,
                MediaRecord.topic == topic,
            )
            .order_by(MediaRecord.id)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()
        return accumulate_daily_trends(
            (kind, timestamp, float(sentiment or 0.0)) for kind, timestamp, sentiment in rows
        )

    def __repr__(self) -> str:
        return f"SqlMediaRepository(partition={self.partition!r})"
