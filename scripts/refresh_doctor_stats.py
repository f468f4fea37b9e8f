"""Recompute cached statistics for every doctor, or for the given IDs."""

import argparse
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import AppException
from app.core.redis_client import CacheManager, close_redis_connection, get_redis_client
from app.database import AsyncSessionLocal, engine
from app.models.doctors import doctors
from app.services.doctor_service import DoctorService


async def refresh(
    doctor_ids: list[str],
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
    cache_manager: CacheManager | None = None,
) -> tuple[int, list[str]]:
    """
    Refresh each doctor's statistics.

    Args:
        doctor_ids: Doctors to refresh; all doctors when empty
        session_factory: Where sessions come from
        cache_manager: Cache whose doctor profiles are dropped after each write

    Returns:
        Number of doctors refreshed and the IDs that could not be
    """
    service = DoctorService(cache_manager=cache_manager)
    refreshed = 0
    failed: list[str] = []

    async with session_factory() as session:
        if not doctor_ids:
            result = await session.execute(select(doctors.c.id))
            doctor_ids = [str(row.id) for row in result.fetchall()]

        for doctor_id in doctor_ids:
            try:
                snapshot = await service.refresh_stats(session, doctor_id)
            except AppException as e:
                await session.rollback()
                failed.append(doctor_id)
                print(f"✗ {doctor_id}: {e.message}")
                continue

            refreshed += 1
            print(
                f"{doctor_id}: consultations={snapshot.consultation_count} "
                f"rating={snapshot.average_rating} reviews={snapshot.review_count}"
            )

    return refreshed, failed


async def run(doctor_ids: list[str]) -> tuple[int, list[str]]:
    """Refresh against the configured database and Redis, then release both."""
    try:
        return await refresh(doctor_ids, cache_manager=CacheManager(get_redis_client()))
    finally:
        await engine.dispose()
        close_redis_connection()


def main() -> None:
    """Parse arguments and run the refresh."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("doctor_ids", nargs="*", help="Doctor IDs (default: all doctors)")
    args = parser.parse_args()

    refreshed, failed = asyncio.run(run(args.doctor_ids))
    print(f"✓ Refreshed statistics for {refreshed} doctor(s)")
    if failed:
        print(f"✗ {len(failed)} doctor(s) could not be refreshed")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
