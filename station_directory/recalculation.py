"""
Quality score recalculation for Station Directory

Glues the pure scoring functions (quality.py, tiers.py) to the database.
Every event that can move a station's score (play, like, feedback
submitted or resolved, bulk recalculation) goes through a
QualityRecalculator, which:

1. Reads the station and its unresolved feedback
2. Computes the score
3. Writes quality_score / feedback_count back
4. Hides the station if the visibility rules say so (never un-hides)

Steps 1-4 are a read-modify-write, so they run under a per-station lock.
Two plays on the same station serialize; plays on different stations do
not block each other. The lock is process-local: several processes
writing the same database can still overwrite each other's score with a
slightly older one.

Usage:
------
    recalculator = QualityRecalculator(db)
    result = recalculator.recalculate(station_id)
    summary = recalculator.recalculate_all()
"""

import logging
import threading

from station_directory.database import queries, crud
from station_directory.quality import aggregate_feedback, compute_quality_score
from station_directory.tiers import classify_tier, should_hide_station

logger = logging.getLogger(__name__)


class StationNotFoundError(LookupError):
    """Raised when a recalculation targets a station that does not exist"""

    def __init__(self, station_id):
        super().__init__(f"Station not found: {station_id}")
        self.station_id = station_id


class FeedbackRateLimitedError(Exception):
    """Raised when an IP already left feedback for a station inside the window"""

    def __init__(self, station_id, ip_address, window_minutes):
        super().__init__(
            f"Feedback from {ip_address} for station {station_id} "
            f"already received in the last {window_minutes} minutes"
        )
        self.station_id = station_id
        self.ip_address = ip_address
        self.window_minutes = window_minutes


class QualityRecalculator:
    """Serialized per-station score recalculation

    Attributes:
        db: StationDatabase instance (connected)
    """

    def __init__(self, db):
        self.db = db
        self._locks = {}
        self._locks_guard = threading.Lock()

    def station_lock(self, station_id):
        """Get the lock guarding one station's read-modify-write"""
        with self._locks_guard:
            lock = self._locks.get(station_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[station_id] = lock
            return lock

    # ==================== SCORING ====================

    def _score(self, cursor, station_id):
        station = queries.get_station_by_id(cursor, station_id)
        if station is None:
            raise StationNotFoundError(station_id)

        feedback = queries.get_station_feedback(cursor, station_id, unresolved_only=True)
        summary = aggregate_feedback(feedback)
        result = compute_quality_score(summary, station)
        return station, summary, result

    def score_station(self, station_id):
        """Compute a fresh score without persisting it

        Args:
            station_id: Station ID

        Returns:
            tuple: (station dict, feedback summary, score result)

        Raises:
            StationNotFoundError: If the station does not exist
        """
        cursor = self.db.get_cursor()
        try:
            return self._score(cursor, station_id)
        finally:
            cursor.close()

    def _recalculate_locked(self, cursor, station_id):
        station, summary, result = self._score(cursor, station_id)

        overall = result['overall']
        feedback_count = summary['total']
        crud.update_station_quality(cursor, self.db.conn, station_id, overall, feedback_count)

        hidden = False
        if should_hide_station(overall, feedback_count):
            hidden = crud.deactivate_station(cursor, self.db.conn, station_id)
            if hidden:
                logger.warning(
                    f"Station {station['name']} ({station_id}) hidden due to poor quality "
                    f"(score={overall}, feedback={feedback_count})"
                )

        logger.debug(f"Station {station_id} quality score: {overall} ({feedback_count} feedback)")

        result = dict(result)
        result['station_id'] = station_id
        result['tier'] = classify_tier(overall)
        result['hidden'] = hidden
        result['is_active'] = station['is_active'] and not hidden
        return result

    def recalculate(self, station_id):
        """Recalculate and persist one station's score

        Args:
            station_id: Station ID

        Returns:
            dict: Score result plus 'station_id', 'tier', 'hidden' (True if
                  this call hid the station) and 'is_active'

        Raises:
            StationNotFoundError: If the station does not exist
        """
        with self.station_lock(station_id):
            cursor = self.db.get_cursor()
            try:
                return self._recalculate_locked(cursor, station_id)
            finally:
                cursor.close()

    def recalculate_all(self):
        """Recalculate every station, continuing past failures

        Returns:
            dict: {'total_stations', 'updated', 'failed', 'hidden'}
        """
        station_ids = self.db.get_all_station_ids()

        updated = 0
        failed = 0
        hidden = 0

        for station_id in station_ids:
            try:
                result = self.recalculate(station_id)
                updated += 1
                if result['hidden']:
                    hidden += 1
            except Exception as e:
                failed += 1
                logger.error(f"Error updating quality score for station {station_id}: {e}")

        logger.info(
            f"Recalculated quality scores for {updated}/{len(station_ids)} stations "
            f"({failed} failed, {hidden} hidden)"
        )

        return {
            'total_stations': len(station_ids),
            'updated': updated,
            'failed': failed,
            'hidden': hidden
        }

    # ==================== EVENTS ====================

    def record_interaction(self, station_id, counter):
        """Count a play or like and rescore the station

        Args:
            station_id: Station ID
            counter: 'clickcount' (play) or 'votes' (like)

        Returns:
            tuple: (new counter value, score result)

        Raises:
            StationNotFoundError: If the station does not exist
        """
        with self.station_lock(station_id):
            cursor = self.db.get_cursor()
            try:
                value = crud.increment_station_counter(cursor, self.db.conn, station_id, counter)
                if value is None:
                    raise StationNotFoundError(station_id)
                return value, self._recalculate_locked(cursor, station_id)
            finally:
                cursor.close()

    def submit_feedback(self, station_id, feedback_type, ip_address, details=None,
                        user_id=None, user_agent=None, window_minutes=60):
        """Store listener feedback and rescore the station

        Only one submission per (station, IP) is accepted per window.

        Returns:
            tuple: (feedback ID, score result)

        Raises:
            ValueError: If feedback_type is unknown
            FeedbackRateLimitedError: If the IP already submitted inside the window
            StationNotFoundError: If the station does not exist
        """
        with self.station_lock(station_id):
            cursor = self.db.get_cursor()
            try:
                if queries.get_station_by_id(cursor, station_id) is None:
                    raise StationNotFoundError(station_id)

                if queries.has_recent_feedback(cursor, station_id, ip_address, window_minutes):
                    raise FeedbackRateLimitedError(station_id, ip_address, window_minutes)

                feedback_id = crud.add_feedback(
                    cursor, self.db.conn, station_id, feedback_type,
                    details=details, user_id=user_id,
                    ip_address=ip_address, user_agent=user_agent
                )
                return feedback_id, self._recalculate_locked(cursor, station_id)
            finally:
                cursor.close()

    def resolve_feedback(self, feedback_id, resolved=True):
        """Resolve (or reopen) feedback and rescore its station

        Returns:
            tuple: (updated feedback dict, score result), or (None, None)
                   if the feedback does not exist
        """
        cursor = self.db.get_cursor()
        try:
            feedback = queries.get_feedback_by_id(cursor, feedback_id)
        finally:
            cursor.close()

        if feedback is None:
            return None, None

        station_id = feedback['station_id']
        with self.station_lock(station_id):
            cursor = self.db.get_cursor()
            try:
                crud.set_feedback_resolved(cursor, self.db.conn, feedback_id, resolved)
                feedback = queries.get_feedback_by_id(cursor, feedback_id)
                return feedback, self._recalculate_locked(cursor, station_id)
            finally:
                cursor.close()
