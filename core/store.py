"""
Redis-backed recommendation store for Site Design Advisor
Persists scans, analyses, recommendations and the interaction audit log
"""

import json
import logging
import uuid
from typing import Any, Dict, List, Optional

import redis
from pydantic import ValidationError as PydanticValidationError

from config import settings
from core.exceptions import NotFoundError, ValidationError
from core.models import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    AnalysisRecord,
    RecommendationRecord,
    ScanRecord,
    utc_now,
)

logger = logging.getLogger(__name__)

ACTION_UPVOTE = "upvote"
ACTION_DOWNVOTE = "downvote"


def _encode(mapping: Dict[str, Any]) -> Dict[str, str]:
    # Every hash field is JSON so lists, booleans and nulls survive the round trip
    return {k: json.dumps(v) for k, v in mapping.items()}


def _decode(mapping: Dict[str, str]) -> Dict[str, Any]:
    decoded = {}
    for k, v in mapping.items():
        try:
            decoded[k] = json.loads(v)
        except (json.JSONDecodeError, TypeError):
            decoded[k] = v
    return decoded


def synthesize_key() -> str:
    return f"REC-{uuid.uuid4().hex[:8]}"


def validate_recommendation_items(parsed: Any) -> List[Dict[str, Any]]:
    """Return the recommendations_all items, or raise ValidationError."""
    if not isinstance(parsed, dict):
        raise ValidationError("Parsed model result is not an object")
    items = parsed.get("recommendations_all")
    if not isinstance(items, list):
        raise ValidationError("Parsed model result has no recommendations_all list")
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"recommendations_all[{index}] is not an object")
    return items


class RecommendationStore:
    """
    Persistence for analyses and their recommendations.

    Key layout (prefix defaults to "design"):
        {prefix}:scan:{id}                          hash
        {prefix}:analysis:{id}                      hash
        {prefix}:analysis:{id}:recs                 list of rec keys, insertion order
        {prefix}:analysis:{id}:rec:{key}            hash
        {prefix}:analysis:{id}:interactions         list of JSON entries
    """

    def __init__(self, client: redis.Redis, prefix: Optional[str] = None):
        self.client = client
        self.prefix = prefix or settings.STORE_KEY_PREFIX

    # ======================
    # Key helpers
    # ======================

    def _scan_key(self, scan_id: str) -> str:
        return f"{self.prefix}:scan:{scan_id}"

    def _analysis_key(self, analysis_id: str) -> str:
        return f"{self.prefix}:analysis:{analysis_id}"

    def _recs_key(self, analysis_id: str) -> str:
        return f"{self._analysis_key(analysis_id)}:recs"

    def _rec_key(self, analysis_id: str, rec_key: str) -> str:
        return f"{self._analysis_key(analysis_id)}:rec:{rec_key}"

    def _interactions_key(self, analysis_id: str) -> str:
        return f"{self._analysis_key(analysis_id)}:interactions"

    # ======================
    # Health
    # ======================

    def ping(self) -> bool:
        """Check if Redis is available"""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def get_stats(self) -> dict:
        """Get Redis connection and memory stats."""
        try:
            info = self.client.info()
            return {
                "connected_clients": info.get("connected_clients", 0),
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "total_commands_processed": info.get("total_commands_processed", 0),
            }
        except redis.RedisError as e:
            logger.error(f"Failed to get Redis stats: {str(e)}")
            return {"error": str(e)}

    # ======================
    # Scans
    # ======================

    def create_scan(self, url: str) -> str:
        scan = ScanRecord(id=uuid.uuid4().hex, url=url)
        self.client.hset(self._scan_key(scan.id), mapping=_encode(scan.model_dump()))
        logger.info(f"🆕 Scan {scan.id} created for {url}")
        return scan.id

    def complete_scan(self, scan_id: str, screenshot_paths: List[str]) -> None:
        self.client.hset(
            self._scan_key(scan_id),
            mapping=_encode(
                {"status": STATUS_COMPLETED, "screenshot_paths": screenshot_paths}
            ),
        )

    def fail_scan(self, scan_id: str, error: str) -> None:
        self.client.hset(
            self._scan_key(scan_id),
            mapping=_encode({"status": STATUS_FAILED, "error": error}),
        )
        logger.warning(f"⚠️ Scan {scan_id} failed: {error}")

    def get_scan(self, scan_id: str) -> ScanRecord:
        data = self.client.hgetall(self._scan_key(scan_id))
        if not data:
            raise NotFoundError(f"Scan not found: {scan_id}")
        return ScanRecord(**_decode(data))

    # ======================
    # Analyses
    # ======================

    def _build_records(
        self, items: List[Dict[str, Any]], taken: Optional[set] = None
    ) -> List[RecommendationRecord]:
        taken = set(taken or ())
        records = []
        for index, item in enumerate(items):
            key = item.get("id")
            key = str(key).strip() if key is not None else ""
            if not key or key in taken:
                key = synthesize_key()
            taken.add(key)
            try:
                records.append(RecommendationRecord.from_model_item(item, key))
            except PydanticValidationError as e:
                raise ValidationError(
                    f"recommendations_all[{index}] has an invalid shape: {e.errors()[0]['msg']}"
                ) from e
        return records

    def create_analysis(
        self,
        parsed: Dict[str, Any],
        url: Optional[str] = None,
        screenshot_paths: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
        raw_output: Optional[str] = None,
    ) -> str:
        """
        Insert one analysis and its recommendations.

        The analysis hash and every recommendation row are written in a single
        MULTI/EXEC transaction, so callers never observe one without the other.

        Args:
            parsed: Extracted model output with "summary" and "recommendations_all"
            url: Source URL of the scan
            screenshot_paths: Storage paths of the screenshots sent to the model
            context: Context map the prompt was built from
            raw_output: Unparsed model text, kept for auditing

        Returns:
            The new analysis id

        Raises:
            ValidationError: If the parsed result is malformed (nothing is written)
        """
        items = validate_recommendation_items(parsed)
        records = self._build_records(items)

        summary = parsed.get("summary")
        analysis = AnalysisRecord(
            id=uuid.uuid4().hex,
            url=url,
            screenshot_paths=list(screenshot_paths or []),
            summary=summary if isinstance(summary, str) else "",
            raw_model=parsed,
            raw_output=raw_output,
            context=context or {},
            status=STATUS_COMPLETED,
        )

        pipe = self.client.pipeline(transaction=True)
        pipe.hset(self._analysis_key(analysis.id), mapping=_encode(analysis.model_dump()))
        for record in records:
            pipe.hset(
                self._rec_key(analysis.id, record.key),
                mapping=_encode(record.model_dump()),
            )
            pipe.rpush(self._recs_key(analysis.id), record.key)
        pipe.execute()

        logger.info(
            f"✅ Analysis {analysis.id} stored with {len(records)} recommendations"
        )
        return analysis.id

    def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        data = self.client.hgetall(self._analysis_key(analysis_id))
        if not data:
            raise NotFoundError(f"Analysis not found: {analysis_id}")
        return AnalysisRecord(**_decode(data))

    def analysis_exists(self, analysis_id: str) -> bool:
        return bool(self.client.exists(self._analysis_key(analysis_id)))

    # ======================
    # Recommendations
    # ======================

    def list_recommendations(self, analysis_id: str) -> List[RecommendationRecord]:
        """All recommendations of an analysis, active or not, in insertion order."""
        keys = self.client.lrange(self._recs_key(analysis_id), 0, -1)
        if not keys:
            return []
        pipe = self.client.pipeline(transaction=False)
        for key in keys:
            pipe.hgetall(self._rec_key(analysis_id, key))
        rows = pipe.execute()
        return [RecommendationRecord(**_decode(row)) for row in rows if row]

    def list_active(self, analysis_id: str) -> List[RecommendationRecord]:
        return [r for r in self.list_recommendations(analysis_id) if r.active]

    def get_recommendation(
        self, analysis_id: str, rec_key: str
    ) -> Optional[RecommendationRecord]:
        data = self.client.hgetall(self._rec_key(analysis_id, rec_key))
        return RecommendationRecord(**_decode(data)) if data else None

    def add_recommendation(self, analysis_id: str, item: Dict[str, Any]) -> str:
        """Append one replacement recommendation (votes=0, active) and return its key."""
        existing = set(self.client.lrange(self._recs_key(analysis_id), 0, -1))
        record = self._build_records([item], taken=existing)[0]

        pipe = self.client.pipeline(transaction=True)
        pipe.hset(
            self._rec_key(analysis_id, record.key), mapping=_encode(record.model_dump())
        )
        pipe.rpush(self._recs_key(analysis_id), record.key)
        pipe.execute()

        logger.info(f"➕ Replacement {record.key} added to analysis {analysis_id}")
        return record.key

    def upvote(self, analysis_id: str, rec_key: str) -> bool:
        """
        Add exactly one vote to a recommendation, active or not.

        Unknown keys are a no-op; the attempt is still written to the audit log.

        Returns:
            True if a recommendation was updated
        """
        row_key = self._rec_key(analysis_id, rec_key)
        updated = False
        # Rows are never deleted, so the existence check cannot go stale
        if self.client.exists(row_key):
            self.client.hincrby(row_key, "votes", 1)
            updated = True
        else:
            logger.info(f"Upvote for unknown recommendation {analysis_id}/{rec_key} ignored")

        self.record_interaction(analysis_id, rec_key, ACTION_UPVOTE)
        return updated

    def downvote(self, analysis_id: str, rec_key: str) -> bool:
        """
        Deactivate a recommendation permanently. Idempotent.

        Returns:
            True if this call moved the recommendation from active to inactive
        """
        row_key = self._rec_key(analysis_id, rec_key)
        was_active = False
        current = self.client.hget(row_key, "active")
        if current is not None:
            was_active = bool(json.loads(current))
            if was_active:
                self.client.hset(row_key, "active", json.dumps(False))
        else:
            logger.info(f"Downvote for unknown recommendation {analysis_id}/{rec_key} ignored")

        self.record_interaction(analysis_id, rec_key, ACTION_DOWNVOTE)
        return was_active

    # ======================
    # Interactions
    # ======================

    def record_interaction(
        self,
        analysis_id: str,
        rec_key: str,
        action: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an audit entry. Best effort: failures are logged, never raised."""
        entry = {
            "analysis_id": analysis_id,
            "rec_key": rec_key,
            "action": action,
            "payload": payload,
            "created_at": utc_now(),
        }
        try:
            self.client.rpush(self._interactions_key(analysis_id), json.dumps(entry))
        except redis.RedisError as e:
            logger.error(f"❌ Failed to record {action} for {analysis_id}/{rec_key}: {e}")

    def list_interactions(self, analysis_id: str) -> List[Dict[str, Any]]:
        return [
            json.loads(entry)
            for entry in self.client.lrange(self._interactions_key(analysis_id), 0, -1)
        ]


# Global connection pool and store instances
_redis_client: Optional[redis.Redis] = None
_store: Optional[RecommendationStore] = None


def get_redis_connection() -> redis.Redis:
    """
    Get or create the global Redis client backed by a connection pool.
    """
    global _redis_client

    if _redis_client is None:
        redis_url = settings.REDIS_URL
        pool = redis.ConnectionPool.from_url(
            redis_url,
            max_connections=20,
            decode_responses=True,  # Auto-decode bytes to strings
            socket_timeout=5,
            socket_connect_timeout=5,
            retry_on_timeout=True,
        )
        _redis_client = redis.Redis(connection_pool=pool)
        logger.info(f"Redis client configured for {redis_url}")

    return _redis_client


def get_store() -> RecommendationStore:
    """Get or create the global recommendation store."""
    global _store

    if _store is None:
        _store = RecommendationStore(get_redis_connection())

    return _store


def close_store():
    """Close the global Redis connection pool"""
    global _redis_client, _store

    if _redis_client is not None:
        try:
            _redis_client.connection_pool.disconnect()
            logger.info("Redis connection closed")
        except redis.RedisError as e:
            logger.error(f"Error closing Redis connection: {str(e)}")
    _redis_client = None
    _store = None
