"""Cache key schema for the event platform.

Key format: {entity}:{qualifier...}:{identifier}

Keys are colon-delimited and hierarchical so that a whole family can be
removed with one glob pattern, e.g. every leaderboard with "leaderboard:*".
"""

from eventcache.core.config.constants import KEY_SEPARATOR


def _join(*parts: object) -> str:
    return KEY_SEPARATOR.join(str(part) for part in parts)


class CacheKeys:
    """Cache key generator following the platform's naming convention."""

    EVENTS_LIST_PATTERN = "events:list*"
    LEADERBOARD_PATTERN = "leaderboard:*"
    REGISTRATIONS_PATTERN = "registrations:*"

    # Events

    @classmethod
    def event(cls, event_id: object) -> str:
        return _join("event", event_id)

    @classmethod
    def events_list_all(cls) -> str:
        return _join("events", "list", "all")

    @classmethod
    def events_list_active(cls) -> str:
        return _join("events", "list", "active")

    @classmethod
    def events_list_admin(cls, admin_id: object) -> str:
        """Events visible to one event admin."""
        return _join("events", "list", "admin", admin_id)

    # Leaderboards

    @classmethod
    def leaderboard_event(cls, event_id: object) -> str:
        return _join("leaderboard", "event", event_id)

    @classmethod
    def leaderboard_round(cls, round_id: object) -> str:
        return _join("leaderboard", "round", round_id)

    # Rounds and questions

    @classmethod
    def rounds(cls, event_id: object) -> str:
        return _join("rounds", event_id)

    @classmethod
    def questions(cls, round_id: object) -> str:
        return _join("questions", round_id)

    # Participants and users

    @classmethod
    def participant(cls, participant_id: object) -> str:
        return _join("participant", participant_id)

    @classmethod
    def participant_credential(cls, user_id: object, event_id: object) -> str:
        return _join("participant", "credential", user_id, event_id)

    @classmethod
    def user(cls, user_id: object) -> str:
        return _join("user", user_id)

    # Registrations

    @classmethod
    def registrations_all(cls) -> str:
        return _join("registrations", "all")

    @classmethod
    def registrations_colleges(cls) -> str:
        return _join("registrations", "colleges")

    # Invalidation patterns

    @classmethod
    def rounds_pattern(cls, event_id: object) -> str:
        """Pattern matching the rounds key of an event and anything below it."""
        return f"{cls.rounds(event_id)}*"

    @classmethod
    def questions_pattern(cls, round_id: object) -> str:
        return f"{cls.questions(round_id)}*"

    @classmethod
    def parse_key(cls, key: str) -> dict[str, str] | None:
        """Split a key into its entity and the remaining qualifier.

        Returns None for an empty key or one without a separator.
        """
        if not key or KEY_SEPARATOR not in key:
            return None
        entity, _, rest = key.partition(KEY_SEPARATOR)
        return {"entity": entity, "rest": rest}
