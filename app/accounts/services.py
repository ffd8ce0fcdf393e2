"""
Identity resolution for the inbox.

ProfileDirectory turns a profile (or user) identifier into the display data
shown next to threads and messages. It is read-only: profile editing lives
outside the inbox.

Lookups are cached in the Django cache for IDENTITY_CACHE_TIMEOUT seconds.
A cache outage only costs an extra query; the directory never fails because
the cache is down.

Usage:
    from accounts.services import ProfileDirectory

    identity = ProfileDirectory.resolve(42)
    if identity is None:
        # unknown profile
        ...

    names = ProfileDirectory.resolve_many([1, 2, 3])
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.cache import cache

from accounts.models import Profile
from core.services import BaseService

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any

IDENTITY_CACHE_TIMEOUT = 300
IDENTITY_CACHE_PREFIX = "inbox:identity"


@dataclass(frozen=True)
class Identity:
    """
    Display data for a single business profile.

    Attributes:
        profile_id: Profile primary key (equal to the owner's user id)
        user_id: Owning user id
        display_name: Company name, contact name, or email local part
        company_name: Registered company name (may be empty)
        avatar_url: Avatar URL (may be empty)
        is_verified: Verification flag
    """

    profile_id: int
    user_id: int
    display_name: str
    company_name: str
    avatar_url: str
    is_verified: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_profile(cls, profile: Profile) -> Identity:
        display_name = profile.display_name or profile.user.email.split("@")[0]
        return cls(
            profile_id=profile.pk,
            user_id=profile.user_id,
            display_name=display_name,
            company_name=profile.company_name,
            avatar_url=profile.avatar_url or "",
            is_verified=profile.is_verified,
        )


class ProfileDirectory(BaseService):
    """
    Read-only lookup of profile display data.

    Methods:
        get_profile: Fetch the Profile row for an active owner
        resolve: Identity for a profile id (cached)
        resolve_user: Identity for a user id
        resolve_many: Identities for several profile ids
        invalidate: Drop a cached identity
    """

    @staticmethod
    def _cache_key(profile_id: int) -> str:
        return f"{IDENTITY_CACHE_PREFIX}:{profile_id}"

    @classmethod
    def get_profile(cls, profile_id) -> Profile | None:
        """
        Return the Profile for ``profile_id`` if its owner is active.

        Non-numeric identifiers resolve to None rather than raising.
        """
        try:
            profile_id = int(profile_id)
        except (TypeError, ValueError):
            return None

        return (
            Profile.objects.select_related("user")
            .filter(pk=profile_id, user__is_active=True)
            .first()
        )

    @classmethod
    def resolve(cls, profile_id) -> Identity | None:
        """
        Resolve a profile id to its Identity.

        Returns:
            Identity, or None when the profile does not exist or is inactive
        """
        try:
            key = cls._cache_key(int(profile_id))
        except (TypeError, ValueError):
            return None

        cached = cache.get(key)
        if cached is not None:
            return Identity(**cached)

        profile = cls.get_profile(profile_id)
        if profile is None:
            return None

        identity = Identity.from_profile(profile)
        cache.set(
            key,
            identity.to_dict(),
            timeout=getattr(settings, "INBOX_IDENTITY_CACHE_TIMEOUT", IDENTITY_CACHE_TIMEOUT),
        )
        return identity

    @classmethod
    def resolve_user(cls, user) -> Identity | None:
        """Resolve a User (or user id) to the Identity of their profile."""
        user_id = getattr(user, "pk", user)
        return cls.resolve(user_id)

    @classmethod
    def resolve_many(cls, profile_ids: Iterable[int]) -> dict[int, Identity]:
        """
        Resolve several profile ids in one query for the cache misses.

        Returns:
            Mapping of profile id to Identity; unknown ids are omitted
        """
        ids = {int(pid) for pid in profile_ids}
        if not ids:
            return {}

        keys = {cls._cache_key(pid): pid for pid in ids}
        found: dict[int, Identity] = {
            keys[key]: Identity(**data) for key, data in cache.get_many(keys).items()
        }

        missing = ids - found.keys()
        if missing:
            profiles = Profile.objects.select_related("user").filter(
                pk__in=missing, user__is_active=True
            )
            fresh = {}
            for profile in profiles:
                identity = Identity.from_profile(profile)
                found[profile.pk] = identity
                fresh[cls._cache_key(profile.pk)] = identity.to_dict()
            if fresh:
                cache.set_many(
                    fresh,
                    timeout=getattr(
                        settings, "INBOX_IDENTITY_CACHE_TIMEOUT", IDENTITY_CACHE_TIMEOUT
                    ),
                )

        return found

    @classmethod
    def invalidate(cls, profile_id) -> None:
        cache.delete(cls._cache_key(int(profile_id)))
        cls.get_logger().debug(f"Invalidated identity cache for profile {profile_id}")
