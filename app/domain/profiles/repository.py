"""Profile repository - Read-only member lookups"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Profile


class ProfileRepository:
    """Repository for profile reads; profile lifecycle is owned by the profile service"""

    @staticmethod
    def get_by_id(db: Session, profile_id: str) -> Optional[Profile]:
        """Get a profile by its ID"""
        if not profile_id:
            return None
        return db.query(Profile).filter(Profile.id == profile_id).first()

    @staticmethod
    def get_by_auth_id(db: Session, clerk_user_id: str) -> Optional[Profile]:
        """Get a profile by hosted-auth user ID"""
        if not clerk_user_id:
            return None
        return db.query(Profile).filter(Profile.clerk_user_id == clerk_user_id).first()

    @staticmethod
    def display_name(profile: Profile) -> str:
        """GitHub username, else email local part, else a generic label"""
        if profile.github_username:
            return profile.github_username
        local_part = (profile.luma_email or "").split("@")[0]
        return local_part or "Member"
