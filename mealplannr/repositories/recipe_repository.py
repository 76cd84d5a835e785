from sqlalchemy.orm import Session
from sqlalchemy import select, and_, or_
from typing import List, Optional
from mealplannr.models.network import NetworkHousehold, InvitationStatus
from mealplannr.models.recipe import Recipe, RecipeShare, RecipeStatus, Visibility
from mealplannr.repositories.repository import BaseRepository


class RecipeRepository(BaseRepository[Recipe]):
    """Repository for recipe operations."""

    def __init__(self, db: Session):
        super().__init__(Recipe, db)

    def get_by_author(self, author_id: int, skip: int = 0, limit: int = 100) -> List[Recipe]:
        """Get all recipes written by a user, newest first."""
        return (
            self.db.query(Recipe)
            .filter(Recipe.author_id == author_id)
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_accessible(
        self,
        user_id: int,
        household_id: Optional[int] = None,
        limit: Optional[int] = None,
        unshared_public: bool = False
    ) -> List[Recipe]:
        """
        Get published recipes a user may read, newest first.

        A recipe qualifies when the user wrote it, it is public, it is shared
        with the user's household, or it is shared with a network the user's
        household has an accepted link to.

        Args:
            user_id: The reading user
            household_id: The user's household, if any
            limit: Maximum number of recipes to return
            unshared_public: Treat recipes without sharing settings as public
        """
        conditions = [
            Recipe.author_id == user_id,
            RecipeShare.visibility == Visibility.PUBLIC,
        ]

        if household_id is not None:
            accepted_networks = select(NetworkHousehold.network_id).where(
                and_(
                    NetworkHousehold.household_id == household_id,
                    NetworkHousehold.status == InvitationStatus.ACCEPTED
                )
            )
            conditions.append(
                and_(
                    RecipeShare.visibility == Visibility.HOUSEHOLD,
                    RecipeShare.household_id == household_id
                )
            )
            conditions.append(
                and_(
                    RecipeShare.visibility == Visibility.NETWORK,
                    RecipeShare.network_id.in_(accepted_networks)
                )
            )

        if unshared_public:
            conditions.append(RecipeShare.id.is_(None))

        stmt = (
            select(Recipe)
            .outerjoin(RecipeShare, RecipeShare.recipe_id == Recipe.id)
            .where(and_(Recipe.status == RecipeStatus.PUBLISH, or_(*conditions)))
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        return list(self.db.execute(stmt).scalars().unique().all())
