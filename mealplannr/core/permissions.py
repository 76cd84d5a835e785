"""Role based access control for recipes and households.

Site roles are derived from the user record: ``is_admin`` makes a user an
administrator, and the user's household membership makes them a household
owner or household member. Every recipe and household permission decision goes
through :class:`AuthorizationPolicy`::

    policy.require(current_user, Action.EDIT_RECIPE, recipe)
"""

import enum
import logging
from typing import Any, Dict, FrozenSet, List, Optional, Set

from mealplannr.core.exception import AuthorizationException
from mealplannr.models.household import Household, HouseholdRole
from mealplannr.models.recipe import Recipe
from mealplannr.models.user import User

logger = logging.getLogger(__name__)


class SiteRole(str, enum.Enum):
    ADMINISTRATOR = "administrator"
    HOUSEHOLD_OWNER = "household_owner"
    HOUSEHOLD_MEMBER = "household_member"


class Capability(str, enum.Enum):
    READ = "read"
    EDIT_RECIPES = "edit_recipes"
    PUBLISH_RECIPES = "publish_recipes"
    DELETE_RECIPES = "delete_recipes"
    MANAGE_HOUSEHOLD = "manage_household"


class Action(str, enum.Enum):
    CREATE_RECIPE = "create_recipe"
    EDIT_RECIPE = "edit_recipe"
    DELETE_RECIPE = "delete_recipe"
    MANAGE_HOUSEHOLD = "manage_household"


ROLE_CAPABILITIES: Dict[SiteRole, FrozenSet[Capability]] = {
    SiteRole.HOUSEHOLD_OWNER: frozenset({
        Capability.READ,
        Capability.EDIT_RECIPES,
        Capability.PUBLISH_RECIPES,
        Capability.DELETE_RECIPES,
        Capability.MANAGE_HOUSEHOLD,
    }),
    SiteRole.HOUSEHOLD_MEMBER: frozenset({
        Capability.READ,
        Capability.EDIT_RECIPES,
        Capability.PUBLISH_RECIPES,
    }),
    SiteRole.ADMINISTRATOR: frozenset(Capability),
}

HOUSEHOLD_ROLES = frozenset({SiteRole.HOUSEHOLD_OWNER, SiteRole.HOUSEHOLD_MEMBER})

# (label, backend page) in menu order
ADMIN_SECTIONS = [
    ("Dashboard", "index.php"),
    ("Posts", "edit.php"),
    ("Media", "upload.php"),
    ("Pages", "edit.php?post_type=page"),
    ("Comments", "edit-comments.php"),
    ("Recipes", "edit.php?post_type=recipe"),
    ("My Networks", "my-networks"),
    ("Appearance", "themes.php"),
    ("Plugins", "plugins.php"),
    ("Users", "users.php"),
    ("Tools", "tools.php"),
    ("Settings", "options-general.php"),
    ("Profile", "profile.php"),
]

HIDDEN_FOR_HOUSEHOLD_ROLES = frozenset({
    "Dashboard", "Posts", "Media", "Pages", "Comments",
    "Appearance", "Plugins", "Users", "Tools", "Settings",
})

RECIPE_LISTING_PAGE = "edit.php?post_type=recipe"
ALWAYS_ALLOWED_PAGES = frozenset({"profile.php", "my-networks", "admin-ajax.php"})
RECIPE_EDITOR_PAGES = frozenset({"post.php", "post-new.php"})


def get_site_roles(user: User) -> Set[SiteRole]:
    """Derive a user's site roles from the admin flag and household membership."""
    roles: Set[SiteRole] = set()
    if user.is_admin:
        roles.add(SiteRole.ADMINISTRATOR)

    for membership in user.memberships:
        if membership.role == HouseholdRole.OWNER:
            roles.add(SiteRole.HOUSEHOLD_OWNER)
        else:
            roles.add(SiteRole.HOUSEHOLD_MEMBER)

    return roles


def get_capabilities(user: User) -> Set[Capability]:
    capabilities: Set[Capability] = set()
    for role in get_site_roles(user):
        capabilities |= ROLE_CAPABILITIES[role]
    return capabilities


def has_household_role(user: User) -> bool:
    return bool(get_site_roles(user) & HOUSEHOLD_ROLES)


def primary_role(user: User) -> Optional[SiteRole]:
    """The role shown for a user: administrator, then owner, then member."""
    roles = get_site_roles(user)
    for role in (SiteRole.ADMINISTRATOR, SiteRole.HOUSEHOLD_OWNER, SiteRole.HOUSEHOLD_MEMBER):
        if role in roles:
            return role
    return None


class AuthorizationPolicy:
    """Single decision point for recipe and household permissions."""

    def authorize(self, user: User, action: Action, resource: Optional[Any] = None) -> bool:
        """Return True if *user* may perform *action* on *resource*."""
        if user.is_admin:
            return True

        if action in (Action.EDIT_RECIPE, Action.DELETE_RECIPE):
            if isinstance(resource, Recipe) and resource.author_id == user.id:
                return True
            # Household roles may edit and delete any recipe
            return has_household_role(user)

        if action == Action.CREATE_RECIPE:
            return Capability.EDIT_RECIPES in get_capabilities(user)

        if action == Action.MANAGE_HOUSEHOLD:
            household_id = resource.id if isinstance(resource, Household) else resource
            return any(
                m.household_id == household_id and m.role == HouseholdRole.OWNER
                for m in user.memberships
            )

        return False

    def require(self, user: User, action: Action, resource: Optional[Any] = None) -> None:
        """Raise AuthorizationException unless *user* may perform *action*."""
        if not self.authorize(user, action, resource):
            logger.info("Denied %s for user %s", action.value, user.id)
            raise AuthorizationException(
                f"You are not allowed to {action.value.replace('_', ' ')}."
            )


policy = AuthorizationPolicy()


def admin_menu(user: User) -> List[str]:
    """List the backend sections visible to a user."""
    labels = [label for label, _ in ADMIN_SECTIONS]
    if user.is_admin or not has_household_role(user):
        return labels
    return [label for label in labels if label not in HIDDEN_FOR_HOUSEHOLD_ROLES]


def admin_redirect(user: User, page: str, post_type: Optional[str] = None) -> Optional[str]:
    """
    Where to send a user who opens a backend page.

    Household-role users are confined to their profile, network management and
    recipe screens; anything else sends them to the recipe listing. Returns
    None when the page may be shown.
    """
    if user.is_admin or not has_household_role(user):
        return None

    if page in ALWAYS_ALLOWED_PAGES:
        return None

    if post_type == "recipe":
        return None

    # The editor defaults to the recipe type when no post type is given
    if page in RECIPE_EDITOR_PAGES and post_type is None:
        return None

    return RECIPE_LISTING_PAGE
