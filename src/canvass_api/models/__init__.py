"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from canvass_api.models.address import Address
from canvass_api.models.friendship import Friendship
from canvass_api.models.person import Person
from canvass_api.models.person_update import PersonUpdate
from canvass_api.models.ranking import Ranking, RankingScope
from canvass_api.models.score import Score
from canvass_api.models.user import User
from canvass_api.models.visit import Visit

__all__ = [
    "Address",
    "Friendship",
    "Person",
    "PersonUpdate",
    "Ranking",
    "RankingScope",
    "Score",
    "User",
    "Visit",
]
