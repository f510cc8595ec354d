from quizhub.models import User
from quizhub.repositories.base import SqlRepository


class UserRepository(SqlRepository[User]):
    model = User
    entity_name = "user"
