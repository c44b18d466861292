from sprintpulse.storage.models import UserModel
from .base import BaseRepository


class UserRepository(BaseRepository[UserModel]):
    model = UserModel
