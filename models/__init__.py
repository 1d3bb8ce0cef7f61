"""SQLAlchemy models and the DBStorage wrapper used by the API."""
from models.base_model import Base
from models.user import User
from models.chirp import Chirp
from models.refresh_token import RefreshToken
from models.db_storage import DBStorage
