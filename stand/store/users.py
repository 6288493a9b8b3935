import logging
import uuid

from aws_config import USERS_TABLE
from aws_lib.dynamodb_client import DynamoDBClient, ItemNotFound

from ..domain import utc_now
from ..exceptions import NicknameTaken, NotFound

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()


def is_nickname_unique(nickname, exclude_user_id=None):
    matches = ddb.scan(USERS_TABLE, nickname=nickname)
    return all(u["user_id"] == exclude_user_id for u in matches)


def create_user(nickname):
    """Register a new nickname; raises NicknameTaken for duplicates."""
    if not is_nickname_unique(nickname):
        raise NicknameTaken(nickname)

    user = {
        "user_id": str(uuid.uuid4()),
        "nickname": nickname,
        "created_at": utc_now(),
    }
    ddb.put(USERS_TABLE, user)
    logger.info("Created user %s (%s)", user["user_id"], nickname)
    return user


def get_user(user_id):
    return ddb.get(USERS_TABLE, {"user_id": user_id}) or None


def update_nickname(user_id, nickname):
    if not is_nickname_unique(nickname, exclude_user_id=user_id):
        raise NicknameTaken(nickname)
    try:
        ddb.update(USERS_TABLE, {"user_id": user_id}, {"nickname": nickname})
    except ItemNotFound:
        raise NotFound("User", user_id) from None
    logger.info("User %s renamed to %s", user_id, nickname)
