import logging
import uuid

from aws_config import COMMENTS_TABLE
from aws_lib.dynamodb_client import DynamoDBClient, ItemNotFound

from ..domain import utc_now
from ..exceptions import NotCommentAuthor, NotFound

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()


def add_comment(order_id, text, author_id, author_nickname):
    comment = {
        "comment_id": str(uuid.uuid4()),
        "order_id": order_id,
        "text": text,
        "author_id": author_id,
        "author_nickname": author_nickname,
        "is_resolved": False,
        "created_at": utc_now(),
    }
    ddb.put(COMMENTS_TABLE, comment)
    logger.info("Comment %s added to order %s", comment["comment_id"], order_id)
    return comment["comment_id"]


def list_comments(order_id):
    """Comments of one order, oldest first."""
    comments = ddb.scan(COMMENTS_TABLE, order_id=order_id)
    return sorted(comments, key=lambda c: c["created_at"])


def unresolved_counts():
    """order_id -> number of open comments, from a single scan."""
    counts = {}
    for comment in ddb.scan(COMMENTS_TABLE, is_resolved=False):
        counts[comment["order_id"]] = counts.get(comment["order_id"], 0) + 1
    return counts


def get_comment(order_id, comment_id):
    comment = ddb.get(COMMENTS_TABLE, {"comment_id": comment_id})
    if not comment or comment.get("order_id") != order_id:
        raise NotFound("Comment", comment_id)
    return comment


def resolve_comment(order_id, comment_id):
    get_comment(order_id, comment_id)
    try:
        ddb.update(COMMENTS_TABLE, {"comment_id": comment_id}, {"is_resolved": True})
    except ItemNotFound:
        raise NotFound("Comment", comment_id) from None


def delete_comment(order_id, comment_id, user_id):
    """Only the author may delete a comment."""
    comment = get_comment(order_id, comment_id)
    if comment.get("author_id") != user_id:
        raise NotCommentAuthor()
    ddb.delete(COMMENTS_TABLE, {"comment_id": comment_id})
    logger.info("Comment %s deleted", comment_id)
