import json
import redis
from redis.exceptions import RedisError
from storefront.domain.errors import InternalError
from storefront.utils.settings import REDIS_URL, SESSION_STORE_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA: ustaw nowa wartosc + TTL tylko jesli klucz jeszcze istnieje
#bez tego extend moglby wskrzesic sesje wylogowana w miedzyczasie
_TOUCH_LUA = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    redis.call('SET', KEYS[1], ARGV[1], 'EX', ARGV[2])
    return 1
else
    return 0
end
"""


class SessionStore:
    """
    -rekord sesji w redisie pod kluczem session:<token>
    -TTL ustawiany przy zapisie, redis sam usuwa wygasle
    -bledy redisa -> InternalError, bez retry
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
            socket_timeout=SESSION_STORE_TIMEOUT_SECONDS,
            socket_connect_timeout=SESSION_STORE_TIMEOUT_SECONDS,
        )

    @staticmethod
    def _key(token: str) -> str:
        return f"session:{token}"

    def get(self, token: str) -> dict | None:
        try:
            raw = self.redis.get(self._key(token))
        except RedisError as e:
            logger.exception("Session store read failed")
            raise InternalError() from e
        return json.loads(raw) if raw else None

    def set(self, token: str, record: dict, ttl: int) -> None:
        try:
            self.redis.set(name=self._key(token), value=json.dumps(record), ex=ttl)
        except RedisError as e:
            logger.exception("Session store write failed")
            raise InternalError() from e

    def touch(self, token: str, record: dict, ttl: int) -> bool:
        try:
            res = self.redis.eval(_TOUCH_LUA, 1, self._key(token), json.dumps(record), ttl)
        except RedisError as e:
            logger.exception("Session store extend failed")
            raise InternalError() from e
        return bool(res)

    def destroy(self, token: str) -> None:
        try:
            self.redis.delete(self._key(token))
        except RedisError as e:
            logger.exception("Session store delete failed")
            raise InternalError() from e
