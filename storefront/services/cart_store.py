import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, REDIS_SOCKET_TIMEOUT, CART_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# compare and delete per field, one atomic script so a cart refilled
# between checkout and cleanup keeps its new quantities
# KEYS[1] cart key, ARGV pairs: product_id, expected quantity
_DISCARD_LUA = """
local removed = 0
for i = 1, #ARGV, 2 do
    if redis.call('HGET', KEYS[1], ARGV[i]) == ARGV[i + 1] then
        removed = removed + redis.call('HDEL', KEYS[1], ARGV[i])
    end
end
return removed
"""


class RedisCartStore:
    """
    Cart per user as a single redis hash:
        cart:{user_id} -> {product_id: quantity}
    No history, no stock checks, the whole key expires CART_TTL_SECONDS
    after the last mutation.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None, ttl: int = CART_TTL_SECONDS):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
            socket_timeout=REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
        )
        self.ttl = ttl

    @staticmethod
    def _key(user_id: int) -> str:
        return f"cart:{user_id}"

    @redis_retry()
    def set_quantity(self, user_id: int, product_id: int, quantity: int) -> None:
        key = self._key(user_id)
        if quantity <= 0:
            logger.info(f"Cart {key}: remove product {product_id}")
            self.redis.hdel(key, str(product_id))
            return

        logger.info(f"Cart {key}: product {product_id} -> {quantity}")
        # value and ttl in one round-trip, MULTI/EXEC
        pipe = self.redis.pipeline()
        pipe.hset(key, str(product_id), quantity)
        pipe.expire(key, self.ttl)
        pipe.execute()

    @redis_retry()
    def remove(self, user_id: int, product_id: int) -> None:
        key = self._key(user_id)
        logger.info(f"Cart {key}: remove product {product_id}")
        self.redis.hdel(key, str(product_id))

    @redis_retry()
    def get_all(self, user_id: int) -> dict[int, int]:
        raw = self.redis.hgetall(self._key(user_id))
        return {int(pid): int(qty) for pid, qty in raw.items() if int(qty) > 0}

    @redis_retry()
    def clear(self, user_id: int) -> None:
        key = self._key(user_id)
        logger.info(f"Cart {key}: clear")
        self.redis.delete(key)

    @redis_retry()
    def discard_entries(self, user_id: int, entries: dict[int, int]) -> int:
        if not entries:
            return 0

        args: list[str] = []
        for product_id, quantity in entries.items():
            args.extend([str(product_id), str(quantity)])

        key = self._key(user_id)
        removed = self.redis.eval(_DISCARD_LUA, 1, key, *args)
        logger.info(f"Cart {key}: discarded {removed} of {len(entries)} checked out entries")
        return int(removed)

    def ping(self) -> bool:
        return bool(self.redis.ping())
