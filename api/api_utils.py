import asyncio
from typing import AsyncGenerator, Generator, TypeVar

T = TypeVar("T")


class Sentinel:
    pass


async def _sync_to_async_generator(
    gen: Generator[T, None, None]
) -> AsyncGenerator[T, None]:
    """
    Converts a sync generator into an async generator
    without blocking the event loop.

    Exceptions raised by the generator propagate to the consumer.
    """
    loop = asyncio.get_running_loop()
    sentinel = Sentinel()

    def safer_next():
        try:
            return next(gen)
        except StopIteration:
            return sentinel

    while True:
        item = await loop.run_in_executor(None, safer_next)
        if isinstance(item, Sentinel):
            break
        yield item


def bearer_token(authorization: str) -> str:
    """Extract the token from an 'Authorization: Bearer <token>' header"""
    if not authorization:
        return ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()
