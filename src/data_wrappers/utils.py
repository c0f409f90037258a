import functools
import inspect
import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Concatenate,
    ParamSpec,
    Type,
    TypeVar,
)

import redis
import redis.asyncio as redis_sync
import redis.asyncio.client as redis_async_client

logger = logging.getLogger(__name__)


def create_pool(redis_url: str) -> redis_sync.Redis:
    """Creates a redis connection pool for the given url"""

    return redis_sync.from_url(redis_url)


# Generics for pipeline_watch decorator
LeftoverParameters = ParamSpec("LeftoverParameters")
ReturnType = TypeVar("ReturnType")
Owner = TypeVar("Owner")


def pipeline_watch(
    watch_param_name: str,
    key_builder: Callable[[Any], str] = str,
    key_not_found_excepton: Type[Exception] = ValueError,
    max_retries: int = 5,
):
    """Sets up a redis pipeline and a redis watch command for some data.

    Meant for methods of classes that keep their connection pool in a "pool"
    attribute. The pipeline is passed to the wrapped method right after self.

    For watch to work you must switch the pipeline to mulit mode then call
    the execute method on the pipeline. This decorator does not do that for you.
    Until then commands sent through the pipeline run immediately.

    Args:
        watch_param_name (str): Name of the parameter in the decorated method
            that will be passed the value to build the watched key from.
            Example: "session_id" will watch the key built from the id passed
            to "session_id" when the wrapped method is called.
        key_builder (Callable[[Any], str], optional): Turns the parameter value
            into the key to watch. Defaults to str.
        key_not_found_excepton (Type[Exception], optional): An exception to raise
            if the watched key is not in the db. It is passed the parameter
            value. Defaults to ValueError.
        max_retries (int, optional): Number of time the wrapped method will
            rerun if a watch error occures. Defaults to 5.

    Raises:
        redis.WatchError: Raised if the key is modified while the pipeline is
            being executed and the max number of retries has been exceded.
        key_not_found_excepton: Raised if the watched key is not in the db.
        TypeError: Raised if the watch_param_name parameter is not in the
            decorated method.
    """

    def decorator(
        fn: Callable[
            Concatenate[Owner, redis_async_client.Pipeline, LeftoverParameters],
            Awaitable[ReturnType],
        ]
    ) -> Callable[Concatenate[Owner, LeftoverParameters], Awaitable[ReturnType]]:
        # Gets signature of the wrapped method
        func_sig = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(
            self: Owner,
            *args: LeftoverParameters.args,
            **kwargs: LeftoverParameters.kwargs,
        ) -> ReturnType:
            # The pipeline is always the parameter after self because of the
            # type definition of this decorator.
            func_params = func_sig.bind(self, None, *args, **kwargs)

            # Makes sure the watch param exists
            if watch_param_name not in func_params.arguments:
                raise TypeError("Missing required parameter: " + watch_param_name)

            watch_value = func_params.arguments[watch_param_name]
            watch_key = key_builder(watch_value)
            pool: redis_sync.Redis = getattr(self, "pool")

            retries_left = max_retries
            async with pool.pipeline() as pipe:
                while True:
                    await pipe.watch(watch_key)

                    # Make sure the key exists while operating on it
                    if not await pipe.exists(watch_key):
                        raise key_not_found_excepton(watch_value)

                    try:
                        return await fn(self, pipe, *args, **kwargs)
                    except redis.WatchError:
                        if retries_left <= 0:
                            raise redis.WatchError("Max retries reached")
                        retries_left -= 1
                        logger.debug("Key %s changed while watched, retrying", watch_key)

        return wrapper

    return decorator
