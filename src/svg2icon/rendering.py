from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

from .errors import RasterizationError
from .rasterizer import Rasterizer


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderRequest:
    label: Union[int, str]
    size: int


def _render_one(rasterizer: Rasterizer, source: Path, request: RenderRequest) -> bytes:
    try:
        payload = rasterizer.render(source, request.size)
    except RasterizationError as exc:
        raise RasterizationError(request.label, request.size, exc.cause or exc) from exc
    except Exception as exc:
        raise RasterizationError(request.label, request.size, exc) from exc
    return bytes(payload)


def _render_parallel(
    rasterizer: Rasterizer,
    source: Path,
    requests: Sequence[RenderRequest],
    max_workers: int,
) -> list[bytes]:
    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="svg2icon-render"
    ) as pool:
        futures: list[Future[bytes]] = [
            pool.submit(_render_one, rasterizer, source, request) for request in requests
        ]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)
        if pending:
            # Only requests after the earliest known failure may be dropped.
            first_failed = min(
                index
                for index, future in enumerate(futures)
                if future.done() and future.exception() is not None
            )
            cancelled = sum(1 for future in futures[first_failed + 1 :] if future.cancel())
            logger.debug(
                "Render failure at %s; cancelled %d queued request(s)",
                requests[first_failed].label,
                cancelled,
            )

    # Nothing ahead of the first cancelled request was cancelled, so result()
    # raises for the lowest failing index before any cancelled future is reached.
    return [future.result() for future in futures]


def render_all(
    rasterizer: Rasterizer,
    source: Path,
    requests: Sequence[RenderRequest],
    max_workers: int = 1,
    dedupe: bool = False,
) -> list[bytes]:
    """Render every request and return the payloads in request order.

    With ``dedupe`` each distinct pixel size is rendered once and the payload is
    shared by all requests of that size. Any failure aborts the whole batch with
    a :class:`RasterizationError` naming the failed request.
    """
    if dedupe:
        unique: dict[int, RenderRequest] = {}
        for request in requests:
            unique.setdefault(request.size, request)
        jobs = list(unique.values())
    else:
        jobs = list(requests)

    logger.debug(
        "Rendering %d image(s) for %d entries (workers=%d)",
        len(jobs),
        len(requests),
        max_workers,
    )

    if max_workers > 1 and len(jobs) > 1:
        payloads = _render_parallel(rasterizer, source, jobs, max_workers)
    else:
        payloads = [_render_one(rasterizer, source, job) for job in jobs]

    if dedupe:
        by_size = {job.size: payload for job, payload in zip(jobs, payloads)}
        return [by_size[request.size] for request in requests]
    return payloads
