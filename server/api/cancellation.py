from __future__ import annotations

"""
server/api/cancellation.py

Ejecuta trabajo bloqueante (fetch a TMDb + mapeo) en el threadpool y lo ata a
la vida de la conexión HTTP.

- Si el cliente se desconecta: se activa el CancellationToken y la request
  termina YA con RequestCancelled; el worker se detiene en su siguiente
  checkpoint y su resultado se descarta.
- Si el trabajo termina antes: se devuelve su resultado (o su excepción).
"""

import asyncio
from typing import Callable, TypeVar

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from backend.cancellation import CancellationToken
from backend.errors import RequestCancelled

T = TypeVar("T")


async def _wait_for_disconnect(request: Request, poll_interval_s: float) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(poll_interval_s)


def _discard_result(task: "asyncio.Future[object]") -> None:
    # el worker cancelado suele acabar en RequestCancelled: nadie lo espera ya
    if not task.cancelled():
        task.exception()


async def run_cancellable(
    request: Request,
    fn: Callable[[CancellationToken], T],
    *,
    poll_interval_s: float = 0.25,
) -> T:
    token = CancellationToken()
    work = asyncio.ensure_future(run_in_threadpool(fn, token))
    watcher = asyncio.ensure_future(_wait_for_disconnect(request, max(0.01, poll_interval_s)))

    try:
        await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        if work.done():
            return work.result()

        token.cancel("client disconnected")
        raise RequestCancelled("client disconnected")
    finally:
        watcher.cancel()
        if not work.done():
            token.cancel("request aborted")
            work.add_done_callback(_discard_result)
