from __future__ import annotations

import threading

from backend.errors import RequestCancelled


class CancellationToken:
    """
    Señal de cancelación ligada al ciclo de vida de una request.

    Se comparte entre el hilo que sirve la request y el worker que hace los
    fetch a TMDb: el primero la activa, el segundo la consulta en cada
    checkpoint (antes/después de cada llamada HTTP).
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = ""

    def cancel(self, reason: str = "cancelled") -> None:
        # la primera razón es la que cuenta
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled(self._reason or "cancelled")


def check_cancelled(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()
