import threading

from starlette.responses import Response

from fitscore.logging.logger import Log


class SingleResponse:
    """Per-request guard that lets exactly one response out.

    The first response passed to send() wins; any later one is dropped and
    the winner is returned again, so a late completion can never produce a
    second reply.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._response: Response | None = None

    @property
    def sent(self) -> bool:
        return self._response is not None

    def send(self, response: Response) -> Response:
        with self._lock:
            if self._response is None:
                self._response = response
                return response
            first = self._response
        Log.warning(
            f"Dropped a second response ({response.status_code}); "
            f"already answered with {first.status_code}"
        )
        return first
