class CancellationToken:
    """Cooperative stop signal for the sequential per-source loops.

    Cancelling never aborts an in-flight request; loops check the token at each
    source boundary.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
