"""Qt integration: run loader callbacks on the GUI thread and expose Qt signals."""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from PySide6.QtCore import QCoreApplication, QObject, Qt, QThread, Signal, Slot

from ..application.dtos import LoadResult

R = TypeVar("R")


class _Invocation:
    """Callable plus its outcome, carried across the thread boundary."""

    __slots__ = ("fn", "args", "result", "error")

    def __init__(self, fn: Callable[..., Any], args: tuple) -> None:
        self.fn = fn
        self.args = args
        self.result: Any = None
        self.error: Optional[Exception] = None

    def run(self) -> None:
        try:
            self.result = self.fn(*self.args)
        except Exception as exc:
            self.error = exc


class QtCallbackContext(QObject):
    """Callback context bound to the thread owning the ``QCoreApplication``.

    Calls from other threads block until the GUI thread has executed them,
    which requires the GUI thread to be running its event loop.  Calls made
    on the GUI thread itself execute inline.
    """

    _invoke = Signal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        app = QCoreApplication.instance()
        if parent is None and app is not None:
            self.moveToThread(app.thread())
        self._invoke.connect(self._run, Qt.ConnectionType.BlockingQueuedConnection)

    @Slot(object)
    def _run(self, invocation: _Invocation) -> None:
        invocation.run()

    def call(self, fn: Callable[..., R], *args: Any) -> R:
        invocation = _Invocation(fn, args)
        if QThread.currentThread() == self.thread():
            invocation.run()
        else:
            self._invoke.emit(invocation)
        if invocation.error is not None:
            raise invocation.error
        return invocation.result


class QtLoadListener(QObject):
    """Listener that forwards notifications to Qt signals.

    Pair it with :class:`QtCallbackContext` so that connected slots run on the
    GUI thread.
    """

    loadStarted = Signal(object)
    loadFinished = Signal(object, object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)

    def loader_did_start(self, loader: Any) -> None:
        self.loadStarted.emit(loader)

    def loader_did_finish(self, loader: Any, result: LoadResult) -> None:
        self.loadFinished.emit(loader, result)


__all__ = ["QtCallbackContext", "QtLoadListener"]
