# ui/screen.py
from PySide6.QtCore import QEventLoop, QObject


class Screen(QObject):
    """
    One full-screen view driven by the Qt event loop.

    ``exec()`` runs a nested QEventLoop until ``done()`` is called and
    returns the value passed to it. Subclasses implement ``render()`` and
    ``on_key()``; ``live`` is a started rich Live shared by all screens.
    """

    def __init__(self, live, keys, theme, parent=None):
        super().__init__(parent)
        self.live = live
        self.keys = keys
        self.theme = theme
        self.result = None
        self._loop = None
        self._done = False

    @property
    def width(self) -> int:
        return self.live.console.width

    def exec(self):
        self._done = False
        self.keys.keyPressed.connect(self.on_key)
        try:
            self.on_enter()
            self.refresh()
            if not self._done:
                self._loop = QEventLoop()
                self._loop.exec()
        finally:
            self.keys.keyPressed.disconnect(self.on_key)
            self._loop = None
        return self.result

    def done(self, result=None):
        self.result = result
        self._done = True
        if self._loop is not None:
            self._loop.quit()

    def refresh(self):
        if not self._done:
            self.live.update(self.render(), refresh=True)

    # ---- overridables ----
    def on_enter(self):
        pass

    def on_key(self, key: str):
        raise NotImplementedError

    def render(self):
        raise NotImplementedError
