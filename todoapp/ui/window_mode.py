# Rev 0.2.0

# todoapp/ui/window_mode.py
from PySide6.QtCore import Qt, QSize
from PySide6.QtGui import QGuiApplication

MIN_SIZE = QSize(480, 320)


def fit_to_screen(win, *, width_ratio: float = 0.6, height_ratio: float = 0.7, fixed: bool = False):
    """
    Size a window as a fraction of the available area of its screen and
    centre it there. fixed=True also locks the size (modal dialogs).
    """
    screen = QGuiApplication.screenAt(win.frameGeometry().center()) or QGuiApplication.primaryScreen()
    if screen is None:
        return
    area = screen.availableGeometry()
    size = QSize(
        max(MIN_SIZE.width(), int(area.width() * width_ratio)),
        max(MIN_SIZE.height(), int(area.height() * height_ratio)),
    ).boundedTo(area.size())

    if fixed:
        win.setFixedSize(size)
        win.setWindowFlag(Qt.WindowMaximizeButtonHint, False)
    else:
        win.resize(size)
    frame = win.frameGeometry()
    frame.moveCenter(area.center())
    win.move(frame.topLeft())
