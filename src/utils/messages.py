from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user asks to log out
    """

    bubble = True


class NewOrderMessage(Message):
    """
    Fired when a new order is placed.
    The app takes the user to their order history.
    """

    bubble = True


class LoginRequestedMessage(Message):
    """
    Ask the app to open the login screen, optionally with a reason to show.
    """

    bubble = True

    def __init__(self, reason: str = "") -> None:
        super().__init__()
        self.reason = reason
