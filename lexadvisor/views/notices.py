"""Toast notices returned by view actions."""

from dataclasses import asdict, dataclass

from lexadvisor.api.errors import LexAdvisorError

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notice:
    """
    A toast.

    Attributes
    ----------
    title : str
    description : str | None
    variant : str
        ``default`` or ``destructive``.
    status : int
        HTTP status the route answers with when relaying the notice.
    """

    title: str
    description: str | None = None
    variant: str = DEFAULT
    status: int = 200

    @property
    def ok(self) -> bool:
        return self.variant != DESTRUCTIVE

    def to_dict(self) -> dict:
        return asdict(self)


def success(title: str, description: str | None = None) -> Notice:
    return Notice(title=title, description=description)


def failure(title: str, description: str | None = None, status: int = 400) -> Notice:
    return Notice(title=title, description=description, variant=DESTRUCTIVE, status=status)


class NoticeError(LexAdvisorError):
    """Raised by streaming actions that cannot return a `Notice` directly."""

    def __init__(self, notice: Notice):
        super().__init__(notice.description or notice.title)
        self.notice = notice
