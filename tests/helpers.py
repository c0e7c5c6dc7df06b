from datetime import datetime


class FakeClock:
    """Epoch-millisecond clock that advances one second per reading."""

    def __init__(self, start: datetime) -> None:
        self.now = int(start.timestamp() * 1000)

    def __call__(self) -> int:
        self.now += 1000
        return self.now

    def jump_to(self, moment: datetime) -> None:
        self.now = int(moment.timestamp() * 1000)


class Allow:
    def check_admin_password(self) -> bool:
        return True


class Deny:
    def check_admin_password(self) -> bool:
        return False


def submit_order(book, table, *items):
    book.select_table(table)
    for item in items:
        book.add_item(item)
    return book.submit()
